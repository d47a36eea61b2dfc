"""Tests for scan endpoint resolution and device models."""

import pytest

from discovery.models import DeviceStatus, NetworkDevice
from discovery.scan_urls import GENERIC_SCAN_PATHS, candidate_scan_urls, qr_code_data, resolve_scan_url


def device_with(manufacturer, base_url="http://192.168.1.100"):
    device = NetworkDevice.from_probe("192.168.1.100", 80, manufacturer)
    device.base_url = base_url
    return device


class TestResolveScanUrl:
    @pytest.mark.parametrize("manufacturer,expected", [
        ("HP", "http://192.168.1.100/hp/device/ScanMenu.html"),
        ("hp inc.", "http://192.168.1.100/hp/device/ScanMenu.html"),
        ("Canon", "http://192.168.1.100/scan.html"),
        ("Epson", "http://192.168.1.100/PRESENTATION/HTML/TOP/PHTM/TOP.HTM"),
        ("Brother", "http://192.168.1.100/general/status.html"),
        (None, "http://192.168.1.100/scan"),
        ("", "http://192.168.1.100/scan"),
        ("Lexmark", "http://192.168.1.100/scan"),
    ])
    def test_vendor_and_fallback_paths(self, manufacturer, expected):
        assert resolve_scan_url(device_with(manufacturer)) == expected

    def test_trailing_slash_is_not_doubled(self):
        device = device_with("HP", base_url="https://192.168.1.100/")

        assert resolve_scan_url(device) == "https://192.168.1.100/hp/device/ScanMenu.html"

    def test_qr_code_data_is_scan_url(self):
        device = device_with("Canon")

        assert qr_code_data(device) == resolve_scan_url(device)


class TestCandidateScanUrls:
    def test_unclassified_device_lists_all_fallbacks(self):
        urls = candidate_scan_urls(device_with(None))

        assert urls == [f"http://192.168.1.100{path}" for path in GENERIC_SCAN_PATHS]
        assert urls[-1] == "http://192.168.1.100/"

    def test_classified_device_lists_vendor_first_without_duplicates(self):
        urls = candidate_scan_urls(device_with("Canon"))

        assert urls[0] == "http://192.168.1.100/scan.html"
        assert len(urls) == len(set(urls))
        assert len(urls) == len(GENERIC_SCAN_PATHS)


class TestNetworkDevice:
    def test_default_port_device(self):
        device = NetworkDevice.from_probe("192.168.1.100", 80)

        assert device.id == "printer-192.168.1.100"
        assert device.address == "192.168.1.100"
        assert device.base_url == "http://192.168.1.100"
        assert device.display_name == "Device at 192.168.1.100"
        assert device.capabilities == {"scan", "print"}
        assert device.status == DeviceStatus.ONLINE

    def test_https_port_omits_suffix(self):
        device = NetworkDevice.from_probe("192.168.1.100", 443)

        assert device.address == "192.168.1.100"
        assert device.base_url == "https://192.168.1.100"

    def test_non_default_port_is_part_of_identity(self):
        device = NetworkDevice.from_probe("192.168.1.100", 9100, "Brother")

        assert device.id == "printer-192.168.1.100:9100"
        assert device.host == "192.168.1.100"
        assert device.base_url == "http://192.168.1.100:9100"
        assert device.display_name == "Brother Printer"

    def test_merge_never_downgrades_status(self):
        device = NetworkDevice.from_probe("192.168.1.100", 80)
        stale = NetworkDevice.from_probe("192.168.1.100", 80)
        stale.status = DeviceStatus.OFFLINE

        device.merge(stale)

        assert device.status == DeviceStatus.ONLINE

    def test_to_dict(self):
        data = NetworkDevice.from_probe("10.0.0.5", 631, "Epson").to_dict()

        assert data["status"] == "online"
        assert data["capabilities"] == ["print", "scan"]
        assert data["manufacturer"] == "Epson"
        assert data["address"] == "10.0.0.5:631"
