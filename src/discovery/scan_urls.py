"""
Scan endpoint resolution - where an operator starts a scan on a device's web UI
"""

from typing import List

from .models import Manufacturer, NetworkDevice

VENDOR_SCAN_PATHS = [
    (Manufacturer.HP, '/hp/device/ScanMenu.html'),
    (Manufacturer.CANON, '/scan.html'),
    (Manufacturer.EPSON, '/PRESENTATION/HTML/TOP/PHTM/TOP.HTM'),
    (Manufacturer.BROTHER, '/general/status.html'),
]

GENERIC_SCAN_PATHS = [
    '/scan',
    '/scan.html',
    '/scanner',
    '/device/scan',
    '/web/guest/en/websys/webArch/mainFrame.cgi',
    '/cgi-bin/dynamic/printer/config/main.html',
    '/main/main.html',
    '/',  # Fallback to root page
]


def _vendor_path(manufacturer) -> str:
    if not manufacturer:
        return ''
    lowered = manufacturer.lower()
    for vendor, path in VENDOR_SCAN_PATHS:
        if vendor.lower() in lowered:
            return path
    return ''


def candidate_scan_urls(device: NetworkDevice) -> List[str]:
    """All scan URLs worth trying, best guess first"""
    base_url = device.base_url.rstrip('/')
    urls = []
    vendor_path = _vendor_path(device.manufacturer)
    if vendor_path:
        urls.append(f"{base_url}{vendor_path}")
    for path in GENERIC_SCAN_PATHS:
        url = f"{base_url}{path}"
        if url not in urls:
            urls.append(url)
    return urls


def resolve_scan_url(device: NetworkDevice) -> str:
    """
    Best-known scan URL for a device. Unclassified devices get the first
    generic path; nothing checks that it exists, the operator opening the
    URL does.
    """
    return candidate_scan_urls(device)[0]


def qr_code_data(device: NetworkDevice) -> str:
    """Payload for a QR code that opens the scan page on a phone"""
    return resolve_scan_url(device)
