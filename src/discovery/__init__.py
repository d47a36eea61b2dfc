"""
Discovery module for network printer and scanner discovery
"""

from .manager import PrinterDiscovery, merge_devices
from .models import NetworkDevice, DeviceStatus, DiscoveryResult, Manufacturer
from .network_discovery import RangeScanner
from .scan_urls import resolve_scan_url, candidate_scan_urls, qr_code_data

__all__ = [
    'PrinterDiscovery', 'merge_devices', 'NetworkDevice', 'DeviceStatus',
    'DiscoveryResult', 'Manufacturer', 'RangeScanner',
    'resolve_scan_url', 'candidate_scan_urls', 'qr_code_data'
]
