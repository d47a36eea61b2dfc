"""
Main discovery manager - composes address resolution, range scanning and
the default-IP strategy into one deduplicated device list
"""

import asyncio
import ipaddress
import logging
import time
from typing import Dict, List, Optional

from config_loader import DEFAULT_PRINTER_IPS
from storage import FavoritesStore
from .address_resolver import AddressResolver, SocketAddressResolver, StaticAddressResolver
from .fingerprint import PrinterFingerprinter
from .models import DeviceStatus, DiscoveryResult, NetworkDevice
from .network_discovery import ProgressCallback, RangeScanner
from .probe import Prober, create_prober

logger = logging.getLogger(__name__)


def merge_devices(device_lists: List[List[NetworkDevice]]) -> List[NetworkDevice]:
    """Union result lists, one device per id; first occurrence keeps its place"""
    merged: Dict[str, NetworkDevice] = {}
    for devices in device_lists:
        for device in devices:
            existing = merged.get(device.id)
            if existing is None:
                merged[device.id] = device
            else:
                existing.merge(device)
    return list(merged.values())


class PrinterDiscovery:
    """Public entry point for finding scan-capable devices on the LAN"""

    def __init__(self, config: Dict,
                 favorites: Optional[FavoritesStore] = None,
                 resolver: Optional[AddressResolver] = None,
                 prober: Optional[Prober] = None,
                 fingerprinter: Optional[PrinterFingerprinter] = None):
        self.config = config
        self.favorites = favorites
        self.resolver = resolver or self._create_resolver(config)
        self.prober = prober or create_prober(config)
        self.fingerprinter = fingerprinter or PrinterFingerprinter(config.get('request_timeout', 1.0))
        self.scanner = RangeScanner(config, self.prober, self.fingerprinter)

        self.default_ip_strategy = config.get('default_ip_strategy', True)
        self.default_ips = config.get('default_ips', DEFAULT_PRINTER_IPS)

        self.discovered: List[NetworkDevice] = []
        self.last_results: List[DiscoveryResult] = []
        self._lock = asyncio.Lock()
        self._cancel_event: Optional[asyncio.Event] = None

    @staticmethod
    def _create_resolver(config: Dict) -> AddressResolver:
        if config.get('local_address'):
            return StaticAddressResolver(config['local_address'])
        return SocketAddressResolver(
            config.get('stun_servers', []),
            timeout=config.get('address_timeout', 3),
            default_address=config.get('default_address', '192.168.1.1')
        )

    async def discover(self, progress_callback: Optional[ProgressCallback] = None) -> List[NetworkDevice]:
        """
        Run one discovery pass and return the deduplicated device list.
        Never raises; a total failure yields an empty list.
        """
        async with self._lock:
            self._cancel_event = asyncio.Event()
            try:
                return await self._run_discovery(self._cancel_event, progress_callback)
            except Exception as e:
                logger.error(f"Error during printer discovery: {e}")
                self.discovered = []
                return []
            finally:
                self._cancel_event = None

    async def _run_discovery(self, cancel_event: asyncio.Event,
                             progress_callback: Optional[ProgressCallback]) -> List[NetworkDevice]:
        logger.info("[SEARCH] Starting printer discovery...")
        start_time = time.time()
        results: List[DiscoveryResult] = []

        # Method 1: local subnet
        local_address = await self.resolver.resolve()
        logger.info(f"Local IP detected: {local_address}")

        scan_start = time.time()
        scanned = []

        async def track_progress(batch_devices, ips_scanned, ips_total):
            scanned.append(ips_scanned)
            if progress_callback:
                await progress_callback(batch_devices, ips_scanned, ips_total)

        range_devices = await self.scanner.scan(local_address, cancel_event, track_progress)
        results.append(DiscoveryResult(
            range_devices, "range_scan", time.time() - scan_start,
            scanned[-1] if scanned else 0, len(range_devices)
        ))
        logger.info(f"Found {len(range_devices)} printers via network scan")

        # Method 2: conventional default printer IPs, independent of the detected subnet
        default_devices: List[NetworkDevice] = []
        if self.default_ip_strategy and not cancel_event.is_set():
            default_start = time.time()
            default_devices = await self.scanner.probe_many(self.default_ips, "default_ips")
            results.append(DiscoveryResult(
                default_devices, "default_ips", time.time() - default_start,
                len(self.default_ips), len(default_devices)
            ))
            logger.info(f"Found {len(default_devices)} printers at common IPs")

        devices = merge_devices([range_devices, default_devices])

        self.discovered = devices
        self.last_results = results
        logger.info(f"[PASS] Discovery complete: {len(devices)} unique printers in {time.time() - start_time:.1f}s")
        return list(devices)

    def cancel(self) -> bool:
        """Stop an in-flight discovery before its next batch"""
        if self._cancel_event is None:
            return False
        self._cancel_event.set()
        logger.info("Discovery cancellation requested")
        return True

    def is_discovery_active(self) -> bool:
        return self._lock.locked()

    async def add_device_by_ip(self, address: str) -> Optional[NetworkDevice]:
        """Probe a manually entered address and add it to the current results"""
        try:
            ip = str(ipaddress.IPv4Address(address.strip()))
        except ValueError:
            logger.warning(f"Ignoring invalid manual address: {address}")
            return None

        logger.info(f"Adding printer manually at IP: {ip}")
        device = await self.scanner.probe_address(ip, "manual")
        if device is None:
            logger.info(f"No printer found at IP: {ip}")
            return None

        self.discovered = merge_devices([self.discovered, [device]])
        logger.info(f"Successfully added printer: {device.display_name}")
        return self.get_device(device.id)

    async def check_device_status(self, device: NetworkDevice) -> DeviceStatus:
        """Re-probe a device's own port"""
        try:
            reachable = await self.prober.probe(device.host, device.port)
        except Exception as e:
            logger.debug(f"Status check failed for {device.address}: {e}")
            reachable = False
        device.status = DeviceStatus.ONLINE if reachable else DeviceStatus.OFFLINE
        if reachable:
            device.last_seen = time.time()
        return device.status

    def discovered_devices(self) -> List[NetworkDevice]:
        return list(self.discovered)

    def get_device(self, device_id: str) -> Optional[NetworkDevice]:
        for device in self.discovered:
            if device.id == device_id:
                return device
        return None

    def favorite_devices(self) -> List[NetworkDevice]:
        if not self.favorites:
            return []
        return [device for device in self.discovered if self.favorites.is_favorite(device.id)]
