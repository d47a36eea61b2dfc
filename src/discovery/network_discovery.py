"""
Subnet range scanning for printer web interfaces
"""

import asyncio
import ipaddress
import logging
from typing import Awaitable, Callable, List, Optional, Tuple

from config_loader import DEFAULT_PRIORITY_OCTETS
from .fingerprint import PrinterFingerprinter
from .models import NetworkDevice, build_base_url
from .probe import Prober

logger = logging.getLogger(__name__)

DEFAULT_PORTS = [80, 631, 443, 8080, 9100, 8000]

ProgressCallback = Callable[[List[NetworkDevice], int, int], Awaitable[None]]


def chunk(items: List[str], size: int) -> List[List[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class RangeScanner:
    """Probes the local /24 in batches, likely printer addresses first"""

    def __init__(self, config: dict, prober: Prober, fingerprinter: PrinterFingerprinter):
        self.config = config
        self.prober = prober
        self.fingerprinter = fingerprinter
        self.ports = config.get('ports', DEFAULT_PORTS)
        self.priority_octets = config.get('priority_octets', DEFAULT_PRIORITY_OCTETS)
        self.batch_size = config.get('batch_size', 10)
        self.batch_delay = config.get('batch_delay', 0.1)
        self.max_concurrent = config.get('max_concurrent_probes', 10)

    def build_candidates(self, local_address: str) -> Tuple[List[str], List[str]]:
        """
        Split the local /24 into (priority, sweep) address lists.
        The local address and the router (.1) are never candidates.
        Raises ValueError for an invalid address.
        """
        ipaddress.IPv4Address(local_address)
        base_ip, _, last = local_address.rpartition('.')
        local_octet = int(last)

        priority = [
            f"{base_ip}.{octet}" for octet in self.priority_octets
            if octet != local_octet and octet != 1
        ]
        sweep = [
            f"{base_ip}.{octet}" for octet in range(2, 254)
            if octet != local_octet and octet not in self.priority_octets
        ]
        return priority, sweep

    def build_batches(self, local_address: str) -> List[List[str]]:
        priority, sweep = self.build_candidates(local_address)
        return chunk(priority, self.batch_size) + chunk(sweep, self.batch_size)

    async def scan(self, local_address: str,
                   cancel_event: Optional[asyncio.Event] = None,
                   progress_callback: Optional[ProgressCallback] = None) -> List[NetworkDevice]:
        """
        Scan the subnet of local_address.

        Batches run strictly one after another. If the first batch finds
        anything the sweep is skipped. A set cancel_event stops the scan
        before the next batch and returns what was found so far.
        """
        try:
            batches = self.build_batches(local_address)
        except ValueError:
            logger.error(f"Cannot scan around invalid local address: {local_address}")
            return []

        ips_total = sum(len(batch) for batch in batches)
        ips_scanned = 0
        devices: List[NetworkDevice] = []

        logger.info(f"Scanning {ips_total} addresses around {local_address} in {len(batches)} batches of {self.batch_size}")

        for batch_index, batch in enumerate(batches):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Range scan cancelled after {ips_scanned}/{ips_total} addresses")
                break

            logger.debug(f"Batch {batch_index + 1}/{len(batches)}: {', '.join(batch)}")
            results = await asyncio.gather(
                *(self.probe_address(ip) for ip in batch), return_exceptions=True
            )
            batch_devices = [r for r in results if isinstance(r, NetworkDevice)]
            devices.extend(batch_devices)
            ips_scanned += len(batch)

            if progress_callback:
                await progress_callback(batch_devices, ips_scanned, ips_total)

            if batch_index == 0 and devices:
                logger.info(f"Found {len(devices)} device(s) in priority batch, stopping scan")
                break

            if batch_index < len(batches) - 1 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        logger.info(f"Range scan complete: {len(devices)} devices found scanning {ips_scanned} addresses")
        return devices

    async def probe_address(self, ip: str, discovery_method: str = "range_scan") -> Optional[NetworkDevice]:
        """Try each port in order; fingerprint the first one that answers"""
        try:
            for port in self.ports:
                if not await self.prober.probe(ip, port):
                    continue

                manufacturer = await self.fingerprinter.identify(build_base_url(ip, port))
                device = NetworkDevice.from_probe(ip, port, manufacturer, discovery_method)
                logger.info(f"Found device at {device.address}: {device.display_name}")
                return device
        except Exception as e:
            logger.debug(f"Probe failed for {ip}: {e}")
        return None

    async def probe_many(self, ip_list: List[str], discovery_method: str) -> List[NetworkDevice]:
        """Probe an arbitrary address list with bounded concurrency"""
        devices = []
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def scan_single_ip(ip: str):
            async with semaphore:
                device = await self.probe_address(ip, discovery_method)
                if device:
                    devices.append(device)

        tasks = [scan_single_ip(ip) for ip in ip_list]
        await asyncio.gather(*tasks, return_exceptions=True)

        # Keep input order so results are stable across runs
        order = {ip: index for index, ip in enumerate(ip_list)}
        devices.sort(key=lambda device: order.get(device.host, len(order)))
        return devices
