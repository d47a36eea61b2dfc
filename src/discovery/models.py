"""
Discovery data structures and models
"""

import time
from enum import Enum
from typing import List, Optional, Set
from dataclasses import dataclass, field

DEFAULT_HTTP_PORTS = (80, 443)


class DeviceStatus(Enum):
    """Reachability of a discovered device"""
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


class Manufacturer:
    """Vendor labels produced by fingerprinting"""
    HP = "HP"
    CANON = "Canon"
    EPSON = "Epson"
    BROTHER = "Brother"


def format_address(ip: str, port: int) -> str:
    """IPv4 address, suffixed with the port when it is not a default HTTP port"""
    if port in DEFAULT_HTTP_PORTS:
        return ip
    return f"{ip}:{port}"


def build_base_url(ip: str, port: int) -> str:
    protocol = 'https' if port == 443 else 'http'
    return f"{protocol}://{format_address(ip, port)}"


def device_id_for(address: str) -> str:
    return f"printer-{address}"


@dataclass
class NetworkDevice:
    """Represents a device that answered on the local network"""
    id: str
    address: str
    display_name: str
    base_url: str
    port: int = 80
    manufacturer: Optional[str] = None
    status: DeviceStatus = DeviceStatus.UNKNOWN
    capabilities: Set[str] = field(default_factory=lambda: {"scan", "print"})
    discovery_method: str = "range_scan"  # "range_scan", "default_ips", "manual"
    last_seen: float = field(default_factory=time.time)

    @classmethod
    def from_probe(cls, ip: str, port: int, manufacturer: Optional[str] = None,
                   discovery_method: str = "range_scan") -> "NetworkDevice":
        """Build an online device from a successful probe on ip:port"""
        address = format_address(ip, port)
        if manufacturer:
            display_name = f"{manufacturer} Printer"
        else:
            display_name = f"Device at {address}"
        return cls(
            id=device_id_for(address),
            address=address,
            display_name=display_name,
            base_url=build_base_url(ip, port),
            port=port,
            manufacturer=manufacturer,
            status=DeviceStatus.ONLINE,
            discovery_method=discovery_method
        )

    @property
    def host(self) -> str:
        return self.address.split(':', 1)[0]

    def merge(self, other: "NetworkDevice") -> None:
        """Fold a duplicate result for the same id into this one"""
        if not self.manufacturer and other.manufacturer:
            self.manufacturer = other.manufacturer
            self.display_name = other.display_name
        if other.status == DeviceStatus.ONLINE:
            self.status = DeviceStatus.ONLINE
        self.capabilities = self.capabilities | other.capabilities
        self.last_seen = max(self.last_seen, other.last_seen)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "address": self.address,
            "display_name": self.display_name,
            "manufacturer": self.manufacturer,
            "base_url": self.base_url,
            "port": self.port,
            "status": self.status.value,
            "capabilities": sorted(self.capabilities),
            "discovery_method": self.discovery_method,
            "last_seen": self.last_seen
        }


@dataclass
class DiscoveryResult:
    """Results from one discovery strategy"""
    devices: List[NetworkDevice]
    method: str
    duration_seconds: float
    devices_tested: int
    success_count: int
