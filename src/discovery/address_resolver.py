"""
Local address resolution - finds this host's private IPv4 address,
the seed for subnet scanning
"""

import asyncio
import ipaddress
import logging
import re
import socket
from abc import ABC, abstractmethod
from typing import AsyncIterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_ADDRESS = '192.168.1.1'

_IPV4_PATTERN = re.compile(r'(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})')

# RFC1918 ranges
_PRIVATE_NETWORKS = (
    ipaddress.IPv4Network('10.0.0.0/8'),
    ipaddress.IPv4Network('172.16.0.0/12'),
    ipaddress.IPv4Network('192.168.0.0/16'),
)


def parse_candidate(candidate: str) -> Optional[str]:
    """Extract a usable IPv4 address from a candidate string"""
    match = _IPV4_PATTERN.search(candidate or '')
    if not match:
        return None
    try:
        address = ipaddress.IPv4Address(match.group(1))
    except ValueError:
        return None
    if address.is_link_local or address.is_loopback or address.is_unspecified:
        return None
    return str(address)


def is_private_address(ip: str) -> bool:
    try:
        address = ipaddress.IPv4Address(ip)
    except ValueError:
        return False
    return any(address in network for network in _PRIVATE_NETWORKS)


def _split_server(server: str) -> Tuple[str, int]:
    host, _, port = server.rpartition(':')
    if not host:
        return server, 3478
    return host, int(port)


class AddressResolver(ABC):
    """Capability interface for finding the local network address"""

    @abstractmethod
    async def resolve(self) -> str:
        """Return the local IPv4 address; never raises"""


class StaticAddressResolver(AddressResolver):
    """Returns an operator-configured address"""

    def __init__(self, address: str):
        self.address = address

    async def resolve(self) -> str:
        return self.address


class SocketAddressResolver(AddressResolver):
    """
    Gathers local address candidates and prefers the first RFC1918 one.

    For each relay server a UDP socket is connected (no datagram is sent)
    so the OS picks the outbound interface; the host name's addresses
    follow. Resolution returns as soon as a private address appears,
    otherwise the best candidate once the timeout runs out.
    """

    def __init__(self, stun_servers: List[str], timeout: float = 3,
                 default_address: str = DEFAULT_LOCAL_ADDRESS):
        self.stun_servers = stun_servers
        self.timeout = timeout
        self.default_address = default_address

    async def resolve(self) -> str:
        collected: List[str] = []
        try:
            address = await asyncio.wait_for(self._first_private(collected), timeout=self.timeout)
            if address:
                logger.info(f"Using private IP: {address}")
                return address
        except asyncio.TimeoutError:
            logger.warning(f"Local address detection timed out after {self.timeout}s")
        except Exception as e:
            logger.warning(f"Could not determine local IP: {e}")

        best = self._best_candidate(collected)
        logger.info(f"Falling back to local address {best} (candidates: {collected or 'none'})")
        return best

    async def _first_private(self, collected: List[str]) -> Optional[str]:
        candidates = self._gather_candidates()
        try:
            async for candidate in candidates:
                ip = parse_candidate(candidate)
                if not ip or ip in collected:
                    continue
                collected.append(ip)
                logger.debug(f"Found local address candidate: {ip}")
                if is_private_address(ip):
                    return ip
        finally:
            await candidates.aclose()
        return None

    def _best_candidate(self, collected: List[str]) -> str:
        for ip in collected:
            if is_private_address(ip):
                return ip
        if collected:
            return collected[0]
        return self.default_address

    async def _gather_candidates(self) -> AsyncIterator[str]:
        loop = asyncio.get_running_loop()

        for server in self.stun_servers:
            try:
                host, port = _split_server(server)
                candidate = await loop.run_in_executor(None, self._route_candidate, host, port)
            except (OSError, ValueError) as e:
                logger.debug(f"Route lookup via {server} failed: {e}")
                continue
            if candidate:
                yield candidate

        try:
            infos = await loop.getaddrinfo(socket.gethostname(), None, family=socket.AF_INET)
        except OSError as e:
            logger.debug(f"Host name lookup failed: {e}")
            return
        for _, _, _, _, sockaddr in infos:
            yield sockaddr[0]

    @staticmethod
    def _route_candidate(host: str, port: int) -> str:
        # connect() on a datagram socket only selects a route, nothing is sent
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect((host, port))
            return sock.getsockname()[0]
