"""
Connectivity probes - prove that something answered on host:port
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List

import aiohttp

from http_helper import create_printer_session
from .models import build_base_url

logger = logging.getLogger(__name__)


class Prober(ABC):
    """Capability interface for reachability checks"""

    @abstractmethod
    async def probe(self, host: str, port: int) -> bool:
        """Return True if anything answered on host:port"""


class TcpConnectProbe(Prober):
    """Raw TCP connect with timeout; an accepted connection is a hit"""

    def __init__(self, timeout: float = 1.5):
        self.timeout = timeout

    async def probe(self, host: str, port: int) -> bool:
        writer = None
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=self.timeout
            )
            return True
        except (OSError, asyncio.TimeoutError) as e:
            logger.debug(f"TCP connect to {host}:{port} failed: {e!r}")
            return False
        finally:
            if writer is not None:
                writer.close()
                try:
                    await writer.wait_closed()
                except OSError:
                    pass


class HttpHeadProbe(Prober):
    """HEAD request where any HTTP response, whatever its status, is a hit"""

    def __init__(self, timeout: float = 1.0):
        self.timeout = timeout

    async def probe(self, host: str, port: int) -> bool:
        url = build_base_url(host, port)
        try:
            async with create_printer_session(self.timeout) as session:
                async with session.head(url, allow_redirects=False) as response:
                    logger.debug(f"HEAD {url} answered with HTTP {response.status}")
                    return True
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.debug(f"HEAD {url} failed: {e!r}")
            return False


class ConnectivityProbe(Prober):
    """Runs probe tiers in order; the first success wins"""

    def __init__(self, tiers: List[Prober]):
        self.tiers = tiers

    async def probe(self, host: str, port: int) -> bool:
        for tier in self.tiers:
            try:
                if await tier.probe(host, port):
                    return True
            except Exception as e:
                logger.debug(f"{type(tier).__name__} unavailable for {host}:{port}: {e}")
        return False


def create_prober(config: dict) -> ConnectivityProbe:
    """Build the probe chain from discovery config"""
    tiers: List[Prober] = []
    for strategy in config.get('probe_strategies', ['tcp', 'http']):
        if strategy == 'tcp':
            tiers.append(TcpConnectProbe(config.get('connect_timeout', 1.5)))
        elif strategy == 'http':
            tiers.append(HttpHeadProbe(config.get('request_timeout', 1.0)))
        else:
            logger.warning(f"Ignoring unknown probe strategy: {strategy}")
    return ConnectivityProbe(tiers)
