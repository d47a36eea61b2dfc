"""
Printer fingerprinting via vendor status-page paths
"""

import asyncio
import logging
from typing import List, Optional, Tuple

import aiohttp

from http_helper import create_printer_session
from .models import Manufacturer

logger = logging.getLogger(__name__)

# Ordered by likelihood; paths are vendor-disjoint, first answer wins
VENDOR_SIGNATURES: List[Tuple[str, str]] = [
    ('/hp/device/info_device_status.html', Manufacturer.HP),
    ('/DevMgmt/ProductConfigDyn.xml', Manufacturer.HP),
    ('/general/information.html', Manufacturer.BROTHER),
    ('/canon', Manufacturer.CANON),
    ('/rps/', Manufacturer.CANON),
    ('/epson', Manufacturer.EPSON),
    ('/PRESENTATION/HTML/TOP/PHTM/TOP.HTM', Manufacturer.EPSON),
    ('/brother', Manufacturer.BROTHER),
]

# Auth-protected pages still prove the path exists
_AUTH_STATUSES = (401, 403)


def path_answers(status: int) -> bool:
    return status < 400 or status in _AUTH_STATUSES


class PrinterFingerprinter:
    """Classifies a reachable device by probing known vendor paths"""

    def __init__(self, timeout: float = 1.0, signatures: Optional[List[Tuple[str, str]]] = None):
        self.timeout = timeout
        self.signatures = signatures if signatures is not None else VENDOR_SIGNATURES

    async def identify(self, base_url: str) -> Optional[str]:
        """Return the manufacturer of the first answering path, or None"""
        base_url = base_url.rstrip('/')
        try:
            async with create_printer_session(self.timeout) as session:
                for path, manufacturer in self.signatures:
                    if await self._path_reachable(session, f"{base_url}{path}"):
                        logger.info(f"Identified {manufacturer} device at {base_url} via {path}")
                        return manufacturer
        except Exception as e:
            logger.debug(f"Could not identify printer at {base_url}: {e}")
        return None

    async def _path_reachable(self, session: aiohttp.ClientSession, url: str) -> bool:
        try:
            async with session.get(url, allow_redirects=False) as response:
                if path_answers(response.status):
                    return True
                logger.debug(f"HTTP {response.status} for {url}")
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"GET {url} failed: {e!r}")
            return False
