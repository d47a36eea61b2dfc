# HTTP Helper for printer web interfaces
# Session configuration for short-lived probes against local network devices

import aiohttp
import logging

logger = logging.getLogger(__name__)

def create_printer_session(timeout_seconds: float = 1.0) -> aiohttp.ClientSession:
    """
    Create aiohttp session for probing local printer web interfaces
    Certificates are not verified: embedded web servers ship self-signed certs
    """
    connector = aiohttp.TCPConnector(
        limit_per_host=2,           # Max 2 connections per device
        ssl=False,                  # Printer certificates are self-signed
        force_close=True            # Force connection cleanup
    )

    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout_seconds)
    )
