"""
Printer discovery API routes
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List, Optional
import ipaddress
import logging

from discovery import PrinterDiscovery, NetworkDevice, resolve_scan_url, candidate_scan_urls, qr_code_data
from storage import FavoritesStore

logger = logging.getLogger(__name__)

# Request models
class ManualAddRequest(BaseModel):
    address: str

# Response models
class DeviceResponse(BaseModel):
    id: str
    address: str
    display_name: str
    manufacturer: Optional[str] = None
    base_url: str
    port: int
    status: str
    capabilities: List[str]
    discovery_method: str
    last_seen: float
    favorite: bool = False

class ScanUrlResponse(BaseModel):
    device_id: str
    scan_url: str
    candidates: List[str]
    qr_data: str

class StatusResponse(BaseModel):
    device_id: str
    status: str

class FavoritesResponse(BaseModel):
    favorites: List[str]


def create_printer_routes(discovery: PrinterDiscovery, favorites: FavoritesStore):
    """Create discovery, scan URL and favorites routes"""
    router = APIRouter(prefix="/api", tags=["printers"])

    def to_response(device: NetworkDevice) -> DeviceResponse:
        return DeviceResponse(**device.to_dict(), favorite=favorites.is_favorite(device.id))

    def require_device(device_id: str) -> NetworkDevice:
        device = discovery.get_device(device_id)
        if not device:
            raise HTTPException(status_code=404, detail="Device not found")
        return device

    @router.post("/printers/discover", response_model=List[DeviceResponse])
    async def run_discovery():
        """Run a discovery pass and return the devices found"""
        devices = await discovery.discover()
        return [to_response(d) for d in devices]

    @router.post("/printers/discover/cancel")
    async def cancel_discovery():
        """Stop the running discovery before its next batch"""
        return {"cancelled": discovery.cancel()}

    @router.get("/printers", response_model=List[DeviceResponse])
    async def list_printers():
        """List devices from the last discovery pass"""
        return [to_response(d) for d in discovery.discovered_devices()]

    @router.post("/printers/manual", response_model=DeviceResponse)
    async def add_printer_manually(request: ManualAddRequest):
        """Probe a manually entered IP address"""
        if not _is_ipv4(request.address):
            raise HTTPException(status_code=422, detail="Invalid IPv4 address")

        device = await discovery.add_device_by_ip(request.address)
        if not device:
            raise HTTPException(status_code=404, detail=f"No printer found at {request.address}")
        return to_response(device)

    @router.get("/printers/{device_id}/scan-url", response_model=ScanUrlResponse)
    async def get_scan_url(device_id: str):
        """Get the web interface URL for scanning"""
        device = require_device(device_id)
        return ScanUrlResponse(
            device_id=device.id,
            scan_url=resolve_scan_url(device),
            candidates=candidate_scan_urls(device),
            qr_data=qr_code_data(device)
        )

    @router.get("/printers/{device_id}/status", response_model=StatusResponse)
    async def get_printer_status(device_id: str):
        """Check whether a discovered device still answers"""
        device = require_device(device_id)
        status = await discovery.check_device_status(device)
        return StatusResponse(device_id=device.id, status=status.value)

    @router.get("/favorites", response_model=FavoritesResponse)
    async def list_favorites():
        return FavoritesResponse(favorites=favorites.all())

    @router.get("/favorites/printers", response_model=List[DeviceResponse])
    async def list_favorite_printers():
        """Favorite devices present in the last discovery pass"""
        return [to_response(d) for d in discovery.favorite_devices()]

    @router.put("/favorites/{device_id}", response_model=FavoritesResponse)
    async def add_favorite(device_id: str):
        favorites.add(device_id)
        return FavoritesResponse(favorites=favorites.all())

    @router.delete("/favorites/{device_id}", response_model=FavoritesResponse)
    async def remove_favorite(device_id: str):
        favorites.remove(device_id)
        return FavoritesResponse(favorites=favorites.all())

    return router


def _is_ipv4(address: str) -> bool:
    try:
        ipaddress.IPv4Address(address.strip())
    except ValueError:
        return False
    return True
