"""
System health and discovery monitoring API routes
"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

# Response models
class StrategyResultResponse(BaseModel):
    method: str
    duration_seconds: float
    devices_tested: int
    success_count: int

class DiscoveryStatusResponse(BaseModel):
    active: bool
    device_count: int
    last_results: List[StrategyResultResponse]
    error_message: Optional[str] = None


def create_system_routes(discovery, favorites):
    """Create system monitoring routes"""
    router = APIRouter(prefix="/api/system", tags=["system"])

    @router.get("/health")
    async def system_health():
        """System health check"""
        try:
            return {
                "status": "healthy",
                "discovery": {
                    "active": discovery.is_discovery_active(),
                    "device_count": len(discovery.discovered_devices())
                },
                "favorites": {
                    "count": len(favorites.all()),
                    "path": str(favorites.path)
                },
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

    @router.get("/discovery/status", response_model=DiscoveryStatusResponse)
    async def discovery_status():
        """Per-strategy statistics of the last discovery pass"""
        try:
            return DiscoveryStatusResponse(
                active=discovery.is_discovery_active(),
                device_count=len(discovery.discovered_devices()),
                last_results=[
                    StrategyResultResponse(
                        method=r.method,
                        duration_seconds=r.duration_seconds,
                        devices_tested=r.devices_tested,
                        success_count=r.success_count
                    ) for r in discovery.last_results
                ]
            )
        except Exception as e:
            logger.error(f"Error getting discovery status: {e}")
            return DiscoveryStatusResponse(
                active=False,
                device_count=0,
                last_results=[],
                error_message=str(e)
            )

    return router
