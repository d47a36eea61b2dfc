"""
Main FastAPI application setup
Local HTTP API for network printer discovery, scan URL hand-off and favorites
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict
import logging

from .printer_routes import create_printer_routes
from .system_routes import create_system_routes

logger = logging.getLogger(__name__)


class PrinterAPI:
    """Local HTTP API around a PrinterDiscovery instance"""

    def __init__(self, discovery, favorites, config: Dict):
        self.discovery = discovery
        self.favorites = favorites
        self.config = config
        self.app = FastAPI(
            title="Network Printer Discovery Server",
            description="Finds scan-capable printers on the local network and hands off their scan pages",
            version="1.0.0"
        )
        self._setup_middleware()
        self._setup_routes()

    def _setup_middleware(self):
        origins = self.config.get('api', {}).get('cors_origins', ['*'])
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["*"],
            allow_headers=["*"]
        )

    def _setup_routes(self):
        """Setup FastAPI routes using modular approach"""
        printer_router = create_printer_routes(self.discovery, self.favorites)
        system_router = create_system_routes(self.discovery, self.favorites)

        self.app.include_router(printer_router)
        self.app.include_router(system_router)
