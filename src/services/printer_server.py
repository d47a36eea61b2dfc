"""
Printer Discovery Server - orchestrates discovery, favorites and the HTTP API
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional
import uvicorn

from config_loader import load_config, setup_logging
from discovery import PrinterDiscovery
from storage import FavoritesStore
from api.main_api import PrinterAPI

logger = logging.getLogger(__name__)


class PrinterServer:
    """Main server wiring discovery, favorites and API together"""

    def __init__(self, config_path: Optional[str] = "config/config.yaml", config: Optional[Dict] = None):
        self.config = config if config is not None else load_config(config_path)
        setup_logging(self.config)

        self.favorites = FavoritesStore(Path(self.config['favorites']['directory']))
        self.discovery = PrinterDiscovery(self.config['discovery'], self.favorites)
        self.api = PrinterAPI(self.discovery, self.favorites, self.config)

        self.running = False
        self.tasks: List[asyncio.Task] = []
        self._server: Optional[uvicorn.Server] = None

    async def start(self):
        """Start background services and serve the API until stopped"""
        logger.info("Starting network printer discovery server...")

        try:
            self.running = True

            if self.config['discovery']['discover_on_startup']:
                self.tasks.append(asyncio.create_task(self._startup_discovery()))

            if self.config['discovery']['scan_interval_minutes'] > 0:
                self.tasks.append(asyncio.create_task(self._discovery_service()))

            logger.info(f"Background services started ({len(self.tasks)} tasks)")

            await self._start_api_server()

        except Exception as e:
            logger.error(f"Server startup failed: {e}")
            await self.stop()
            raise

    async def stop(self):
        """Stop all server services gracefully"""
        logger.info("Stopping server...")
        self.running = False
        self.discovery.cancel()

        if self._server is not None:
            self._server.should_exit = True

        for task in self.tasks:
            task.cancel()

        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks = []
        logger.info("Server stopped")

    async def _startup_discovery(self):
        devices = await self.discovery.discover()
        favorites = self.discovery.favorite_devices()
        logger.info(f"[SUCCESS] Startup discovery: {len(devices)} devices, {len(favorites)} favorites online")

    async def _discovery_service(self):
        """Background service for periodic rediscovery"""
        scan_interval = self.config['discovery']['scan_interval_minutes'] * 60

        logger.info(f"Discovery service started (every {scan_interval/60} minutes)")

        while self.running:
            try:
                await asyncio.sleep(scan_interval)
                if not self.running:
                    break

                logger.info("[REFRESH] Running periodic discovery...")
                devices = await self.discovery.discover()
                logger.info(f"Periodic discovery found {len(devices)} devices")

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Discovery service error: {e}")

    async def _start_api_server(self):
        """Start the FastAPI server"""
        config = uvicorn.Config(
            self.api.app,
            host=self.config['api']['host'],
            port=self.config['api']['port'],
            log_level="info",
            access_log=False  # We handle our own logging
        )

        self._server = uvicorn.Server(config)

        logger.info(f"Starting API server on {self.config['api']['host']}:{self.config['api']['port']}")
        logger.info(f"API documentation: http://localhost:{self.config['api']['port']}/docs")

        await self._server.serve()
