"""
ASGI entry point for uvicorn
This module exposes the FastAPI app for use with uvicorn command line
"""

import logging
import os
from pathlib import Path

from config_loader import load_config, setup_logging
from discovery import PrinterDiscovery
from storage import FavoritesStore
from api.main_api import PrinterAPI

# Load configuration
config = load_config(os.environ.get('CONFIG_FILE', 'config/config.yaml'))
setup_logging(config)

logger = logging.getLogger(__name__)

logger.info("Initializing application components...")

favorites = FavoritesStore(Path(config['favorites']['directory']))
discovery = PrinterDiscovery(config['discovery'], favorites)
api = PrinterAPI(discovery, favorites, config)

# Expose the FastAPI app for uvicorn
app = api.app

logger.info("ASGI app ready for uvicorn")
