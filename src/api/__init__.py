"""
API module for printer discovery and favorites
"""

from .main_api import PrinterAPI
from .printer_routes import create_printer_routes
from .system_routes import create_system_routes

__all__ = ['PrinterAPI', 'create_printer_routes', 'create_system_routes']
