"""
Server orchestration module
"""

from .printer_server import PrinterServer

__all__ = ['PrinterServer']
