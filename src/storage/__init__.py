"""
Storage module for operator preferences
"""

from .favorites import FavoritesStore, FAVORITES_KEY

__all__ = ['FavoritesStore', 'FAVORITES_KEY']
