"""
Durable favorites - the set of device ids an operator prefers
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

FAVORITES_KEY = 'printer-favorites'


class FavoritesStore:
    """
    Set of favorite device ids backed by a JSON array on disk.

    The file is read once at construction and rewritten after every
    mutation. Missing or corrupt files load as an empty set and write
    failures are logged, never raised.
    """

    def __init__(self, directory: Union[str, Path], key: str = FAVORITES_KEY):
        self.path = Path(directory) / f"{key}.json"
        self._favorites: List[str] = self._load()

    def add(self, device_id: str) -> None:
        if device_id in self._favorites:
            return
        self._favorites.append(device_id)
        self._save()

    def remove(self, device_id: str) -> None:
        self._favorites = [fid for fid in self._favorites if fid != device_id]
        self._save()

    def is_favorite(self, device_id: str) -> bool:
        return device_id in self._favorites

    def all(self) -> List[str]:
        return list(self._favorites)

    def _load(self) -> List[str]:
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read favorites from {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Ignoring malformed favorites file {self.path}")
            return []

        favorites = []
        for item in data:
            if isinstance(item, str) and item not in favorites:
                favorites.append(item)
        return favorites

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix='.favorites-', suffix='.tmp')
            try:
                with os.fdopen(fd, 'w') as f:
                    json.dump(self._favorites, f)
                os.replace(tmp_name, self.path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.warning(f"Could not save favorites to {self.path}: {e}")
