"""
Advisory cache of the last store versions seen.

Other release tooling in the same run (fastlane lanes, shell scripts) reads
these files instead of querying the stores again. Nothing in this package
treats a cached value as ground truth: it is only shown when a live lookup
fails. Concurrent writers are serialized with a file lock and the last
writer wins.
"""

import logging
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from flutterdeploy import constants
from flutterdeploy.config import get_cache_dir

from .sources import VersionSource

logger = logging.getLogger(__name__)

_STORE_FILES = {
    VersionSource.GOOGLE_PLAY: constants.GOOGLE_PLAY_CACHE_FILE,
    VersionSource.APP_STORE: constants.APP_STORE_CACHE_FILE,
}


class StoreVersionCache:
    def __init__(self, cache_dir: Optional[Path] = None, lock_timeout: float = 5.0):
        self.cache_dir = Path(cache_dir) if cache_dir is not None else get_cache_dir()
        self.lock_timeout = lock_timeout

    def path_for(self, store: Optional[VersionSource] = None) -> Path:
        """Per-store cache file, or the combined highest-version file when *store* is None."""
        if store is None:
            return self.cache_dir / constants.STORE_CACHE_FILE
        return self.cache_dir / _STORE_FILES[store]

    def write(self, value: str, store: Optional[VersionSource] = None) -> bool:
        """Store *value*; failures are logged and reported as False."""
        path = self.path_for(store)
        lock = FileLock(str(path) + ".lock", timeout=self.lock_timeout)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with lock:
                path.write_text(f"{value}\n", encoding="utf-8")
        except (OSError, Timeout) as e:
            logger.debug(f"Could not cache store version in {path}: {e}")
            return False
        logger.debug(f"Cached store version {value} in {path}")
        return True

    def read(self, store: Optional[VersionSource] = None) -> Optional[str]:
        path = self.path_for(store)
        try:
            value = path.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return value or None
