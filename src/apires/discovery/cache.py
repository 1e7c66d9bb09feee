"""On-disk cache of discovery responses, keyed by API server host."""

from __future__ import annotations

import json
import logging
import re
import time
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 6 * 60 * 60


def _host_dir_name(server: str) -> str:
    u = urlparse(server if "://" in server else f"https://{server}")
    host = u.netloc or u.path or "default"
    return re.sub(r"[^A-Za-z0-9.\-]", "_", host)


class DiscoveryCache:
    """Stores the raw ``APIResourceList`` payloads of one server."""

    def __init__(self, cache_dir: Path, server: str, ttl_s: int = DEFAULT_TTL_S):
        self.path = Path(cache_dir) / _host_dir_name(server) / "discovery.json"
        self.ttl_s = ttl_s

    def load(self) -> Optional[List[dict]]:
        """Cached payloads, or None when missing, expired or corrupt."""
        if not self.path.exists():
            logger.debug("Discovery cache miss: %s", self.path)
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            fetched_at = float(data["fetched_at"])
            lists = data["lists"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.info("Ignoring corrupt discovery cache %s: %s", self.path, e)
            return None

        if not isinstance(lists, list) or not all(isinstance(x, dict) for x in lists):
            return None
        if time.time() - fetched_at > self.ttl_s:
            logger.debug("Discovery cache expired: %s", self.path)
            return None
        logger.info("Using cached discovery data from %s", self.path)
        return lists

    def save(self, lists: List[dict]) -> Optional[Path]:
        """Write the payloads; returns None if the cache is not writable."""
        payload = {"fetched_at": time.time(), "lists": lists}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot write discovery cache %s: %s", self.path, e)
            return None
        return self.path

    def clear(self) -> None:
        """Remove the cache file; safe to call repeatedly."""
        try:
            self.path.unlink()
            logger.debug("Invalidated discovery cache %s", self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Cannot remove discovery cache %s: %s", self.path, e)
