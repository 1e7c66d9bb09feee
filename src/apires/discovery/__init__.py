"""Kubernetes API discovery: HTTP client and on-disk cache."""

from .cache import DiscoveryCache
from .client import DiscoveryClient

__all__ = ["DiscoveryCache", "DiscoveryClient"]
