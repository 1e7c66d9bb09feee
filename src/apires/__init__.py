"""apires: list the API resources a Kubernetes server exposes."""

__version__ = "0.1.0"
