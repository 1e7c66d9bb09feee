from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .env import load_env_files
from .errors import ConfigurationError

APP = "apires"

logger = logging.getLogger(__name__)


def config_dir() -> Path:
    """
    Cross-platform config directory:
      - Windows: %APPDATA%\\apires
      - macOS/Linux: $XDG_CONFIG_HOME/apires or ~/.config/apires
    """
    if os.name == "nt":
        base = os.environ.get("APPDATA") or str(Path.home())
        return Path(base) / APP
    return Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))) / APP


def config_path() -> Path:
    return config_dir() / "config.json"


def default_cache_dir() -> Path:
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home())
        return Path(base) / APP / "cache" / "discovery"
    return Path(os.environ.get("XDG_CACHE_HOME", str(Path.home() / ".cache"))) / APP / "discovery"


def default_kubeconfig() -> Optional[Path]:
    """First existing entry of $APIRES_KUBECONFIG / $KUBECONFIG, else ~/.kube/config."""
    raw = os.environ.get("APIRES_KUBECONFIG") or os.environ.get("KUBECONFIG") or ""
    for entry in raw.split(os.pathsep):
        if entry and Path(entry).expanduser().is_file():
            return Path(entry).expanduser()
    fallback = Path.home() / ".kube" / "config"
    return fallback if fallback.is_file() else None


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "t", "true", "yes", "y", "on")


def _materialize(data_b64: str, suffix: str) -> str:
    """Write base64 kubeconfig data to a file, since requests wants paths."""
    raw = base64.b64decode(data_b64)
    digest = hashlib.sha256(raw).hexdigest()[:16]
    path = config_dir() / "certs" / f"{digest}{suffix}"
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(raw)
        if os.name != "nt":
            path.chmod(0o600)
    return str(path)


def _named(items: Any, name: str) -> Dict[str, Any]:
    for item in items or []:
        if isinstance(item, dict) and item.get("name") == name:
            return item
    return {}


def load_kubeconfig(path: Path, context: Optional[str] = None) -> Dict[str, Any]:
    """Extract connection settings for one context of a kubeconfig file.

    Returns a dict with any of: server, token, certificate_authority,
    client_certificate, client_key, insecure_skip_tls_verify. Relative file
    references are resolved against the kubeconfig's directory.
    """
    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"cannot read kubeconfig {path}: {e}") from e
    if not isinstance(doc, dict):
        raise ConfigurationError(f"invalid kubeconfig {path}")

    context_name = context or doc.get("current-context") or ""
    ctx = _named(doc.get("contexts"), context_name).get("context")
    if not ctx:
        if context:
            raise ConfigurationError(f'context "{context}" does not exist in {path}')
        return {}

    cluster = _named(doc.get("clusters"), ctx.get("cluster", "")).get("cluster") or {}
    user = _named(doc.get("users"), ctx.get("user", "")).get("user") or {}
    base = path.parent

    def _file(value: Optional[str]) -> str:
        if not value:
            return ""
        p = Path(value).expanduser()
        return str(p if p.is_absolute() else base / p)

    out: Dict[str, Any] = {}
    if cluster.get("server"):
        out["server"] = cluster["server"]
    if cluster.get("insecure-skip-tls-verify"):
        out["insecure_skip_tls_verify"] = True

    if cluster.get("certificate-authority-data"):
        out["certificate_authority"] = _materialize(cluster["certificate-authority-data"], ".crt")
    elif cluster.get("certificate-authority"):
        out["certificate_authority"] = _file(cluster["certificate-authority"])

    if user.get("token"):
        out["token"] = user["token"]
    elif user.get("tokenFile"):
        try:
            out["token"] = Path(_file(user["tokenFile"])).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ConfigurationError(f"cannot read token file: {e}") from e

    if user.get("client-certificate-data"):
        out["client_certificate"] = _materialize(user["client-certificate-data"], ".crt")
    elif user.get("client-certificate"):
        out["client_certificate"] = _file(user["client-certificate"])
    if user.get("client-key-data"):
        out["client_key"] = _materialize(user["client-key-data"], ".key")
    elif user.get("client-key"):
        out["client_key"] = _file(user["client-key"])

    return out


@dataclass
class Settings:
    server: str = ""
    token: str = ""
    certificate_authority: str = ""
    client_certificate: str = ""
    client_key: str = ""
    insecure_skip_tls_verify: bool = False
    request_timeout: float = 30.0
    cache_dir: str = ""
    cache_ttl_s: int = 6 * 60 * 60

    @staticmethod
    def load(
        path: Optional[Path] = None,
        kubeconfig: Optional[Path] = None,
        context: Optional[str] = None,
    ) -> "Settings":
        path = path or config_path()

        # Load .env files before reading environment variables
        load_env_files(config_dir())

        data: dict = {}
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning("Ignoring unreadable settings file %s: %s", path, e)
                data = {}

        s = Settings(
            server=str(data.get("server", Settings.server)),
            token=str(data.get("token", Settings.token)),
            certificate_authority=str(data.get("certificate_authority", Settings.certificate_authority)),
            client_certificate=str(data.get("client_certificate", Settings.client_certificate)),
            client_key=str(data.get("client_key", Settings.client_key)),
            insecure_skip_tls_verify=bool(data.get("insecure_skip_tls_verify", Settings.insecure_skip_tls_verify)),
            request_timeout=float(data.get("request_timeout", Settings.request_timeout)),
            cache_dir=str(data.get("cache_dir", "") or default_cache_dir()),
            cache_ttl_s=int(data.get("cache_ttl_s", Settings.cache_ttl_s)),
        )

        # kubeconfig overrides the settings file
        kc_path = kubeconfig or default_kubeconfig()
        if kc_path is not None:
            if not kc_path.is_file():
                raise ConfigurationError(f"kubeconfig {kc_path} does not exist")
            for key, value in load_kubeconfig(kc_path, context).items():
                setattr(s, key, value)
        elif context:
            raise ConfigurationError(f'context "{context}" requested but no kubeconfig was found')

        # Environment overrides (highest priority)
        s.server = os.environ.get("APIRES_SERVER", s.server)
        s.token = os.environ.get("APIRES_TOKEN", s.token)
        if "APIRES_INSECURE" in os.environ:
            s.insecure_skip_tls_verify = _truthy(os.environ["APIRES_INSECURE"])

        return s

    def verify(self) -> Any:
        """Value for requests' ``verify``: False, a CA bundle path, or True."""
        if self.insecure_skip_tls_verify:
            return False
        return self.certificate_authority or True
