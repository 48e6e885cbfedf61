"""Settings loader with environment variable integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from xpack_user.core.elastic.client import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """Application configuration container."""
    # Elasticsearch
    elasticsearch_url: str = "http://localhost:9200"
    elasticsearch_version: Optional[int] = None
    request_timeout: float = REQUEST_TIMEOUT

    # Local state
    state_dir: Path = Path(".runtime/state")

    def state_file(self, username: str) -> Path:
        """Path of the persisted state for one username.

        Names are percent-encoded so distinct usernames never share a file.
        """
        return self.state_dir / f"{quote(username, safe='')}.json"


def _get_int(var_name: str) -> Optional[int]:
    value = os.environ.get(var_name, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be an integer, got {value!r}") from None


def _get_float(var_name: str, default: float) -> float:
    value = os.environ.get(var_name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got {value!r}") from None


def load_settings() -> AppConfig:
    """Load settings from the environment."""
    elasticsearch_url = os.environ.get("ELASTICSEARCH_URL", "http://localhost:9200").strip()
    elasticsearch_version = _get_int("ELASTICSEARCH_VERSION")
    request_timeout = _get_float("ELASTICSEARCH_TIMEOUT", REQUEST_TIMEOUT)
    state_dir = Path(os.environ.get("XPACK_USER_STATE_DIR", ".runtime/state"))

    logger.info(
        "url=%s; version=%s; timeout=%ss",
        elasticsearch_url,
        elasticsearch_version or "auto",
        request_timeout,
    )

    return AppConfig(
        elasticsearch_url=elasticsearch_url,
        elasticsearch_version=elasticsearch_version,
        request_timeout=request_timeout,
        state_dir=state_dir,
    )
