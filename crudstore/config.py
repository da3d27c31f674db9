"""Client settings.

Settings come from keyword arguments, from ``CRUDSTORE_*`` environment
variables, or from a YAML mapping with the same field names.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, field_validator

from .json_codec import DEFAULT_MAX_FRAME_BYTES

ENV_PREFIX = "CRUDSTORE_"


def _is_valid_http_endpoint(endpoint: str) -> bool:
    """Check if the endpoint is a valid HTTP/HTTPS URL."""
    if not endpoint:
        return False

    try:
        parsed = urlparse(endpoint)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    except ValueError:
        return False


class ClientSettings(BaseModel):
    """Connection settings for a remote CRUD store."""

    endpoint: str
    timeout: float = Field(default=30.0, gt=0)
    api_key: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    max_frame_bytes: int = Field(default=DEFAULT_MAX_FRAME_BYTES, gt=0)

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        if not _is_valid_http_endpoint(value):
            raise ValueError(f"Invalid HTTP endpoint: {value}. The CRUD client requires HTTP/HTTPS URLs.")
        return value

    def request_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        headers.update(self.headers)
        return headers

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, **overrides: Any) -> ClientSettings:
        """Load settings from environment variables, e.g. ``CRUDSTORE_ENDPOINT``."""
        values: dict[str, Any] = {}
        for name in ("endpoint", "timeout", "api_key", "max_frame_bytes"):
            raw = os.getenv(f"{prefix}{name.upper()}")
            if raw is not None:
                values[name] = raw
        values.update(overrides)
        return cls.model_validate(values)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ClientSettings:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")
        return cls.model_validate(data)
