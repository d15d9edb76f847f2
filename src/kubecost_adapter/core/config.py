"""Adapter configuration: environment variables overlaid by an optional YAML file.

Resolution order (later wins, per key):

1. Built-in defaults from :mod:`kubecost_adapter.core.defaults`.
2. ``KUBECOST_*`` environment variables.
3. Keys present in the YAML file, if one is given and exists.

Typical file::

    baseUrl: http://kubecost-cost-analyzer.kubecost:9090
    apiToken: s3cret
    defaultWindow: 7d
    timeout: 30s
    tlsSkipVerify: false
    clusterId: prod-eu-1
    defaultNamespace: default
    predictionWindow: 2d

Usage::

    from kubecost_adapter.core.config import load_config

    cfg = load_config("kubecost.yaml")
    cfg.base_url
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from kubecost_adapter.core.defaults import (
    DEFAULT_PREDICTION_WINDOW,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_WINDOW,
)
from kubecost_adapter.core.errors import InvalidWindowFormat
from kubecost_adapter.core.window import parse_duration

logger = logging.getLogger(__name__)

_ENV_VARS: dict[str, str] = {
    "base_url": "KUBECOST_BASE_URL",
    "api_token": "KUBECOST_API_TOKEN",
    "default_window": "KUBECOST_DEFAULT_WINDOW",
    "timeout_seconds": "KUBECOST_TIMEOUT",
    "tls_skip_verify": "KUBECOST_TLS_SKIP_VERIFY",
    "cluster_id": "KUBECOST_CLUSTER_ID",
    "default_namespace": "KUBECOST_DEFAULT_NAMESPACE",
    "prediction_window": "KUBECOST_PREDICTION_WINDOW",
}


class KubecostConfig(BaseModel):
    """Read-only settings handed to :class:`~kubecost_adapter.adapters.kubecost.client.KubecostClient`.

    YAML keys use the camelCase aliases; Python callers may use field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(default="", alias="baseUrl")
    api_token: str = Field(default="", alias="apiToken", repr=False)
    default_window: str = Field(default=DEFAULT_WINDOW, alias="defaultWindow")
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, alias="timeout", gt=0)
    tls_skip_verify: bool = Field(default=False, alias="tlsSkipVerify")
    cluster_id: str = Field(default="", alias="clusterId")
    default_namespace: str = Field(default="", alias="defaultNamespace")
    prediction_window: str = Field(default=DEFAULT_PREDICTION_WINDOW, alias="predictionWindow")

    @field_validator("timeout_seconds", mode="before")
    @classmethod
    def _duration_string(cls, value: Any) -> Any:
        """Accept ``"30s"``-style durations alongside plain seconds."""
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return parse_duration(value).total_seconds()
        return value


_ALIASES: dict[str, str] = {
    field.alias or name: name for name, field in KubecostConfig.model_fields.items()
}


def _from_environ(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name, var in _ENV_VARS.items():
        raw = environ.get(var, "")
        if not raw:
            continue
        if name == "tls_skip_verify":
            values[name] = raw == "true"
        elif name == "timeout_seconds":
            try:
                seconds = parse_duration(raw).total_seconds()
            except InvalidWindowFormat:
                logger.warning("Ignoring unparsable %s=%r", var, raw)
                continue
            if seconds <= 0:
                logger.warning("Ignoring non-positive %s=%r", var, raw)
                continue
            values[name] = seconds
        else:
            values[name] = raw
    return values


def _from_file(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError:
        logger.warning("Corrupt config at %s; using environment values", path)
        return {}
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        logger.warning("Config at %s is not a mapping; using environment values", path)
        return {}

    values: dict[str, Any] = {}
    for key, val in raw.items():
        name = _ALIASES.get(key, key)
        if name not in KubecostConfig.model_fields:
            logger.debug("Ignoring unknown config key %r in %s", key, path)
            continue
        values[name] = val
    return values


def load_config(
    path: Path | str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> KubecostConfig:
    """Build a :class:`KubecostConfig` from the environment and an optional file.

    A missing file is not an error: the environment values are used as-is.

    Args:
        path: Optional YAML file whose keys override the environment.
        environ: Environment mapping (defaults to :data:`os.environ`).

    Returns:
        A validated, frozen config.

    Raises:
        OSError: If *path* exists but cannot be read.
        pydantic.ValidationError: If a value has the wrong type.
    """
    env = os.environ if environ is None else environ
    values = _from_environ(env)

    if path:
        file_path = Path(path)
        if file_path.exists():
            values.update(_from_file(file_path))
        else:
            logger.debug("Config file %s not found; using environment values", file_path)

    return KubecostConfig.model_validate(values)
