"""
Configuration loader for the volume reconciler.

Environment-specific values (data volume naming, mount path, AWS region,
resize timeouts) live in an INI file rather than in code.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_CONFIG_PATH = Path("/etc/volume-reconciler/reconciler.conf")
CONFIG_SECTION = "reconciler"


@dataclass(frozen=True)
class ReconcilerConfig:
    data_volume_name: str = "pgdata"
    data_mount: str = "/home/postgres/pgdata"
    container_name: str = "postgres"
    aws_region: str = "eu-central-1"
    resize_timeout: int = 300  # seconds
    resize_poll_interval: int = 5  # seconds
    log_level: str = "INFO"
    kubeconfig: str = ""


def _config_path() -> Path:
    env = os.environ.get("VOLUME_RECONCILER_CONFIG_PATH")
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def _read_ini(path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    if path.exists():
        parser.read(path, encoding="utf-8")
    return parser


def load_config() -> ReconcilerConfig:
    """
    Load config from `VOLUME_RECONCILER_CONFIG_PATH` or
    `/etc/volume-reconciler/reconciler.conf`.

    Missing files are not an error; defaults are returned.
    """
    parser = _read_ini(_config_path())
    section = parser[CONFIG_SECTION] if parser.has_section(CONFIG_SECTION) else {}

    def _get(key: str, default: str) -> str:
        if isinstance(section, dict):
            return str(section.get(key, default)).strip()
        return str(section.get(key, fallback=default)).strip()

    def _get_int(key: str, default: int) -> int:
        raw = _get(key, str(default))
        try:
            value = int(raw)
        except ValueError:
            return default
        return value if value > 0 else default

    defaults = ReconcilerConfig()
    return ReconcilerConfig(
        data_volume_name=_get("data_volume_name", defaults.data_volume_name),
        data_mount=_get("data_mount", defaults.data_mount),
        container_name=_get("container_name", defaults.container_name),
        aws_region=_get("aws_region", defaults.aws_region),
        resize_timeout=_get_int("resize_timeout", defaults.resize_timeout),
        resize_poll_interval=_get_int("resize_poll_interval", defaults.resize_poll_interval),
        log_level=_get("log_level", defaults.log_level).upper(),
        kubeconfig=_get("kubeconfig", defaults.kubeconfig),
    )
