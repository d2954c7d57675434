"""
Configuration loading for the CVE store runner.

The configuration is a YAML file:

    store:
      url: redis://localhost:6379/0
      expire_seconds: 0          # 0 = keys never expire
      socket_timeout: 30         # optional
    sources:
      debian:
        path: data/debian.json
    report_dir: output

Retention is carried explicitly in StoreConfig and handed to the writer;
nothing reads it from global state.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from vulnstore.models import Vendor

SOURCE_VENDORS = {
    "redhat": Vendor.REDHAT,
    "debian": Vendor.DEBIAN,
    "ubuntu": Vendor.UBUNTU,
    "microsoft": Vendor.MICROSOFT,
}


@dataclass
class StoreConfig:
    url: str
    expire_seconds: int = 0
    socket_timeout: Optional[float] = None


@dataclass
class PipelineConfig:
    store: StoreConfig
    sources: Dict[Vendor, Dict[str, Any]] = field(default_factory=dict)
    report_dir: Path = Path("output")


def load_config(config_path: str) -> PipelineConfig:
    """
    Load and validate the runner configuration.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        PipelineConfig

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if required keys are missing or values are invalid
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    store = raw.get("store")
    if not isinstance(store, dict) or not store.get("url"):
        raise ValueError("Missing required config key: store.url")

    expire = store.get("expire_seconds", 0)
    if isinstance(expire, bool) or not isinstance(expire, int) or expire < 0:
        raise ValueError(f"store.expire_seconds must be a non-negative integer, got {expire!r}")

    sources = {}
    for name, source_config in (raw.get("sources") or {}).items():
        if name not in SOURCE_VENDORS:
            raise ValueError(f"Unknown source: sources.{name}")
        sources[SOURCE_VENDORS[name]] = source_config or {}

    return PipelineConfig(
        store=StoreConfig(
            url=store["url"],
            expire_seconds=expire,
            socket_timeout=store.get("socket_timeout"),
        ),
        sources=sources,
        report_dir=Path(raw.get("report_dir", "output")),
    )
