#!/usr/bin/env python3
"""
Kladeusis Configuration Manager

Keeps a small run history (last run, last root, totals) in a JSON file
under ~/.kladeusis. The prune policy itself is not configurable.
"""

import json
import pathlib
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class KladeusisConfig:
    """Persistent run history"""

    version: str = "1.0"
    last_run: Optional[str] = None
    last_root: Optional[str] = None
    last_total_bytes: int = 0
    total_runs: int = 0

    def record_run(self, root: str, total_bytes: int):
        """Update history after a completed scan"""
        self.last_run = datetime.now(timezone.utc).isoformat()
        self.last_root = root
        self.last_total_bytes = total_bytes
        self.total_runs += 1

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "KladeusisConfig":
        """Create from dictionary"""
        return cls(
            version=data.get("version", "1.0"),
            last_run=data.get("last_run"),
            last_root=data.get("last_root"),
            last_total_bytes=int(data.get("last_total_bytes", 0)),
            total_runs=int(data.get("total_runs", 0)),
        )


class ConfigManager:
    """Manages loading and saving the Kladeusis configuration"""

    def __init__(self, config_dir: Optional[pathlib.Path] = None):
        """Initialize configuration manager

        Args:
            config_dir: Override default .kladeusis directory location
        """
        self.config_dir = config_dir or pathlib.Path.home() / ".kladeusis"
        self.config_file = self.config_dir / "config.json"

    def load(self) -> KladeusisConfig:
        """Load configuration from file"""
        if self.config_file.exists():
            try:
                with self.config_file.open() as f:
                    return KladeusisConfig.from_dict(json.load(f))
            except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError):
                # If config is corrupted, return default
                return KladeusisConfig()
        return KladeusisConfig()

    def save(self, config: KladeusisConfig):
        """Save configuration to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with self.config_file.open("w") as f:
            json.dump(config.to_dict(), f, indent=2)
