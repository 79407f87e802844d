"""Configuration for elftrace runs.

Defines which machines are accepted, how the container class is checked
and how logging is set up. Configurations load from YAML or JSON files
and from a small set of named presets.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from elftrace.errors import ConfigError
from elftrace.utils.types import DEFAULT_MACHINES

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class TraceConfig:
    """Settings for one trace run.

    Attributes:
        accepted_machines: ``e_machine`` names that may be traced
        elf_class: Required container class (32 or 64); None accepts both
        log_level: loguru level name
        log_file: Optional log file path
        json_logs: Emit serialized JSON log records on stderr
        check_destination: Validate the output path before extraction
    """

    accepted_machines: list[str] = field(default_factory=lambda: list(DEFAULT_MACHINES))
    elf_class: Optional[int] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    json_logs: bool = False
    check_destination: bool = True

    def __post_init__(self):
        """Validate configuration."""
        if isinstance(self.accepted_machines, str):
            self.accepted_machines = [self.accepted_machines]
        self.accepted_machines = [m.upper() for m in self.accepted_machines]
        if not self.accepted_machines:
            raise ConfigError("accepted_machines must name at least one machine")
        for machine in self.accepted_machines:
            if not machine.startswith("EM_"):
                raise ConfigError(f"Machine names use the EM_ prefix, got {machine!r}")

        if self.elf_class not in (None, 32, 64):
            raise ConfigError(f"elf_class must be 32, 64 or null, got {self.elf_class!r}")

        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TraceConfig":
        """Build a configuration, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TraceConfig":
        """Load configuration from a YAML or JSON file.

        Args:
            path: ``.json`` files are read as JSON, anything else as YAML

        Returns:
            TraceConfig instance
        """
        path = Path(path)
        try:
            with open(path) as f:
                if path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config {path}: {e.strerror}", path=path) from e
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot parse config {path}: {e}", path=path) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must contain a mapping", path=path)
        return cls.from_dict(data)

    @classmethod
    def from_preset(cls, name: str) -> "TraceConfig":
        """Return one of the named configurations."""
        presets = {
            "riscv": cls(),
            "riscv32": cls(elf_class=32),
            "riscv64": cls(elf_class=64),
        }
        if name not in presets:
            raise ConfigError(f"Unknown preset: {name}. Available: {sorted(presets)}")
        return presets[name]

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration as YAML."""
        save_path = Path(path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}
