"""Configuration for stream buffers and the pipeline runner."""

from __future__ import annotations
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import json

import numpy as np
import yaml

from .errors import ConfigError


@dataclass(frozen=True)
class StreamConfig:
    """Configuration shared by streams and pipelines."""
    dtype: str = "float64"
    max_elements: Optional[int] = None
    fail_fast: bool = True
    swap_after_stage: bool = True
    per_dimension: bool = False
    log_level: str = "WARNING"

    def __post_init__(self):
        try:
            np.dtype(self.dtype)
        except TypeError as exc:
            raise ConfigError(f"Unknown dtype: {self.dtype!r}") from exc
        if self.max_elements is not None and self.max_elements < 1:
            raise ConfigError(f"max_elements must be >= 1, got {self.max_elements}")

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(self.dtype)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dtype": self.dtype,
            "max_elements": self.max_elements,
            "fail_fast": self.fail_fast,
            "swap_after_stage": self.swap_after_stage,
            "per_dimension": self.per_dimension,
            "log_level": self.log_level,
        }

    def update(self, **overrides: Any) -> StreamConfig:
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")
        return replace(self, **overrides)


def default_config() -> StreamConfig:
    """Default configuration: float64 buffers, no size cap, fail-fast pipeline."""
    return StreamConfig()


def load_config(source: Any = None) -> StreamConfig:
    """Load configuration from dict, file, or use defaults."""
    if source is None or isinstance(source, StreamConfig):
        return source or StreamConfig()

    if isinstance(source, Mapping):
        return default_config().update(**dict(source))

    # Load from file
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Config file {path} not found.")

    text = path.read_text()
    if path.suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif path.suffix == ".json":
        data = json.loads(text)
    else:
        raise ConfigError(f"Unsupported config extension: {path.suffix}")

    if data is None:
        return default_config()
    if not isinstance(data, Mapping):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return default_config().update(**data)


__all__ = ["StreamConfig", "default_config", "load_config"]
