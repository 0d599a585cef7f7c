"""
Fuzzer configuration.

Retry budgets and structural defaults live here so that test suites can
tune them from a YAML file instead of patching constants. Combinators read
the active configuration when they are constructed; an explicit keyword
argument always wins.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "FuzzConfig",
    "get_config",
    "load_config_from_env",
    "reset_config",
]

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "KOMPACT_FUZZ_CONFIG"
DEFAULT_CONFIG_PATH = "config/fuzz.yaml"


@dataclass(slots=True)
class FuzzConfig:
    """Tunable limits for fuzzers."""

    such_that_max_attempts: int = 100
    set_max_attempts: int = 100
    data_max_depth: int = 3
    data_max_children: int = 4
    default_list_max: int = 32

    @classmethod
    def from_file(cls, path: Path | str) -> "FuzzConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        retries = data.get("retries") or {}
        data_cfg = data.get("data") or {}
        lists = data.get("lists") or {}
        config = cls(
            such_that_max_attempts=int(retries.get("such_that", 100)),
            set_max_attempts=int(retries.get("set", 100)),
            data_max_depth=int(data_cfg.get("max_depth", 3)),
            data_max_children=int(data_cfg.get("max_children", 4)),
            default_list_max=int(lists.get("default_max", 32)),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate structural invariants for the configuration."""
        for attr_name in ("such_that_max_attempts", "set_max_attempts", "default_list_max"):
            value = getattr(self, attr_name)
            if value <= 0:
                raise ValueError(f"fuzz config {attr_name} must be >0, got {value}")
        for attr_name in ("data_max_depth", "data_max_children"):
            value = getattr(self, attr_name)
            if value < 0:
                raise ValueError(f"fuzz config {attr_name} must be >=0, got {value}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config_from_env() -> FuzzConfig:
    """Load the YAML named by ``KOMPACT_FUZZ_CONFIG``, or the defaults."""
    path = Path(os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
    if not path.exists():
        return FuzzConfig()
    logger.info("Loaded fuzz config from %s", path)
    return FuzzConfig.from_file(path)


@lru_cache(maxsize=1)
def get_config() -> FuzzConfig:
    return load_config_from_env()


def reset_config() -> None:
    """Forget the cached configuration (next ``get_config`` reloads it)."""
    get_config.cache_clear()
