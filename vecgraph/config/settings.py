"""
vecgraph Settings
=================

Search, maintenance and splitter defaults.

Values come from `vecgraph/config/defaults.yaml`, optionally overridden by a
user YAML file (explicit path or VECGRAPH_SETTINGS env var).

Usage:
    from vecgraph.config import load_settings

    settings = load_settings()
    print(settings.search.alpha)        # 0.7
    print(settings.maintenance.top_k)   # 5
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
import yaml

from vecgraph.errors import ConfigurationError

log = structlog.get_logger()

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"
SETTINGS_ENV_VAR = "VECGRAPH_SETTINGS"
MAX_KNN_DEPTH = 4


@dataclass
class SearchSettings:
    """
    Hybrid search parameters.

    Attributes:
        alpha: Weight for direct similarity vs graph score [0-1]
               Default: 0.7 (70% direct, 30% graph)
        similarity_threshold: Minimum direct similarity and edge weight
        top_n: Maximum results returned
        knn_depth: Maximum hops along SIMILAR_TO edges (0..4)
    """
    alpha: float = 0.7
    similarity_threshold: float = 0.25
    top_n: int = 4
    knn_depth: int = 2

    def __post_init__(self):
        if not 0 <= self.alpha <= 1:
            raise ConfigurationError(f"alpha must be in [0, 1], got {self.alpha}")
        if not 0 <= self.similarity_threshold <= 1:
            raise ConfigurationError(
                f"similarity_threshold must be in [0, 1], got {self.similarity_threshold}"
            )
        if self.top_n < 1:
            raise ConfigurationError(f"top_n must be >= 1, got {self.top_n}")
        if not 0 <= self.knn_depth <= MAX_KNN_DEPTH:
            raise ConfigurationError(
                f"knn_depth must be in [0, {MAX_KNN_DEPTH}], got {self.knn_depth}"
            )


@dataclass
class MaintenanceSettings:
    """KNN graph maintenance parameters."""
    top_k: int = 5
    similarity_cutoff: float = 0.0
    concurrency: int = 1
    random_seed: int = 42
    refresh_on_initialize: bool = True

    def __post_init__(self):
        if self.top_k < 1:
            raise ConfigurationError(f"top_k must be >= 1, got {self.top_k}")
        if not 0 <= self.similarity_cutoff <= 1:
            raise ConfigurationError(
                f"similarity_cutoff must be in [0, 1], got {self.similarity_cutoff}"
            )
        if self.concurrency < 1:
            raise ConfigurationError(f"concurrency must be >= 1, got {self.concurrency}")


@dataclass
class SplitterSettings:
    """Text splitter parameters (characters)."""
    chunk_size: int = 1000
    chunk_overlap: int = 20

    def __post_init__(self):
        if self.chunk_size < 1:
            raise ConfigurationError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ConfigurationError(
                f"chunk_overlap must be in [0, chunk_size), got {self.chunk_overlap}"
            )


@dataclass
class VecGraphSettings:
    """All tunable settings of the adapter."""
    search: SearchSettings = field(default_factory=SearchSettings)
    maintenance: MaintenanceSettings = field(default_factory=MaintenanceSettings)
    splitter: SplitterSettings = field(default_factory=SplitterSettings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VecGraphSettings":
        """Build settings from a nested dict, ignoring unknown keys."""
        return cls(
            search=_build(SearchSettings, data.get("search")),
            maintenance=_build(MaintenanceSettings, data.get("maintenance")),
            splitter=_build(SplitterSettings, data.get("splitter")),
        )


def _build(section_cls, values: Optional[Dict[str, Any]]):
    known = {f.name for f in fields(section_cls)}
    values = values or {}
    unknown = set(values) - known
    if unknown:
        log.warning(f"Ignoring unknown {section_cls.__name__} keys: {sorted(unknown)}")
    return section_cls(**{k: v for k, v in values.items() if k in known})


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationError(f"Settings file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid settings file {path}: {e}")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(path: Optional[Union[str, Path]] = None) -> VecGraphSettings:
    """
    Load settings from the packaged defaults plus an optional override file.

    Args:
        path: Override YAML file (default: $VECGRAPH_SETTINGS if set)

    Returns:
        VecGraphSettings

    Raises:
        ConfigurationError: unreadable file or out-of-range value
    """
    data = _read_yaml(DEFAULTS_PATH)

    override_path = path or os.environ.get(SETTINGS_ENV_VAR)
    if override_path:
        data = _merge(data, _read_yaml(Path(override_path)))
        log.info(f"Settings loaded with overrides from {override_path}")

    return VecGraphSettings.from_dict(data)
