"""
Configuration module for vecgraph.
"""

from .settings import (
    VecGraphSettings,
    SearchSettings,
    MaintenanceSettings,
    SplitterSettings,
    load_settings,
    MAX_KNN_DEPTH,
)

__all__ = [
    "VecGraphSettings",
    "SearchSettings",
    "MaintenanceSettings",
    "SplitterSettings",
    "load_settings",
    "MAX_KNN_DEPTH",
]
