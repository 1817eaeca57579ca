"""Configuration-sync pipeline run after code deployments."""

from .pipeline import (
    ConfigSyncPipeline,
    DrushRunner,
    DrushStep,
    LocalDrushRunner,
    SSHDrushRunner,
    build_steps,
)

__all__ = [
    "ConfigSyncPipeline",
    "DrushRunner",
    "DrushStep",
    "LocalDrushRunner",
    "SSHDrushRunner",
    "build_steps",
]
