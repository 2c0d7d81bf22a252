"""Configuration for the offline sales subsystem."""
from .settings import SyncConfig

__all__ = ["SyncConfig"]
