"""Configuration module for the cpu monitor."""

from .monitor_config import MonitorConfig
from .config_loader import ConfigLoader

__all__ = ["MonitorConfig", "ConfigLoader"]
