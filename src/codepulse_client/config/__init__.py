"""Configuration module for CodePulse client."""

from .logger_config import setup_logging
from .settings import HEARTBEAT_WINDOW_MS, PulseConfig, load_config

__all__ = ["HEARTBEAT_WINDOW_MS", "PulseConfig", "load_config", "setup_logging"]
