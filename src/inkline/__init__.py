"""Inkline - turns photos into colouring-book outlines."""

__version__ = "0.1.0"

from inkline.core.config import InklineConfig, config

__all__ = [
    "InklineConfig",
    "config",
]
