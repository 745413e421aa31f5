"""
geotrack I/O Package

YAML configuration loading.
"""

from .config_loader import ConfigLoader, load_config

__all__ = ["ConfigLoader", "load_config"]
