"""
Configuration defaults, loading and validation.
"""
from .defaults import DefaultConfig, get_default_config
from .loader import ConfigLoader
from .validation import ConfigFieldError, ConfigValidator

__all__ = [
    "ConfigFieldError",
    "ConfigLoader",
    "ConfigValidator",
    "DefaultConfig",
    "get_default_config",
]
