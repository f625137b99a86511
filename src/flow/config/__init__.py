from .config_manager import (
    Condition,
    Configuration,
    ConfigurationError,
    Filter,
    default_config,
    get_config,
    load_config,
    resolve_config_path,
)
from .config_initializer import ConfigInitializer, initialize_config

__all__ = [
    "Condition",
    "Configuration",
    "ConfigurationError",
    "Filter",
    "default_config",
    "get_config",
    "load_config",
    "resolve_config_path",
    "ConfigInitializer",
    "initialize_config",
]
