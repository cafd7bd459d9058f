from .loader import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG, load_config
from .models import (
    ActionItemsConfig,
    APIConfig,
    AttendeeTagsConfig,
    ContentConfig,
    GranolaMdConfig,
    ImportConfig,
)

__all__ = [
    "APIConfig",
    "ActionItemsConfig",
    "AttendeeTagsConfig",
    "ContentConfig",
    "DEFAULT_CONFIG_TEMPLATE",
    "GranolaMdConfig",
    "ImportConfig",
    "PROJECT_CONFIG",
    "load_config",
]
