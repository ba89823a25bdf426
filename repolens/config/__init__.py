"""Configuration package."""

from repolens.config.settings import Settings, settings
from repolens.config.tuning import (
    COURSE_KEYWORDS,
    DEFAULT_DIRECTORY_SCORE,
    DIRECTORY_PRIORITIES,
    DirectoryPriority,
)

__all__ = [
    "COURSE_KEYWORDS",
    "DEFAULT_DIRECTORY_SCORE",
    "DIRECTORY_PRIORITIES",
    "DirectoryPriority",
    "Settings",
    "settings",
]
