"""Configuration module for the board game moderator"""

from .prompts import (
    CORRECTION_TEMPLATE,
    RULES_PREAMBLE,
    build_system_prompt,
    build_user_prompt,
    format_game_rules,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "RULES_PREAMBLE",
    "CORRECTION_TEMPLATE",
    "build_system_prompt",
    "build_user_prompt",
    "format_game_rules",
]
