"""
Visitor Settings.

Unified configuration for the traversal engine and the reflection provider.
Values are layered: built-in defaults < user config files < TYPESHAPE_*
environment variables. CLI flags override the result.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from typeshape.exceptions import ConfigError
from typeshape.user_config import UserConfig, get_user_config


DEFAULT_INDENT_UNIT = " "
DEFAULT_INDENT_REPEAT = 4
DEFAULT_DEPTH_LIMIT = -1                 # -1 = unlimited


def _env_str(key: str, default: str) -> str:
    """Read string from environment variable."""
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value


def _env_int(key: str, default: int) -> int:
    """Read integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    """Read boolean from environment variable."""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


@dataclass
class VisitorSettings:
    """
    Settings for one visit.

    Environment Variables:
        TYPESHAPE_INDENT_UNIT: Indentation unit string (default: one space)
        TYPESHAPE_INDENT_REPEAT: Units per depth level (default: 4)
        TYPESHAPE_DEPTH_LIMIT: Maximum depth, -1 for unlimited (default: -1)
        TYPESHAPE_INCLUDE_INHERITED: Report inherited members (default: false)
        TYPESHAPE_EXPAND_BUILTINS: Describe builtins types (default: false)
    """

    indent_unit: str = DEFAULT_INDENT_UNIT
    indent_repeat: int = DEFAULT_INDENT_REPEAT
    depth_limit: int = DEFAULT_DEPTH_LIMIT
    include_inherited: bool = False
    expand_builtins: bool = False

    @classmethod
    def load(cls, user_config: Optional[UserConfig] = None) -> "VisitorSettings":
        """Build settings from user config files overlaid with environment variables."""
        config = user_config or get_user_config()

        settings = cls(
            indent_unit=_env_str(
                "TYPESHAPE_INDENT_UNIT",
                config.get("visitor.indent_unit", DEFAULT_INDENT_UNIT),
            ),
            indent_repeat=_env_int(
                "TYPESHAPE_INDENT_REPEAT",
                config.get("visitor.indent_repeat", DEFAULT_INDENT_REPEAT),
            ),
            depth_limit=_env_int(
                "TYPESHAPE_DEPTH_LIMIT",
                config.get("visitor.depth_limit", DEFAULT_DEPTH_LIMIT),
            ),
            include_inherited=_env_bool(
                "TYPESHAPE_INCLUDE_INHERITED",
                bool(config.get("reflection.include_inherited", False)),
            ),
            expand_builtins=_env_bool(
                "TYPESHAPE_EXPAND_BUILTINS",
                bool(config.get("reflection.expand_builtins", False)),
            ),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise ConfigError for values the engine cannot honor."""
        if not isinstance(self.indent_unit, str) or not self.indent_unit:
            raise ConfigError("indent_unit must be a non-empty string")
        if not isinstance(self.indent_repeat, int) or self.indent_repeat < 0:
            raise ConfigError(f"indent_repeat must be a non-negative integer, got {self.indent_repeat!r}")
        if not isinstance(self.depth_limit, int) or self.depth_limit < -1:
            raise ConfigError(f"depth_limit must be -1 or a non-negative integer, got {self.depth_limit!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Export settings as dictionary."""
        return {
            "indent_unit": self.indent_unit,
            "indent_repeat": self.indent_repeat,
            "depth_limit": self.depth_limit,
            "include_inherited": self.include_inherited,
            "expand_builtins": self.expand_builtins,
        }
