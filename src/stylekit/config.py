"""Configuration from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import IntEnum

from stylekit.environment import Idiom, Orientation, SizeClass, StaticEnvironment


def _enum_from_env(name: str, enum: type[IntEnum], default: IntEnum) -> IntEnum:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return enum[value]
    except KeyError:
        choices = ", ".join(member.name for member in enum)
        raise ValueError(f"{name}={value!r} is not one of: {choices}") from None


@dataclass
class StylekitConfig:
    """Runtime configuration.

    Attributes:
        log_level: Logging level name for the CLI
        idiom: Default device idiom
        orientation: Default orientation
        vertical_size_class: Default vertical size class
        horizontal_size_class: Default horizontal size class
    """

    log_level: str = "WARNING"
    idiom: Idiom = Idiom.phone
    orientation: Orientation = Orientation.portrait
    vertical_size_class: SizeClass = SizeClass.regular
    horizontal_size_class: SizeClass = SizeClass.compact

    @classmethod
    def from_env(cls) -> StylekitConfig:
        """Create config from environment variables.

        Variables:
        - STYLEKIT_LOG_LEVEL (default WARNING)
        - STYLEKIT_IDIOM, STYLEKIT_ORIENTATION (constant names, e.g. iPad)
        - STYLEKIT_VERTICAL_SIZE_CLASS, STYLEKIT_HORIZONTAL_SIZE_CLASS

        Raises:
            ValueError: A variable names an unknown constant or log level
        """
        log_level = os.environ.get("STYLEKIT_LOG_LEVEL", "WARNING").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"STYLEKIT_LOG_LEVEL={log_level!r} is not a logging level")

        return cls(
            log_level=log_level,
            idiom=_enum_from_env("STYLEKIT_IDIOM", Idiom, Idiom.phone),
            orientation=_enum_from_env(
                "STYLEKIT_ORIENTATION", Orientation, Orientation.portrait
            ),
            vertical_size_class=_enum_from_env(
                "STYLEKIT_VERTICAL_SIZE_CLASS", SizeClass, SizeClass.regular
            ),
            horizontal_size_class=_enum_from_env(
                "STYLEKIT_HORIZONTAL_SIZE_CLASS", SizeClass, SizeClass.compact
            ),
        )

    def environment(self, **variables: float) -> StaticEnvironment:
        """Build the default environment snapshot."""
        return StaticEnvironment(
            current_idiom=self.idiom,
            current_orientation=self.orientation,
            vertical=self.vertical_size_class,
            horizontal=self.horizontal_size_class,
            variables=variables,
        )

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=self.log_level,
            format="%(levelname)s %(name)s: %(message)s",
        )
