"""Runtime environment queried by expressions at evaluation time.

Expressions never cache environment symbols: every evaluation asks the
provider again, so a provider must be a side-effect-free read of current
state. ``StaticEnvironment`` is an immutable snapshot suitable for tests and
for the CLI.
"""

from dataclasses import dataclass, field, replace as _replace
from enum import IntEnum
from types import MappingProxyType
from typing import Callable, Mapping, Protocol


class Idiom(IntEnum):
    """Device class."""

    iPhoneSE = 0
    iPhone8 = 1
    iPhone8Plus = 2
    iPhoneX = 3
    phone = 4
    iPad = 5
    tv = 6


class Orientation(IntEnum):
    portrait = 0
    landscape = 1


class SizeClass(IntEnum):
    unspecified = 0
    compact = 1
    regular = 2


# Reference portrait bounds (width, height) for the phone idioms.
REFERENCE_BOUNDS: Mapping[Idiom, tuple[int, int]] = MappingProxyType({
    Idiom.iPhoneSE: (320, 568),
    Idiom.iPhone8: (375, 667),
    Idiom.iPhone8Plus: (414, 736),
    Idiom.iPhoneX: (375, 812),
})

# Narrowest portrait width treated as a tablet.
PAD_MIN_WIDTH = 768


class EnvironmentProvider(Protocol):
    """Source of the environment symbols.

    Implementations must not mutate state when queried; evaluations on
    different threads may call them concurrently.
    """

    def idiom(self) -> Idiom: ...

    def orientation(self) -> Orientation: ...

    def vertical_size_class(self) -> SizeClass: ...

    def horizontal_size_class(self) -> SizeClass: ...

    def variable(self, name: str) -> float | None:
        """Resolve an application-defined symbol, or None if unknown."""
        ...


@dataclass(frozen=True)
class StaticEnvironment:
    """Immutable environment snapshot.

    Attributes:
        current_idiom: Device class
        current_orientation: Screen orientation
        vertical: Vertical size class
        horizontal: Horizontal size class
        variables: Extra named symbols available to expressions
    """

    current_idiom: Idiom = Idiom.phone
    current_orientation: Orientation = Orientation.portrait
    vertical: SizeClass = SizeClass.regular
    horizontal: SizeClass = SizeClass.compact
    variables: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))

    def __hash__(self) -> int:
        return hash((
            self.current_idiom,
            self.current_orientation,
            self.vertical,
            self.horizontal,
            tuple(sorted(self.variables.items())),
        ))

    def idiom(self) -> Idiom:
        return self.current_idiom

    def orientation(self) -> Orientation:
        return self.current_orientation

    def vertical_size_class(self) -> SizeClass:
        return self.vertical

    def horizontal_size_class(self) -> SizeClass:
        return self.horizontal

    def variable(self, name: str) -> float | None:
        value = self.variables.get(name)
        return None if value is None else float(value)

    def replace(self, **changes) -> "StaticEnvironment":
        """Return a copy with the given fields replaced."""
        return _replace(self, **changes)

    def with_variables(self, **values: float) -> "StaticEnvironment":
        """Return a copy with extra variables merged in."""
        merged = dict(self.variables)
        merged.update(values)
        return _replace(self, variables=merged)

    @classmethod
    def for_screen(cls, width: float, height: float, **kwargs) -> "StaticEnvironment":
        """Build an environment from screen bounds.

        Orientation is landscape when the screen is wider than tall. The
        idiom is the reference phone whose bounds match, ``iPad`` for wide
        screens, and ``phone`` otherwise.
        """
        short_side, long_side = sorted((width, height))
        orientation = Orientation.landscape if width > height else Orientation.portrait

        idiom = Idiom.phone
        if short_side >= PAD_MIN_WIDTH:
            idiom = Idiom.iPad
        else:
            for candidate, bounds in REFERENCE_BOUNDS.items():
                if bounds == (short_side, long_side):
                    idiom = candidate
                    break

        return cls(current_idiom=idiom, current_orientation=orientation, **kwargs)


# Symbols read from the provider on every lookup; never cached.
ENVIRONMENT_SYMBOLS: Mapping[str, Callable[[EnvironmentProvider], float]] = MappingProxyType({
    "idiom": lambda env: float(env.idiom()),
    "orientation": lambda env: float(env.orientation()),
    "verticalSizeClass": lambda env: float(env.vertical_size_class()),
    "horizontalSizeClass": lambda env: float(env.horizontal_size_class()),
})
