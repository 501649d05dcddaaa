"""Named constants available to every stylesheet expression.

The table is built once at import time and exposed read-only, so concurrent
evaluations can share it without locking.
"""

from types import MappingProxyType
from typing import Mapping

from stylekit.environment import REFERENCE_BOUNDS, Idiom, Orientation, SizeClass


def _build_constants() -> dict[str, float]:
    constants: dict[str, float] = {}

    # Device idioms, orientations and size classes
    for enum in (Idiom, Orientation, SizeClass):
        for member in enum:
            constants[member.name] = float(member.value)

    # Reference screen bounds
    for idiom, (width, height) in REFERENCE_BOUNDS.items():
        constants[f"{idiom.name}.width"] = float(width)
        constants[f"{idiom.name}.height"] = float(height)

    # Layout engine enums (direction, alignment, display, flex direction,
    # position/overflow, wrap)
    constants.update({
        "inherit": 0.0,
        "ltr": 1.0,
        "rtl": 2.0,
        "auto": 0.0,
        "flexStart": 1.0,
        "center": 2.0,
        "flexEnd": 3.0,
        "stretch": 4.0,
        "baseline": 5.0,
        "spaceBetween": 6.0,
        "spaceAround": 7.0,
        "flex": 0.0,
        "none": 1.0,
        "column": 0.0,
        "columnReverse": 1.0,
        "row": 2.0,
        "rowReverse": 3.0,
        "visible": 0.0,
        "hidden": 1.0,
        "absolute": 2.0,
        "noWrap": 0.0,
        "wrap": 1.0,
        "wrapReverse": 2.0,
    })

    # Font weights (platform float codes)
    constants.update({
        "FontWeight.ultralight": -0.800000011920929,
        "FontWeight.thin": -0.600000023841858,
        "FontWeight.light": -0.400000005960464,
        "FontWeight.regular": 0.0,
        "FontWeight.medium": 0.230000004172325,
        "FontWeight.semibold": 0.300000011920929,
        "FontWeight.bold": 0.400000005960464,
        "FontWeight.heavy": 0.560000002384186,
        "FontWeight.black": 0.620000004768372,
    })

    for index, name in enumerate(("left", "center", "right", "justified", "natural")):
        constants[f"TextAlignment.{name}"] = float(index)

    for index, name in enumerate((
        "byWordWrapping",
        "byCharWrapping",
        "byClipping",
        "byTruncatingHead",
        "byTruncatingTail",
        "byTruncatingMiddle",
    )):
        constants[f"LineBreakMode.{name}"] = float(index)

    for index, name in enumerate((
        "up",
        "down",
        "left",
        "right",
        "upMirrored",
        "downMirrored",
        "leftMirrored",
        "rightMirrored",
    )):
        constants[f"ImageOrientation.{name}"] = float(index)

    constants["ImageResizingMode.tile"] = 0.0
    constants["ImageResizingMode.stretch"] = 1.0

    # The fallback branch of a conditional value: `${default}`
    constants["default"] = 1.0

    return constants


CONSTANTS: Mapping[str, float] = MappingProxyType(_build_constants())
