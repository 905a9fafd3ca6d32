"""
Classify stored cell fills as approved (green) or flagged (red).

The thresholds are a tolerance heuristic rather than an exact match so that a
workbook exported here and re-saved by another tool still classifies the same
way when it is opened again.
"""

import logging
from enum import Enum
from typing import Optional

from openpyxl.styles.colors import COLOR_INDEX

from .config import ReviewConfig

logger = logging.getLogger(__name__)

# A channel must exceed this value and dominate the other two by RATIO.
CHANNEL_FLOOR = 100
CHANNEL_RATIO = 1.5


class HighlightColor(str, Enum):
    """Highlight state of a single cell."""

    GREEN = "green"
    RED = "red"


def classify_rgb(r: int, g: int, b: int) -> Optional[HighlightColor]:
    """Classify decoded channels in [0, 255]."""
    if r > CHANNEL_FLOOR and r > CHANNEL_RATIO * g and r > CHANNEL_RATIO * b:
        return HighlightColor.RED
    if g > CHANNEL_FLOOR and g > CHANNEL_RATIO * r and g > CHANNEL_RATIO * b:
        return HighlightColor.GREEN
    return None


def classify_hex(value: object) -> Optional[HighlightColor]:
    """
    Classify an RRGGBB or AARRGGBB hex string.

    Malformed input classifies as no color; this never raises.
    """
    if not isinstance(value, str):
        return None

    hex_value = value.strip().lstrip('#')
    # Drop the leading alpha segment of 32-bit colors
    if len(hex_value) > 6:
        hex_value = hex_value[2:]
    if len(hex_value) < 6:
        return None

    try:
        r = int(hex_value[0:2], 16)
        g = int(hex_value[2:4], 16)
        b = int(hex_value[4:6], 16)
    except ValueError:
        logger.debug("Ignoring malformed color %r", value)
        return None

    return classify_rgb(r, g, b)


def _fill_rgb(color) -> Optional[str]:
    """Return the hex string behind an openpyxl color, if it has one."""
    color_type = getattr(color, 'type', 'rgb')

    if color_type == 'rgb':
        rgb = getattr(color, 'rgb', None)
        # openpyxl reports descriptor failures as the error text itself
        if isinstance(rgb, str) and 'Values must be' not in rgb:
            return rgb
        return None

    if color_type == 'indexed':
        idx = getattr(color, 'indexed', None)
        if isinstance(idx, int) and 0 <= idx < len(COLOR_INDEX):
            return COLOR_INDEX[idx]
        return None

    # Theme colors depend on the workbook theme and are never written by the exporter
    return None


def classify_fill(fill) -> Optional[HighlightColor]:
    """
    Classify an openpyxl cell fill.

    Only solid pattern fills carry a highlight; missing fills, other pattern
    types and colors without RGB data classify as no color.
    """
    if fill is None or getattr(fill, 'patternType', None) != 'solid':
        return None

    color = getattr(fill, 'fgColor', None)
    if color is None:
        color = getattr(fill, 'start_color', None)
    if color is None:
        return None

    try:
        rgb = _fill_rgb(color)
    except (AttributeError, TypeError, ValueError):
        logger.debug("Ignoring unreadable fill color %r", color)
        return None

    return classify_hex(rgb)


def argb_for(color: HighlightColor, config: Optional[ReviewConfig] = None) -> str:
    """ARGB constant written on export for a highlight color."""
    config = config or ReviewConfig()
    if color == HighlightColor.GREEN:
        return config.green_argb
    return config.red_argb
