"""
Aspect-ratio fit scoring.

Slot aspect ratios are derived from slot percentages on a 16:9 canvas:
    slot_ar = (slot_width% / slot_height%) * (16 / 9)
Portrait templates use 9:16 slots and landscape templates 16:9 slots.
"""
import math
from typing import Dict

from domain.models import Orientation

CANVAS_ASPECT_RATIO = 16 / 9

PORTRAIT_SLOT_ASPECT_RATIO = 9 / 16  # ~0.5625
LANDSCAPE_SLOT_ASPECT_RATIO = 16 / 9  # ~1.7778

SLOT_ASPECT_RATIOS: Dict[Orientation, float] = {
    Orientation.PORTRAIT: PORTRAIT_SLOT_ASPECT_RATIO,
    Orientation.LANDSCAPE: LANDSCAPE_SLOT_ASPECT_RATIO,
}


def fit_score(image_aspect_ratio: float, target_aspect_ratio: float) -> float:
    """
    How well an image fits a slot. Lower is better, 0 is a perfect match.

    Uses the log-ratio, so a 2:1 image against a 1:1 slot scores the same
    as a 1:2 image against the same slot. Both ratios must be positive.
    """
    return abs(math.log(image_aspect_ratio) - math.log(target_aspect_ratio))


def target_aspect_ratio(orientation: Orientation) -> float:
    """Canonical slot aspect ratio for a template orientation."""
    try:
        return SLOT_ASPECT_RATIOS[orientation]
    except KeyError:
        raise ValueError(f"No slot aspect ratio for orientation: {orientation}")


def slot_aspect_ratio(width_pct: float, height_pct: float) -> float:
    """Real aspect ratio of a slot given as canvas percentages."""
    return (width_pct / height_pct) * CANVAS_ASPECT_RATIO
