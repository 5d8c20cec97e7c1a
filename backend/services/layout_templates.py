"""
Static slot geometry for album page templates.

All values are percentages of a 16:9 canvas. For portrait (9:16) slots the
height percentage is ~3.16x the width percentage; for landscape (16:9) slots
width and height percentages are equal. The table is data only and must stay
in sync with the album player's rendering.
"""
from typing import Dict, List, Tuple

from domain.models import LayoutTemplate, Orientation, SlotRect, TemplateSlot

TEMPLATE_PHOTO_COUNTS: Tuple[int, ...] = (1, 2, 3, 4, 6, 12)


def _row(y: float, xs: Tuple[float, ...], size: float, first_index: int) -> Tuple[SlotRect, ...]:
    return tuple(
        SlotRect(id=f"slot-{first_index + i}", x=x, y=y, width=size, height=size)
        for i, x in enumerate(xs)
    )


_GRID_12_XS = (2.4, 26.8, 51.2, 75.6)
_GRID_6_XS = (2.5, 35, 67.5)

SLOT_GEOMETRY: Dict[Tuple[int, Orientation], Tuple[SlotRect, ...]] = {
    # Single photo centered
    (1, Orientation.PORTRAIT): (
        SlotRect(id="slot-1", x=37.35, y=10, width=25.3, height=80),
    ),
    (1, Orientation.LANDSCAPE): (
        SlotRect(id="slot-1", x=10, y=10, width=80, height=80),
    ),
    # Two side by side with equal gaps
    (2, Orientation.PORTRAIT): (
        SlotRect(id="slot-1", x=16.47, y=10, width=25.3, height=80),
        SlotRect(id="slot-2", x=58.23, y=10, width=25.3, height=80),
    ),
    (2, Orientation.LANDSCAPE): (
        SlotRect(id="slot-1", x=4, y=28, width=44, height=44),
        SlotRect(id="slot-2", x=52, y=28, width=44, height=44),
    ),
    # Portrait only
    (3, Orientation.PORTRAIT): (
        SlotRect(id="slot-1", x=6.025, y=10, width=25.3, height=80),
        SlotRect(id="slot-2", x=37.35, y=10, width=25.3, height=80),
        SlotRect(id="slot-3", x=68.675, y=10, width=25.3, height=80),
    ),
    # Landscape only: 2x2, 3x2 and 4x3 grids
    (4, Orientation.LANDSCAPE): _row(4, (4, 52), 44, 1) + _row(52, (4, 52), 44, 3),
    (6, Orientation.LANDSCAPE): _row(17.5, _GRID_6_XS, 30, 1) + _row(52.5, _GRID_6_XS, 30, 4),
    (12, Orientation.LANDSCAPE): (
        _row(8.5, _GRID_12_XS, 22, 1)
        + _row(39, _GRID_12_XS, 22, 5)
        + _row(69.5, _GRID_12_XS, 22, 9)
    ),
}


def available_template_counts() -> Tuple[int, ...]:
    """Photo counts that have a template."""
    return TEMPLATE_PHOTO_COUNTS


def supported_orientations(photo_count: int) -> List[Orientation]:
    """Orientations available for a photo count, portrait first."""
    return [o for (count, o) in SLOT_GEOMETRY if count == photo_count]


def template_id(photo_count: int, orientation: Orientation) -> str:
    return f"{photo_count}-photo-{orientation.value}"


def get_slot_geometry(photo_count: int, orientation: Orientation) -> Tuple[SlotRect, ...]:
    """
    Look up the slot rectangles for a template.

    Raises:
        ValueError: If there is no template for the combination
    """
    geometry = SLOT_GEOMETRY.get((photo_count, Orientation(orientation)))
    if geometry is None:
        raise ValueError(
            f"No template for {photo_count} photo(s) in {Orientation(orientation).value} orientation"
        )
    return geometry


def get_template(
    photo_count: int,
    orientation: Orientation = Orientation.LANDSCAPE,
    frame_width: float = 0,
    frame_color: str = "#1a1a1a",
    mat_width: float = 0,
    mat_color: str = "#FFFFFF",
) -> LayoutTemplate:
    """
    Build a template with fresh, unassigned slots.

    Args:
        photo_count: One of TEMPLATE_PHOTO_COUNTS
        orientation: Template orientation (3 is portrait-only, 4/6/12 landscape-only)

    Returns:
        LayoutTemplate whose slots can be mutated by the caller

    Raises:
        ValueError: If there is no template for the combination
    """
    orientation = Orientation(orientation)
    geometry = get_slot_geometry(photo_count, orientation)
    return LayoutTemplate(
        id=template_id(photo_count, orientation),
        name=f"{photo_count} Photo{'s' if photo_count > 1 else ''}",
        photo_count=photo_count,
        orientation=orientation,
        slots=[TemplateSlot.from_rect(rect) for rect in geometry],
        frame_width=frame_width,
        frame_color=frame_color,
        mat_width=mat_width,
        mat_color=mat_color,
    )


def list_templates() -> List[LayoutTemplate]:
    """Every template in the table, ordered by photo count then orientation."""
    return [
        get_template(count, orientation)
        for count in TEMPLATE_PHOTO_COUNTS
        for orientation in supported_orientations(count)
    ]
