"""
Layout engine service.

Turns page plans into album pages: picks the template for each plan, binds
the plan's images to the template's slots, and runs the whole auto-layout
pipeline from raw uploads to pages.
"""
import logging
from typing import Dict, List, Optional, Sequence

from domain.models import (
    AnalyzedImage,
    AutoLayoutResult,
    ImageFile,
    Orientation,
    Page,
    PageDefaults,
    PagePlan,
    ProgressCallback,
    ProgressPhase,
    SlotPosition,
)
from services.image_analyzer import analyze_images
from services.layout_templates import get_template
from services.page_planner import plan_pages, sort_by_fit

logger = logging.getLogger(__name__)


# Orientation constraints per template photo count. None means flexible.
FIXED_ORIENTATION: Dict[int, Optional[Orientation]] = {
    1: None,
    2: None,
    3: Orientation.PORTRAIT,
    4: Orientation.LANDSCAPE,
    6: Orientation.LANDSCAPE,
    12: Orientation.LANDSCAPE,
}

DEFAULT_PAGE_DEFAULTS = PageDefaults()


def resolve_orientation(page_size: int, planned: Orientation) -> Orientation:
    """
    Orientation of the template used for a page.

    Fixed-orientation templates override the plan; flexible ones (1, 2) keep
    the orientation chosen by classification.
    """
    return FIXED_ORIENTATION.get(page_size) or planned


def create_page(plan: PagePlan, defaults: PageDefaults = DEFAULT_PAGE_DEFAULTS) -> Page:
    """
    Materialize a page plan.

    Images are re-sorted against the chosen template's slot ratio, since it
    may differ from the pool the plan came from, and bound to slots in order.
    Slots without an image stay empty and have no pan/zoom position.
    """
    orientation = resolve_orientation(plan.size, plan.orientation)
    template = get_template(
        plan.size,
        orientation,
        frame_width=defaults.frame_width,
        frame_color=defaults.frame_color,
        mat_width=defaults.mat_width,
        mat_color=defaults.mat_color,
    )

    images = sort_by_fit(plan.images, orientation)
    slots = template.slots
    for slot, img in zip(slots, images):
        slot.image_id = img.id
        slot.position = SlotPosition()

    if len(images) != len(slots):
        logger.warning(
            "Page plan has %s images for a %s-slot template %s", len(images), len(slots), template.id
        )

    return Page(
        id=Page.generate_id(),
        template_id=template.id,
        photo_count=plan.size,
        orientation=orientation,
        slots=slots,
        frame_width=defaults.frame_width,
        frame_color=defaults.frame_color,
        mat_width=defaults.mat_width,
        mat_color=defaults.mat_color,
        background_color=defaults.background_color,
    )


def assign_analyzed_images(
    images: Sequence[AnalyzedImage],
    defaults: PageDefaults = DEFAULT_PAGE_DEFAULTS,
    on_progress: Optional[ProgressCallback] = None,
) -> List[Page]:
    """Plan and materialize pages for images that are already analyzed."""
    plans = plan_pages(images)
    if on_progress:
        on_progress(0, len(plans), ProgressPhase.ASSIGNING)

    pages: List[Page] = []
    for idx, plan in enumerate(plans):
        pages.append(create_page(plan, defaults))
        if on_progress:
            on_progress(idx + 1, len(plans), ProgressPhase.ASSIGNING)
    return pages


async def auto_assign_layouts(
    files: Sequence[ImageFile],
    defaults: PageDefaults = DEFAULT_PAGE_DEFAULTS,
    on_progress: Optional[ProgressCallback] = None,
    timeout: Optional[float] = None,
) -> AutoLayoutResult:
    """
    Distribute uploaded images across optimally sized layout pages.

    Pipeline stages:
    1. Analyze files (HEIC conversion, optimization, dimensions)
    2. Plan pages from aspect-ratio classification
    3. Materialize pages and bind images to slots

    Files that fail to decode are skipped and listed in `failures`; they do
    not block layout of the remaining images.

    Args:
        files: Raw uploaded files
        defaults: Styling copied onto every page
        on_progress: Optional callback receiving (current, total, phase)
        timeout: Per-file decode timeout in seconds

    Returns:
        AutoLayoutResult with pages and summary counters
    """
    if not files:
        return AutoLayoutResult()

    report = await analyze_images(files, on_progress=on_progress, timeout=timeout)
    pages = assign_analyzed_images(report.images, defaults, on_progress)

    logger.info(
        "Auto layout: %s images -> %s pages (%s failed)", len(report.images), len(pages), len(report.failures)
    )
    return AutoLayoutResult(
        pages=pages,
        image_count=len(report.images),
        page_count=len(pages),
        analyzed_images=report.images,
        failures=report.failures,
    )
