"""
Page planning service.

Decides how many pages an album gets and which images go on each:

1. Classify images into portrait and landscape pools by aspect-ratio fit
2. Sort each pool best-fitting first
3. Partition each pool's size into orientation-appropriate page sizes
   - Portrait pool  -> sizes (3, 2, 1)
   - Landscape pool -> sizes (12, 6, 4, 2, 1)
4. Chunk the sorted pools into page plans, largest pages first
"""
from typing import List, Sequence, Tuple

from domain.models import AnalyzedImage, Orientation, PagePlan
from services.fit_scoring import SLOT_ASPECT_RATIOS, fit_score

PORTRAIT_PAGE_SIZES: Tuple[int, ...] = (3, 2, 1)
LANDSCAPE_PAGE_SIZES: Tuple[int, ...] = (12, 6, 4, 2, 1)

POOL_PAGE_SIZES = {
    Orientation.PORTRAIT: PORTRAIT_PAGE_SIZES,
    Orientation.LANDSCAPE: LANDSCAPE_PAGE_SIZES,
}


def partition_count(count: int, allowed_sizes: Sequence[int]) -> List[int]:
    """
    Split `count` into page sizes drawn from `allowed_sizes` (descending).

    Greedy with a one-step look-ahead: a size is taken only if what remains
    is 0 or at least 2, so a single stray photo is not left for last. When
    no size qualifies a page of 1 is used. The look-ahead is applied at each
    step on its own, e.g. 7 with (12, 6, 4, 2, 1) gives [4, 1, 2].
    """
    if count <= 0:
        return []

    result: List[int] = []
    remaining = count
    while remaining > 0:
        best = 1
        for size in allowed_sizes:
            if size <= remaining:
                leftover = remaining - size
                if leftover == 0 or leftover >= 2:
                    best = size
                    break
        result.append(best)
        remaining -= best
    return result


def classify_images(images: Sequence[AnalyzedImage]) -> Tuple[List[AnalyzedImage], List[AnalyzedImage]]:
    """
    Split images into (portrait, landscape) pools.

    Each image is scored against the portrait slot ratio (9:16) and the
    landscape slot ratio (16:9) and goes to the better fit. Ties go to
    landscape.
    """
    portrait: List[AnalyzedImage] = []
    landscape: List[AnalyzedImage] = []
    for img in images:
        p_score = fit_score(img.aspect_ratio, SLOT_ASPECT_RATIOS[Orientation.PORTRAIT])
        l_score = fit_score(img.aspect_ratio, SLOT_ASPECT_RATIOS[Orientation.LANDSCAPE])
        if p_score < l_score:
            portrait.append(img)
        else:
            landscape.append(img)
    return portrait, landscape


def sort_by_fit(images: Sequence[AnalyzedImage], orientation: Orientation) -> List[AnalyzedImage]:
    """Best-fitting first for the given slot orientation. Stable."""
    target = SLOT_ASPECT_RATIOS[orientation]
    return sorted(images, key=lambda img: fit_score(img.aspect_ratio, target))


def _plan_pool(pool: Sequence[AnalyzedImage], orientation: Orientation) -> List[PagePlan]:
    ordered = sort_by_fit(pool, orientation)
    plans: List[PagePlan] = []
    idx = 0
    for size in partition_count(len(ordered), POOL_PAGE_SIZES[orientation]):
        plans.append(PagePlan(size=size, orientation=orientation, images=ordered[idx:idx + size]))
        idx += size
    return plans


def plan_pages(images: Sequence[AnalyzedImage]) -> List[PagePlan]:
    """
    Build the ordered list of page plans for a set of analyzed images.

    Deterministic for a given input order. The best-fitting images of each
    pool land on its largest pages, and the combined list is ordered by
    descending page size (ties keep portrait plans before landscape ones).
    """
    portrait, landscape = classify_images(images)
    plans = _plan_pool(portrait, Orientation.PORTRAIT) + _plan_pool(landscape, Orientation.LANDSCAPE)
    return sorted(plans, key=lambda plan: -plan.size)
