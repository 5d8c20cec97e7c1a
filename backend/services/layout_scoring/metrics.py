"""
Per-image measurements and aggregate statistics for layout scoring.

Visual weight favors large files and extreme aspect ratios. The aesthetic
score rewards proximity to a handful of commonly pleasing ratios:
1:1, 4:3, 3:2, golden ratio, 2:1 and 2.35:1 (cinemascope).
"""
from statistics import fmean, pvariance
from typing import Optional, Sequence, Tuple

from domain.models import AnalyzedImage, ImageMeasurement, Orientation, ScoringContext

GOLDEN_RATIO = 1.618
COMMON_RATIOS = (1, 1.333, 1.5, GOLDEN_RATIO, 2, 2.35)

# Scoring uses its own, tighter orientation thresholds
SCORING_LANDSCAPE_MIN_RATIO = 1.1
SCORING_PORTRAIT_MAX_RATIO = 0.9

BYTES_PER_MB = 1024 * 1024
UNKNOWN_SIZE_WEIGHT = 0.5

# Used when an upload cannot be measured
FALLBACK_WIDTH = 1920
FALLBACK_HEIGHT = 1080


def calculate_image_metrics(aspect_ratio: float, file_size: Optional[int] = None) -> Tuple[float, float]:
    """
    Returns:
        (visual_weight, aesthetic_score), both in 0..1
    """
    size_weight = min(file_size / BYTES_PER_MB, 10) / 10 if file_size else UNKNOWN_SIZE_WEIGHT
    aspect_weight = abs(aspect_ratio - 1) + 0.5
    visual_weight = min((size_weight + aspect_weight) / 2, 1)

    aesthetic_score = 0.0
    for ratio in COMMON_RATIOS:
        distance = abs(aspect_ratio - ratio)
        aesthetic_score = max(aesthetic_score, max(0.0, 1 - distance * 2))

    return visual_weight, aesthetic_score


def scoring_orientation(aspect_ratio: float) -> Orientation:
    if aspect_ratio > SCORING_LANDSCAPE_MIN_RATIO:
        return Orientation.LANDSCAPE
    if aspect_ratio < SCORING_PORTRAIT_MAX_RATIO:
        return Orientation.PORTRAIT
    return Orientation.SQUARE


def measure_image(width: int, height: int, file_size: Optional[int] = None) -> ImageMeasurement:
    """Build the scoring measurement for an image of the given size."""
    aspect_ratio = width / height
    visual_weight, aesthetic_score = calculate_image_metrics(aspect_ratio, file_size)
    return ImageMeasurement(
        width=width,
        height=height,
        aspect_ratio=aspect_ratio,
        orientation=scoring_orientation(aspect_ratio),
        visual_weight=visual_weight,
        aesthetic_score=aesthetic_score,
        file_size=file_size,
    )


def measure_analyzed_image(image: AnalyzedImage) -> ImageMeasurement:
    return measure_image(image.width, image.height, image.file_size)


def fallback_measurement() -> ImageMeasurement:
    """A typical 16:9 landscape photo, for uploads that could not be read."""
    return measure_image(FALLBACK_WIDTH, FALLBACK_HEIGHT)


def build_scoring_context(measurements: Sequence[ImageMeasurement]) -> ScoringContext:
    """
    Aggregate statistics shared by all layout scorers.

    Returns an all-zero context for an empty input.
    """
    image_count = len(measurements)
    if image_count == 0:
        return ScoringContext()

    portrait_count = sum(1 for m in measurements if m.orientation == Orientation.PORTRAIT)
    landscape_count = sum(1 for m in measurements if m.orientation == Orientation.LANDSCAPE)
    square_count = image_count - portrait_count - landscape_count

    weights = [m.visual_weight for m in measurements]
    avg_visual_weight = fmean(weights)
    # Population variance of visual weight; 0 means perfectly even
    balance_score = max(0.0, 1 - pvariance(weights, avg_visual_weight) * 2)

    return ScoringContext(
        image_count=image_count,
        portrait_count=portrait_count,
        landscape_count=landscape_count,
        square_count=square_count,
        avg_aesthetic_score=fmean(m.aesthetic_score for m in measurements),
        avg_visual_weight=avg_visual_weight,
        orientation_dominance=max(portrait_count, landscape_count, square_count) / image_count,
        balance_score=balance_score,
    )
