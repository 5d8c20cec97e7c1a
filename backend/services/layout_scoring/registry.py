"""
Layout scorer registry.

Maps layout names to scoring strategies. The default catalog is built
explicitly by `build_default_registry()`; callers hold the registry and pass
it where scoring is needed.
"""
import logging
from typing import Dict, List, Optional, Sequence

from domain.models import (
    Confidence,
    DetailedAnalysis,
    ImageFile,
    ImageMeasurement,
    LayoutScore,
)
from services.image_analyzer import analyze_images
from services.layout_scoring.base import LayoutScorer
from services.layout_scoring.metrics import (
    build_scoring_context,
    fallback_measurement,
    measure_analyzed_image,
)
from services.layout_scoring.strategies import (
    ColumnStackLayoutScorer,
    GridLayoutScorer,
    LandscapeLayoutScorer,
    MixedLayoutScorer,
    MosaicLayoutScorer,
    PortraitLayoutScorer,
    SingleRowLayoutScorer,
    SlideshowLayoutScorer,
)

logger = logging.getLogger(__name__)

UNAVAILABLE_REASON = "Layout scoring system unavailable"
NEUTRAL_SCORE = 50.0


def unavailable_layout_score(layout_name: str) -> LayoutScore:
    """Neutral score for a layout nobody knows how to rate."""
    return LayoutScore(
        layout_name=layout_name,
        score=NEUTRAL_SCORE,
        reason=UNAVAILABLE_REASON,
        detailed_analysis=DetailedAnalysis(
            orientation_match=NEUTRAL_SCORE,
            image_count_match=NEUTRAL_SCORE,
            aesthetic_score=NEUTRAL_SCORE,
            balance_score=NEUTRAL_SCORE,
            visual_impact=NEUTRAL_SCORE,
        ),
        confidence=Confidence.LOW,
    )


class LayoutScorerRegistry:
    """Name -> strategy map with scoring helpers."""

    def __init__(self) -> None:
        self._scorers: Dict[str, LayoutScorer] = {}

    def register(self, scorer: LayoutScorer, layout_name: Optional[str] = None) -> LayoutScorer:
        """Register a strategy under its own name (or an explicit one). Replaces existing."""
        self._scorers[layout_name or scorer.layout_name] = scorer
        return scorer

    def get(self, layout_name: str) -> Optional[LayoutScorer]:
        return self._scorers.get(layout_name)

    def layout_names(self) -> List[str]:
        """Registered names in registration order."""
        return list(self._scorers)

    def __contains__(self, layout_name: str) -> bool:
        return layout_name in self._scorers

    def __len__(self) -> int:
        return len(self._scorers)

    def score(self, measurements: Sequence[ImageMeasurement], layout_name: str) -> LayoutScore:
        """
        Score one layout.

        Unknown layout names get a neutral fallback score instead of an error,
        since this only feeds a ranking.
        """
        scorer = self.get(layout_name)
        if scorer is None:
            logger.warning("No layout scorer registered for %r, using neutral score", layout_name)
            return unavailable_layout_score(layout_name)
        return scorer.score(build_scoring_context(measurements))

    def score_all(self, measurements: Sequence[ImageMeasurement]) -> List[LayoutScore]:
        """Score every registered layout, best first (ties keep catalog order)."""
        context = build_scoring_context(measurements)
        results = [scorer.score(context) for scorer in self._scorers.values()]
        return sorted(results, key=lambda r: -r.score)


def build_default_registry() -> LayoutScorerRegistry:
    """Registry holding the standard layout catalog."""
    registry = LayoutScorerRegistry()
    registry.register(PortraitLayoutScorer("3 Portraits", 3, bonus=20))
    registry.register(PortraitLayoutScorer("6 Portraits", 6, bonus=25))
    registry.register(LandscapeLayoutScorer("3x2 Landscape", 6))
    # Prefers mixed orientations
    registry.register(GridLayoutScorer("2x2 Grid", 4, prefer_mixed_orientations=True))
    registry.register(SingleRowLayoutScorer("Single Row"))
    registry.register(MixedLayoutScorer("Mixed Grid"))
    registry.register(ColumnStackLayoutScorer("Column Stack"))
    registry.register(SlideshowLayoutScorer("Slideshow"))
    registry.register(MosaicLayoutScorer("Mosaic"))
    return registry


async def recommend_layouts(
    files: Sequence[ImageFile],
    registry: LayoutScorerRegistry,
    timeout: Optional[float] = None,
) -> List[LayoutScore]:
    """
    Analyze uploads and rank every layout in the registry.

    Files that cannot be decoded are counted as a typical landscape photo so
    the ranking still reflects how many images the user picked.
    """
    if not files:
        return []

    report = await analyze_images(files, timeout=timeout)
    measurements = [measure_analyzed_image(img) for img in report.images]
    for failure in report.failures:
        logger.warning("Using fallback measurement for %s: %s", failure.file_name, failure.reason)
        measurements.append(fallback_measurement())

    return registry.score_all(measurements)


async def best_layout(
    files: Sequence[ImageFile],
    registry: LayoutScorerRegistry,
    timeout: Optional[float] = None,
) -> Optional[LayoutScore]:
    """Top recommendation, or None when there are no files."""
    recommendations = await recommend_layouts(files, registry, timeout=timeout)
    return recommendations[0] if recommendations else None
