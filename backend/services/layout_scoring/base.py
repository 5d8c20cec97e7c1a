"""
Base class for layout scoring strategies.

A strategy rates how well a set of images suits one fixed layout shape.
Subclasses implement `calculate_score` over a non-empty ScoringContext;
the base class handles empty input, clamping and confidence.
"""
from abc import ABC, abstractmethod

from domain.models import Confidence, DetailedAnalysis, LayoutScore, ScoringContext

NO_IMAGES_REASON = "No images to analyze"

HIGH_CONFIDENCE_SCORE = 85
LOW_CONFIDENCE_SCORE = 40


def empty_layout_score(layout_name: str) -> LayoutScore:
    """Zero score returned when there is nothing to score."""
    return LayoutScore(
        layout_name=layout_name,
        score=0,
        reason=NO_IMAGES_REASON,
        detailed_analysis=DetailedAnalysis(),
        confidence=Confidence.LOW,
    )


class LayoutScorer(ABC):
    """Common contract and helpers for layout scoring strategies."""

    def __init__(self, layout_name: str):
        self.layout_name = layout_name

    def score(self, context: ScoringContext) -> LayoutScore:
        """Score this layout for the given statistics."""
        if context.image_count == 0:
            return empty_layout_score(self.layout_name)
        return self.calculate_score(context)

    @abstractmethod
    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        """Layout-specific formula. `context.image_count` is always > 0."""

    @staticmethod
    def determine_confidence(score: float, base_confidence: Confidence = Confidence.MEDIUM) -> Confidence:
        # A strategy that forces low confidence keeps it regardless of score
        if base_confidence == Confidence.LOW:
            return Confidence.LOW
        if score > HIGH_CONFIDENCE_SCORE:
            return Confidence.HIGH
        if score < LOW_CONFIDENCE_SCORE:
            return Confidence.LOW
        return base_confidence

    @staticmethod
    def clamp_score(score: float) -> float:
        return min(100.0, max(0.0, score))

    def create_result(
        self,
        score: float,
        reason: str,
        orientation_match: float,
        image_count_match: float,
        visual_impact: float,
        context: ScoringContext,
        confidence: Confidence = Confidence.MEDIUM,
    ) -> LayoutScore:
        final_score = self.clamp_score(score)
        return LayoutScore(
            layout_name=self.layout_name,
            score=final_score,
            reason=reason,
            detailed_analysis=DetailedAnalysis(
                orientation_match=orientation_match,
                image_count_match=image_count_match,
                aesthetic_score=context.avg_aesthetic_score * 100,
                balance_score=context.balance_score * 100,
                visual_impact=visual_impact,
            ),
            confidence=self.determine_confidence(final_score, confidence),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.layout_name!r})"
