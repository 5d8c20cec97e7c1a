"""
Concrete layout scoring strategies.

Each strategy weighs three components, all on a 0-100 scale:
orientation match, image-count match and visual impact, then applies its
own bonuses and penalties.
"""
from domain.models import Confidence, LayoutScore, ScoringContext
from services.layout_scoring.base import LayoutScorer


class PortraitLayoutScorer(LayoutScorer):
    """Layouts built from N portrait slots."""

    def __init__(self, layout_name: str, target_image_count: int, bonus: float = 20):
        super().__init__(layout_name)
        self.target_image_count = target_image_count
        self.bonus = bonus

    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        portrait_count = context.portrait_count

        if image_count >= self.target_image_count:
            image_count_match = min(100.0, self.target_image_count / image_count * 100)
        else:
            image_count_match = image_count / self.target_image_count * 100
        orientation_match = portrait_count / image_count * 100
        visual_impact = context.avg_visual_weight * 100

        score = orientation_match * 0.5 + image_count_match * 0.3 + visual_impact * 0.2
        confidence = Confidence.MEDIUM

        if portrait_count == image_count and image_count >= self.target_image_count:
            score += self.bonus
            confidence = Confidence.HIGH
        elif orientation_match < 50:
            confidence = Confidence.LOW
        elif image_count < max(3, self.target_image_count - 2):
            # Too few images to fill the layout
            confidence = Confidence.LOW
            score *= 0.5

        return self.create_result(
            score,
            self._reason(image_count, portrait_count),
            orientation_match,
            image_count_match,
            visual_impact,
            context,
            confidence,
        )

    def _reason(self, image_count: int, portrait_count: int) -> str:
        if image_count == self.target_image_count:
            return f"Perfect for {portrait_count} portrait images"
        if image_count > self.target_image_count:
            return f"Excellent for {portrait_count} portrait images in gallery style"
        return (
            f"{portrait_count}/{image_count} images are portrait "
            f"(optimal: {self.target_image_count} portraits)"
        )


class LandscapeLayoutScorer(LayoutScorer):
    """Layouts built from wide landscape slots."""

    def __init__(self, layout_name: str, target_image_count: int, landscape_threshold: float = 0.7):
        super().__init__(layout_name)
        self.target_image_count = target_image_count
        self.landscape_threshold = landscape_threshold

    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        landscape_count = context.landscape_count

        if image_count >= self.target_image_count:
            image_count_match = min(100.0, self.target_image_count / image_count * 100)
        else:
            image_count_match = image_count / self.target_image_count * 100
        orientation_match = landscape_count / image_count * 100
        visual_impact = context.avg_aesthetic_score * 100

        score = orientation_match * 0.5 + image_count_match * 0.3 + visual_impact * 0.2
        confidence = Confidence.MEDIUM

        if landscape_count >= image_count * self.landscape_threshold and image_count >= self.target_image_count:
            score += 20
            confidence = Confidence.HIGH

        reason = f"{landscape_count}/{image_count} landscape images (optimal for wide photos)"
        return self.create_result(
            score, reason, orientation_match, image_count_match, visual_impact, context, confidence
        )


class GridLayoutScorer(LayoutScorer):
    """Regular grids; optionally prefers a mix of orientations."""

    def __init__(self, layout_name: str, target_image_count: int, prefer_mixed_orientations: bool = False):
        super().__init__(layout_name)
        self.target_image_count = target_image_count
        self.prefer_mixed_orientations = prefer_mixed_orientations

    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        varied = context.orientation_dominance < 0.8

        if image_count >= self.target_image_count:
            image_count_match = 100.0
        else:
            image_count_match = image_count / self.target_image_count * 100
        if self.prefer_mixed_orientations:
            orientation_match = 90.0 if varied else 60.0
        else:
            orientation_match = 80.0
        visual_impact = context.balance_score * 100

        score = orientation_match * 0.4 + image_count_match * 0.4 + visual_impact * 0.2
        confidence = Confidence.MEDIUM

        if image_count == self.target_image_count:
            if self.prefer_mixed_orientations and varied:
                score += 15
                confidence = Confidence.HIGH
            elif not self.prefer_mixed_orientations:
                score += 10
                confidence = Confidence.HIGH

        reason = f"Good for {image_count} images with balanced composition"
        return self.create_result(
            score, reason, orientation_match, image_count_match, visual_impact, context, confidence
        )


class SingleRowLayoutScorer(LayoutScorer):
    """A single horizontal strip; useful up to a maximum count."""

    def __init__(
        self,
        layout_name: str,
        max_optimal_count: int = 8,
        ideal_min_count: int = 3,
        ideal_max_count: int = 6,
    ):
        super().__init__(layout_name)
        self.max_optimal_count = max_optimal_count
        self.ideal_min_count = ideal_min_count
        self.ideal_max_count = ideal_max_count

    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        image_count = context.image_count

        if image_count <= self.max_optimal_count:
            image_count_match = 100.0
        else:
            image_count_match = max(50.0, 100 - (image_count - self.max_optimal_count) * 5)
        orientation_match = 80.0  # works with any orientation
        visual_impact = context.avg_aesthetic_score * 100

        score = orientation_match * 0.3 + image_count_match * 0.4 + visual_impact * 0.3
        confidence = Confidence.MEDIUM

        if self.ideal_min_count <= image_count <= self.ideal_max_count:
            score += 15
            confidence = Confidence.HIGH

        if image_count <= self.max_optimal_count:
            reason = f"Great horizontal flow for {image_count} images"
        else:
            reason = (
                f"Too many images for single row (have {image_count}, "
                f"ideal: {self.ideal_min_count}-{self.max_optimal_count})"
            )
        return self.create_result(
            score, reason, orientation_match, image_count_match, visual_impact, context, confidence
        )


class MixedLayoutScorer(LayoutScorer):
    """Free-form grids that shine with a variety of orientations."""

    def __init__(self, layout_name: str, min_image_count: int = 4, diversity_threshold: float = 66):
        super().__init__(layout_name)
        self.min_image_count = min_image_count
        self.diversity_threshold = diversity_threshold

    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        present = sum(
            min(count, 1) for count in (context.portrait_count, context.landscape_count, context.square_count)
        )
        diversity_score = present / 3 * 100

        if image_count >= self.min_image_count:
            image_count_match = 90.0
        else:
            image_count_match = image_count / self.min_image_count * 100
        orientation_match = diversity_score
        visual_impact = context.balance_score * 100

        score = orientation_match * 0.4 + image_count_match * 0.3 + visual_impact * 0.3
        confidence = Confidence.MEDIUM

        if diversity_score > self.diversity_threshold and image_count >= 6:
            score += 15
            confidence = Confidence.HIGH

        reason = (
            f"Great variety (P:{context.portrait_count}, "
            f"L:{context.landscape_count}, S:{context.square_count})"
        )
        return self.create_result(
            score, reason, orientation_match, image_count_match, visual_impact, context, confidence
        )


class ColumnStackLayoutScorer(LayoutScorer):
    """Vertical stacks; prefers portrait-heavy sets."""

    def __init__(self, layout_name: str, max_optimal_count: int = 10, portrait_threshold: float = 0.6):
        super().__init__(layout_name)
        self.max_optimal_count = max_optimal_count
        self.portrait_threshold = portrait_threshold

    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        portrait_heavy = context.portrait_count >= image_count * self.portrait_threshold

        if image_count <= self.max_optimal_count:
            image_count_match = 90.0
        else:
            image_count_match = max(60.0, 90 - (image_count - self.max_optimal_count) * 3)
        orientation_match = context.portrait_count / image_count * 80 + 20
        visual_impact = context.balance_score * 100

        score = orientation_match * 0.4 + image_count_match * 0.3 + visual_impact * 0.3
        confidence = Confidence.MEDIUM

        if portrait_heavy:
            score += 20
            confidence = Confidence.HIGH

        reason = f"Vertical layout {'perfect' if portrait_heavy else 'good'} for mobile viewing"
        return self.create_result(
            score, reason, orientation_match, image_count_match, visual_impact, context, confidence
        )


class SlideshowLayoutScorer(LayoutScorer):
    """One image at a time; a decent option for any collection."""

    def __init__(
        self,
        layout_name: str,
        base_score: float = 70,
        bonus_threshold: int = 10,
        small_collection_threshold: int = 3,
    ):
        super().__init__(layout_name)
        self.base_score = base_score
        self.bonus_threshold = bonus_threshold
        self.small_collection_threshold = small_collection_threshold

    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        image_count = context.image_count

        score = self.base_score
        image_count_match = 100.0
        orientation_match = 90.0
        visual_impact = context.avg_aesthetic_score * 100
        confidence = Confidence.MEDIUM

        if image_count > self.bonus_threshold:
            score += 15
            confidence = Confidence.HIGH
        elif image_count < self.small_collection_threshold:
            score += 10

        if image_count > self.bonus_threshold:
            reason = f"Perfect for large collection ({image_count} images)"
        else:
            reason = f"Classic presentation for {image_count} images"
        return self.create_result(
            score, reason, orientation_match, image_count_match, visual_impact, context, confidence
        )


class MosaicLayoutScorer(LayoutScorer):
    """Dense mosaics for large, varied collections."""

    def __init__(
        self,
        layout_name: str,
        min_optimal_count: int = 8,
        ideal_count: int = 12,
        variety_threshold: float = 0.7,
    ):
        super().__init__(layout_name)
        self.min_optimal_count = min_optimal_count
        self.ideal_count = ideal_count
        self.variety_threshold = variety_threshold

    def calculate_score(self, context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        dominance = context.orientation_dominance

        if image_count >= self.min_optimal_count:
            image_count_match = min(100.0, 70 + (image_count - self.min_optimal_count) * 2)
        else:
            image_count_match = image_count / self.min_optimal_count * 100
        orientation_match = (1 - dominance) * 100
        visual_impact = context.balance_score * 100

        score = orientation_match * 0.3 + image_count_match * 0.5 + visual_impact * 0.2
        confidence = Confidence.MEDIUM

        if image_count >= self.ideal_count and dominance < self.variety_threshold:
            score += 20
            confidence = Confidence.HIGH
        elif image_count < 6:
            confidence = Confidence.LOW

        if image_count >= self.min_optimal_count:
            reason = f"Dynamic layout showcases {image_count} diverse images"
        else:
            reason = f"Better with more images (have {image_count}, ideal: {self.min_optimal_count}+)"
        return self.create_result(
            score, reason, orientation_match, image_count_match, visual_impact, context, confidence
        )
