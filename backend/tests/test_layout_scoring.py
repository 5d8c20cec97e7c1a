import asyncio
from io import BytesIO

import pytest
from PIL import Image

from domain.models import Confidence, ImageFile, Orientation
from services.layout_scoring.base import NO_IMAGES_REASON, LayoutScorer
from services.layout_scoring.metrics import (
    build_scoring_context,
    calculate_image_metrics,
    fallback_measurement,
    measure_image,
    scoring_orientation,
)
from services.layout_scoring.registry import (
    UNAVAILABLE_REASON,
    LayoutScorerRegistry,
    best_layout,
    build_default_registry,
    recommend_layouts,
)
from services.layout_scoring.strategies import SlideshowLayoutScorer


def _portraits(n):
    return [measure_image(900, 1600) for _ in range(n)]


def _landscapes(n):
    return [measure_image(1600, 900) for _ in range(n)]


def _squares(n):
    return [measure_image(1000, 1000) for _ in range(n)]


@pytest.fixture
def registry():
    return build_default_registry()


class TestImageMetrics:
    def test_square_without_size(self):
        weight, aesthetic = calculate_image_metrics(1.0)
        assert weight == pytest.approx(0.5)
        assert aesthetic == pytest.approx(1.0)

    def test_large_file_raises_visual_weight(self):
        weight, _ = calculate_image_metrics(1.0, 10 * 1024 * 1024)
        assert weight == pytest.approx(0.75)

    def test_visual_weight_is_capped(self):
        weight, _ = calculate_image_metrics(4.0, 50 * 1024 * 1024)
        assert weight == 1

    def test_aesthetic_score_near_golden_ratio(self):
        _, aesthetic = calculate_image_metrics(1.6)
        assert aesthetic == pytest.approx(1 - 0.018 * 2)

    def test_aesthetic_score_far_from_common_ratios(self):
        _, aesthetic = calculate_image_metrics(0.3)
        assert aesthetic == 0

    def test_scoring_orientation_thresholds(self):
        assert scoring_orientation(0.89) == Orientation.PORTRAIT
        assert scoring_orientation(0.9) == Orientation.SQUARE
        assert scoring_orientation(1.1) == Orientation.SQUARE
        assert scoring_orientation(1.11) == Orientation.LANDSCAPE

    def test_fallback_is_landscape_full_hd(self):
        m = fallback_measurement()
        assert (m.width, m.height) == (1920, 1080)
        assert m.orientation == Orientation.LANDSCAPE


class TestScoringContext:
    def test_empty_is_all_zero(self):
        context = build_scoring_context([])
        assert context.image_count == 0
        assert context.orientation_dominance == 0
        assert context.balance_score == 0

    def test_counts_and_dominance(self):
        context = build_scoring_context(_portraits(1) + _landscapes(1) + _squares(1))
        assert (context.portrait_count, context.landscape_count, context.square_count) == (1, 1, 1)
        assert context.orientation_dominance == pytest.approx(1 / 3)
        assert 0 <= context.balance_score <= 1

    def test_identical_weights_are_perfectly_balanced(self):
        context = build_scoring_context(_landscapes(5))
        assert context.balance_score == pytest.approx(1.0)
        assert context.orientation_dominance == 1


class TestStrategies:
    def test_empty_input_scores_zero(self, registry):
        result = registry.score([], "Slideshow")
        assert result.score == 0
        assert result.reason == NO_IMAGES_REASON
        assert result.confidence == Confidence.LOW

    def test_all_portraits_get_bonus(self, registry):
        result = registry.score(_portraits(9), "3 Portraits")
        assert result.score == pytest.approx(94.375)
        assert result.confidence == Confidence.HIGH
        assert result.reason == "Excellent for 9 portrait images in gallery style"

    def test_too_few_portraits_are_halved(self, registry):
        result = registry.score(_portraits(1), "6 Portraits")
        assert result.score == pytest.approx(34.6875)
        assert result.confidence == Confidence.LOW
        assert result.reason == "1/1 images are portrait (optimal: 6 portraits)"

    def test_exact_portrait_count(self, registry):
        result = registry.score(_portraits(3), "3 Portraits")
        assert result.reason == "Perfect for 3 portrait images"

    def test_landscape_layout_rewards_landscapes(self, registry):
        wide = registry.score(_landscapes(6), "3x2 Landscape")
        tall = registry.score(_portraits(6), "3x2 Landscape")
        assert wide.score > tall.score
        assert wide.confidence == Confidence.HIGH
        assert wide.reason == "6/6 landscape images (optimal for wide photos)"

    def test_slideshow_large_collection(self, registry):
        result = registry.score(_landscapes(11), "Slideshow")
        assert result.score == 85
        assert result.confidence == Confidence.HIGH
        assert result.reason == "Perfect for large collection (11 images)"

    def test_slideshow_small_collection(self, registry):
        result = registry.score(_landscapes(2), "Slideshow")
        assert result.score == 80
        assert result.confidence == Confidence.MEDIUM
        assert result.reason == "Classic presentation for 2 images"

    def test_single_row_too_many(self, registry):
        result = registry.score(_landscapes(9), "Single Row")
        assert result.reason == "Too many images for single row (have 9, ideal: 3-8)"

    def test_single_row_ideal_range(self, registry):
        result = registry.score(_landscapes(4), "Single Row")
        assert result.confidence == Confidence.HIGH
        assert result.reason == "Great horizontal flow for 4 images"

    def test_mixed_grid_rewards_variety(self, registry):
        varied = registry.score(_portraits(2) + _landscapes(2) + _squares(2), "Mixed Grid")
        uniform = registry.score(_landscapes(6), "Mixed Grid")
        assert varied.score > uniform.score
        assert varied.confidence == Confidence.HIGH
        assert varied.reason == "Great variety (P:2, L:2, S:2)"

    def test_grid_prefers_mixed_orientations(self, registry):
        mixed = registry.score(_portraits(2) + _landscapes(2), "2x2 Grid")
        uniform = registry.score(_landscapes(4), "2x2 Grid")
        assert mixed.score > uniform.score
        assert mixed.confidence == Confidence.HIGH

    def test_column_stack_portrait_heavy(self, registry):
        result = registry.score(_portraits(4), "Column Stack")
        assert result.reason == "Vertical layout perfect for mobile viewing"
        assert result.confidence == Confidence.HIGH

    def test_mosaic_wants_more_images(self, registry):
        result = registry.score(_landscapes(3), "Mosaic")
        assert result.reason == "Better with more images (have 3, ideal: 8+)"
        assert result.confidence == Confidence.LOW

    def test_scores_are_clamped(self):
        result = SlideshowLayoutScorer("Slideshow", base_score=150).score(build_scoring_context(_landscapes(2)))
        assert result.score == 100

    def test_low_base_confidence_is_kept(self):
        assert LayoutScorer.determine_confidence(95, Confidence.LOW) == Confidence.LOW
        assert LayoutScorer.determine_confidence(95) == Confidence.HIGH
        assert LayoutScorer.determine_confidence(30, Confidence.HIGH) == Confidence.LOW
        assert LayoutScorer.determine_confidence(60, Confidence.HIGH) == Confidence.HIGH


class TestRegistry:
    def test_default_catalog_order(self, registry):
        assert registry.layout_names() == [
            "3 Portraits",
            "6 Portraits",
            "3x2 Landscape",
            "2x2 Grid",
            "Single Row",
            "Mixed Grid",
            "Column Stack",
            "Slideshow",
            "Mosaic",
        ]
        assert len(registry) == 9
        assert "Mosaic" in registry

    def test_unknown_layout_gets_neutral_score(self, registry):
        result = registry.score(_landscapes(3), "Spiral")
        assert result.score == 50
        assert result.reason == UNAVAILABLE_REASON
        assert result.confidence == Confidence.LOW
        assert result.layout_name == "Spiral"

    def test_score_all_is_sorted_and_bounded(self, registry):
        results = registry.score_all(_portraits(3) + _landscapes(5))
        assert len(results) == 9
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert all(0 <= s <= 100 for s in scores)

    def test_custom_registration(self):
        registry = LayoutScorerRegistry()
        registry.register(SlideshowLayoutScorer("Slideshow"), layout_name="Carousel")
        assert registry.layout_names() == ["Carousel"]
        assert registry.score(_landscapes(2), "Carousel").score == 80

    def test_register_replaces_existing(self):
        registry = LayoutScorerRegistry()
        registry.register(SlideshowLayoutScorer("Slideshow"))
        registry.register(SlideshowLayoutScorer("Slideshow", base_score=40))
        assert len(registry) == 1
        assert registry.score(_landscapes(5), "Slideshow").score == 40


class TestRecommendLayouts:
    def test_unreadable_file_counts_as_fallback(self, registry):
        buf = BytesIO()
        Image.new("RGB", (90, 160)).save(buf, format="PNG")
        files = [
            ImageFile(file_name="ok.png", data=buf.getvalue()),
            ImageFile(file_name="broken.jpg", data=b"not an image"),
        ]
        results = asyncio.run(recommend_layouts(files, registry))
        assert len(results) == 9
        slideshow = next(r for r in results if r.layout_name == "Slideshow")
        assert slideshow.reason == "Classic presentation for 2 images"

    def test_no_files(self, registry):
        assert asyncio.run(recommend_layouts([], registry)) == []
        assert asyncio.run(best_layout([], registry)) is None

    def test_best_layout_is_top_recommendation(self, registry):
        files = []
        for n in range(3):
            buf = BytesIO()
            Image.new("RGB", (90, 160)).save(buf, format="PNG")
            files.append(ImageFile(file_name=f"p{n}.png", data=buf.getvalue()))
        ranked = asyncio.run(recommend_layouts(files, registry))
        best = asyncio.run(best_layout(files, registry))
        assert best.layout_name == ranked[0].layout_name
        assert best.score == ranked[0].score
