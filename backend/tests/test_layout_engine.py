import asyncio
from io import BytesIO

import pytest
from PIL import Image

from domain.models import (
    AnalyzedImage,
    ImageFile,
    Orientation,
    PageDefaults,
    PagePlan,
    ProgressPhase,
    SlotPosition,
)
from services.image_analyzer import classify_orientation
from services.layout_engine import (
    assign_analyzed_images,
    auto_assign_layouts,
    create_page,
    resolve_orientation,
)


def _img(aspect_ratio: float, name: str) -> AnalyzedImage:
    return AnalyzedImage(
        id=name,
        file_name=f"{name}.jpg",
        source_bytes=b"",
        width=int(round(aspect_ratio * 1000)),
        height=1000,
        aspect_ratio=aspect_ratio,
        orientation=classify_orientation(aspect_ratio),
    )


def _upload(name: str, width: int, height: int) -> ImageFile:
    buf = BytesIO()
    Image.new("RGB", (width, height), color=(10, 20, 30)).save(buf, format="PNG")
    return ImageFile(file_name=name, data=buf.getvalue(), content_type="image/png")


class TestResolveOrientation:
    @pytest.mark.parametrize("size", [1, 2])
    def test_flexible_sizes_keep_plan_orientation(self, size):
        assert resolve_orientation(size, Orientation.PORTRAIT) == Orientation.PORTRAIT
        assert resolve_orientation(size, Orientation.LANDSCAPE) == Orientation.LANDSCAPE

    def test_fixed_sizes_override_plan(self):
        assert resolve_orientation(3, Orientation.LANDSCAPE) == Orientation.PORTRAIT
        for size in (4, 6, 12):
            assert resolve_orientation(size, Orientation.PORTRAIT) == Orientation.LANDSCAPE


class TestCreatePage:
    def test_slot_count_matches_photo_count(self):
        plan = PagePlan(size=6, orientation=Orientation.LANDSCAPE, images=[_img(1.78, f"i{n}") for n in range(6)])
        page = create_page(plan)
        assert page.photo_count == 6
        assert len(page.slots) == 6
        assert page.template_id == "6-photo-landscape"
        assert page.id.startswith("page-")

    def test_images_resorted_against_template_ratio(self):
        images = [_img(1.0, "square"), _img(1.78, "wide"), _img(1.5, "mid"), _img(1.2, "narrow")]
        page = create_page(PagePlan(size=4, orientation=Orientation.PORTRAIT, images=images))
        assert page.orientation == Orientation.LANDSCAPE
        assert page.template_id == "4-photo-landscape"
        assert [s.image_id for s in page.slots] == ["wide", "mid", "narrow", "square"]

    def test_portrait_pair_sorted_by_portrait_fit(self):
        images = [_img(0.8, "loose"), _img(0.56, "tight")]
        page = create_page(PagePlan(size=2, orientation=Orientation.PORTRAIT, images=images))
        assert page.template_id == "2-photo-portrait"
        assert [s.image_id for s in page.slots] == ["tight", "loose"]

    def test_assigned_slots_get_identity_position(self):
        page = create_page(PagePlan(size=1, orientation=Orientation.LANDSCAPE, images=[_img(1.5, "x")]))
        assert page.slots[0].image_id == "x"
        assert page.slots[0].position == SlotPosition(offset_x=0, offset_y=0, zoom=1)

    def test_short_plan_leaves_trailing_slots_empty(self):
        page = create_page(PagePlan(size=4, orientation=Orientation.LANDSCAPE, images=[_img(1.78, "a"), _img(1.6, "b")]))
        assert [s.image_id for s in page.slots] == ["a", "b", None, None]
        assert page.slots[2].position is None
        assert page.slots[3].position is None

    def test_style_defaults_copied(self):
        defaults = PageDefaults(
            frame_width=4, frame_color="#222222", mat_width=12, mat_color="#F5F5DC", background_color="#101010"
        )
        page = create_page(PagePlan(size=1, orientation=Orientation.PORTRAIT, images=[_img(0.56, "p")]), defaults)
        assert (page.frame_width, page.frame_color) == (4, "#222222")
        assert (page.mat_width, page.mat_color) == (12, "#F5F5DC")
        assert page.background_color == "#101010"

    def test_default_style(self):
        page = create_page(PagePlan(size=1, orientation=Orientation.PORTRAIT, images=[_img(0.56, "p")]))
        assert page.frame_width == 0
        assert page.frame_color == "#1a1a1a"
        assert page.mat_color == "#FFFFFF"
        assert page.background_color == "#000000"


class TestAssignAnalyzedImages:
    def test_twelve_landscape_three_portrait(self):
        images = [_img(1.78, f"l{n}") for n in range(12)] + [_img(0.56, f"p{n}") for n in range(3)]
        pages = assign_analyzed_images(images)
        assert [p.template_id for p in pages] == ["12-photo-landscape", "3-photo-portrait"]
        assert set(pages[1].assigned_image_ids) == {"p0", "p1", "p2"}

    def test_every_image_placed_exactly_once(self):
        ratios = [0.5, 0.56, 0.6, 0.67, 0.75, 1.0, 1.2, 1.33, 1.5, 1.6, 1.78, 2.0, 2.35, 0.8, 1.9, 1.4, 0.7, 1.1]
        images = [_img(ar, f"i{n}") for n, ar in enumerate(ratios)]
        pages = assign_analyzed_images(images)
        placed = [image_id for p in pages for image_id in p.assigned_image_ids]
        assert sorted(placed) == sorted(i.id for i in images)
        assert all(len(p.slots) == p.photo_count for p in pages)

    def test_progress_for_assignment(self):
        calls = []
        images = [_img(1.78, f"l{n}") for n in range(7)]
        pages = assign_analyzed_images(images, on_progress=lambda *args: calls.append(args))
        assert len(pages) == 3
        assert calls == [
            (0, 3, ProgressPhase.ASSIGNING),
            (1, 3, ProgressPhase.ASSIGNING),
            (2, 3, ProgressPhase.ASSIGNING),
            (3, 3, ProgressPhase.ASSIGNING),
        ]

    def test_empty(self):
        assert assign_analyzed_images([]) == []


class TestAutoAssignLayouts:
    def test_empty_input(self):
        calls = []
        result = asyncio.run(auto_assign_layouts([], on_progress=lambda *args: calls.append(args)))
        assert result.pages == []
        assert result.image_count == 0
        assert result.page_count == 0
        assert calls == []

    def test_single_portrait_upload(self):
        result = asyncio.run(auto_assign_layouts([_upload("p.png", 90, 160)]))
        assert result.image_count == 1
        assert result.page_count == 1
        page = result.pages[0]
        assert page.template_id == "1-photo-portrait"
        assert page.slots[0].image_id == result.analyzed_images[0].id

    def test_full_pipeline_with_progress(self):
        files = [_upload(f"l{n}.png", 160, 90) for n in range(4)]
        calls = []
        result = asyncio.run(auto_assign_layouts(files, on_progress=lambda *args: calls.append(args)))
        assert result.page_count == 1
        assert result.pages[0].template_id == "4-photo-landscape"
        assert calls == [
            (3, 4, ProgressPhase.ANALYZING),
            (4, 4, ProgressPhase.ANALYZING),
            (0, 1, ProgressPhase.ASSIGNING),
            (1, 1, ProgressPhase.ASSIGNING),
        ]

    def test_failed_upload_does_not_block_layout(self):
        files = [
            _upload("a.png", 90, 160),
            ImageFile(file_name="corrupt.jpg", data=b"\x00\x01garbage"),
            _upload("b.png", 90, 160),
            _upload("c.png", 90, 160),
        ]
        result = asyncio.run(auto_assign_layouts(files))
        assert result.image_count == 3
        assert [f.file_name for f in result.failures] == ["corrupt.jpg"]
        assert [p.template_id for p in result.pages] == ["3-photo-portrait"]
