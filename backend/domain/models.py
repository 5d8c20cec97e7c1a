"""
Core domain models for the album auto-layout engine.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional
import uuid


class Orientation(str, Enum):
    """Orientation label for an image or a page template."""
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    SQUARE = "square"  # Display label only; templates are never square


class Confidence(str, Enum):
    """How sure a layout scorer is about its recommendation."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ProgressPhase(str, Enum):
    """Pipeline phase reported to progress callbacks."""
    ANALYZING = "analyzing"
    ASSIGNING = "assigning"


# (current, total, phase)
ProgressCallback = Callable[[int, int, ProgressPhase], None]


# Input / analysis models

@dataclass
class ImageFile:
    """A raw uploaded file: payload bytes plus the name it was uploaded with."""
    file_name: str
    data: bytes
    content_type: Optional[str] = None


@dataclass(frozen=True)
class AnalyzedImage:
    """
    An uploaded image after decoding.

    Created once per input file and never mutated afterwards. `aspect_ratio`
    is always `width / height` and strictly positive.
    """
    id: str
    file_name: str
    source_bytes: bytes = field(repr=False)
    width: int
    height: int
    aspect_ratio: float
    orientation: Orientation

    @property
    def file_size(self) -> int:
        return len(self.source_bytes)

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())


@dataclass
class AnalysisFailure:
    """A file that could not be analyzed, with a human-readable reason."""
    file_name: str
    reason: str


@dataclass
class AnalysisReport:
    """
    Outcome of a batched analysis run.

    `images` keeps the input file order; failed files are skipped there and
    listed in `failures` instead.
    """
    images: List[AnalyzedImage] = field(default_factory=list)
    failures: List[AnalysisFailure] = field(default_factory=list)


# Planning / template models

@dataclass
class PagePlan:
    """Pre-materialization page: a size, a pool orientation and its images."""
    size: int
    orientation: Orientation
    images: List[AnalyzedImage] = field(default_factory=list)


@dataclass(frozen=True)
class SlotRect:
    """Static slot geometry, in percentages of a 16:9 canvas."""
    id: str
    x: float
    y: float
    width: float
    height: float


@dataclass
class SlotPosition:
    """Pan/zoom state of an image inside its slot."""
    offset_x: float = 0.0
    offset_y: float = 0.0
    zoom: float = 1.0


@dataclass
class TemplateSlot:
    """
    A slot on a page.

    Geometry is copied from the template table; only `image_id` and
    `position` change at runtime.
    """
    id: str
    x: float
    y: float
    width: float
    height: float
    image_id: Optional[str] = None
    position: Optional[SlotPosition] = None

    @classmethod
    def from_rect(cls, rect: SlotRect) -> "TemplateSlot":
        return cls(id=rect.id, x=rect.x, y=rect.y, width=rect.width, height=rect.height)


@dataclass
class PageDefaults:
    """Styling copied onto every generated page."""
    frame_width: float = 0
    frame_color: str = "#1a1a1a"
    mat_width: float = 0
    mat_color: str = "#FFFFFF"
    background_color: str = "#000000"


@dataclass
class LayoutTemplate:
    """A fixed photo-count/orientation template with its slots."""
    id: str
    name: str
    photo_count: int
    orientation: Orientation
    slots: List[TemplateSlot] = field(default_factory=list)
    frame_width: float = 0
    frame_color: str = "#1a1a1a"
    mat_width: float = 0
    mat_color: str = "#FFFFFF"


@dataclass
class Page:
    """
    A materialized album page.

    Owned by the caller once returned; the engine never touches it again.
    """
    id: str
    template_id: str
    photo_count: int
    orientation: Orientation
    slots: List[TemplateSlot] = field(default_factory=list)
    frame_width: float = 0
    frame_color: str = "#1a1a1a"
    mat_width: float = 0
    mat_color: str = "#FFFFFF"
    background_color: str = "#000000"

    @staticmethod
    def generate_id() -> str:
        return f"page-{uuid.uuid4().hex}"

    @property
    def assigned_image_ids(self) -> List[str]:
        return [s.image_id for s in self.slots if s.image_id]


@dataclass
class AutoLayoutResult:
    """Pages produced by the auto-layout pipeline plus summary counters."""
    pages: List[Page] = field(default_factory=list)
    image_count: int = 0
    page_count: int = 0
    analyzed_images: List[AnalyzedImage] = field(default_factory=list)
    failures: List[AnalysisFailure] = field(default_factory=list)


# Layout scoring models

@dataclass
class ImageMeasurement:
    """Per-image measurements consumed by the layout scorers."""
    width: int
    height: int
    aspect_ratio: float
    orientation: Orientation
    visual_weight: float  # 0-1
    aesthetic_score: float  # 0-1, proximity to common pleasing ratios
    file_size: Optional[int] = None


@dataclass(frozen=True)
class ScoringContext:
    """Aggregate statistics over a set of measurements. Read-only to scorers."""
    image_count: int = 0
    portrait_count: int = 0
    landscape_count: int = 0
    square_count: int = 0
    avg_aesthetic_score: float = 0.0
    avg_visual_weight: float = 0.0
    orientation_dominance: float = 0.0
    balance_score: float = 0.0


@dataclass
class DetailedAnalysis:
    orientation_match: float = 0.0
    image_count_match: float = 0.0
    aesthetic_score: float = 0.0
    balance_score: float = 0.0
    visual_impact: float = 0.0


@dataclass
class LayoutScore:
    """A scored layout recommendation."""
    layout_name: str
    score: float  # 0-100
    reason: str
    detailed_analysis: DetailedAnalysis = field(default_factory=DetailedAnalysis)
    confidence: Confidence = Confidence.MEDIUM
