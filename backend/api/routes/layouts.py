"""
Layout API routes.

Auto-assigns uploaded photos to album pages and ranks layout shapes.
"""
from typing import List, Optional
from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from domain.models import (
    AnalysisFailure,
    AnalyzedImage,
    ImageFile,
    LayoutScore,
    LayoutTemplate,
    Page,
    PageDefaults,
    TemplateSlot,
)
from services.layout_engine import DEFAULT_PAGE_DEFAULTS, auto_assign_layouts
from services.layout_scoring.registry import build_default_registry, recommend_layouts
from services.layout_templates import list_templates

router = APIRouter()
scorer_registry = build_default_registry()


class SlotPositionResponse(BaseModel):
    offset_x: float
    offset_y: float
    zoom: float


class SlotResponse(BaseModel):
    id: str
    x: float
    y: float
    width: float
    height: float
    image_id: Optional[str] = None
    position: Optional[SlotPositionResponse] = None


class PageResponse(BaseModel):
    id: str
    template_id: str
    photo_count: int
    orientation: str
    slots: List[SlotResponse]
    frame_width: float
    frame_color: str
    mat_width: float
    mat_color: str
    background_color: str


class AnalyzedImageResponse(BaseModel):
    id: str
    file_name: str
    width: int
    height: int
    aspect_ratio: float
    orientation: str


class FailureResponse(BaseModel):
    file_name: str
    reason: str


class AutoLayoutResponse(BaseModel):
    pages: List[PageResponse]
    image_count: int
    page_count: int
    images: List[AnalyzedImageResponse]
    failures: List[FailureResponse]


class TemplateResponse(BaseModel):
    id: str
    name: str
    photo_count: int
    orientation: str
    slots: List[SlotResponse]


class DetailedAnalysisResponse(BaseModel):
    orientation_match: float
    image_count_match: float
    aesthetic_score: float
    balance_score: float
    visual_impact: float


class LayoutScoreResponse(BaseModel):
    layout_name: str
    score: float
    reason: str
    detailed_analysis: DetailedAnalysisResponse
    confidence: str


def slot_to_response(slot: TemplateSlot) -> SlotResponse:
    position = None
    if slot.position is not None:
        position = SlotPositionResponse(
            offset_x=slot.position.offset_x,
            offset_y=slot.position.offset_y,
            zoom=slot.position.zoom,
        )
    return SlotResponse(
        id=slot.id,
        x=slot.x,
        y=slot.y,
        width=slot.width,
        height=slot.height,
        image_id=slot.image_id,
        position=position,
    )


def page_to_response(page: Page) -> PageResponse:
    """Convert a domain Page to an API response."""
    return PageResponse(
        id=page.id,
        template_id=page.template_id,
        photo_count=page.photo_count,
        orientation=page.orientation.value,
        slots=[slot_to_response(s) for s in page.slots],
        frame_width=page.frame_width,
        frame_color=page.frame_color,
        mat_width=page.mat_width,
        mat_color=page.mat_color,
        background_color=page.background_color,
    )


def image_to_response(image: AnalyzedImage) -> AnalyzedImageResponse:
    return AnalyzedImageResponse(
        id=image.id,
        file_name=image.file_name,
        width=image.width,
        height=image.height,
        aspect_ratio=image.aspect_ratio,
        orientation=image.orientation.value,
    )


def failure_to_response(failure: AnalysisFailure) -> FailureResponse:
    return FailureResponse(file_name=failure.file_name, reason=failure.reason)


def template_to_response(template: LayoutTemplate) -> TemplateResponse:
    return TemplateResponse(
        id=template.id,
        name=template.name,
        photo_count=template.photo_count,
        orientation=template.orientation.value,
        slots=[slot_to_response(s) for s in template.slots],
    )


def score_to_response(result: LayoutScore) -> LayoutScoreResponse:
    analysis = result.detailed_analysis
    return LayoutScoreResponse(
        layout_name=result.layout_name,
        score=result.score,
        reason=result.reason,
        detailed_analysis=DetailedAnalysisResponse(
            orientation_match=analysis.orientation_match,
            image_count_match=analysis.image_count_match,
            aesthetic_score=analysis.aesthetic_score,
            balance_score=analysis.balance_score,
            visual_impact=analysis.visual_impact,
        ),
        confidence=result.confidence.value,
    )


async def _read_uploads(files: List[UploadFile]) -> List[ImageFile]:
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")
    uploads = []
    for file in files:
        uploads.append(ImageFile(
            file_name=file.filename or "photo.jpg",
            data=await file.read(),
            content_type=file.content_type,
        ))
    return uploads


@router.get("/templates", response_model=List[TemplateResponse])
async def get_templates():
    """List every page template with its slot geometry."""
    return [template_to_response(t) for t in list_templates()]


@router.post("/auto-assign", response_model=AutoLayoutResponse)
async def auto_assign(
    files: List[UploadFile] = File(...),
    frame_width: float = Form(DEFAULT_PAGE_DEFAULTS.frame_width),
    frame_color: str = Form(DEFAULT_PAGE_DEFAULTS.frame_color),
    mat_width: float = Form(DEFAULT_PAGE_DEFAULTS.mat_width),
    mat_color: str = Form(DEFAULT_PAGE_DEFAULTS.mat_color),
    background_color: str = Form(DEFAULT_PAGE_DEFAULTS.background_color),
):
    """
    Distribute uploaded photos across album pages.

    Files that cannot be decoded are reported in `failures` and the rest are
    laid out normally.
    """
    uploads = await _read_uploads(files)
    defaults = PageDefaults(
        frame_width=frame_width,
        frame_color=frame_color,
        mat_width=mat_width,
        mat_color=mat_color,
        background_color=background_color,
    )
    result = await auto_assign_layouts(uploads, defaults)
    return AutoLayoutResponse(
        pages=[page_to_response(p) for p in result.pages],
        image_count=result.image_count,
        page_count=result.page_count,
        images=[image_to_response(img) for img in result.analyzed_images],
        failures=[failure_to_response(f) for f in result.failures],
    )


@router.post("/recommendations", response_model=List[LayoutScoreResponse])
async def get_recommendations(files: List[UploadFile] = File(...)):
    """Rank the layout catalog for the uploaded photos, best first."""
    uploads = await _read_uploads(files)
    results = await recommend_layouts(uploads, scorer_registry)
    return [score_to_response(r) for r in results]
