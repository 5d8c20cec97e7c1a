"""
Image analysis service.

Decodes uploaded files to find their pixel dimensions and aspect ratio.
Decoding is the only step of the auto-layout pipeline that suspends: it runs
on a worker thread and files are processed in small concurrent batches to
bound how many images are held in memory at once.

Uploads are prepared first: HEIC/HEIF files are converted to JPEG and large
images are downscaled, mirroring what the album stores for playback.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageOps

from domain.models import (
    AnalysisFailure,
    AnalysisReport,
    AnalyzedImage,
    ImageFile,
    Orientation,
    ProgressCallback,
    ProgressPhase,
)
from settings import settings

logger = logging.getLogger(__name__)

# Display-label thresholds (coarser than the planner's fit scoring)
PORTRAIT_MAX_ASPECT_RATIO = 0.85
LANDSCAPE_MIN_ASPECT_RATIO = 1.18

HEIC_EXTENSIONS = ("heic", "heif")
HEIC_CONTENT_TYPES = ("image/heic", "image/heif", "image/heic-sequence", "image/heif-sequence")


class ImageDecodeError(Exception):
    """Raised when an uploaded file cannot be read as an image."""

    def __init__(self, file_name: str, reason: str):
        super().__init__(f"Failed to load image {file_name}: {reason}")
        self.file_name = file_name
        self.reason = reason


def classify_orientation(aspect_ratio: float) -> Orientation:
    """Coarse orientation label used for display."""
    if aspect_ratio < PORTRAIT_MAX_ASPECT_RATIO:
        return Orientation.PORTRAIT
    if aspect_ratio > LANDSCAPE_MIN_ASPECT_RATIO:
        return Orientation.LANDSCAPE
    return Orientation.SQUARE


# ============================================
# Upload preparation
# ============================================

def is_heic_file(filename: str, content_type: Optional[str] = None) -> bool:
    """Check if a file is a HEIC/HEIF image by extension or MIME type."""
    if filename:
        ext = filename.lower().rsplit(".", 1)[-1] if "." in filename else ""
        if ext in HEIC_EXTENSIONS:
            return True
    if content_type and content_type.lower() in HEIC_CONTENT_TYPES:
        return True
    return False


def register_heif_opener() -> bool:
    """
    Register the HEIF/HEIC opener with Pillow if pillow-heif is available.

    Call this at application startup. Safe to call multiple times.
    """
    try:
        from pillow_heif import register_heif_opener as _register
        _register()
        return True
    except ImportError:
        return False


@lru_cache(maxsize=None)
def ensure_heif_opener() -> bool:
    """Register the HEIF opener once per process, on first HEIC upload."""
    available = register_heif_opener()
    if not available:
        logger.warning("pillow-heif not installed; HEIC uploads cannot be converted")
    return available


def _change_extension(filename: str, new_ext: str) -> str:
    base = filename.rsplit(".", 1)[0] if "." in filename else filename
    return base + new_ext


def _encode_jpeg(img: Image.Image, max_dimension: Optional[int] = None) -> bytes:
    img = ImageOps.exif_transpose(img)
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    if max_dimension:
        img.thumbnail((max_dimension, max_dimension))
    output = BytesIO()
    img.save(output, format="JPEG", quality=settings.JPEG_QUALITY, optimize=True)
    return output.getvalue()


def needs_optimization(size_bytes: int, width: int, height: int) -> bool:
    """Whether an upload is heavy enough to be downscaled."""
    if size_bytes > settings.MAX_UPLOAD_BYTES:
        return True
    return width > settings.MAX_IMAGE_DIMENSION or height > settings.MAX_IMAGE_DIMENSION


def prepare_upload(file: ImageFile) -> ImageFile:
    """
    Convert HEIC to JPEG and downscale oversized images.

    Never raises: if conversion or optimization fails the original bytes are
    returned unchanged and decoding decides whether the file is usable.
    """
    heic = is_heic_file(file.file_name, file.content_type)
    if not heic and not settings.OPTIMIZE_UPLOADS:
        return file
    if heic:
        ensure_heif_opener()

    try:
        with Image.open(BytesIO(file.data)) as img:
            optimize = settings.OPTIMIZE_UPLOADS and needs_optimization(len(file.data), img.width, img.height)
            if not heic and not optimize:
                return file
            data = _encode_jpeg(img, settings.MAX_IMAGE_DIMENSION if optimize else None)
    except Exception as e:
        logger.warning("Could not prepare upload %s, using original bytes: %s", file.file_name, e)
        return file

    logger.debug(
        "Prepared upload %s (heic=%s): %s -> %s bytes", file.file_name, heic, len(file.data), len(data)
    )
    return ImageFile(
        file_name=_change_extension(file.file_name, ".jpg"),
        data=data,
        content_type="image/jpeg",
    )


# ============================================
# Decoding
# ============================================

def _read_dimensions(file: ImageFile) -> Tuple[int, int]:
    """Decode the image and return EXIF-aware (width, height)."""
    try:
        with Image.open(BytesIO(file.data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            width, height = img.size
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(file.file_name, str(e) or type(e).__name__) from e
    if width <= 0 or height <= 0:
        raise ImageDecodeError(file.file_name, f"invalid dimensions {width}x{height}")
    return width, height


def _analyze_sync(file: ImageFile) -> AnalyzedImage:
    prepared = prepare_upload(file)
    width, height = _read_dimensions(prepared)
    aspect_ratio = width / height
    return AnalyzedImage(
        id=AnalyzedImage.generate_id(),
        file_name=prepared.file_name,
        source_bytes=prepared.data,
        width=width,
        height=height,
        aspect_ratio=aspect_ratio,
        orientation=classify_orientation(aspect_ratio),
    )


async def _await_decode(file: ImageFile, decode: asyncio.Future, timeout: Optional[float]) -> AnalyzedImage:
    # Shielded so a timed-out decode stays owned by whoever started it
    try:
        return await asyncio.wait_for(asyncio.shield(decode), timeout)
    except asyncio.TimeoutError as e:
        raise ImageDecodeError(file.file_name, f"decode timed out after {timeout}s") from e


async def analyze_image(file: ImageFile, timeout: Optional[float] = None) -> AnalyzedImage:
    """
    Analyze a single uploaded file.

    Args:
        file: The uploaded file
        timeout: Seconds allowed for preparation + decode, None for no limit

    Returns:
        AnalyzedImage with dimensions, aspect ratio and orientation label

    Raises:
        ImageDecodeError: If the file is not a readable image or the decode timed out
    """
    decode = asyncio.get_running_loop().run_in_executor(None, _analyze_sync, file)
    return await _await_decode(file, decode, timeout)


async def _analyze_isolated(
    file: ImageFile, decode: asyncio.Future, timeout: Optional[float]
) -> AnalyzedImage | AnalysisFailure:
    try:
        return await _await_decode(file, decode, timeout)
    except ImageDecodeError as e:
        logger.warning("Skipping %s: %s", file.file_name, e.reason)
        return AnalysisFailure(file_name=file.file_name, reason=e.reason)


async def analyze_images(
    files: Sequence[ImageFile],
    on_progress: Optional[ProgressCallback] = None,
    batch_size: Optional[int] = None,
    timeout: Optional[float] = None,
) -> AnalysisReport:
    """
    Analyze files in fixed-size concurrent batches.

    Batches run one after another; files inside a batch run concurrently on
    a pool with one worker per batch slot. A file that fails to decode or
    times out is reported in `failures` and does not affect the rest of its
    batch. A timed-out decode cannot be interrupted, so the next batch starts
    only after it has finished. Progress is reported once per batch.

    Args:
        files: Uploaded files, in album order
        on_progress: Optional callback receiving (done, total, "analyzing")
        batch_size: Files per batch (defaults to settings.ANALYSIS_BATCH_SIZE)
        timeout: Per-file decode timeout (defaults to settings.DECODE_TIMEOUT_SECONDS)

    Returns:
        AnalysisReport with images in input order
    """
    report = AnalysisReport()
    total = len(files)
    if total == 0:
        return report

    size = batch_size or settings.ANALYSIS_BATCH_SIZE
    if timeout is None:
        timeout = settings.DECODE_TIMEOUT_SECONDS

    loop = asyncio.get_running_loop()
    executor = ThreadPoolExecutor(max_workers=size, thread_name_prefix="image-decode")
    try:
        for start in range(0, total, size):
            batch = files[start:start + size]
            decodes = [loop.run_in_executor(executor, _analyze_sync, f) for f in batch]
            outcomes: List[AnalyzedImage | AnalysisFailure] = await asyncio.gather(
                *(_analyze_isolated(f, d, timeout) for f, d in zip(batch, decodes))
            )
            # Abandoned decodes still hold a worker and their image bytes
            await asyncio.wait(decodes)

            for outcome in outcomes:
                if isinstance(outcome, AnalysisFailure):
                    report.failures.append(outcome)
                else:
                    report.images.append(outcome)
            if on_progress:
                on_progress(min(start + size, total), total, ProgressPhase.ANALYZING)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    if report.failures:
        logger.info("Analyzed %s of %s images (%s failed)", len(report.images), total, len(report.failures))
    return report
