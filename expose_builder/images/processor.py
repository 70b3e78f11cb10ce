"""
Image processor for exposé photos.
Handles decoding, resizing, auto-levels, sharpening, brightness, watermarking
and JPEG encoding, plus the quality score used for cover suggestions.
"""

import base64
import io
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ..api.config import Config
from ..models.expose import OptimizationSettings
from ..models.photos import MAX_PHOTOS, PhotoBatchResult
from .adjustments import adjust_brightness, auto_levels, luma_variance, sharpen
from .watermark import WatermarkStyle, add_text_watermark, flatten_for_export

LOGGER = logging.getLogger(__name__)

ImageSource = Union[str, bytes, Image.Image]


class ImageDecodeError(Exception):
    """Raised when a file cannot be decoded as an image"""
    def __init__(self, message: str, name: str = None):
        self.message = message
        self.name = name
        super().__init__(self.message)


@dataclass(frozen=True)
class OptimizedImage:
    """Encoded pipeline output"""
    data_uri: str
    width: int
    height: int


class ImageProcessor:
    """Process photos for exposés."""

    def __init__(self, quality: int = None, workers: int = None):
        """
        Initialize the image processor.

        Args:
            quality: JPEG quality (uses config if not provided)
            workers: Thread pool size for batches (uses config if not provided)
        """
        self.quality = quality or Config.JPEG_QUALITY
        self.workers = workers or Config.PIPELINE_WORKERS

    def load_image(self, image_source: ImageSource) -> Image.Image:
        """
        Load an image from various sources.

        Args:
            image_source: bytes, data URI, file path, or PIL Image

        Returns:
            Decoded PIL Image, never the caller's object

        Raises:
            ImageDecodeError: the source is not a readable image
        """
        if isinstance(image_source, Image.Image):
            return image_source.copy()

        try:
            if isinstance(image_source, (bytes, bytearray)):
                img = Image.open(io.BytesIO(image_source))
            elif isinstance(image_source, str) and image_source.startswith('data:image'):
                base64_data = image_source.split(',', 1)[1]
                img = Image.open(io.BytesIO(base64.b64decode(base64_data)))
            elif isinstance(image_source, str) and os.path.exists(image_source):
                img = Image.open(image_source)
            else:
                raise ImageDecodeError(f"Cannot load image from: {type(image_source).__name__}")
            img.load()
            return ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, Image.DecompressionBombError, SyntaxError, OSError, ValueError,
                IndexError) as e:
            raise ImageDecodeError(f"Cannot decode image: {e}") from e

    @staticmethod
    def target_size(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
        """Fit (width, height) into the bounding box, keeping the aspect ratio; never upscales"""
        if width <= 0 or height <= 0:
            return width, height
        ratio = min(max_width / width, max_height / height, 1)
        return max(1, int(round(width * ratio))), max(1, int(round(height * ratio)))

    def resize_image(self, img: Image.Image, max_width: int, max_height: int) -> Image.Image:
        size = self.target_size(img.size[0], img.size[1], max_width, max_height)
        if size == img.size:
            return img
        return img.resize(size, Image.LANCZOS)

    def encode_jpeg(self, img: Image.Image) -> bytes:
        """Flatten transparency onto white and encode as JPEG"""
        if img.mode == 'RGBA':
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[3])
            img = background
        elif img.mode != 'RGB':
            img = img.convert('RGB')

        output = io.BytesIO()
        img.save(output, format='JPEG', quality=self.quality)
        return output.getvalue()

    def optimize(
        self,
        image_source: ImageSource,
        settings: OptimizationSettings = None,
        watermark: Optional[WatermarkStyle] = None
    ) -> OptimizedImage:
        """
        Run one photo through the pipeline.

        decode -> resize -> auto-levels -> [sharpen] -> [brightness]
        -> [watermark] -> JPEG data URI

        Raises:
            ImageDecodeError: the source cannot be decoded
        """
        settings = settings or OptimizationSettings()

        img = self.load_image(image_source).convert('RGBA')
        img = self.resize_image(img, settings.max_width, settings.max_height)

        pixels = np.asarray(img, dtype=np.uint8)
        pixels = auto_levels(pixels, settings.contrast_strength)
        if settings.sharpen:
            pixels = sharpen(pixels)
        if settings.brightness:
            pixels = adjust_brightness(pixels, settings.brightness)
        img = Image.fromarray(pixels)

        if watermark is not None and (watermark.text or '').strip():
            img = add_text_watermark(img, watermark)

        data = self.encode_jpeg(img)
        return OptimizedImage(
            data_uri=self.image_to_base64(data),
            width=img.size[0],
            height=img.size[1],
        )

    def process_batch(
        self,
        files: Iterable[Any],
        settings: OptimizationSettings = None,
        existing_count: int = 0,
        watermark: Optional[WatermarkStyle] = None
    ) -> PhotoBatchResult:
        """
        Process an upload batch with the same settings.

        The cap is applied to the batch as selected, before any processing:
        only the first `MAX_PHOTOS - existing_count` files are processed.
        A file that fails for any reason is logged and skipped; the output keeps
        the input order.

        Args:
            files: Image sources, or (name, source) tuples
            settings: Pipeline settings captured for the whole batch
            existing_count: Photos (and reserved slots) already in the collection
            watermark: Optional watermark applied to every photo

        Returns:
            PhotoBatchResult with the processed data URIs
        """
        named = [_named(i, item) for i, item in enumerate(files)]
        settings = settings or OptimizationSettings()

        free = max(0, MAX_PHOTOS - existing_count)
        accepted = min(len(named), free)
        result = PhotoBatchResult(requested=len(named), accepted=accepted, dropped=len(named) - accepted)
        if result.dropped:
            LOGGER.info("photo limit: accepting %d of %d files", accepted, len(named))

        batch = named[:accepted]
        if not batch:
            return result

        with ThreadPoolExecutor(max_workers=min(self.workers, len(batch))) as executor:
            futures = [executor.submit(self.optimize, source, settings, watermark) for _, source in batch]
            for (name, _), future in zip(batch, futures):
                try:
                    result.add_success(future.result().data_uri)
                except Exception as e:
                    LOGGER.warning("skipping photo %s: %s", name, e)
                    result.add_failure(name, str(e))

        return result

    def quality_score(self, image_source: ImageSource) -> float:
        """Luma variance of a 256x256 thumbnail; higher means more detail"""
        size = Config.QUALITY_SAMPLE_SIZE
        img = self.load_image(image_source).convert('RGBA').resize((size, size), Image.BILINEAR)
        return luma_variance(np.asarray(img, dtype=np.uint8))

    def suggest_cover(self, images: List[ImageSource]) -> Tuple[Optional[int], List[float]]:
        """
        Pick the photo with the highest quality score.

        Unreadable images score 0. Ties go to the earliest photo.

        Returns:
            (index or None when there are no images, scores in input order)
        """
        scores = []
        for index, source in enumerate(images):
            try:
                scores.append(self.quality_score(source))
            except ImageDecodeError as e:
                LOGGER.warning("cannot score photo #%d: %s", index + 1, e.message)
                scores.append(0.0)

        if not scores:
            return None, scores
        return max(range(len(scores)), key=lambda i: (scores[i], -i)), scores

    def export_photo(
        self,
        data_uri: ImageSource,
        watermark: Optional[WatermarkStyle] = None,
        logo: Optional[ImageSource] = None
    ) -> Image.Image:
        """Decode a stored photo and burn watermark/logo into an export copy"""
        logo_img = None
        if logo:
            try:
                logo_img = self.load_image(logo)
            except ImageDecodeError as e:
                LOGGER.warning("could not load logo: %s", e.message)
        return flatten_for_export(self.load_image(data_uri), watermark, logo_img)

    def export_data_uri(
        self,
        data_uri: ImageSource,
        watermark: Optional[WatermarkStyle] = None,
        logo: Optional[ImageSource] = None
    ) -> str:
        """export_photo() encoded as a JPEG data URI, for HTML previews"""
        return self.image_to_base64(self.encode_jpeg(self.export_photo(data_uri, watermark, logo)))

    def image_to_base64(self, img_bytes: bytes, format: str = 'JPEG') -> str:
        """Convert image bytes to base64 data URL."""
        mime_type = f"image/{format.lower()}"
        b64 = base64.b64encode(img_bytes).decode('utf-8')
        return f"data:{mime_type};base64,{b64}"


def _named(index: int, item: Any) -> Tuple[str, Any]:
    if isinstance(item, tuple) and len(item) == 2:
        return str(item[0]), item[1]
    if isinstance(item, str) and not item.startswith('data:'):
        return os.path.basename(item), item
    return f"#{index + 1}", item
