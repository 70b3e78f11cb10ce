"""
Text and logo watermarks.

The text layer is a pure function of the target size and the style, so the
preview and the export produce identical watermarks for the same photo.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

LOGGER = logging.getLogger(__name__)

FONT_CANDIDATES = ('DejaVuSans-Bold.ttf', 'DejaVuSans.ttf', 'arial.ttf')

POSITIONS = {
    'bottom_right': ('right', 'bottom'),
    'bottom_left': ('left', 'bottom'),
    'top_right': ('right', 'top'),
    'top_left': ('left', 'top'),
    'center': ('center', 'center'),
}


@dataclass(frozen=True)
class WatermarkStyle:
    """How the watermark text is drawn"""
    text: str
    opacity: float = 0.3
    font_size: int = 24
    color: str = '#ffffff'
    layout: str = 'tiled'   # 'tiled' grid or one 'diagonal' line
    angle: float = -45

    @property
    def rgba(self) -> Tuple[int, int, int, int]:
        try:
            r, g, b = ImageColor.getrgb(self.color)[:3]
        except ValueError:
            r, g, b = 255, 255, 255
        alpha = int(round(255 * max(0.0, min(1.0, self.opacity))))
        return r, g, b, alpha


def photo_overlay_style(text: Optional[str]) -> Optional[WatermarkStyle]:
    """Watermark drawn over exposé photos, identical in the preview and the PDF"""
    text = (text or '').strip()
    if not text:
        return None
    return WatermarkStyle(text=text, opacity=0.25, font_size=42, color='#ffffff', layout='diagonal')


def load_font(size: int) -> ImageFont.ImageFont:
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except IOError:
            continue
    return ImageFont.load_default(size=size)


def render_text_layer(size: Tuple[int, int], style: WatermarkStyle) -> Image.Image:
    """
    Transparent RGBA layer of `size` carrying the rotated watermark text.

    The text is drawn on an oversized canvas, rotated by `style.angle`
    and cropped back to `size`, so the pattern covers the corners.
    """
    width, height = size
    layer = Image.new('RGBA', (width, height), (0, 0, 0, 0))
    text = (style.text or '').strip()
    if not text or width <= 0 or height <= 0:
        return layer

    diagonal = int(math.ceil(math.hypot(width, height)))
    canvas = Image.new('RGBA', (diagonal, diagonal), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    font = load_font(max(1, int(style.font_size)))
    fill = style.rgba

    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    text_w, text_h = max(1, right - left), max(1, bottom - top)

    if style.layout == 'diagonal':
        draw.text(((diagonal - text_w) // 2, (diagonal - text_h) // 2), text, font=font, fill=fill)
    else:
        step_x = text_w + max(text_w // 2, style.font_size * 2)
        step_y = text_h + style.font_size * 3
        for row, y in enumerate(range(0, diagonal, step_y)):
            offset = (step_x // 2) if row % 2 else 0
            for x in range(-offset, diagonal, step_x):
                draw.text((x, y), text, font=font, fill=fill)

    # PIL rotates counter-clockwise for positive angles
    rotated = canvas.rotate(-style.angle, resample=Image.BICUBIC)
    x0 = (diagonal - width) // 2
    y0 = (diagonal - height) // 2
    layer.paste(rotated.crop((x0, y0, x0 + width, y0 + height)), (0, 0))
    return layer


def add_text_watermark(img: Image.Image, style: WatermarkStyle) -> Image.Image:
    """Composite the text layer over a copy of `img` (returned as RGBA)"""
    base = img.convert('RGBA') if img.mode != 'RGBA' else img.copy()
    if not (style.text or '').strip():
        return base
    return Image.alpha_composite(base, render_text_layer(base.size, style))


def add_logo(
    img: Image.Image,
    logo: Image.Image,
    position: str = 'top_right',
    size_percent: int = 15,
    margin_percent: int = 3,
    opacity: float = 1.0
) -> Image.Image:
    """
    Add a logo to a copy of an image.

    Args:
        img: Base PIL Image
        logo: Logo image
        position: Position key (top_right, bottom_left, etc.)
        size_percent: Logo width as percentage of image width (5-50)
        margin_percent: Margin from edges as percentage
        opacity: Logo opacity (0.0-1.0)

    Returns:
        RGBA image with the logo
    """
    img = img.convert('RGBA') if img.mode != 'RGBA' else img.copy()
    width, height = img.size

    size_percent = max(5, min(50, size_percent))
    logo_width = max(1, int(width * size_percent / 100))
    logo_height = max(1, int(logo.size[1] * (logo_width / logo.size[0])))

    logo = logo.convert('RGBA').resize((logo_width, logo_height), Image.LANCZOS)

    if opacity < 1.0:
        alpha = logo.split()[3]
        alpha = alpha.point(lambda p: int(p * max(0.0, opacity)))
        logo.putalpha(alpha)

    margin = int(min(width, height) * margin_percent / 100)
    pos_x, pos_y = POSITIONS.get(position, ('right', 'top'))

    if pos_x == 'left':
        x = margin
    elif pos_x == 'right':
        x = width - logo_width - margin
    else:
        x = (width - logo_width) // 2

    if pos_y == 'top':
        y = margin
    elif pos_y == 'bottom':
        y = height - logo_height - margin
    else:
        y = (height - logo_height) // 2

    img.paste(logo, (x, y), logo)
    return img


def flatten_for_export(
    image: Image.Image,
    watermark: Optional[WatermarkStyle] = None,
    logo: Optional[Image.Image] = None
) -> Image.Image:
    """
    Burn watermark and logo into an RGB copy for the export path.

    The stored photo is left untouched; this only runs on the copy that
    goes into a download.
    """
    result = image
    if watermark is not None and (watermark.text or '').strip():
        result = add_text_watermark(result, watermark)
    if logo is not None:
        result = add_logo(result, logo, position='top_right', size_percent=12, opacity=0.9)

    if result.mode == 'RGBA':
        background = Image.new('RGB', result.size, (255, 255, 255))
        background.paste(result, mask=result.split()[3])
        return background
    return result.convert('RGB')
