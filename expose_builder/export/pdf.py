"""
PDF export of a RenderModel.

Layout: A4 cover page (title, address, cover photo, thumbnails, key
facts), details page(s) (fact tables, location, descriptions, contact,
notices) and gallery pages with every photo in collection order. Photos
get the same watermark and logo as in the preview, flattened into export
copies.
"""
import io
import logging
from typing import Dict, Optional, Sequence

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from ..images.processor import ImageDecodeError, ImageProcessor
from ..services.assembly import RenderModel
from ..services.i18n import translate

LOGGER = logging.getLogger(__name__)

FONT = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'
TEXT_COLOR = '#2c3e50'
MUTED_COLOR = '#777777'

MARGIN = 40
HEADER_H = 110
GALLERY_PER_PAGE = 4


class ExposePdfRenderer:
    """Draws one RenderModel onto an A4 canvas"""

    def __init__(self, model: RenderModel, processor: ImageProcessor = None):
        self.model = model
        self.processor = processor or ImageProcessor()
        self.width, self.height = A4
        self.primary = HexColor(model.palette['primary'])
        self.accent = HexColor(model.palette['accent'])
        self.bg_soft = HexColor(model.palette['bg_soft'])
        self._photo_cache: Dict[str, Optional[ImageReader]] = {}

        # same overlay the preview draws
        self.photo_watermark = model.watermark

    def t(self, key: str, **vars) -> str:
        return translate(key, self.model.language, **vars)

    # Page plumbing

    def _new_page(self, c: canvas.Canvas, first: bool = False) -> float:
        if not first:
            c.showPage()
        return self.height - MARGIN

    def _ensure_space(self, c: canvas.Canvas, y: float, needed: float) -> float:
        if y - needed < MARGIN:
            return self._new_page(c)
        return y

    def _photo(self, data_uri: str) -> Optional[ImageReader]:
        if data_uri not in self._photo_cache:
            try:
                img = self.processor.export_photo(data_uri, self.photo_watermark, self.model.logo)
                self._photo_cache[data_uri] = ImageReader(img)
            except ImageDecodeError as e:
                LOGGER.warning("photo left out of PDF: %s", e.message)
                self._photo_cache[data_uri] = None
        return self._photo_cache[data_uri]

    def _draw_photo(self, c: canvas.Canvas, data_uri: str, x: float, y: float, w: float, h: float):
        reader = self._photo(data_uri)
        c.setFillColor(self.bg_soft)
        c.rect(x, y, w, h, fill=1, stroke=0)
        if reader is not None:
            c.drawImage(reader, x, y, width=w, height=h, preserveAspectRatio=True, anchor='c')

    def _draw_logo(self, c: canvas.Canvas, x: float, y: float, w: float, h: float):
        if not self.model.logo:
            return
        try:
            logo = self.processor.load_image(self.model.logo)
        except ImageDecodeError as e:
            LOGGER.warning("logo left out of PDF: %s", e.message)
            return
        c.drawImage(ImageReader(logo), x, y, width=w, height=h, preserveAspectRatio=True, anchor='ne', mask='auto')

    def _heading(self, c: canvas.Canvas, y: float, text: str) -> float:
        y = self._ensure_space(c, y, 40)
        c.setFillColor(self.primary)
        c.rect(MARGIN, y - 4, 4, 16, fill=1, stroke=0)
        c.setFillColor(self.accent)
        c.setFont(FONT_BOLD, 13)
        c.drawString(MARGIN + 12, y, text)
        return y - 22

    def _paragraphs(self, c: canvas.Canvas, y: float, paragraphs: Sequence[str], size: float = 10,
                    color: str = TEXT_COLOR) -> float:
        width = self.width - 2 * MARGIN
        leading = size * 1.4
        c.setFont(FONT, size)
        for paragraph in paragraphs:
            for line in simpleSplit(paragraph, FONT, size, width):
                y = self._ensure_space(c, y, leading)
                c.setFont(FONT, size)
                c.setFillColor(HexColor(color))
                c.drawString(MARGIN, y, line)
                y -= leading
            y -= leading * 0.4
        return y

    # Pages

    def _cover_page(self, c: canvas.Canvas):
        m = self.model
        self._new_page(c, first=True)

        c.setFillColor(self.primary)
        c.rect(0, self.height - HEADER_H, self.width, HEADER_H, fill=1, stroke=0)
        c.setFillColor(HexColor('#ffffff'))
        c.setFont(FONT_BOLD, 24)
        title_lines = simpleSplit(m.title, FONT_BOLD, 24, self.width - 2 * MARGIN - 90)[:2]
        y = self.height - 48
        for line in title_lines:
            c.drawString(MARGIN, y, line)
            y -= 28
        if m.address:
            c.setFont(FONT, 13)
            c.drawString(MARGIN, self.height - HEADER_H + 16, m.address)
        self._draw_logo(c, self.width - MARGIN - 80, self.height - MARGIN - 40, 80, 40)

        photo_top = self.height - HEADER_H - 20
        if m.cover_photo:
            cover_h = 330
            self._draw_photo(c, m.cover_photo, MARGIN, photo_top - cover_h, self.width - 2 * MARGIN, cover_h)
            photo_top -= cover_h + 10

            if m.thumbnails:
                gap = 8
                thumb_w = (self.width - 2 * MARGIN - gap * 3) / 4
                thumb_h = thumb_w * 0.66
                for i, thumb in enumerate(m.thumbnails):
                    self._draw_photo(c, thumb, MARGIN + i * (thumb_w + gap), photo_top - thumb_h, thumb_w, thumb_h)
                photo_top -= thumb_h + 10

        # Key facts bar
        bar_h = 70
        bar_y = max(MARGIN, photo_top - bar_h - 10)
        c.setFillColor(self.bg_soft)
        c.rect(MARGIN, bar_y, self.width - 2 * MARGIN, bar_h, fill=1, stroke=0)
        cell_w = (self.width - 2 * MARGIN) / max(1, len(m.key_facts))
        for i, fact in enumerate(m.key_facts):
            cx = MARGIN + cell_w * (i + 0.5)
            c.setFillColor(self.primary)
            c.setFont(FONT_BOLD, 18)
            c.drawCentredString(cx, bar_y + 38, fact.value)
            c.setFillColor(HexColor(MUTED_COLOR))
            c.setFont(FONT, 10)
            c.drawCentredString(cx, bar_y + 18, fact.label)

    def _details_pages(self, c: canvas.Canvas):
        m = self.model
        y = self._new_page(c)

        label_w = 200
        row_h = 18
        for table in m.tables:
            if not table.rows:
                continue
            y = self._heading(c, y, table.title)
            for i, row in enumerate(table.rows):
                y = self._ensure_space(c, y, row_h)
                if i % 2 == 0:
                    c.setFillColor(self.bg_soft)
                    c.rect(MARGIN, y - 5, self.width - 2 * MARGIN, row_h, fill=1, stroke=0)
                c.setFillColor(HexColor(MUTED_COLOR))
                c.setFont(FONT, 10)
                c.drawString(MARGIN + 6, y, row.label)
                c.setFillColor(HexColor(TEXT_COLOR))
                c.setFont(FONT_BOLD, 10)
                c.drawString(MARGIN + label_w, y, row.value)
                y -= row_h
            y -= 12

        if m.location:
            y = self._heading(c, y, self.t('sections.location'))
            y = self._paragraphs(c, y, [m.location['text']])
            if m.location.get('address'):
                y = self._paragraphs(c, y, [m.location['address']], size=9, color=MUTED_COLOR)

        for block in m.descriptions:
            y = self._heading(c, y, block.title)
            y = self._paragraphs(c, y, block.paragraphs)

        if m.contact:
            y = self._heading(c, y, self.t('sections.contact'))
            lines = [m.contact[key] for key in ('firma', 'name') if key in m.contact]
            if 'email' in m.contact:
                lines.append(f"E-Mail: {m.contact['email']}")
            if 'tel' in m.contact:
                lines.append(f"Tel: {m.contact['tel']}")
            if 'web' in m.contact:
                lines.append(f"Web: {m.contact['web']}")
            y = self._paragraphs(c, y, lines)

        y = self._heading(c, y, self.t('sections.notices'))
        self._paragraphs(c, y, m.notices, size=7.5, color='#555555')

    def _gallery_pages(self, c: canvas.Canvas):
        m = self.model
        if not m.show_gallery or not m.gallery:
            return

        gap = 12
        cell_w = (self.width - 2 * MARGIN - gap) / 2
        cell_h = (self.height - 2 * MARGIN - 40 - gap) / 2
        for start in range(0, len(m.gallery), GALLERY_PER_PAGE):
            y = self._new_page(c)
            self._heading(c, y, self.t('sections.gallery'))
            top = y - 30
            for offset, photo in enumerate(m.gallery[start:start + GALLERY_PER_PAGE]):
                col, row = offset % 2, offset // 2
                x = MARGIN + col * (cell_w + gap)
                py = top - (row + 1) * cell_h - row * gap
                self._draw_photo(c, photo, x, py, cell_w, cell_h)

    def render(self) -> bytes:
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=A4)
        c.setTitle(self.model.title)
        contact = self.model.contact or {}
        c.setAuthor(contact.get('firma') or contact.get('name', ''))

        self._cover_page(c)
        self._details_pages(c)
        self._gallery_pages(c)

        c.save()
        return buffer.getvalue()


def render_pdf(model: RenderModel, processor: ImageProcessor = None) -> bytes:
    """Render a RenderModel to PDF bytes"""
    return ExposePdfRenderer(model, processor).render()
