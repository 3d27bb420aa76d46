"""
Wallpaper Generator - hour grid edition
Draws one column per date with 24 hour cells, colored by task status.
"""
import glob
import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .config import DEFAULT_SETTINGS, STATUS_COLORS, get_theme, output_dir
from .dates import DateKey
from .errors import StorageFailure
from .models import Task
from .status import slot_status
from .storage import TaskStore, group_by_hour

logger = logging.getLogger(__name__)

HOURS = 24
CELL_GAP = 1
CELL_PADDING = 4


# ============================================================================
# RASTER BUFFER
# ============================================================================

class RasterImage:
    """RGB pixel buffer, shape (height, width, 3)"""

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"expected an RGB buffer, got shape {pixels.shape}")
        self.pixels = np.ascontiguousarray(pixels, dtype=np.uint8)

    @property
    def size(self) -> Tuple[int, int]:
        height, width = self.pixels.shape[:2]
        return width, height

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels, "RGB")

    def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        r, g, b = self.pixels[y, x]
        return int(r), int(g), int(b)

    def encode(self, fmt: str = "PNG") -> bytes:
        """Encode to a standard image format"""
        buf = BytesIO()
        self.to_pil().save(buf, fmt)
        return buf.getvalue()


class ImageSink(Protocol):
    """Anything that can persist a rendered image at a path"""

    def write(self, image: RasterImage, path: Path) -> Path:
        ...


class FileImageSink:
    """Writes PNG files to the local filesystem"""

    def write(self, image: RasterImage, path: Path) -> Path:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(image.encode("PNG"))
        except OSError as e:
            raise StorageFailure(f"failed to write image to {path}: {e}") from e
        return path


# ============================================================================
# COLOR & FONT UTILITIES
# ============================================================================

def calculate_luminance(color: tuple) -> float:
    """Calculate perceived luminance (0-1)."""
    r, g, b = color[:3]
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255.0


def get_contrast_color(bg_color: tuple) -> tuple:
    """Return white or dark gray based on background luminance."""
    lum = calculate_luminance(bg_color)
    return (255, 255, 255) if lum < 0.55 else (40, 40, 45)


def get_font(size: int, name: Optional[str] = None) -> ImageFont.ImageFont:
    """Get a configured or system font with fallback."""
    fonts = ["DejaVuSans.ttf", "Arial.ttf", "Helvetica.ttc", "segoeui.ttf", "Calibri.ttf"]
    if name:
        fonts.insert(0, name)

    for candidate in fonts:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default(size)


def fit_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> str:
    """Shorten text with a trailing '..' until it fits max_width."""
    if draw.textlength(text, font=font) <= max_width:
        return text
    while text and draw.textlength(text + "..", font=font) > max_width:
        text = text[:-1]
    return text + ".." if text else ""


def draw_text_shadow(draw, pos, text, font, fill, shadow_color=(0, 0, 0), offset=1):
    """Draw text with shadow for readability."""
    x, y = pos
    draw.text((x + offset, y + offset), text, font=font, fill=shadow_color)
    draw.text(pos, text, font=font, fill=fill)


# ============================================================================
# GRID RENDERER
# ============================================================================

class GridRenderer:
    """
    Lays out dates as columns and hours as rows.

    The header band along the top holds the date of each column; below it
    are 24 equal rows, 00:00 at the top. Leftover pixels from integer
    division go to the header and to the last column.
    """

    def __init__(self, width: int, height: int, theme: Dict,
                 font_size: int = 16, font_name: Optional[str] = None,
                 separator: str = "\n"):
        if width <= 0 or height < HOURS:
            raise ValueError(f"image must be at least 1x{HOURS} pixels, got {width}x{height}")
        self.width = width
        self.height = height
        self.theme = theme
        self.font_size = font_size
        self.font = get_font(font_size, font_name)
        self.header_size = int(font_size * 1.2)
        self.header_font = get_font(self.header_size, font_name)
        self.separator = separator

        self.line_height = font_size + 2
        self.cell_height = max((height - (font_size * 2 + 8)) // HOURS, 1)
        self.header_height = height - self.cell_height * HOURS

    @classmethod
    def from_settings(cls, settings: Optional[Dict] = None) -> "GridRenderer":
        settings = {**DEFAULT_SETTINGS, **(settings or {})}
        return cls(
            width=int(settings["width"]),
            height=int(settings["height"]),
            theme=get_theme(settings["theme"]),
            font_size=int(settings["font_size"]),
            font_name=settings["font"],
            separator=settings["separator"],
        )

    def column_bounds(self, column: int, columns: int) -> Tuple[int, int]:
        col_w = self.width // columns
        x1 = column * col_w
        x2 = self.width if column == columns - 1 else x1 + col_w
        return x1, x2

    def cell_box(self, column: int, columns: int, hour: int) -> Tuple[int, int, int, int]:
        """Pixel box (x1, y1, x2, y2) of an hour cell, gap excluded, x2/y2 exclusive"""
        x1, x2 = self.column_bounds(column, columns)
        y1 = self.header_height + hour * self.cell_height
        y2 = y1 + self.cell_height
        return x1 + CELL_GAP, y1 + CELL_GAP, max(x2 - CELL_GAP, x1 + CELL_GAP), max(y2 - CELL_GAP, y1 + CELL_GAP)

    def cell_label(self, hour: int, tasks: Sequence[Task]) -> List[str]:
        label = self.separator.join(task.description for task in tasks)
        lines = label.split("\n") if label else [""]
        lines[0] = f"{hour:02d}  {lines[0]}".rstrip()
        return lines

    def render(self, dates: Sequence[DateKey], tasks_by_date: Mapping[DateKey, Sequence[Task]],
               now: datetime) -> RasterImage:
        """
        Render the hour grid for dates.

        Args:
            dates: Columns, left to right
            tasks_by_date: Tasks per date in hour-then-index order
            now: Wall clock time used for statuses and the current hour outline

        Returns:
            The rendered image
        """
        canvas = np.empty((self.height, self.width, 3), dtype=np.uint8)
        canvas[:, :] = self.theme["grid_color"]
        canvas[:self.header_height, :] = self.theme["header_color"]

        columns = len(dates)
        cells = []
        for column, date in enumerate(dates):
            slots = group_by_hour(tasks_by_date.get(date, []))
            for hour in range(HOURS):
                tasks = slots.get(hour, [])
                status = slot_status(tasks, now)
                color = STATUS_COLORS[status.value] if status else self.theme["empty_color"]
                x1, y1, x2, y2 = self.cell_box(column, columns, hour)
                canvas[y1:y2, x1:x2] = color
                cells.append((column, hour, tasks, color))

        image = Image.fromarray(canvas, "RGB")
        draw = ImageDraw.Draw(image)

        for column, date in enumerate(dates):
            self._draw_header(draw, column, columns, date)

        for column, hour, tasks, color in cells:
            self._draw_label(draw, column, columns, hour, tasks, color)

        now_key = DateKey.from_date(now)
        if now_key in dates:
            x1, y1, x2, y2 = self.cell_box(dates.index(now_key), columns, now.hour)
            # cells of very narrow columns or short images can be empty
            if x2 - 1 >= x1 and y2 - 1 >= y1:
                draw.rectangle([x1, y1, x2 - 1, y2 - 1], outline=self.theme["accent"], width=2)

        return RasterImage(np.asarray(image))

    def _draw_header(self, draw, column, columns, date):
        x1, x2 = self.column_bounds(column, columns)
        text = fit_text(
            draw, f"{date.to_date():%a} {date.label()}", self.header_font, x2 - x1 - 2 * CELL_PADDING
        )
        if not text:
            return
        text_w = draw.textlength(text, font=self.header_font)
        pos = (x1 + (x2 - x1 - text_w) / 2, (self.header_height - self.header_size) / 2)
        draw_text_shadow(draw, pos, text, self.header_font, self.theme["text_color"])

    def _draw_label(self, draw, column, columns, hour, tasks, color):
        x1, y1, x2, y2 = self.cell_box(column, columns, hour)
        text_color = get_contrast_color(color) if tasks else self.theme["text_secondary"]
        max_w = x2 - x1 - 2 * CELL_PADDING
        max_lines = max((y2 - y1 - CELL_PADDING) // self.line_height, 1)

        lines = self.cell_label(hour, tasks)
        if len(lines) > max_lines:
            lines = lines[:max_lines]
            lines[-1] = lines[-1] + " .."

        y = y1 + max((y2 - y1 - self.line_height * len(lines)) // 2, 0)
        for line in lines:
            line = fit_text(draw, line, self.font, max_w)
            if line:
                draw.text((x1 + CELL_PADDING, y), line, font=self.font, fill=text_color)
            y += self.line_height


# ============================================================================
# MAIN GENERATOR
# ============================================================================

def default_output_path(data_dir: Path, now: datetime, settings: Optional[Dict] = None) -> Path:
    """Fresh file name per render, so wallpaper caches notice the change."""
    pattern = (settings or DEFAULT_SETTINGS).get("output_filename", DEFAULT_SETTINGS["output_filename"])
    name = pattern.format(timestamp=now.strftime("%Y-%m-%d-%H-%M-%S"))
    return output_dir(data_dir) / name


def prune_renders(data_dir: Path, keep: Path, settings: Optional[Dict] = None) -> List[Path]:
    """
    Delete earlier renders in the output folder, leaving keep.

    Only files whose names match the output_filename pattern are touched.

    Returns:
        Paths that were deleted
    """
    pattern = (settings or DEFAULT_SETTINGS).get("output_filename", DEFAULT_SETTINGS["output_filename"])
    wildcard = glob.escape(pattern.format(timestamp="\0")).replace("\0", "*")

    removed = []
    for path in sorted(output_dir(data_dir).glob(wildcard)):
        if path.name == keep.name or not path.is_file():
            continue
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Could not delete old render %s: %s", path, e)
            continue
        removed.append(path)
    if removed:
        logger.info("Deleted %d old render(s) from %s", len(removed), output_dir(data_dir))
    return removed


def generate_wallpaper(store: TaskStore, start: DateKey, count: int, now: datetime,
                       output_path: Path, settings: Optional[Dict] = None,
                       sink: Optional[ImageSink] = None) -> Path:
    """
    Render count days starting at start and hand the image to the sink.

    Returns:
        Path the sink wrote to
    """
    days = store.tasks_for_range(start, count)
    dates = [date for date, _ in days]
    image = GridRenderer.from_settings(settings).render(dates, dict(days), now)
    return (sink or FileImageSink()).write(image, output_path)
