"""
Print-Sheet Packer — paper selection and sheet tiling.

Two independent pieces:
- Paper selection picks the candidate paper that fits the most bled cards.
- Sheet tiling composites rendered card images into fixed-grid pages.

Every card is surrounded by bleed on all four sides, so two neighbouring
cards are separated by twice the bleed.

INVARIANTS:
- Ties between candidate papers go to the first listed
- Pages are numbered from zero in chunk order, regardless of which chunk
  finishes compositing first
- A final partial chunk still produces a full-size page, unused cells blank
"""

import logging
import math
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TypeVar

from PIL import Image

from cardforge.config import DEFAULT_PAPER_CANDIDATES, settings
from cardforge.models.layout import PackingPlan, PaperLayout

logger = logging.getLogger(__name__)

T = TypeVar("T")

PAGE_BACKGROUND = "white"
PAGE_PREFIX = "page-"
PAGE_EXTENSION = ".png"


# =============================================================================
# PAPER SELECTION
# =============================================================================


def bleed_card_size(card_size: tuple[float, float], bleed: float) -> tuple[float, float]:
    """Card footprint with bleed added on every side."""
    width, height = card_size
    return width + 2 * bleed, height + 2 * bleed


def evaluate_paper(
    paper: tuple[float, float],
    card_size: tuple[float, float],
    bleed: float,
) -> PaperLayout:
    """How many whole bled cards fit on one paper orientation."""
    card_width, card_height = bleed_card_size(card_size, bleed)
    if card_width <= 0 or card_height <= 0:
        raise ValueError(f"Card size must be positive, got {card_width}x{card_height}")
    width, height = paper
    return PaperLayout(
        width=width,
        height=height,
        card_width=card_width,
        card_height=card_height,
        columns=math.floor(width / card_width),
        rows=math.floor(height / card_height),
    )


def select_paper(
    candidates: Sequence[tuple[float, float]] = DEFAULT_PAPER_CANDIDATES,
    card_size: tuple[float, float] | None = None,
    bleed: float | None = None,
) -> PaperLayout:
    """
    Pick the paper holding the most cards per sheet.

    Args:
        candidates: Paper sizes as (width, height); list each orientation
        card_size: Card size without bleed, defaults to settings
        bleed: Bleed on each side, defaults to settings

    Returns:
        Layout of the winning paper; the first candidate wins a tie
    """
    if not candidates:
        raise ValueError("No paper candidates given")
    if card_size is None:
        card_size = (settings.card_width, settings.card_height)
    if bleed is None:
        bleed = settings.bleed

    layouts = [evaluate_paper(paper, card_size, bleed) for paper in candidates]
    for layout in layouts:
        logger.debug(
            "%gx%g fits %dx%d = %d cards",
            layout.width,
            layout.height,
            layout.columns,
            layout.rows,
            layout.cards_per_sheet,
        )
    # max() keeps the first of equal layouts
    return max(layouts, key=lambda layout: layout.cards_per_sheet)


def sheets_needed(total_copies: int, cards_per_sheet: int) -> int:
    """Sheets required to print `total_copies` cards at `cards_per_sheet`."""
    if cards_per_sheet <= 0:
        raise ValueError("cards_per_sheet must be positive")
    return math.ceil(total_copies / cards_per_sheet)


# =============================================================================
# SHEET TILING
# =============================================================================


def build_packing_plan(
    dpi: int | None = None,
    card_size: tuple[float, float] | None = None,
    bleed: float | None = None,
    columns: int | None = None,
    rows: int | None = None,
    chunk_size: int | None = None,
) -> PackingPlan:
    """
    Pixel geometry for print sheets.

    Card pixels are ceil(dpi × size) per axis. The sheet is the grid of
    card-plus-bleed cells, rounded up to whole pixels.

    Raises:
        ValueError: If the grid is empty or a chunk exceeds one page
    """
    dpi = dpi or settings.dpi
    card_width, card_height = card_size or (settings.card_width, settings.card_height)
    bleed = settings.bleed if bleed is None else bleed
    columns = columns or settings.sheet_columns
    rows = rows or settings.sheet_rows
    chunk_size = chunk_size or settings.sheet_chunk_size

    if columns <= 0 or rows <= 0:
        raise ValueError(f"Grid must have at least one cell, got {columns}x{rows}")
    if chunk_size > columns * rows:
        raise ValueError(
            f"Chunk of {chunk_size} cards does not fit a {columns}x{rows} sheet"
        )

    card_px_width = math.ceil(dpi * card_width)
    card_px_height = math.ceil(dpi * card_height)
    bleed_px = dpi * bleed

    return PackingPlan(
        dpi=dpi,
        card_px_width=card_px_width,
        card_px_height=card_px_height,
        bleed_px=bleed_px,
        columns=columns,
        rows=rows,
        sheet_px_width=math.ceil(columns * (card_px_width + 2 * bleed_px)),
        sheet_px_height=math.ceil(rows * (card_px_height + 2 * bleed_px)),
        chunk_size=chunk_size,
    )


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive chunks of `size`, the last may be short."""
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def page_path(output_dir: Path, page_number: int) -> Path:
    return output_dir / f"{PAGE_PREFIX}{page_number}{PAGE_EXTENSION}"


def compose_sheet(image_paths: Sequence[Path], plan: PackingPlan, destination: Path) -> Path:
    """
    Composite card images onto one sheet and save it.

    Images are resized to the plan's card pixels and placed row by row.
    """
    if len(image_paths) > plan.cells:
        raise ValueError(f"{len(image_paths)} images do not fit {plan.cells} cells")

    sheet = Image.new("RGB", (plan.sheet_px_width, plan.sheet_px_height), PAGE_BACKGROUND)
    card_size = (plan.card_px_width, plan.card_px_height)

    for index, image_path in enumerate(image_paths):
        with Image.open(image_path) as card:
            card = card.convert("RGBA")
            if card.size != card_size:
                card = card.resize(card_size, Image.Resampling.LANCZOS)
            # Alpha as mask keeps rounded corners on the page background
            sheet.paste(card, plan.cell_origin(index), card)

    sheet.save(destination, dpi=(plan.dpi, plan.dpi))
    return destination


def build_sheets(
    image_paths: Sequence[Path],
    plan: PackingPlan | None = None,
    output_dir: Path | None = None,
    max_workers: int | None = None,
) -> list[Path]:
    """
    Tile rendered card images into print sheets.

    Args:
        image_paths: Rendered card images, in print order
        plan: Sheet geometry, defaults to build_packing_plan()
        output_dir: Where pages are written, defaults to settings
        max_workers: Chunks composited in parallel

    Returns:
        Page paths in page order (page-0, page-1, ...)
    """
    plan = plan or build_packing_plan()
    output_dir = output_dir or settings.sheets_dir
    max_workers = max_workers or settings.sheet_workers
    output_dir.mkdir(parents=True, exist_ok=True)

    chunks = chunked(image_paths, plan.chunk_size)
    destinations = [page_path(output_dir, number) for number in range(len(chunks))]
    logger.info(
        "Composing %d cards onto %d sheets of %dx%d px",
        len(image_paths),
        len(chunks),
        plan.sheet_px_width,
        plan.sheet_px_height,
    )

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        # map() yields in submission order, so page numbering is fixed up front
        pages = list(
            executor.map(
                lambda job: compose_sheet(job[0], plan, job[1]),
                zip(chunks, destinations),
            )
        )

    for page in pages:
        logger.info("Wrote %s", page)
    return pages
