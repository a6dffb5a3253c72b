import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PaperLayout:
    """
    A candidate paper size and how many bled cards fit on it.

    All lengths share one unit (inches by convention).
    """

    width: float
    height: float
    card_width: float
    card_height: float
    columns: int
    rows: int

    @property
    def cards_per_sheet(self) -> int:
        return self.columns * self.rows

    def sheets_needed(self, total_copies: int) -> int:
        """Sheets required to print `total_copies` cards."""
        if self.cards_per_sheet == 0:
            raise ValueError(f"A {self.width:g}x{self.height:g} sheet holds no cards")
        return math.ceil(total_copies / self.cards_per_sheet)


@dataclass(frozen=True, slots=True)
class PackingPlan:
    """
    Pixel geometry for tiling card images into print sheets.

    Each grid cell is the card plus bleed on every side; the card image is
    pasted inset by the bleed so neighbouring cards are separated by a
    gutter of twice the bleed.
    """

    dpi: int
    card_px_width: int
    card_px_height: int
    bleed_px: float
    columns: int
    rows: int
    sheet_px_width: int
    sheet_px_height: int
    chunk_size: int

    @property
    def cells(self) -> int:
        return self.columns * self.rows

    @property
    def cell_width(self) -> float:
        return self.card_px_width + 2 * self.bleed_px

    @property
    def cell_height(self) -> float:
        return self.card_px_height + 2 * self.bleed_px

    def cell_origin(self, index: int) -> tuple[int, int]:
        """Top-left pixel of the card image placed in cell `index` (row-major)."""
        if not 0 <= index < self.cells:
            raise IndexError(f"Cell {index} outside a {self.columns}x{self.rows} grid")
        row, col = divmod(index, self.columns)
        x = math.floor(col * self.cell_width + self.bleed_px)
        y = math.floor(row * self.cell_height + self.bleed_px)
        return x, y
