"""
Remote card creator interface.

The orchestrator speaks in semantic controls (tabs, text fields, frame
placements). Implementations translate them into clicks and keystrokes
against a concrete creator and are responsible for turning their own
timeouts into RemoteSurfaceTimeout and canceled exports into
DownloadCanceled.

Every call is awaited to completion before the next one is issued; the
creator holds one card in progress at a time.
"""

from enum import Enum
from pathlib import Path
from typing import Protocol


class Tab(int, Enum):
    """Creator menu tabs, valued by their position in the tab bar."""

    FRAME = 1
    TEXT = 2
    ART = 3
    SET_SYMBOL = 4
    COLLECTOR = 6


class FrameGroup(str, Enum):
    STANDARD = "standard"
    SPLIT = "split"


class FramePlacement(str, Enum):
    """Where an added frame image lands on the card."""

    FULL = "full"
    RIGHT_HALF = "right_half"
    TOP_MASK = "top_mask"
    BOTTOM_MASK = "bottom_mask"


class Half(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"


class TextField(int, Enum):
    """Text options, valued by their position in the top half's field list."""

    MANA_COST = 1
    TITLE = 2
    TYPE = 3
    RULES = 4
    POWER_TOUGHNESS = 5


class CollectorField(str, Enum):
    ARTIST = "artist"
    NUMBER = "number"
    RARITY = "rarity"


class RenderSurface(Protocol):
    """One live session of the card creator."""

    async def start(self) -> None: ...

    async def close(self) -> None: ...

    async def select_tab(self, tab: Tab, timeout: float) -> None:
        """Open a menu tab and wait until its panel is visible."""
        ...

    async def select_frame_group(self, group: FrameGroup) -> None: ...

    async def add_frame(self, option: int, placement: FramePlacement) -> None: ...

    async def set_text(
        self,
        field: TextField,
        value: str,
        half: Half = Half.TOP,
        clear: bool = False,
    ) -> None:
        """Type into a text field; `clear` empties the field first."""
        ...

    async def upload_art(self, path: Path) -> None: ...

    async def set_symbol(self, url: str) -> None: ...

    async def wait_for_symbol(self, timeout: float) -> None: ...

    async def set_collector_field(self, field: CollectorField, value: str) -> None:
        """Overwrite a collector info field."""
        ...

    async def trigger_download(self) -> None: ...

    async def wait_for_download(self, destination: Path, timeout: float) -> Path:
        """Block until the export triggered last is saved to `destination`."""
        ...

    async def reset(self, timeout: float) -> None:
        """Discard the card in progress and return to a fresh session."""
        ...
