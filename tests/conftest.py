from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from cardforge.models.card import CardRecord
from cardforge.models.failure import KnownError
from cardforge.surface.base import (
    CollectorField,
    FrameGroup,
    FramePlacement,
    Half,
    Tab,
    TextField,
)


class FakeSurface:
    """
    In-memory card creator that records every call.

    `failures` maps a method name to an exception raised the next time the
    method is called. wait_for_download writes a small file at the
    destination so resume checks see it on the next run.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[str, KnownError] = {}
        self.resets = 0

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        error = self.failures.pop(name, None)
        if error is not None:
            raise error

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    async def start(self) -> None:
        self._record("start")

    async def close(self) -> None:
        self._record("close")

    async def select_tab(self, tab: Tab, timeout: float) -> None:
        self._record("select_tab", tab)

    async def select_frame_group(self, group: FrameGroup) -> None:
        self._record("select_frame_group", group)

    async def add_frame(self, option: int, placement: FramePlacement) -> None:
        self._record("add_frame", option, placement)

    async def set_text(
        self,
        field: TextField,
        value: str,
        half: Half = Half.TOP,
        clear: bool = False,
    ) -> None:
        self._record("set_text", field, value, half, clear)

    async def upload_art(self, path: Path) -> None:
        self._record("upload_art", path)

    async def set_symbol(self, url: str) -> None:
        self._record("set_symbol", url)

    async def wait_for_symbol(self, timeout: float) -> None:
        self._record("wait_for_symbol", timeout)

    async def set_collector_field(self, field: CollectorField, value: str) -> None:
        self._record("set_collector_field", field, value)

    async def trigger_download(self) -> None:
        self._record("trigger_download")

    async def wait_for_download(self, destination: Path, timeout: float) -> Path:
        self._record("wait_for_download", destination, timeout)
        destination.write_bytes(b"png")
        return destination

    async def reset(self, timeout: float) -> None:
        self.resets += 1
        self._record("reset")


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def make_record() -> Callable[..., CardRecord]:
    """Factory for complete records with sensible defaults."""

    def _make(number: int, name: str | None = None, **overrides: Any) -> CardRecord:
        fields: dict[str, Any] = {
            "number": number,
            "name": name if name is not None else f"Card {number}",
            "rarity": "C",
            "color": "Red",
            "type_line": "Instant",
        }
        fields.update(overrides)
        return CardRecord(**fields)

    return _make


@pytest.fixture
def sample_card_sheet() -> str:
    """Card sheet CSV with a template row, a creature and a split card."""
    return (
        "#,Name,Rarity,Color,Cost,Type,Text,Power,Toughness,Flavor,Split,Fuse\n"
        ",,,,,,,,,,,\n"
        "1,Goblin Guide,R,Red,{R},Creature — Goblin Scout,Haste,2,2,Quick.,,\n"
        "2,Fire,U,Red,{1}{R},Instant,Fire deals 2 damage.,,,,fire-ice,\n"
        "3,Ice,U,Blue,{1}{U},Instant,Tap target permanent.\\nDraw a card.,,,,fire-ice,\n"
        "4,Azorius Signet,C,White/Blue,{2},Artifact,,,,,,\n"
    )
