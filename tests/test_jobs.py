"""Tests for command-line jobs."""

import logging
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from PIL import Image

from cardforge.jobs.build_sheets import collect_card_images, run_build_sheets
from cardforge.jobs.generate_cards import main as generate_main
from cardforge.jobs.generate_cards import run_generate
from cardforge.jobs.paper_size import run_paper_size
from cardforge.models.failure import FatalIOError, RemoteSurfaceTimeout, UnitStatus
from cardforge.services.sheet_packer import build_packing_plan


def _surface_session(surface) -> MagicMock:
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=surface)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


class TestRunGenerate:
    @pytest.mark.asyncio
    async def test_renders_sheet(self, tmp_path: Path, sample_card_sheet: str, fake_surface) -> None:
        """Every unit in the sheet is rendered through one session."""
        sheet = tmp_path / "cards.csv"
        sheet.write_text(sample_card_sheet, encoding="utf-8")
        output_dir = tmp_path / "out"

        with (
            patch(
                "cardforge.jobs.generate_cards.check_surface_available",
                new_callable=AsyncMock,
            ) as mock_check,
            patch(
                "cardforge.jobs.generate_cards.ConjurerSurface",
                return_value=_surface_session(fake_surface),
            ),
        ):
            report = await run_generate(sheet, output_dir, "http://creator.test")

        mock_check.assert_awaited_once()
        assert [o.name for o in report.outcomes] == ["Goblin Guide", "Fire // Ice", "Azorius Signet"]
        assert all(o.status == UnitStatus.COMPLETED for o in report.outcomes)
        assert (output_dir / "Fire __ Ice.png").exists()

    @pytest.mark.asyncio
    async def test_unreachable_creator_stops_before_session(self, tmp_path: Path, sample_card_sheet: str) -> None:
        """No browser is started when the creator is down."""
        sheet = tmp_path / "cards.csv"
        sheet.write_text(sample_card_sheet, encoding="utf-8")

        with (
            patch(
                "cardforge.jobs.generate_cards.check_surface_available",
                new_callable=AsyncMock,
                side_effect=FatalIOError("Card creator at http://creator.test is unreachable"),
            ),
            patch("cardforge.jobs.generate_cards.ConjurerSurface") as mock_surface,
        ):
            with pytest.raises(FatalIOError):
                await run_generate(sheet, tmp_path / "out", "http://creator.test")

        mock_surface.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_sheet(self, tmp_path: Path) -> None:
        with pytest.raises(FatalIOError, match="does not exist"):
            await run_generate(tmp_path / "missing.csv", tmp_path / "out", "http://creator.test")

    def test_main_exits_on_fatal_error(self, tmp_path: Path) -> None:
        """Fatal errors end the CLI with a non-zero status."""
        argv = ["generate-cards", str(tmp_path / "missing.csv")]

        with patch("sys.argv", argv), pytest.raises(SystemExit) as exc_info:
            generate_main()

        assert exc_info.value.code == 1

    def test_main_exits_when_session_cannot_start(
        self, tmp_path: Path, sample_card_sheet: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A creator session that never loads ends the CLI with a logged error."""
        sheet = tmp_path / "cards.csv"
        sheet.write_text(sample_card_sheet, encoding="utf-8")
        session = MagicMock()
        session.__aenter__ = AsyncMock(side_effect=RemoteSurfaceTimeout("card creator to load", 10.0))
        session.__aexit__ = AsyncMock(return_value=None)
        argv = ["generate-cards", str(sheet), "--output-dir", str(tmp_path / "out")]

        with (
            patch("cardforge.jobs.generate_cards.check_surface_available", new_callable=AsyncMock),
            patch("cardforge.jobs.generate_cards.ConjurerSurface", return_value=session),
            patch("sys.argv", argv),
            caplog.at_level(logging.ERROR),
            pytest.raises(SystemExit) as exc_info,
        ):
            generate_main()

        assert exc_info.value.code == 1
        assert "Timed out after 10s waiting for card creator to load" in caplog.text


class TestBuildSheets:
    def test_collects_png_in_name_order(self, tmp_path: Path) -> None:
        """Only PNG card images are collected, sorted by name."""
        for name in ("b.png", "A.png", "notes.txt", "c.PNG"):
            (tmp_path / name).write_bytes(b"x")

        images = collect_card_images(tmp_path)
        assert [p.name for p in images] == ["A.png", "b.png", "c.PNG"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FatalIOError, match="does not exist"):
            collect_card_images(tmp_path / "nope")

    def test_empty_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FatalIOError, match="No card images"):
            collect_card_images(tmp_path)

    def test_builds_pages(self, tmp_path: Path) -> None:
        """Rendered cards are tiled into numbered pages."""
        input_dir = tmp_path / "cards"
        input_dir.mkdir()
        for number in range(5):
            Image.new("RGBA", (25, 35), (0, 0, 200, 255)).save(input_dir / f"{number}.png")
        plan = build_packing_plan(dpi=10, columns=2, rows=2, chunk_size=4)

        with patch("cardforge.jobs.build_sheets.build_packing_plan", return_value=plan):
            pages = run_build_sheets(input_dir, tmp_path / "sheets")

        assert [p.name for p in pages] == ["page-0.png", "page-1.png"]


class TestPaperSize:
    def test_reports_best_layout(self) -> None:
        """Fifty cards, fifteen copies each, on the best paper."""
        layout, sheets = run_paper_size(50, 15)

        assert (layout.width, layout.height) == (13, 19)
        assert sheets == 38
