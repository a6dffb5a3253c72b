from pathlib import Path

import pytest

from cardforge.models.failure import FatalIOError, RecordSkipped
from cardforge.parsers.card_sheet import load_card_sheet, parse_card_sheet, parse_row


class TestParseCardSheet:
    def test_skips_template_rows(self, sample_card_sheet: str) -> None:
        """Rows without name, color and type are dropped."""
        records = parse_card_sheet(sample_card_sheet)
        assert [r.number for r in records] == [1, 2, 3, 4]

    def test_reads_all_columns(self, sample_card_sheet: str) -> None:
        """Every column lands in the matching field."""
        guide = parse_card_sheet(sample_card_sheet)[0]

        assert guide.name == "Goblin Guide"
        assert guide.rarity == "R"
        assert guide.color == "Red"
        assert guide.cost == "{R}"
        assert guide.type_line == "Creature — Goblin Scout"
        assert guide.text == "Haste"
        assert guide.power == "2"
        assert guide.toughness == "2"
        assert guide.flavor == "Quick."

    def test_blank_cells_are_none(self, sample_card_sheet: str) -> None:
        """Empty optional cells become None."""
        signet = parse_card_sheet(sample_card_sheet)[3]

        assert signet.text is None
        assert signet.power is None
        assert signet.split_key is None

    def test_keeps_escaped_newlines(self, sample_card_sheet: str) -> None:
        """The literal escape is kept for the render step to decode."""
        ice = parse_card_sheet(sample_card_sheet)[2]
        assert ice.text == "Tap target permanent.\\nDraw a card."

    def test_reads_split_keys(self, sample_card_sheet: str) -> None:
        """Split group keys are read from the Split column."""
        records = parse_card_sheet(sample_card_sheet)
        assert [r.split_key for r in records] == [None, "fire-ice", "fire-ice", None]

    def test_missing_columns_is_fatal(self) -> None:
        """A header without required columns aborts the run."""
        with pytest.raises(FatalIOError, match="missing required columns"):
            parse_card_sheet("#,Name,Rarity\n1,Bolt,C\n")

    def test_empty_sheet_is_fatal(self) -> None:
        """An empty file aborts the run."""
        with pytest.raises(FatalIOError):
            parse_card_sheet("")

    def test_duplicate_numbers_are_fatal(self) -> None:
        """Sequence numbers must be unique."""
        text = "#,Name,Color,Type\n1,Bolt,Red,Instant\n1,Shock,Red,Instant\n"
        with pytest.raises(FatalIOError, match="Duplicate sequence number #1"):
            parse_card_sheet(text)

    def test_invalid_number_is_fatal(self) -> None:
        """A complete row needs an integer sequence number."""
        text = "#,Name,Color,Type\nabc,Bolt,Red,Instant\n"
        with pytest.raises(FatalIOError, match="invalid sequence number"):
            parse_card_sheet(text)

    def test_float_numbers_are_typed(self) -> None:
        """Spreadsheet exports of "3.0" are read as 3."""
        text = "#,Name,Color,Type,Power,Toughness\n3.0,Bear,Green,Creature,2.0,2\n"
        record = parse_card_sheet(text)[0]

        assert record.number == 3
        assert record.power == "2"

    def test_half_power_toughness_is_dropped(self) -> None:
        """Power without toughness is treated as no power/toughness."""
        text = "#,Name,Color,Type,Power,Toughness\n1,Odd,Green,Creature,2,\n"
        record = parse_card_sheet(text)[0]

        assert record.power is None
        assert record.toughness is None


class TestParseRow:
    def test_missing_name_raises_skip(self) -> None:
        """Template rows raise RecordSkipped naming the missing column."""
        with pytest.raises(RecordSkipped) as exc_info:
            parse_row({"#": "1", "Name": "", "Color": "Red", "Type": "Instant"}, 2)

        assert exc_info.value.missing == "Name"

    def test_rarity_is_uppercased(self) -> None:
        """Rarity letters are normalized to upper case."""
        record = parse_row({"#": "1", "Name": "Bolt", "Color": "Red", "Type": "Instant", "Rarity": "u"}, 2)
        assert record.rarity == "U"


class TestLoadCardSheet:
    def test_loads_file(self, tmp_path: Path, sample_card_sheet: str) -> None:
        """Card sheets are read from disk."""
        path = tmp_path / "cards.csv"
        path.write_text(sample_card_sheet, encoding="utf-8")

        assert len(load_card_sheet(path)) == 4

    def test_handles_byte_order_mark(self, tmp_path: Path) -> None:
        """Spreadsheet exports with a BOM keep the "#" header."""
        path = tmp_path / "cards.csv"
        path.write_text("\ufeff#,Name,Color,Type\n1,Bolt,Red,Instant\n", encoding="utf-8")

        assert load_card_sheet(path)[0].number == 1

    def test_missing_file_is_fatal(self, tmp_path: Path) -> None:
        """A missing input path aborts the run."""
        with pytest.raises(FatalIOError, match="does not exist"):
            load_card_sheet(tmp_path / "nope.csv")
