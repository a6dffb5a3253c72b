"""
Parser for the card sheet CSV.

One row per card, with a header row naming the columns:

    #,Name,Rarity,Color,Cost,Type,Text,Power,Toughness,Flavor,Split,Fuse

Rows missing Name, Color or Type are template/separator rows and are
skipped silently. Anything else that cannot be read is fatal for the run.
"""

import csv
import logging
from io import StringIO
from pathlib import Path

from cardforge.models.card import CardRecord
from cardforge.models.failure import FatalIOError, RecordSkipped

logger = logging.getLogger(__name__)

NUMBER_COLUMN = "#"
REQUIRED_COLUMNS = ("Name", "Color", "Type")


def _cell(row: dict[str, str | None], column: str) -> str | None:
    """Stripped cell value, None when absent or blank."""
    value = row.get(column)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_number(value: str | None, row_index: int) -> int:
    if value is None:
        raise FatalIOError(f"Row {row_index} has no sequence number")
    try:
        number = float(value)
    except ValueError as e:
        raise FatalIOError(
            f"Row {row_index} has an invalid sequence number: {value!r}"
        ) from e
    if not number.is_integer():
        raise FatalIOError(f"Row {row_index} has an invalid sequence number: {value!r}")
    return int(number)


def _parse_stat(value: str | None) -> str | None:
    """Power/toughness as typed in the sheet ("3", "*", "1+*"); "3.0" becomes "3"."""
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError:
        return value
    return str(int(number)) if number.is_integer() else value


def parse_row(row: dict[str, str | None], row_index: int) -> CardRecord:
    """
    Build a CardRecord from one CSV row.

    Raises:
        RecordSkipped: If Name, Color or Type is missing
        FatalIOError: If the sequence number is missing or not an integer
    """
    for column in REQUIRED_COLUMNS:
        if _cell(row, column) is None:
            raise RecordSkipped(row_index, column)

    power = _parse_stat(_cell(row, "Power"))
    toughness = _parse_stat(_cell(row, "Toughness"))
    if power is None or toughness is None:
        power = toughness = None

    return CardRecord(
        number=_parse_number(_cell(row, NUMBER_COLUMN), row_index),
        name=_cell(row, "Name") or "",
        rarity=(_cell(row, "Rarity") or "").upper(),
        color=_cell(row, "Color") or "",
        type_line=_cell(row, "Type") or "",
        cost=_cell(row, "Cost"),
        text=_cell(row, "Text"),
        power=power,
        toughness=toughness,
        flavor=_cell(row, "Flavor"),
        split_key=_cell(row, "Split"),
        fuse_key=_cell(row, "Fuse"),
    )


def parse_card_sheet(text: str) -> list[CardRecord]:
    """
    Parse card sheet CSV text into records, in file order.

    Raises:
        FatalIOError: If the header lacks a required column, a row cannot be
            parsed, or two rows share a sequence number
    """
    reader = csv.DictReader(StringIO(text))

    if not reader.fieldnames:
        raise FatalIOError("Card sheet is empty")

    fieldnames = [name.strip() for name in reader.fieldnames]
    missing = [c for c in (NUMBER_COLUMN, *REQUIRED_COLUMNS) if c not in fieldnames]
    if missing:
        raise FatalIOError(
            "Card sheet is missing required columns",
            detail=", ".join(missing),
        )
    reader.fieldnames = fieldnames

    records: list[CardRecord] = []
    seen_numbers: set[int] = set()

    try:
        # Row 1 is the header
        for row_index, row in enumerate(reader, start=2):
            if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
                continue
            try:
                record = parse_row(row, row_index)
            except RecordSkipped as e:
                logger.debug("%s", e.message)
                continue

            if record.number in seen_numbers:
                raise FatalIOError(f"Duplicate sequence number #{record.number} on row {row_index}")
            seen_numbers.add(record.number)
            records.append(record)
    except csv.Error as e:
        raise FatalIOError("Failed to parse card sheet", detail=str(e)) from e

    return records


def load_card_sheet(path: Path) -> list[CardRecord]:
    """
    Load and parse a card sheet file.

    Raises:
        FatalIOError: If the file is missing, unreadable or unparseable
    """
    if not path.exists():
        raise FatalIOError(f"Path {path} does not exist")

    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise FatalIOError(f"Failed to read {path}", detail=str(e)) from e

    records = parse_card_sheet(text)
    logger.info("Loaded %d cards from %s", len(records), path)
    return records
