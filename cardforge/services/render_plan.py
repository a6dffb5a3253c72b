"""
Render plans — what to tell the card creator for one unit.

A plan is built before the creator is touched, so every lookup that can
fail (unknown color, unknown rarity) fails here and the unit is skipped
without leaving half-entered state behind.
"""

from dataclasses import dataclass
from pathlib import Path

from cardforge.config import ART_EXTENSIONS
from cardforge.models.card import CardRecord, RenderUnit
from cardforge.services.frame_tables import (
    SPLIT_DUAL_COLOR_FRAME,
    frame_option,
    frame_options,
    power_toughness_option,
    rarity_symbol,
)
from cardforge.surface.base import (
    CollectorField,
    FrameGroup,
    FramePlacement,
    Half,
    TextField,
)

# Literal two-character escape used for line breaks in the sheet
ESCAPED_NEWLINE = "\\n"

# Creator markup separating rules text from flavor text
FLAVOR_MARKER = "{flavor}"


@dataclass(frozen=True, slots=True)
class FrameStep:
    option: int
    placement: FramePlacement


@dataclass(frozen=True, slots=True)
class TextEntry:
    field: TextField
    value: str
    half: Half = Half.TOP
    clear: bool = False


@dataclass(frozen=True, slots=True)
class RenderPlan:
    """Ordered instructions for rendering one unit."""

    unit: RenderUnit
    frame_group: FrameGroup
    frames: tuple[FrameStep, ...]
    text: tuple[TextEntry, ...]
    art_path: Path | None
    symbol_url: str
    collector: tuple[tuple[CollectorField, str], ...]


def decode_rules_text(text: str) -> str:
    """Turn literal "\\n" escapes into real line breaks."""
    return text.replace(ESCAPED_NEWLINE, "\n")


def compose_rules_text(record: CardRecord) -> str | None:
    """
    Rules text as typed into the creator.

    Flavor text always follows the rules text, after the flavor marker.
    """
    rules = decode_rules_text(record.text) if record.text else ""
    if record.flavor:
        rules = f"{rules}{FLAVOR_MARKER}{decode_rules_text(record.flavor)}"
    return rules or None


def _single_frames(record: CardRecord) -> list[FrameStep]:
    options = frame_options(record)
    steps = [FrameStep(options[0], FramePlacement.FULL)]
    if record.is_dual_color:
        steps.append(FrameStep(options[1], FramePlacement.RIGHT_HALF))
    if record.has_power_toughness:
        steps.append(FrameStep(power_toughness_option(record), FramePlacement.FULL))
    return steps


def _split_frames(top: CardRecord, bottom: CardRecord) -> list[FrameStep]:
    steps: list[FrameStep] = []
    for record, placement in ((top, FramePlacement.TOP_MASK), (bottom, FramePlacement.BOTTOM_MASK)):
        options = frame_options(record)
        if record.is_dual_color:
            option = frame_option(SPLIT_DUAL_COLOR_FRAME, record)
        else:
            option = options[0]
        steps.append(FrameStep(option, placement))
    if top.has_power_toughness:
        steps.append(FrameStep(power_toughness_option(top), FramePlacement.TOP_MASK))
    return steps


def frame_steps(unit: RenderUnit) -> tuple[FrameStep, ...]:
    """Frame picks for the unit, raising MappingError on unknown colors."""
    if unit.bottom is None:
        return tuple(_single_frames(unit.top))
    return tuple(_split_frames(unit.top, unit.bottom))


def text_entries(record: CardRecord, half: Half, include_power_toughness: bool) -> list[TextEntry]:
    """Mana cost, title, type, rules and power/toughness for one half."""
    entries: list[TextEntry] = []
    if record.cost:
        entries.append(TextEntry(TextField.MANA_COST, record.cost, half))
    # Title is overwritten, never appended to
    entries.append(TextEntry(TextField.TITLE, record.name, half, clear=True))
    entries.append(TextEntry(TextField.TYPE, record.type_line, half))
    rules = compose_rules_text(record)
    if rules:
        entries.append(TextEntry(TextField.RULES, rules, half))
    if include_power_toughness and record.has_power_toughness:
        entries.append(
            TextEntry(TextField.POWER_TOUGHNESS, f"{record.power}/{record.toughness}", half)
        )
    return entries


def find_art(number: int, art_dir: Path) -> Path | None:
    """Art file for a sequence number, or None when the card has no art."""
    for extension in ART_EXTENSIONS:
        candidate = art_dir / f"{number}{extension}"
        if candidate.is_file():
            return candidate
    return None


def build_render_plan(unit: RenderUnit, art_dir: Path, artist_credit: str) -> RenderPlan:
    """
    Build the render plan for a unit.

    Raises:
        MappingError: If a color or the rarity has no creator option
    """
    frames = frame_steps(unit)
    symbol_url = rarity_symbol(unit.top)

    text = text_entries(unit.top, Half.TOP, include_power_toughness=True)
    if unit.bottom is not None:
        text.extend(text_entries(unit.bottom, Half.BOTTOM, include_power_toughness=False))

    return RenderPlan(
        unit=unit,
        frame_group=FrameGroup.SPLIT if unit.is_paired else FrameGroup.STANDARD,
        frames=frames,
        text=tuple(text),
        art_path=find_art(unit.number, art_dir),
        symbol_url=symbol_url,
        collector=(
            (CollectorField.ARTIST, artist_credit),
            (CollectorField.NUMBER, str(unit.number)),
            (CollectorField.RARITY, unit.top.rarity),
        ),
    )
