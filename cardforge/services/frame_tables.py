"""
Frame and set-symbol lookup tables for the card creator.

Frame options are 1-based positions in the creator's frame picker for the
standard frame pack. Tables are read-only; unknown tokens raise
MappingError rather than falling through to a default.
"""

from types import MappingProxyType

from cardforge.models.card import CardRecord
from cardforge.models.failure import MappingError

FRAME_OPTIONS = MappingProxyType(
    {
        "White": 1,
        "Blue": 2,
        "Black": 3,
        "Red": 4,
        "Green": 5,
        "Multi": 6,
        "Artifact": 7,
        "Land": 8,
        "Eldrazi": 9,
        "Vehicle": 10,
    }
)

POWER_TOUGHNESS_OPTIONS = MappingProxyType(
    {
        "White": 11,
        "Blue": 12,
        "Black": 13,
        "Red": 14,
        "Green": 15,
        "Multi": 16,
        "Artifact": 17,
        "Colorless": 18,
    }
)

RARITY_SYMBOLS = MappingProxyType(
    {
        "R": "https://i.imgur.com/3dvWenR.png",
        "U": "https://i.imgur.com/FMyNUww.png",
        "C": "https://i.imgur.com/CGciVRr.png",
    }
)

# Dual-color cards share one color-neutral power/toughness box
DUAL_COLOR_PT = "Colorless"

# A dual-color half of a split card uses the gold frame
SPLIT_DUAL_COLOR_FRAME = "Multi"


def frame_option(color: str, record: CardRecord) -> int:
    """Frame picker position for a single color token."""
    try:
        return FRAME_OPTIONS[color]
    except KeyError:
        raise MappingError("color", color, record.number, record.name) from None


def frame_options(record: CardRecord) -> tuple[int, ...]:
    """Frame positions for every color of a record, validating each token."""
    return tuple(frame_option(color, record) for color in record.colors)


def power_toughness_option(record: CardRecord) -> int:
    """
    Frame picker position of the power/toughness box.

    Dual-color records always use the color-neutral box; single-color
    records use the box matching their color.
    """
    color = DUAL_COLOR_PT if record.is_dual_color else record.color
    try:
        return POWER_TOUGHNESS_OPTIONS[color]
    except KeyError:
        raise MappingError("power/toughness color", color, record.number, record.name) from None


def rarity_symbol(record: CardRecord) -> str:
    """Set-symbol image URL for the record's rarity letter."""
    try:
        return RARITY_SYMBOLS[record.rarity]
    except KeyError:
        raise MappingError("rarity", record.rarity, record.number, record.name) from None
