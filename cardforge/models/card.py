from dataclasses import dataclass
from enum import Enum

from cardforge.config import OUTPUT_EXTENSION

# Characters replaced with "_" in output file names
_UNSAFE_FILENAME_CHARS = '<>:"/\\|?*'


class PairKind(str, Enum):
    """How two records combine into one card."""

    SPLIT = "split"
    FUSE = "fuse"


@dataclass(frozen=True, slots=True)
class CardRecord:
    """
    One logical card from the input sheet.

    Attributes:
        number: Sequence number, unique across the batch
        name: Display name (empty for template/separator rows)
        rarity: Single rarity letter (C, U, R)
        color: Color token ("Red") or "/"-joined pair ("White/Blue")
        type_line: Full type line
        cost: Mana cost in creator notation ("{2}{R}")
        text: Rules text, may contain the literal escape "\\n"
        power: Power, paired with toughness
        toughness: Toughness, paired with power
        flavor: Flavor text, placed after the rules text
        split_key: Group key joining the two halves of a split card
        fuse_key: Group key joining the two halves of a fuse card
    """

    number: int
    name: str
    rarity: str
    color: str
    type_line: str
    cost: str | None = None
    text: str | None = None
    power: str | None = None
    toughness: str | None = None
    flavor: str | None = None
    split_key: str | None = None
    fuse_key: str | None = None

    @property
    def is_complete(self) -> bool:
        """Name, color and type line are all present."""
        return bool(self.name and self.color and self.type_line)

    @property
    def has_power_toughness(self) -> bool:
        return self.power is not None and self.toughness is not None

    @property
    def colors(self) -> tuple[str, ...]:
        return tuple(part.strip() for part in self.color.split("/"))

    @property
    def is_dual_color(self) -> bool:
        return "/" in self.color

    @property
    def pair_key(self) -> tuple[PairKind, str] | None:
        """Group key joining this record to its other half, split before fuse."""
        if self.split_key is not None:
            return PairKind.SPLIT, self.split_key
        if self.fuse_key is not None:
            return PairKind.FUSE, self.fuse_key
        return None


@dataclass(frozen=True, slots=True)
class RenderUnit:
    """
    The atomic job submitted to the card creator.

    Either a single record, or a top/bottom pair sharing one card face.
    The bottom record of a pair never appears as a unit of its own.
    """

    top: CardRecord
    bottom: CardRecord | None = None
    pair_kind: PairKind | None = None

    def __post_init__(self) -> None:
        if (self.bottom is None) != (self.pair_kind is None):
            raise ValueError("A paired unit needs both a bottom record and a pair kind")

    @property
    def is_paired(self) -> bool:
        return self.bottom is not None

    @property
    def number(self) -> int:
        return self.top.number

    @property
    def name(self) -> str:
        if self.bottom is None:
            return self.top.name
        return f"{self.top.name} // {self.bottom.name}"

    @property
    def records(self) -> tuple[CardRecord, ...]:
        if self.bottom is None:
            return (self.top,)
        return (self.top, self.bottom)

    @property
    def output_name(self) -> str:
        """File name the exported card is saved under."""
        cleaned = "".join("_" if c in _UNSAFE_FILENAME_CHARS else c for c in self.name)
        return f"{cleaned.strip()}{OUTPUT_EXTENSION}"
