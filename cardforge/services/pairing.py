"""
Pairing Resolver — turns input records into render units.

Split and fuse cards arrive as two rows sharing a group key. They render as
one card, so the resolver merges them into a single paired unit.

INVARIANTS:
- Output order follows each unit's top record; bottom positions are elided
- A bottom record is claimed once and never emitted on its own
- The first record of a pair in file order is always the top half
- A key shared by one record, or by three or more, is a PairingError and
  yields no unit at all for that key
- Incomplete records (no name, color or type) are skipped silently
- Pairing errors never stop resolution of the remaining records
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from cardforge.models.card import CardRecord, PairKind, RenderUnit
from cardforge.models.failure import PairingError

logger = logging.getLogger(__name__)


@dataclass
class PairingResult:
    """Units ready to render plus the pairing errors found on the way."""

    units: list[RenderUnit] = field(default_factory=list)
    errors: list[PairingError] = field(default_factory=list)


def _build_groups(records: list[CardRecord]) -> dict[tuple[PairKind, str], list[CardRecord]]:
    """Complete records indexed by (kind, key), each list in file order."""
    groups: dict[tuple[PairKind, str], list[CardRecord]] = defaultdict(list)
    for record in records:
        if not record.is_complete:
            continue
        if record.split_key is not None and record.fuse_key is not None:
            continue
        key = record.pair_key
        if key is not None:
            groups[key].append(record)
    return groups


def resolve_render_units(records: list[CardRecord]) -> PairingResult:
    """
    Resolve the ordered record list into render units.

    Args:
        records: All records from the input sheet, in file order

    Returns:
        PairingResult with units in top-record order and any pairing errors
    """
    result = PairingResult()
    groups = _build_groups(records)
    claimed: set[int] = set()
    reported: set[tuple[PairKind, str]] = set()

    for record in records:
        if not record.is_complete or record.number in claimed:
            continue

        if record.split_key is not None and record.fuse_key is not None:
            error = PairingError(
                "split/fuse",
                f"{record.split_key}/{record.fuse_key}",
                [record.number],
                reason="combines a split key with a fuse key",
            )
            logger.error("Skipping #%d %s: %s", record.number, record.name, error.message)
            result.errors.append(error)
            claimed.add(record.number)
            continue

        key = record.pair_key
        if key is None:
            result.units.append(RenderUnit(top=record))
            continue

        members = groups[key]
        if len(members) != 2:
            claimed.update(member.number for member in members)
            if key not in reported:
                reported.add(key)
                error = PairingError(key[0].value, key[1], [m.number for m in members])
                logger.error("Skipping %s: %s", error.message, error.detail)
                result.errors.append(error)
            continue

        top, bottom = members
        claimed.add(top.number)
        claimed.add(bottom.number)
        result.units.append(RenderUnit(top=top, bottom=bottom, pair_kind=key[0]))
        logger.debug("Paired #%d and #%d as %s card", top.number, bottom.number, key[0].value)

    return result
