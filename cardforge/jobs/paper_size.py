"""
Find the optimal paper for printing a card set.
"""

import argparse
import logging

from cardforge.config import DEFAULT_PAPER_CANDIDATES, settings
from cardforge.models.layout import PaperLayout
from cardforge.services.sheet_packer import select_paper

logger = logging.getLogger(__name__)

DEFAULT_CARD_COUNT = 50


def run_paper_size(card_count: int, copies: int) -> tuple[PaperLayout, int]:
    """
    Pick the paper for `card_count` cards printed `copies` times each.

    Returns:
        Winning layout and the number of sheets needed
    """
    layout = select_paper(
        DEFAULT_PAPER_CANDIDATES,
        (settings.card_width, settings.card_height),
        settings.bleed,
    )
    total = card_count * copies
    sheets = layout.sheets_needed(total)

    logger.info(
        "Best paper %gx%g: %d columns x %d rows = %d cards per sheet",
        layout.width,
        layout.height,
        layout.columns,
        layout.rows,
        layout.cards_per_sheet,
    )
    logger.info("%d cards x %d copies = %d cards on %d sheets", card_count, copies, total, sheets)
    return layout, sheets


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Find the optimal page layout for a card set")
    parser.add_argument(
        "--cards",
        type=int,
        default=DEFAULT_CARD_COUNT,
        help=f"Distinct cards in the set (default: {DEFAULT_CARD_COUNT})",
    )
    parser.add_argument(
        "--copies",
        type=int,
        default=settings.copies,
        help=f"Copies of each card (default: {settings.copies})",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    run_paper_size(args.cards, args.copies)


if __name__ == "__main__":
    main()
