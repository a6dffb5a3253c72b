"""
Render every card in a card sheet through the card creator.

Re-running the job resumes: cards whose image already exists in the output
directory are skipped without touching the creator.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from cardforge.config import settings
from cardforge.models.failure import BatchReport, KnownError
from cardforge.parsers.card_sheet import load_card_sheet
from cardforge.services.orchestrator import RenderOrchestrator
from cardforge.services.pairing import resolve_render_units
from cardforge.surface.conjurer import ConjurerSurface
from cardforge.surface.preflight import check_surface_available

logger = logging.getLogger(__name__)


async def run_generate(
    card_sheet: Path,
    output_dir: Path | None = None,
    surface_url: str | None = None,
) -> BatchReport:
    """
    Load a card sheet and render all of its units.

    Args:
        card_sheet: Path to the CSV card sheet
        output_dir: Where card images are saved, defaults to settings
        surface_url: Card creator URL, defaults to settings

    Returns:
        BatchReport of the run

    Raises:
        FatalIOError: If the sheet cannot be loaded, the creator is
            unreachable or the output directory is not writable
        RemoteSurfaceTimeout, RemoteSurfaceError: If the creator session
            cannot be started or reset
    """
    surface_url = surface_url or settings.surface_url

    records = load_card_sheet(card_sheet)
    pairing = resolve_render_units(records)
    logger.info(
        "Resolved %d render units (%d pairing errors)",
        len(pairing.units),
        len(pairing.errors),
    )

    await check_surface_available(surface_url, timeout=settings.step_timeout)

    async with ConjurerSurface(url=surface_url) as surface:
        orchestrator = RenderOrchestrator(surface, output_dir=output_dir)
        return await orchestrator.run(pairing.units, pairing_errors=pairing.errors)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Generate card images from a CSV card sheet")
    parser.add_argument("card_sheet", type=Path, help="Path to CSV containing cards")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help=f"Directory for card images (default: {settings.output_dir})",
    )
    parser.add_argument(
        "--url",
        default=None,
        help=f"Card creator URL (default: {settings.surface_url})",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        report = asyncio.run(run_generate(args.card_sheet, args.output_dir, args.url))
    except KnownError as e:
        # Setup failures and a session that cannot start or reset end the run
        logger.error("%s%s", e.message, f" ({e.detail})" if e.detail else "")
        raise SystemExit(1) from e

    for outcome in report.failed + report.skipped:
        if outcome.failure is not None:
            logger.warning("#%d %s: %s", outcome.number, outcome.name, outcome.failure.message)


if __name__ == "__main__":
    main()
