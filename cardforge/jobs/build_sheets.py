"""
Compose rendered card images into print sheets.

Cards are taken from the render output directory in name order and tiled
onto pages of the configured grid.
"""

import argparse
import logging
from pathlib import Path

from cardforge.config import OUTPUT_EXTENSION, settings
from cardforge.models.failure import FatalIOError
from cardforge.services.sheet_packer import build_packing_plan, build_sheets

logger = logging.getLogger(__name__)


def collect_card_images(input_dir: Path) -> list[Path]:
    """
    Rendered card images in name order.

    Raises:
        FatalIOError: If the directory is missing or holds no card images
    """
    if not input_dir.is_dir():
        raise FatalIOError(f"Card image directory {input_dir} does not exist")

    images = sorted(
        (p for p in input_dir.iterdir() if p.suffix.lower() == OUTPUT_EXTENSION),
        key=lambda p: p.name.lower(),
    )
    if not images:
        raise FatalIOError(f"No card images found in {input_dir}")
    return images


def run_build_sheets(
    input_dir: Path | None = None,
    output_dir: Path | None = None,
) -> list[Path]:
    """Build print sheets from every card image in `input_dir`."""
    input_dir = input_dir or settings.output_dir
    output_dir = output_dir or settings.sheets_dir

    images = collect_card_images(input_dir)
    plan = build_packing_plan()
    try:
        return build_sheets(images, plan, output_dir)
    except OSError as e:
        raise FatalIOError(f"Failed to write sheets to {output_dir}", detail=str(e)) from e


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Tile rendered cards into print sheets")
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=None,
        help=f"Rendered card images (default: {settings.output_dir})",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help=f"Directory for sheet pages (default: {settings.sheets_dir})",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        pages = run_build_sheets(args.input_dir, args.output_dir)
    except FatalIOError as e:
        logger.error("%s", e.message)
        raise SystemExit(1) from e

    logger.info("Built %d sheets", len(pages))


if __name__ == "__main__":
    main()
