from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    debug: bool = False

    # Card creator web app driven by the render jobs
    surface_url: str = "http://localhost:4242"
    headless: bool = False

    output_dir: Path = Path("cards")
    art_dir: Path = Path("art")
    sheets_dir: Path = Path("sheets")

    artist_credit: str = ""

    # Bounded waits against the card creator, in seconds
    step_timeout: float = 10.0
    symbol_timeout: float = 15.0
    download_timeout: float = 60.0

    # Print sheet geometry (inches)
    dpi: int = 300
    card_width: float = 2.5
    card_height: float = 3.5
    bleed: float = 0.125
    sheet_columns: int = 4
    sheet_rows: int = 5
    sheet_chunk_size: int = 20
    sheet_workers: int = 4

    # Copies of each card printed when sizing a run
    copies: int = 15


settings = Settings()


# =============================================================================
# PAPER CANDIDATES
# =============================================================================

# Commercial press sheets in inches, both orientations of each size.
# Order matters: ties go to the first candidate listed.
DEFAULT_PAPER_CANDIDATES: tuple[tuple[float, float], ...] = (
    (12.0, 18.0),
    (13.0, 19.0),
    (18.0, 12.0),
    (19.0, 13.0),
)


# =============================================================================
# ASSET CONVENTIONS
# =============================================================================

# Art is looked up as <art_dir>/<sequence number><ext>, first match wins
ART_EXTENSIONS: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".webp")

OUTPUT_EXTENSION = ".png"
