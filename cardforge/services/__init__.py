from cardforge.services.frame_tables import (
    FRAME_OPTIONS,
    POWER_TOUGHNESS_OPTIONS,
    RARITY_SYMBOLS,
    frame_option,
    power_toughness_option,
    rarity_symbol,
)
from cardforge.services.orchestrator import (
    RenderOrchestrator,
    RenderState,
    UnitContext,
    find_name_collisions,
)
from cardforge.services.pairing import PairingResult, resolve_render_units
from cardforge.services.render_plan import (
    RenderPlan,
    build_render_plan,
    compose_rules_text,
    decode_rules_text,
)
from cardforge.services.sheet_packer import (
    build_packing_plan,
    build_sheets,
    chunked,
    compose_sheet,
    select_paper,
    sheets_needed,
)

__all__ = [
    "FRAME_OPTIONS",
    "POWER_TOUGHNESS_OPTIONS",
    "PairingResult",
    "RARITY_SYMBOLS",
    "RenderOrchestrator",
    "RenderPlan",
    "RenderState",
    "UnitContext",
    "build_packing_plan",
    "build_render_plan",
    "build_sheets",
    "chunked",
    "compose_rules_text",
    "compose_sheet",
    "decode_rules_text",
    "find_name_collisions",
    "frame_option",
    "power_toughness_option",
    "rarity_symbol",
    "resolve_render_units",
    "select_paper",
    "sheets_needed",
]
