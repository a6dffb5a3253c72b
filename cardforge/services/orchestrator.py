"""
Render Orchestrator — drives the card creator one unit at a time.

Each unit walks a fixed state machine:

    IDLE → FRAME_SET → TEXT_SET → [ART_SET] → RARITY_SET
         → COLLECTOR_INFO_SET → SUBMITTED → COMPLETED | FAILED

ART_SET is entered only when the unit has an art file. The creator's
selected tab is tracked in the unit's context, so steps never depend on
whatever tab a previous call happened to leave open.

INVARIANTS:
- Units are processed strictly one at a time against one session
- A unit whose output file already exists makes no creator call at all
- Mapping errors are found before the creator is touched
- Creator timeouts and errors fail the unit, never the batch; so do
  canceled exports
- The session is reset after every unit that touched the creator
- Every wait is bounded by a timeout
"""

import logging
import os
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from cardforge.config import settings
from cardforge.models.card import RenderUnit
from cardforge.models.failure import (
    BatchReport,
    DownloadCanceled,
    FatalIOError,
    InvariantError,
    KnownError,
    MappingError,
    PairingError,
    RemoteSurfaceError,
    RemoteSurfaceTimeout,
    UnitOutcome,
    UnitStatus,
)
from cardforge.services.render_plan import RenderPlan, build_render_plan
from cardforge.surface.base import FrameGroup, RenderSurface, Tab

logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    IDLE = "idle"
    FRAME_SET = "frame_set"
    TEXT_SET = "text_set"
    ART_SET = "art_set"
    RARITY_SET = "rarity_set"
    COLLECTOR_INFO_SET = "collector_info_set"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    FAILED = "failed"


TRANSITIONS = MappingProxyType(
    {
        RenderState.IDLE: frozenset({RenderState.FRAME_SET, RenderState.FAILED}),
        RenderState.FRAME_SET: frozenset({RenderState.TEXT_SET, RenderState.FAILED}),
        RenderState.TEXT_SET: frozenset(
            {RenderState.ART_SET, RenderState.RARITY_SET, RenderState.FAILED}
        ),
        RenderState.ART_SET: frozenset({RenderState.RARITY_SET, RenderState.FAILED}),
        RenderState.RARITY_SET: frozenset({RenderState.COLLECTOR_INFO_SET, RenderState.FAILED}),
        RenderState.COLLECTOR_INFO_SET: frozenset({RenderState.SUBMITTED, RenderState.FAILED}),
        RenderState.SUBMITTED: frozenset({RenderState.COMPLETED, RenderState.FAILED}),
        RenderState.COMPLETED: frozenset(),
        RenderState.FAILED: frozenset(),
    }
)


@dataclass
class UnitContext:
    """
    Processing state of one unit against the creator.

    Attributes:
        plan: What to enter for the unit
        state: Current state machine position
        current_tab: Creator tab known to be open, None until one is chosen
        history: States entered so far, in order
    """

    plan: RenderPlan
    state: RenderState = RenderState.IDLE
    current_tab: Tab | None = None
    history: list[RenderState] = field(default_factory=list)

    def advance(self, target: RenderState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvariantError(
                f"#{self.plan.unit.number}: cannot move from {self.state.value} to {target.value}"
            )
        self.state = target
        self.history.append(target)

    def fail(self) -> None:
        if self.state not in (RenderState.COMPLETED, RenderState.FAILED):
            self.advance(RenderState.FAILED)


def find_name_collisions(units: list[RenderUnit]) -> dict[str, list[int]]:
    """
    Output names shared by more than one unit.

    Resume matches by output name, so a later unit sharing a name with an
    earlier one is treated as already rendered.
    """
    by_name: dict[str, list[int]] = defaultdict(list)
    for unit in units:
        by_name[unit.output_name.lower()].append(unit.number)
    return {name: numbers for name, numbers in by_name.items() if len(numbers) > 1}


class RenderOrchestrator:
    """Renders units through one card creator session."""

    def __init__(
        self,
        surface: RenderSurface,
        output_dir: Path | None = None,
        art_dir: Path | None = None,
        artist_credit: str | None = None,
        step_timeout: float | None = None,
        symbol_timeout: float | None = None,
        download_timeout: float | None = None,
    ):
        self.surface = surface
        self.output_dir = output_dir or settings.output_dir
        self.art_dir = art_dir or settings.art_dir
        self.artist_credit = settings.artist_credit if artist_credit is None else artist_credit
        self.step_timeout = step_timeout or settings.step_timeout
        self.symbol_timeout = symbol_timeout or settings.symbol_timeout
        self.download_timeout = download_timeout or settings.download_timeout

    def output_path(self, unit: RenderUnit) -> Path:
        return self.output_dir / unit.output_name

    async def run(
        self,
        units: list[RenderUnit],
        pairing_errors: list[PairingError] | None = None,
    ) -> BatchReport:
        """
        Render every unit in order.

        Args:
            units: Units from the pairing resolver
            pairing_errors: Errors from the resolver, carried into the report

        Returns:
            BatchReport with one outcome per unit

        Raises:
            FatalIOError: If the output directory cannot be written
            RemoteSurfaceTimeout, RemoteSurfaceError: If the session cannot be
                reset between units
        """
        self._prepare_output_dir()

        for name, numbers in find_name_collisions(units).items():
            logger.warning(
                "Units %s all render to %r; only the first will be produced",
                ", ".join(f"#{n}" for n in numbers),
                name,
            )

        report = BatchReport(
            pairing_errors=[error.to_detail() for error in pairing_errors or []],
        )

        for index, unit in enumerate(units, start=1):
            logger.info("[%d/%d] #%d %s", index, len(units), unit.number, unit.name)
            report.outcomes.append(await self.render_unit(unit))

        logger.info(
            "Batch complete: %d rendered, %d already present, %d skipped, %d failed",
            len(report.completed),
            len(report.already_complete),
            len(report.skipped) + len(report.pairing_errors),
            len(report.failed),
        )
        return report

    async def render_unit(self, unit: RenderUnit) -> UnitOutcome:
        """Render one unit, converting per-unit errors into its outcome."""
        destination = self.output_path(unit)
        if destination.exists():
            logger.info("#%d %s already rendered at %s, skipping", unit.number, unit.name, destination)
            return UnitOutcome(
                number=unit.number,
                name=unit.name,
                status=UnitStatus.ALREADY_COMPLETE,
                output_path=str(destination),
            )

        try:
            plan = build_render_plan(unit, self.art_dir, self.artist_credit)
        except MappingError as e:
            logger.error("Skipping #%d %s: %s", unit.number, unit.name, e.message)
            return self._outcome(unit, UnitStatus.SKIPPED, error=e)

        context = UnitContext(plan=plan)
        try:
            saved = await self._render(context, destination)
        except (RemoteSurfaceTimeout, RemoteSurfaceError, DownloadCanceled) as e:
            context.fail()
            logger.error("Failed #%d %s: %s", unit.number, unit.name, e.message)
            outcome = self._outcome(unit, UnitStatus.FAILED, error=e)
        else:
            logger.info("Rendered #%d %s to %s", unit.number, unit.name, saved)
            outcome = self._outcome(unit, UnitStatus.COMPLETED, output_path=saved)

        # A failed reset leaves the session unusable for every later unit
        await self.surface.reset(self.step_timeout)
        return outcome

    async def _render(self, context: UnitContext, destination: Path) -> Path:
        plan = context.plan
        await self._set_frames(context)
        await self._set_text(context)
        if plan.art_path is not None:
            await self._set_art(context)
        await self._set_rarity(context)
        await self._set_collector_info(context)
        return await self._submit(context, destination)

    async def _select_tab(self, context: UnitContext, tab: Tab) -> None:
        if context.current_tab is not tab:
            await self.surface.select_tab(tab, self.step_timeout)
            context.current_tab = tab

    async def _set_frames(self, context: UnitContext) -> None:
        plan = context.plan
        await self._select_tab(context, Tab.FRAME)
        if plan.frame_group is not FrameGroup.STANDARD:
            await self.surface.select_frame_group(plan.frame_group)
        for step in plan.frames:
            await self.surface.add_frame(step.option, step.placement)
        context.advance(RenderState.FRAME_SET)

    async def _set_text(self, context: UnitContext) -> None:
        await self._select_tab(context, Tab.TEXT)
        for entry in context.plan.text:
            await self.surface.set_text(entry.field, entry.value, half=entry.half, clear=entry.clear)
        context.advance(RenderState.TEXT_SET)

    async def _set_art(self, context: UnitContext) -> None:
        art_path = context.plan.art_path
        if art_path is None:
            raise InvariantError(f"#{context.plan.unit.number}: no art to upload")
        await self._select_tab(context, Tab.ART)
        await self.surface.upload_art(art_path)
        context.advance(RenderState.ART_SET)

    async def _set_rarity(self, context: UnitContext) -> None:
        await self._select_tab(context, Tab.SET_SYMBOL)
        await self.surface.set_symbol(context.plan.symbol_url)
        await self.surface.wait_for_symbol(self.symbol_timeout)
        context.advance(RenderState.RARITY_SET)

    async def _set_collector_info(self, context: UnitContext) -> None:
        await self._select_tab(context, Tab.COLLECTOR)
        for collector_field, value in context.plan.collector:
            await self.surface.set_collector_field(collector_field, value)
        context.advance(RenderState.COLLECTOR_INFO_SET)

    async def _submit(self, context: UnitContext, destination: Path) -> Path:
        await self.surface.trigger_download()
        context.advance(RenderState.SUBMITTED)
        saved = await self.surface.wait_for_download(destination, self.download_timeout)
        context.advance(RenderState.COMPLETED)
        return saved

    def _prepare_output_dir(self) -> None:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FatalIOError(f"Cannot create output directory {self.output_dir}", detail=str(e)) from e
        if not os.access(self.output_dir, os.W_OK):
            raise FatalIOError(f"Output directory {self.output_dir} is not writable")

    @staticmethod
    def _outcome(
        unit: RenderUnit,
        status: UnitStatus,
        error: KnownError | None = None,
        output_path: Path | None = None,
    ) -> UnitOutcome:
        return UnitOutcome(
            number=unit.number,
            name=unit.name,
            status=status,
            output_path=str(output_path) if output_path is not None else None,
            failure=error.to_detail() if error is not None else None,
        )
