"""
Card Conjurer driven through Playwright.

Drives a locally served Card Conjurer instance in Chromium: tabs in
#creator-menu-tabs, frames from #frame-picker, text through #text-options
and #text-editor, and the export via the download heading.

Note: selectors follow the creator's markup and break if it changes.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from types import TracebackType

from playwright.async_api import Browser, Download, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from cardforge.config import settings
from cardforge.models.failure import (
    DownloadCanceled,
    RemoteSurfaceError,
    RemoteSurfaceTimeout,
)
from cardforge.surface.base import (
    CollectorField,
    FrameGroup,
    FramePlacement,
    Half,
    Tab,
    TextField,
)

logger = logging.getLogger(__name__)

MENU_TABS = "#creator-menu-tabs"
FRAME_OPTION = "#frame-picker .frame-option"
MASK_OPTION = "#mask-picker .mask-option"
FRAME_GROUP_SELECT = "#selectFrameGroup"
TEXT_OPTION = "#text-options h4"
TEXT_EDITOR = "#text-editor"
ART_FILE_INPUT = "#creator-menu-art input[type='file']"
SYMBOL_URL_INPUT = "#creator-menu-setSymbol input[type='url']"
DOWNLOAD_BUTTON = "h3.download"

# Element that becomes visible once a tab's panel is open
TAB_PANELS = {
    Tab.FRAME: FRAME_OPTION,
    Tab.TEXT: TEXT_EDITOR,
    Tab.ART: "#creator-menu-art",
    Tab.SET_SYMBOL: "#creator-menu-setSymbol",
    Tab.COLLECTOR: "#creator-menu-bottomInfo",
}

FRAME_GROUP_VALUES = {
    FrameGroup.STANDARD: "Standard-3",
    FrameGroup.SPLIT: "Split",
}

PLACEMENT_BUTTONS = {
    FramePlacement.FULL: "#addToFull",
    FramePlacement.RIGHT_HALF: "#addToRightHalf",
    FramePlacement.TOP_MASK: "#addToFull",
    FramePlacement.BOTTOM_MASK: "#addToFull",
}

PLACEMENT_MASKS = {
    FramePlacement.TOP_MASK: "Top",
    FramePlacement.BOTTOM_MASK: "Bottom",
}

# The bottom half's fields follow the top half's five in the field list
BOTTOM_FIELD_OFFSET = len(TextField)


@asynccontextmanager
async def _bounded(step: str, timeout: float) -> AsyncIterator[None]:
    """Translate Playwright errors into per-unit surface errors."""
    try:
        yield
    except PlaywrightTimeoutError as e:
        raise RemoteSurfaceTimeout(step, timeout) from e
    except PlaywrightError as e:
        raise RemoteSurfaceError(step, str(e)) from e


class ConjurerSurface:
    """
    One Chromium page running Card Conjurer.

    Use as an async context manager, or call start() and close().
    """

    def __init__(
        self,
        url: str | None = None,
        headless: bool | None = None,
        step_timeout: float | None = None,
    ):
        self.url = url or settings.surface_url
        self.headless = settings.headless if headless is None else headless
        self.step_timeout = step_timeout or settings.step_timeout
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None
        self._pending_download: asyncio.Future[Download] | None = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Card creator session has not been started")
        return self._page

    async def __aenter__(self) -> "ConjurerSurface":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        # __aexit__ does not run when __aenter__ raises
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=["--no-sandbox", "--disable-web-security"],
            )
            context = await self._browser.new_context(accept_downloads=True)
            self._page = await context.new_page()
            self._page.set_default_timeout(self.step_timeout * 1000)

            async with _bounded("card creator to load", self.step_timeout):
                await self._page.goto(self.url, wait_until="networkidle")
                await self._page.wait_for_selector(MENU_TABS, state="visible")
        except BaseException:
            await self.close()
            raise
        logger.info("Card creator session started at %s", self.url)

    async def close(self) -> None:
        self._discard_pending_download()
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
            self._page = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def select_tab(self, tab: Tab, timeout: float) -> None:
        async with _bounded(f"{tab.name.lower()} tab", timeout):
            await self.page.click(f"{MENU_TABS} h3:nth-child({tab.value})")
            await self.page.wait_for_selector(
                TAB_PANELS[tab], state="visible", timeout=timeout * 1000
            )

    async def select_frame_group(self, group: FrameGroup) -> None:
        async with _bounded(f"{group.value} frame group", self.step_timeout):
            await self.page.select_option(FRAME_GROUP_SELECT, FRAME_GROUP_VALUES[group])
            await self.page.wait_for_selector(FRAME_OPTION, state="visible")

    async def add_frame(self, option: int, placement: FramePlacement) -> None:
        async with _bounded(f"frame option {option}", self.step_timeout):
            await self.page.click(f"{FRAME_OPTION}:nth-child({option})")
            mask = PLACEMENT_MASKS.get(placement)
            if mask is not None:
                await self.page.locator(MASK_OPTION).filter(has_text=mask).first.click()
            await self.page.click(PLACEMENT_BUTTONS[placement])

    async def set_text(
        self,
        field: TextField,
        value: str,
        half: Half = Half.TOP,
        clear: bool = False,
    ) -> None:
        index = field.value + (BOTTOM_FIELD_OFFSET if half is Half.BOTTOM else 0)
        async with _bounded(f"{half.value} {field.name.lower()} field", self.step_timeout):
            await self.page.click(f"{TEXT_OPTION}:nth-child({index})")
            editor = self.page.locator(TEXT_EDITOR)
            if clear:
                await editor.focus()
                await self.page.keyboard.press("Control+A")
                await self.page.keyboard.press("Delete")
            await editor.press_sequentially(value)

    async def upload_art(self, path: Path) -> None:
        async with _bounded("art upload", self.step_timeout):
            file_input = self.page.locator(ART_FILE_INPUT).first
            await file_input.set_input_files([])
            await file_input.set_input_files(str(path))

    async def set_symbol(self, url: str) -> None:
        async with _bounded("set symbol input", self.step_timeout):
            symbol_input = self.page.locator(SYMBOL_URL_INPUT)
            await symbol_input.fill(url)
            await symbol_input.press("Enter")

    async def wait_for_symbol(self, timeout: float) -> None:
        async with _bounded("set symbol to load", timeout):
            await self.page.wait_for_load_state("networkidle", timeout=timeout * 1000)

    async def set_collector_field(self, field: CollectorField, value: str) -> None:
        async with _bounded(f"collector {field.value} field", self.step_timeout):
            info_input = self.page.locator(f"#info-{field.value}")
            await info_input.clear()
            await info_input.fill(value)

    async def trigger_download(self) -> None:
        self._discard_pending_download()
        # Listener must exist before the click; wait_for_download bounds it
        self._pending_download = asyncio.ensure_future(
            self.page.wait_for_event("download", timeout=0)
        )
        async with _bounded("download button", self.step_timeout):
            await self.page.click(DOWNLOAD_BUTTON)

    async def wait_for_download(self, destination: Path, timeout: float) -> Path:
        pending = self._pending_download
        if pending is None:
            raise RuntimeError("No export has been triggered")
        self._pending_download = None

        try:
            return await asyncio.wait_for(self._save_download(pending, destination), timeout)
        except asyncio.TimeoutError as e:
            raise RemoteSurfaceTimeout("export download", timeout) from e
        except PlaywrightError as e:
            raise RemoteSurfaceError("export download", str(e)) from e

    async def _save_download(self, pending: "asyncio.Future[Download]", destination: Path) -> Path:
        download = await pending
        failure = await download.failure()
        if failure is not None:
            raise DownloadCanceled(failure)
        await download.save_as(destination)
        return destination

    async def reset(self, timeout: float) -> None:
        self._discard_pending_download()
        async with _bounded("card creator to reload", timeout):
            await self.page.reload(wait_until="networkidle", timeout=timeout * 1000)
            await self.page.wait_for_selector(MENU_TABS, state="visible", timeout=timeout * 1000)

    def _discard_pending_download(self) -> None:
        if self._pending_download is not None:
            self._pending_download.cancel()
            self._pending_download = None
