"""
Reachability check for the card creator.

Runs before a batch starts so a stopped or mistyped creator URL fails the
run immediately instead of timing out on every unit.
"""

import logging

import httpx

from cardforge.models.failure import FatalIOError

logger = logging.getLogger(__name__)

USER_AGENT = "CardForge/1.0"


async def check_surface_available(
    url: str,
    timeout: float = 10.0,
    client: httpx.AsyncClient | None = None,
) -> None:
    """
    Confirm the card creator answers at `url`.

    Args:
        url: Base URL of the card creator
        timeout: Request timeout in seconds
        client: Optional httpx client for connection reuse

    Raises:
        FatalIOError: If the creator is unreachable or answers with an error
    """
    logger.info("Checking card creator at %s...", url)

    try:
        if client:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
                timeout=timeout,
            ) as own_client:
                response = await own_client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FatalIOError(
            f"Card creator at {url} answered {e.response.status_code}",
            detail=str(e),
        ) from e
    except httpx.HTTPError as e:
        raise FatalIOError(f"Card creator at {url} is unreachable", detail=str(e)) from e
