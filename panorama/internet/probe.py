"""HTTP reachability probe."""

from __future__ import annotations

import httpx

from panorama.core.config import CheckUrl
from panorama.core.exceptions import ProbeError


class HttpProbe:
    """GETs a URL and checks the status and, optionally, the body.

    Raises :class:`ProbeError` on transport failures, HTTP errors (>= 400) and
    bodies missing the expected substring.
    """

    def __init__(
        self,
        timeout_secs: float = 20.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._http = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_secs),
            follow_redirects=True,
        )

    async def __call__(self, check: CheckUrl) -> None:
        try:
            response = await self._http.get(check.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ProbeError(
                f"{check.url} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProbeError(f"request to {check.url} failed: {exc!r}") from exc

        if check.body_contains is not None and check.body_contains not in response.text:
            raise ProbeError(
                f"response body did not contain expected string '{check.body_contains}'"
            )

    async def close(self) -> None:
        if not self._http.is_closed:
            await self._http.aclose()
