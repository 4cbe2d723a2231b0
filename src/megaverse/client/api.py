"""HTTP client for the megaverse challenge API.

Every failure leaves this module as a :class:`RemoteError`, so the retry
executor can classify it from ``status`` alone:

    - non-2xx response   → ``RemoteError(status=<code>)``
    - transport failure  → ``RemoteError(status=None)`` (connect, read, DNS…)

Endpoints::

    GET    /map/{candidateId}/goal        → {"goal": [[token, ...], ...]}
    POST   /polyanets  {candidateId, row, column}
    POST   /soloons    {candidateId, row, column, color}
    POST   /comeths    {candidateId, row, column, direction}
    DELETE /polyanets | /soloons | /comeths  {candidateId, row, column}

Example::

    async with MegaverseClient("my-candidate-id") as api:
        goal = await api.get_goal()
        await api.create_soloon(Point(1, 0), Color.BLUE)
"""

from __future__ import annotations

from typing import Any

import httpx

from megaverse.core.errors import GoalFormatError, MissingConfigError, RemoteError
from megaverse.core.logging import get_logger
from megaverse.core.settings import DEFAULT_BASE_URL, MegaverseSettings
from megaverse.domain.cells import Color, Direction
from megaverse.domain.grid import Point

logger = get_logger(__name__)


def _safe_text(response: httpx.Response) -> str:
    try:
        return response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError):
        return "<no-body>"


class MegaverseClient:
    """Async client bound to one candidate id.

    Parameters
    ----------
    candidate_id : str
        Required; an empty value raises :class:`MissingConfigError`.
    base_url : str
        API root; a trailing slash is ignored.
    timeout : float
        httpx timeout in seconds for each request.
    http : httpx.AsyncClient, optional
        Pre-built client (tests pass one with ``httpx.MockTransport``).
        A client passed in is not closed by :meth:`aclose`.
    """

    def __init__(
        self,
        candidate_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        if not candidate_id:
            raise MissingConfigError("CANDIDATE_ID")
        self.candidate_id = candidate_id
        self.base_url = base_url.removesuffix("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: MegaverseSettings) -> MegaverseClient:
        return cls(settings.candidate_id, settings.base_url, settings.request_timeout)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> MegaverseClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # ── Goal ─────────────────────────────────────────────────────────

    async def get_goal(self) -> list[list[str]]:
        """Fetch the goal matrix for this candidate."""
        path = f"/map/{self.candidate_id}/goal"
        response = await self._request("GET", path)
        try:
            data = response.json()
        except ValueError as e:
            raise GoalFormatError(f"Goal payload is not JSON: {e}", cause=e) from e
        goal = data.get("goal") if isinstance(data, dict) else None
        if not isinstance(goal, list) or not all(isinstance(row, list) for row in goal):
            raise GoalFormatError("Goal payload malformed: missing goal[]")
        return goal

    # ── Polyanets ────────────────────────────────────────────────────

    async def create_polyanet(self, point: Point) -> None:
        await self._post("/polyanets", point)

    async def delete_polyanet(self, point: Point) -> None:
        await self._delete("/polyanets", point)

    # ── Soloons ──────────────────────────────────────────────────────

    async def create_soloon(self, point: Point, color: Color) -> None:
        await self._post("/soloons", point, color=Color(color).value)

    async def delete_soloon(self, point: Point) -> None:
        await self._delete("/soloons", point)

    # ── Comeths ──────────────────────────────────────────────────────

    async def create_cometh(self, point: Point, direction: Direction) -> None:
        await self._post("/comeths", point, direction=Direction(direction).value)

    async def delete_cometh(self, point: Point) -> None:
        await self._delete("/comeths", point)

    # ── Transport ────────────────────────────────────────────────────

    def _body(self, point: Point, **extra: Any) -> dict[str, Any]:
        return {"candidateId": self.candidate_id, "row": point.row, "column": point.column, **extra}

    async def _post(self, path: str, point: Point, **extra: Any) -> None:
        await self._request("POST", path, json=self._body(point, **extra))

    async def _delete(self, path: str, point: Point) -> None:
        await self._request("DELETE", path, json=self._body(point))

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = await self._http.request(method, url, json=json)
        except httpx.TransportError as e:
            logger.debug("client.transport_error", method=method, path=path, error=str(e))
            raise RemoteError(f"{method} {path} failed: {type(e).__name__}: {e}", cause=e) from e

        if response.is_success:
            return response

        text = _safe_text(response)
        logger.debug("client.request_failed", method=method, path=path, status=response.status_code)
        raise RemoteError(
            f"{method} {path} failed: {response.status_code} {response.reason_phrase} → {text}",
            status=response.status_code,
        )
