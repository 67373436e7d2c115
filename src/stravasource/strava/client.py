"""
Async client for the Strava v3 REST API.

Only the one endpoint the datasource needs is wrapped:
GET /athlete/activities, which returns summary activities for the
authenticated athlete, newest first, filtered by `before`/`after` epoch
seconds and paged with `page`/`per_page`.

Token refresh is out of scope: the access token comes from settings and is
sent as-is. Any failure talking to Strava surfaces as UpstreamError; there
are no retries here.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from stravasource.config import Settings
from stravasource.models.activity import ActivityRecord

logger = logging.getLogger(__name__)

ACTIVITIES_PATH = "/athlete/activities"


class UpstreamError(RuntimeError):
    """Raised when Strava cannot be reached or returns something unusable."""


class StravaClient:
    """
    Thin async wrapper over httpx for the athlete activities listing.

    The client owns its httpx.AsyncClient unless one is passed in (tests pass
    one built on httpx.MockTransport). Call aclose() when done.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str = "",
        *,
        timeout: float = 10.0,
        per_page: int = 200,
        max_pages: int = 10,
        http: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: API root, e.g. https://www.strava.com/api/v3
            access_token: OAuth bearer token. Sent only when non-empty.
            timeout: Per-request timeout in seconds.
            per_page: Page size used when the caller does not give one.
            max_pages: Upper bound on pages fetched by one get_activities call.
            http: Pre-built AsyncClient to use instead of creating one.
        """
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )
        self.per_page = per_page
        self.max_pages = max_pages

    @classmethod
    def from_settings(cls, settings: Settings) -> "StravaClient":
        return cls(
            settings.strava_api_url,
            settings.strava_access_token,
            timeout=settings.strava_timeout_seconds,
            per_page=settings.strava_per_page,
            max_pages=settings.strava_max_pages,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def get_activities(
        self,
        before: Optional[int] = None,
        after: Optional[int] = None,
        per_page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[ActivityRecord]:
        """
        Fetch summary activities, walking pages until the listing runs out.

        Args:
            before: Only activities starting before this epoch second.
            after: Only activities starting after this epoch second.
            per_page: Page size; defaults to the client's per_page.
            limit: Stop once this many activities have been collected.

        Returns:
            Activities in the order Strava lists them.

        Raises:
            UpstreamError: on transport errors, non-2xx responses, or a body
                that is not a list of activities.
        """
        page_size = per_page or self.per_page
        params: Dict[str, Any] = {"per_page": page_size}
        if before is not None:
            params["before"] = before
        if after is not None:
            params["after"] = after

        activities: List[ActivityRecord] = []
        for page in range(1, self.max_pages + 1):
            batch = await self._fetch_page({**params, "page": page})
            activities.extend(batch)
            if limit is not None and len(activities) >= limit:
                return activities[:limit]
            if len(batch) < page_size:
                break
        else:
            logger.warning(
                "Stopped after %d pages of activities; later pages were not fetched",
                self.max_pages,
            )
        return activities

    async def _fetch_page(self, params: Dict[str, Any]) -> List[ActivityRecord]:
        logger.debug("GET %s %s", ACTIVITIES_PATH, params)
        try:
            response = await self._http.get(ACTIVITIES_PATH, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Strava request failed: %s", exc)
            raise UpstreamError(f"Strava request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamError("Strava returned a non-JSON body") from exc

        if not isinstance(payload, list):
            raise UpstreamError(
                f"Expected a list of activities, got {type(payload).__name__}"
            )
        try:
            return [ActivityRecord.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise UpstreamError(f"Unexpected activity payload: {exc}") from exc
