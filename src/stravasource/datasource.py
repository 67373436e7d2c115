"""
StravaDatasource: runs dashboard queries against a StravaClient.

Flow for one query request:
  1. Fetch every activity in the time range (one client call, however many
     targets the request has)
  2. For each target, pick the transform by its format and shape the
     shared snapshot
  3. Return results in target order

A fetch failure fails the whole query; there are no partial results.
"""
import logging
from typing import Callable, Dict, List, Sequence

from stravasource.analysis.transform import stat_names, to_table, to_timeseries, to_worldmap
from stravasource.config import Settings
from stravasource.models.activity import ActivityRecord, QueryFormat, QueryTarget, TimeRange
from stravasource.models.results import HealthStatus, ShapedResult
from stravasource.strava.client import UpstreamError

logger = logging.getLogger(__name__)

Transform = Callable[[Sequence[ActivityRecord], QueryTarget], ShapedResult]

TRANSFORMS: Dict[QueryFormat, Transform] = {
    QueryFormat.TIMESERIES: to_timeseries,
    QueryFormat.TABLE: to_table,
    QueryFormat.WORLDMAP: to_worldmap,
}

HEALTH_OK = "Data source is working"
HEALTH_FAILED = "Cannot connect to Strava API"


class StravaDatasource:
    """Dispatches query targets to transforms over a single activity fetch."""

    def __init__(self, settings: Settings, client):
        """
        Args:
            settings: Application settings.
            client: StravaClient instance (or AsyncMock in tests).
        """
        self.settings = settings
        self.client = client

    async def query(
        self, time_range: TimeRange, targets: Sequence[QueryTarget]
    ) -> List[ShapedResult]:
        """
        Shape the activities in time_range once per target.

        Raises:
            UpstreamError: if the activities cannot be fetched.
        """
        activities = tuple(
            await self.client.get_activities(
                before=time_range.before_unix(),
                after=time_range.after_unix(),
                per_page=self.settings.strava_per_page,
            )
        )
        logger.info(
            "Shaping %d activities for %d targets", len(activities), len(targets)
        )
        return [
            TRANSFORMS[QueryFormat.resolve(target.format)](activities, target)
            for target in targets
        ]

    async def test_datasource(self) -> HealthStatus:
        """Probe Strava with a tiny listing request."""
        try:
            probe = await self.client.get_activities(per_page=2, limit=2)
        except UpstreamError as exc:
            logger.warning("Health check failed: %s", exc)
            return HealthStatus(status="error", message=HEALTH_FAILED)
        except Exception:
            logger.exception("Health check failed unexpectedly")
            return HealthStatus(status="error", message=HEALTH_FAILED)
        logger.info("Health check ok (%d activities returned)", len(probe))
        return HealthStatus(status="success", message=HEALTH_OK)

    def search(self) -> List[str]:
        return stat_names()
