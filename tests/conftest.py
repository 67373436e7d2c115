"""Shared test fixtures."""
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List
from unittest.mock import AsyncMock

import pytest

from stravasource.config import Settings
from stravasource.datasource import StravaDatasource
from stravasource.models.activity import ActivityRecord, TimeRange

FIXTURES_DIR = Path(__file__).parent / "fixtures"

RAW_ACTIVITIES = json.loads((FIXTURES_DIR / "strava_activities.json").read_text())


@pytest.fixture(name="raw_activities")
def raw_activities_fixture() -> List[dict]:
    """Strava /athlete/activities payload: 4 activities, 3 of them geolocated."""
    return json.loads(json.dumps(RAW_ACTIVITIES))


@pytest.fixture(name="activities")
def activities_fixture(raw_activities) -> List[ActivityRecord]:
    return [ActivityRecord.model_validate(a) for a in raw_activities]


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    return Settings(
        strava_api_url="https://strava.test/api/v3",
        strava_access_token="test-token",
        strava_per_page=50,
        strava_max_pages=3,
        _env_file=None,
    )


@pytest.fixture(name="fake_client")
def fake_client_fixture(activities):
    """A StravaClient stand-in whose get_activities returns the fixture activities."""
    client = AsyncMock()
    client.get_activities.return_value = activities
    return client


@pytest.fixture(name="datasource")
def datasource_fixture(settings, fake_client) -> StravaDatasource:
    return StravaDatasource(settings, fake_client)


@pytest.fixture(name="time_range")
def time_range_fixture() -> TimeRange:
    return TimeRange(
        start=datetime(2024, 3, 1, tzinfo=timezone.utc),
        end=datetime(2024, 3, 3, tzinfo=timezone.utc),
    )
