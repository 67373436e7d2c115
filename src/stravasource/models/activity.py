"""Activity records as returned by Strava, and the query descriptors that project them."""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

Number = Union[int, float]


def to_epoch_ms(moment: datetime) -> int:
    """Milliseconds since the Unix epoch. Naive datetimes are treated as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // timedelta(milliseconds=1)


class ActivityMap(BaseModel):
    """The `map` object Strava attaches to summary activities."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    summary_polyline: Optional[str] = None  # absent/empty when there is no GPS track


class ActivityRecord(BaseModel):
    """
    One summary activity from GET /athlete/activities.

    Only the fields the datasource projects are modelled; everything else in
    the upstream payload is ignored. Records are frozen once parsed so every
    query target sees the same snapshot.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: Optional[str] = None
    type: Optional[str] = None  # "Run", "Ride", ...
    start_date: datetime

    distance: Optional[float] = None              # meters
    moving_time: Optional[int] = None             # seconds
    elapsed_time: Optional[int] = None            # seconds
    total_elevation_gain: Optional[float] = None  # meters
    kilojoules: Optional[float] = None            # only for power-tracked rides

    start_latitude: Optional[float] = None
    start_longitude: Optional[float] = None
    map: Optional[ActivityMap] = None

    @model_validator(mode="before")
    @classmethod
    def _coordinates_from_latlng(cls, data: Any) -> Any:
        # Newer payloads only carry start_latlng: [lat, lng] (or [] without GPS)
        if not isinstance(data, dict):
            return data
        latlng = data.get("start_latlng")
        if (
            data.get("start_latitude") is None
            and data.get("start_longitude") is None
            and isinstance(latlng, (list, tuple))
            and len(latlng) == 2
        ):
            data = {**data, "start_latitude": latlng[0], "start_longitude": latlng[1]}
        return data

    @field_validator("start_date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def has_start_coordinates(self) -> bool:
        return self.start_latitude is not None and self.start_longitude is not None

    @property
    def summary_polyline(self) -> Optional[str]:
        return self.map.summary_polyline if self.map else None

    @property
    def start_ms(self) -> int:
        return to_epoch_ms(self.start_date)


class ActivityStat(str, Enum):
    """Statistics a query target can project onto its value axis."""

    DISTANCE = "distance"
    MOVING_TIME = "moving_time"
    ELAPSED_TIME = "elapsed_time"
    ELEVATION_GAIN = "total_elevation_gain"
    KILOJOULES = "kilojoules"

    @classmethod
    def _missing_(cls, value):
        if value == "elevation_gain":
            return cls.ELEVATION_GAIN
        return None

    @property
    def is_length(self) -> bool:
        return self in (ActivityStat.DISTANCE, ActivityStat.ELEVATION_GAIN)

    def value_of(self, activity: ActivityRecord) -> Optional[Number]:
        """Project this statistic from an activity. None when the activity lacks it."""
        return _STAT_ACCESSORS[self](activity)


_STAT_ACCESSORS: Dict[ActivityStat, Callable[[ActivityRecord], Optional[Number]]] = {
    ActivityStat.DISTANCE: lambda a: a.distance,
    ActivityStat.MOVING_TIME: lambda a: a.moving_time,
    ActivityStat.ELAPSED_TIME: lambda a: a.elapsed_time,
    ActivityStat.ELEVATION_GAIN: lambda a: a.total_elevation_gain,
    ActivityStat.KILOJOULES: lambda a: a.kilojoules,
}


class QueryFormat(str, Enum):
    TIMESERIES = "timeseries"
    TABLE = "table"
    WORLDMAP = "worldmap"

    @classmethod
    def resolve(cls, raw: Any) -> "QueryFormat":
        """
        Map a target's raw format value to a QueryFormat.

        Legacy behaviour: unset or unrecognised formats, including values
        that are not strings at all, fall back to TIMESERIES rather than
        being rejected.
        """
        if not isinstance(raw, str):
            return cls.TIMESERIES
        try:
            return cls(raw)
        except ValueError:
            return cls.TIMESERIES


class QueryTarget(BaseModel):
    """One requested output within a query request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    activity_stat: ActivityStat = Field(alias="activityStat")
    format: Any = None  # free-form; see QueryFormat.resolve
    ref_id: Optional[str] = Field(default=None, alias="refId")

    @field_validator("activity_stat", mode="before")
    @classmethod
    def _lookup_stat(cls, value: Any) -> Any:
        # Route through the enum so the elevation_gain alias resolves
        if isinstance(value, str):
            return ActivityStat(value)
        return value


class TimeRange(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start: datetime = Field(validation_alias=AliasChoices("from", "start"), serialization_alias="from")
    end: datetime = Field(validation_alias=AliasChoices("to", "end"), serialization_alias="to")

    def after_unix(self) -> int:
        return to_epoch_ms(self.start) // 1000

    def before_unix(self) -> int:
        return to_epoch_ms(self.end) // 1000
