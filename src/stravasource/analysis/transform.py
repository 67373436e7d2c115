"""
Shape a snapshot of Strava activities into dashboard results.

Three pure strategies, one per QueryFormat:

  to_timeseries  one [value, epoch_ms] point per activity, time ascending
  to_table       fixed 8-column activity table
  to_worldmap    value/name/latitude/longitude rows for a map panel

None of them perform I/O or mutate their inputs; calling twice with the
same activities and target gives equal results.

Both table shapes only include activities with start coordinates. For the
world map that is required. For the plain table none of the columns are
geographic, but existing dashboards depend on the same rows appearing in
both panels, so the filter is kept.
"""
from typing import List, Optional, Sequence

from stravasource.models.activity import ActivityRecord, ActivityStat, QueryTarget
from stravasource.models.results import TableColumn, TableResult, TimeSeriesResult
from stravasource.strava.polyline import Point, decode_polyline

TABLE_COLUMNS = (
    TableColumn(text="Time"),
    TableColumn(text="name"),
    TableColumn(text="distance", unit="lengthm"),
    TableColumn(text="moving_time", unit="s"),
    TableColumn(text="elapsed_time", unit="s"),
    TableColumn(text="total_elevation_gain", unit="lengthm"),
    TableColumn(text="type"),
    TableColumn(text="kilojoules", unit="joule"),
)


def to_timeseries(
    activities: Sequence[ActivityRecord], target: QueryTarget
) -> TimeSeriesResult:
    """
    Project target.activity_stat against each activity's start time.

    Every activity yields exactly one point; a missing statistic becomes a
    None value rather than a dropped point. Activities that start at the
    same instant keep their input order (sorted() is stable).
    """
    stat = target.activity_stat
    datapoints = [(stat.value_of(a), a.start_ms) for a in activities]
    datapoints = sorted(datapoints, key=lambda dp: dp[1])
    return TimeSeriesResult(target=stat.value, datapoints=datapoints)


def to_table(
    activities: Sequence[ActivityRecord], target: QueryTarget
) -> TableResult:
    """One row per geolocated activity, in input order."""
    rows = [
        [
            a.start_ms,
            a.name,
            a.distance,
            a.moving_time,
            a.elapsed_time,
            a.total_elevation_gain,
            a.type,
            a.kilojoules,
        ]
        for a in activities
        if a.has_start_coordinates
    ]
    return TableResult(columns=list(TABLE_COLUMNS), rows=rows)


def activity_middle_point(activity: ActivityRecord) -> Optional[Point]:
    """
    The point halfway along the activity's route, or None without a route.

    An empty polyline, or one that decodes to no points, counts as no route.
    """
    encoded = activity.summary_polyline
    if not encoded:
        return None
    points = decode_polyline(encoded)
    if not points:
        return None
    return points[len(points) // 2]


def to_worldmap(
    activities: Sequence[ActivityRecord], target: QueryTarget
) -> TableResult:
    """
    value/name/latitude/longitude rows for geolocated activities.

    The location is the route midpoint when the activity has a decodable
    route, otherwise its start coordinates.
    """
    stat = target.activity_stat
    unit = "lengthm" if stat.is_length else "s"
    columns = [
        TableColumn(text="value", unit=unit),
        TableColumn(text="name"),
        TableColumn(text="latitude"),
        TableColumn(text="longitude"),
    ]

    rows: List[list] = []
    for activity in activities:
        if not activity.has_start_coordinates:
            continue
        middle = activity_middle_point(activity)
        if middle is not None:
            latitude, longitude = middle.lat, middle.lon
        else:
            latitude, longitude = activity.start_latitude, activity.start_longitude
        rows.append([stat.value_of(activity), activity.name, latitude, longitude])

    return TableResult(columns=columns, rows=rows)


def stat_names() -> List[str]:
    """Names a query target may use for activityStat."""
    return [stat.value for stat in ActivityStat]
