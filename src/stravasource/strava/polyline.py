"""
Google encoded-polyline codec.

Strava ships every activity's GPS track as `map.summary_polyline`, a compact
ASCII string in the format documented at
https://developers.google.com/maps/documentation/utilities/polylinealgorithm

Each coordinate is stored as a delta from the previous one, multiplied by
1e5, zig-zag sign encoded and split into 5-bit chunks (least significant
chunk first). Every chunk is offset by 63 to land in printable ASCII, and
0x20 marks "more chunks follow".

Decoding never raises. The format assumes well-formed input; if the string
is truncated mid-value we return the points completed so far.
"""
from typing import Iterable, List, NamedTuple, Optional, Tuple

SCALE = 1e-5
_CHUNK_OFFSET = 63
_CONTINUATION = 0x20
_PAYLOAD = 0x1F


class Point(NamedTuple):
    """A geographic point in decimal degrees."""
    lat: float
    lon: float


def _read_value(encoded: str, index: int) -> Tuple[Optional[int], int]:
    """
    Read one zig-zag encoded integer starting at `index`.

    Returns (delta, next_index). delta is None when the string ends before
    a terminating chunk is seen.
    """
    raw = 0
    shift = 0
    while index < len(encoded):
        chunk = ord(encoded[index]) - _CHUNK_OFFSET
        index += 1
        raw |= (chunk & _PAYLOAD) << shift
        shift += 5
        if chunk < _CONTINUATION:
            delta = -((raw + 1) >> 1) if raw & 1 else raw >> 1
            return delta, index
    return None, index


def decode_polyline(encoded: str) -> List[Point]:
    """
    Decode an encoded polyline into an ordered list of Points.

    Args:
        encoded: Polyline string, e.g. Strava's map.summary_polyline.

    Returns:
        Points in route order. Empty for an empty string; a partial list for
        a string that ends in the middle of a coordinate pair.
    """
    points: List[Point] = []
    index = 0
    lat = 0
    lon = 0

    while index < len(encoded):
        dlat, index = _read_value(encoded, index)
        if dlat is None:
            break
        dlon, index = _read_value(encoded, index)
        if dlon is None:
            break
        lat += dlat
        lon += dlon
        points.append(Point(lat=lat * SCALE, lon=lon * SCALE))

    return points


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= _CONTINUATION:
        chunks.append(chr((_CONTINUATION | (value & _PAYLOAD)) + _CHUNK_OFFSET))
        value >>= 5
    chunks.append(chr(value + _CHUNK_OFFSET))
    return "".join(chunks)


def encode_polyline(points: Iterable[Tuple[float, float]]) -> str:
    """Encode (lat, lon) pairs into a polyline string. Inverse of decode_polyline."""
    parts = []
    prev_lat = 0
    prev_lon = 0
    for lat, lon in points:
        lat_e5 = int(round(lat / SCALE))
        lon_e5 = int(round(lon / SCALE))
        parts.append(_encode_value(lat_e5 - prev_lat))
        parts.append(_encode_value(lon_e5 - prev_lon))
        prev_lat, prev_lon = lat_e5, lon_e5
    return "".join(parts)
