"""
Great-circle helpers on a spherical Earth.

Distances are in metres, headings in degrees clockwise from north, and all
coordinates are WGS84 degrees. The formulas follow the spherical utilities
shipped with the Google Maps SDKs so that sampled points line up with the
polylines the Directions API hands back.
"""

from __future__ import annotations

import math

from .errors import GeometryDegenerate
from .models import LatLng, TimedPoint

# Mean Earth radius (IUGG), metres
EARTH_RADIUS_M = 6371009.0


def wrap(n: float, min_value: float, max_value: float) -> float:
    """Fold ``n`` into the half-open interval ``[min_value, max_value)``."""
    if min_value <= n < max_value:
        return n
    # Python's % is already a floored modulus
    return (n - min_value) % (max_value - min_value) + min_value


def _hav(x: float) -> float:
    return math.sin(x * 0.5) * math.sin(x * 0.5)


def _arc_hav(x: float) -> float:
    # Rounding can push x a hair above 1 for near-antipodal points
    return 2 * math.asin(math.sqrt(min(max(x, 0.0), 1.0)))


def _angle_between(a: LatLng, b: LatLng) -> float:
    lat1, lng1 = math.radians(a.lat), math.radians(a.lng)
    lat2, lng2 = math.radians(b.lat), math.radians(b.lng)
    return _arc_hav(_hav(lat1 - lat2) + _hav(lng1 - lng2) * math.cos(lat1) * math.cos(lat2))


def compute_distance_between(a: LatLng, b: LatLng) -> float:
    """Haversine great-circle distance between two coordinates, in metres."""
    return _angle_between(a, b) * EARTH_RADIUS_M


def compute_heading(a: LatLng, b: LatLng) -> float:
    """
    Initial bearing of the great circle from ``a`` to ``b``.

    Returns degrees in ``[-180, 180)``. Coincident points give 0.
    """
    from_lat = math.radians(a.lat)
    to_lat = math.radians(b.lat)
    d_lng = math.radians(b.lng) - math.radians(a.lng)
    heading = math.atan2(
        math.sin(d_lng) * math.cos(to_lat),
        math.cos(from_lat) * math.sin(to_lat) - math.sin(from_lat) * math.cos(to_lat) * math.cos(d_lng),
    )
    return wrap(math.degrees(heading), -180, 180)


def compute_offset(origin: LatLng, distance_m: float, heading: float) -> LatLng:
    """Point reached by travelling ``distance_m`` from ``origin`` along ``heading``."""
    distance = distance_m / EARTH_RADIUS_M
    heading_rad = math.radians(heading)
    from_lat = math.radians(origin.lat)
    cos_distance = math.cos(distance)
    sin_distance = math.sin(distance)
    sin_from_lat = math.sin(from_lat)
    cos_from_lat = math.cos(from_lat)
    sin_lat = cos_distance * sin_from_lat + sin_distance * cos_from_lat * math.cos(heading_rad)
    d_lng = math.atan2(
        sin_distance * cos_from_lat * math.sin(heading_rad),
        cos_distance - sin_from_lat * sin_lat,
    )
    return LatLng(
        lat=math.degrees(math.asin(max(-1.0, min(1.0, sin_lat)))),
        lng=origin.lng + math.degrees(d_lng),
    )


def compute_offset_origin(to: TimedPoint, distance_m: float, heading: float) -> TimedPoint:
    """
    Solve for the point that lands on ``to`` after travelling ``distance_m``
    along ``heading``.

    The forward formula is rearranged into a quadratic in the cosine/sine of
    the unknown latitude. The ``+`` root is tried first, then the ``-`` root;
    the first one giving a latitude within [-90, 90] wins.

    Raises :class:`GeometryDegenerate` when the discriminant is negative or
    neither root yields a valid latitude. The result keeps ``to``'s timestamp.
    """
    heading_rad = math.radians(heading)
    distance = distance_m / EARTH_RADIUS_M

    n1 = math.cos(distance)
    n2 = math.sin(distance) * math.cos(heading_rad)
    n3 = math.sin(distance) * math.sin(heading_rad)
    n4 = math.sin(math.radians(to.coord.lat))

    n12 = n1 * n1
    discriminant = n2 * n2 * n12 + n12 * n12 - n12 * n4 * n4
    if discriminant < 0 or n1 == 0:
        raise GeometryDegenerate(
            f"no origin {distance_m:.1f} m behind ({to.coord.lat}, {to.coord.lng}) at heading {heading:.2f}"
        )

    from_lat = None
    for root in (math.sqrt(discriminant), -math.sqrt(discriminant)):
        b = (n2 * n4 + root) / (n1 * n1 + n2 * n2)
        a = (n4 - n2 * b) / n1
        candidate = math.atan2(a, b)
        if -math.pi / 2 <= candidate <= math.pi / 2:
            from_lat = candidate
            break

    if from_lat is None:
        raise GeometryDegenerate(
            f"no valid latitude {distance_m:.1f} m behind ({to.coord.lat}, {to.coord.lng})"
        )

    from_lng = math.radians(to.coord.lng) - math.atan2(n3, n1 * math.cos(from_lat) - n2 * math.sin(from_lat))
    return TimedPoint(
        coord=LatLng(lat=math.degrees(from_lat), lng=math.degrees(from_lng)),
        time=to.time,
    )
