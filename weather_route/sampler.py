import logging
from typing import List, Sequence

from .errors import GeometryDegenerate
from .geodesy import compute_distance_between, compute_heading, compute_offset_origin
from .models import TimedPoint

logger = logging.getLogger(__name__)

# Five miles
DEFAULT_INTERVAL_M = 8046.72


def sample_every_n_meters(trace: Sequence[TimedPoint], interval_m: float = DEFAULT_INTERVAL_M) -> List[TimedPoint]:
    """
    Down-sample a trace to one anchor roughly every ``interval_m`` metres of travel.

    The first point is always kept. Each time the distance travelled since the
    previous anchor goes past the interval, the anchor is placed exactly
    ``interval_m`` along the path by stepping back from the current point along
    the bearing of the segment being crossed; it inherits that point's time.
    The last trace point is appended at the end, even if it nearly coincides
    with the last anchor.

    Traces of one or two points are returned as-is.
    """
    if not trace:
        raise ValueError("cannot sample an empty trace")

    samples = [trace[0]]
    if len(trace) <= 2:
        samples.extend(trace[1:])
        return samples

    accumulated = 0.0
    prev = trace[0]
    for p in trace:
        accumulated += compute_distance_between(prev.coord, p.coord)
        if accumulated <= interval_m:
            prev = p
            continue

        overshoot = accumulated - interval_m
        heading = compute_heading(prev.coord, p.coord)
        try:
            anchor = compute_offset_origin(p, overshoot, heading)
        except GeometryDegenerate as exc:
            logger.debug("[SAMPLER] %s; keeping trace point instead", exc)
            anchor = p

        samples.append(anchor)
        accumulated = 0.0
        prev = anchor

    samples.append(trace[-1])
    return samples
