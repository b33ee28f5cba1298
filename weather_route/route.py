"""
Route geometry to time-stamped trace.

A Directions route is a tree: legs hold steps, and a step either carries its
own polyline (a leaf) or a list of finer sub-steps (a composite). The trace is
the flattened list of decoded coordinates, each stamped with the time the
traveller starts the step it belongs to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Sequence, Tuple, Union

from .errors import DecodeError
from .models import LatLng, Route, Step, TimedPoint
from .polyline import decode_polyline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeafStep:
    polyline: str
    duration: timedelta


@dataclass(frozen=True)
class CompositeStep:
    """A step split into sub-steps; only the sub-steps' geometry and durations count."""

    sub_steps: Tuple["RouteStep", ...]


RouteStep = Union[LeafStep, CompositeStep]


def to_route_step(step: Step) -> RouteStep:
    """Convert a Directions step into the leaf/composite form used by the trace builder."""
    if step.steps:
        return CompositeStep(sub_steps=tuple(to_route_step(s) for s in step.steps))
    return LeafStep(polyline=step.polyline.points, duration=timedelta(seconds=step.duration.value))


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _walk_step(step: RouteStep, cursor: datetime, label: str, out: List[TimedPoint]) -> datetime:
    if isinstance(step, CompositeStep):
        for k, sub_step in enumerate(step.sub_steps):
            cursor = _walk_step(sub_step, cursor, f"{label}.{k}", out)
        return cursor

    try:
        coords = decode_polyline(step.polyline)
    except DecodeError as exc:
        logger.error("[TRACE] Unable to decode polyline of %s: %s", label, exc)
        raise DecodeError(str(exc), step=label) from exc

    out.extend(TimedPoint(coord=LatLng(lat=lat, lng=lng), time=cursor) for lat, lng in coords)
    return cursor + step.duration


def build_trace(routes: Sequence[Route], start_time: datetime) -> Tuple[List[TimedPoint], datetime]:
    """
    Decode the first route into a trace of time-stamped points.

    Returns the trace and the time cursor after the last step (the estimated
    arrival time). Raises DecodeError, naming the step, if any polyline is
    malformed; no partial trace is returned.
    """
    cursor = _as_utc(start_time)
    trace: List[TimedPoint] = []
    if not routes:
        return trace, cursor

    for i, leg in enumerate(routes[0].legs):
        for j, step in enumerate(leg.steps):
            cursor = _walk_step(to_route_step(step), cursor, f"leg {i} step {j}", trace)

    logger.debug("[TRACE] %d points, arrival %s", len(trace), cursor.isoformat())
    return trace, cursor
