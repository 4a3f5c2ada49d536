"""Planning layer exports: stage timelines and viewport projection."""

from .timeline import blocks_to_frame, build_stage_timeline, build_timelines, timeline_end
from .viewport import (
    PillBounds,
    Segment,
    WeekSegment,
    compute_pill_bounds,
    day_offset,
    project_segments,
    project_timeline,
    project_to_week,
)

__all__ = [
    "build_stage_timeline",
    "build_timelines",
    "timeline_end",
    "blocks_to_frame",
    "PillBounds",
    "Segment",
    "WeekSegment",
    "day_offset",
    "compute_pill_bounds",
    "project_segments",
    "project_timeline",
    "project_to_week",
]
