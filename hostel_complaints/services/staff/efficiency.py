"""
Efficiency score computation from resolution history.
"""

from typing import Iterable, Optional

from hostel_complaints.models.base.types import ensure_utc
from hostel_complaints.repositories.complaint.complaint_repository import ResolutionRecord

VOLUME_WEIGHT = 40.0
SPEED_WEIGHT = 40.0
QUALITY_WEIGHT = 20.0
VOLUME_SATURATION = 20
SPEED_HORIZON_HOURS = 168.0


def compute_efficiency_score(
    resolution_count: int,
    average_resolution_hours: float,
    clean_resolutions: int,
) -> float:
    """
    Efficiency from resolution volume, speed and quality.

    volume   min(n, 20) / 20 * 40
    speed    max(0, 1 - avg_hours / 168) * 40
    quality  clean / n * 20   (clean = never reopened)

    More resolutions, faster resolutions and more clean resolutions never
    lower the score. The result is clamped to [0, 100].
    """
    if resolution_count <= 0:
        return 0.0

    volume = min(resolution_count, VOLUME_SATURATION) / VOLUME_SATURATION * VOLUME_WEIGHT
    speed = max(0.0, 1.0 - max(0.0, average_resolution_hours) / SPEED_HORIZON_HOURS) * SPEED_WEIGHT
    clean = max(0, min(clean_resolutions, resolution_count))
    quality = clean / resolution_count * QUALITY_WEIGHT

    return round(max(0.0, min(100.0, volume + speed + quality)), 2)


def score_from_resolutions(records: Iterable[ResolutionRecord]) -> Optional[float]:
    """Efficiency for a member's resolutions, or None when there are none."""
    records = list(records)
    if not records:
        return None

    hours = [
        max(0.0, (ensure_utc(r.resolved_at) - ensure_utc(r.created_at)).total_seconds() / 3600.0)
        for r in records
    ]
    clean = sum(1 for r in records if not r.reopen_count)
    return compute_efficiency_score(len(records), sum(hours) / len(hours), clean)
