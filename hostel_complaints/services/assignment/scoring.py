"""
Candidate scoring for automated assignment.

Score components (total out of 100):
    expertise     0-40  proficiency in the complaint category
    efficiency    0-30  rolling efficiency score
    workload      0-20  fewer open assignments score higher
    availability  0-10  decays linearly to 0 over 240 hours since last activity
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from hostel_complaints.models.base.types import ensure_utc, utcnow

EXPERTISE_WEIGHT = 40.0
EFFICIENCY_WEIGHT = 30.0
WORKLOAD_WEIGHT = 20.0
AVAILABILITY_WEIGHT = 10.0
AVAILABILITY_DECAY_HOURS = 240.0


@dataclass(frozen=True)
class CandidateProfile:
    """Inputs the scoring function needs about one staff member."""

    staff_id: str
    name: str
    expertise: float
    efficiency_score: float
    current_workload: int
    last_active: datetime


@dataclass(frozen=True)
class ScoreBreakdown:
    expertise: float
    efficiency: float
    workload: float
    availability: float

    @property
    def total(self) -> float:
        return self.expertise + self.efficiency + self.workload + self.availability


@dataclass(frozen=True)
class ScoredCandidate:
    profile: CandidateProfile
    breakdown: ScoreBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.total


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def hours_since(moment: datetime, now: Optional[datetime] = None) -> float:
    now = ensure_utc(now) if now is not None else utcnow()
    return max(0.0, (now - ensure_utc(moment)).total_seconds() / 3600.0)


def score_candidate(
    profile: CandidateProfile,
    max_workload: int,
    now: Optional[datetime] = None,
) -> ScoreBreakdown:
    """
    Score one candidate.

    Args:
        profile: Candidate inputs
        max_workload: Workload cap from the assignment configuration
        now: Reference time for the availability component

    Returns:
        Per-component scores
    """
    expertise = _clamp(profile.expertise, 0.0, 100.0) / 100.0 * EXPERTISE_WEIGHT
    efficiency = _clamp(profile.efficiency_score, 0.0, 100.0) / 100.0 * EFFICIENCY_WEIGHT

    cap = max(1, max_workload)
    workload = max(0.0, WORKLOAD_WEIGHT - (profile.current_workload / cap) * WORKLOAD_WEIGHT)

    idle_hours = hours_since(profile.last_active, now)
    availability = max(0.0, AVAILABILITY_WEIGHT * (1.0 - idle_hours / AVAILABILITY_DECAY_HOURS))

    return ScoreBreakdown(
        expertise=expertise,
        efficiency=efficiency,
        workload=workload,
        availability=availability,
    )


def rank_candidates(
    profiles: Iterable[CandidateProfile],
    max_workload: int,
    now: Optional[datetime] = None,
) -> List[ScoredCandidate]:
    """
    Drop candidates at or over the cap and rank the rest best first.

    Ties on total score go to the lower workload, then to the member
    who has been idle longest.
    """
    now = now or utcnow()
    eligible = [p for p in profiles if p.current_workload < max_workload]
    scored = [ScoredCandidate(p, score_candidate(p, max_workload, now)) for p in eligible]
    scored.sort(
        key=lambda c: (
            -round(c.score, 9),
            c.profile.current_workload,
            ensure_utc(c.profile.last_active),
            c.profile.staff_id,
        )
    )
    return scored
