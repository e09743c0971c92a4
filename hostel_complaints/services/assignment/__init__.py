from hostel_complaints.services.assignment.assignment_engine import AssignmentEngine
from hostel_complaints.services.assignment.config_provider import (
    AssignmentConfigProvider,
    AssignmentConfigSnapshot,
    CategorySettingSnapshot,
)
from hostel_complaints.services.assignment.scoring import (
    CandidateProfile,
    ScoreBreakdown,
    ScoredCandidate,
    rank_candidates,
    score_candidate,
)

__all__ = [
    "AssignmentConfigProvider",
    "AssignmentConfigSnapshot",
    "AssignmentEngine",
    "CandidateProfile",
    "CategorySettingSnapshot",
    "ScoreBreakdown",
    "ScoredCandidate",
    "rank_candidates",
    "score_candidate",
]
