from datetime import timedelta

import pytest

from hostel_complaints.models.base.types import utcnow
from hostel_complaints.repositories.complaint.complaint_repository import ResolutionRecord
from hostel_complaints.services.assignment.scoring import (
    CandidateProfile,
    rank_candidates,
    score_candidate,
)
from hostel_complaints.services.staff.efficiency import (
    compute_efficiency_score,
    score_from_resolutions,
)

NOW = utcnow()


def profile(staff_id="s1", expertise=50.0, efficiency=50.0, workload=0, idle_hours=0.0):
    return CandidateProfile(
        staff_id=staff_id,
        name=staff_id,
        expertise=expertise,
        efficiency_score=efficiency,
        current_workload=workload,
        last_active=NOW - timedelta(hours=idle_hours),
    )


def test_perfect_candidate_scores_one_hundred():
    breakdown = score_candidate(profile(expertise=100, efficiency=100), max_workload=5, now=NOW)

    assert breakdown.total == pytest.approx(100.0)


def test_component_weights():
    breakdown = score_candidate(profile(expertise=50, efficiency=50, workload=2, idle_hours=120), 4, now=NOW)

    assert breakdown.expertise == pytest.approx(20.0)
    assert breakdown.efficiency == pytest.approx(15.0)
    assert breakdown.workload == pytest.approx(10.0)
    assert breakdown.availability == pytest.approx(5.0)


def test_availability_bottoms_out_after_ten_days():
    assert score_candidate(profile(idle_hours=500), 5, now=NOW).availability == 0.0


def test_members_at_cap_are_not_ranked():
    ranked = rank_candidates([profile("busy", workload=3), profile("free", workload=1)], max_workload=3, now=NOW)

    assert [c.profile.staff_id for c in ranked] == ["free"]


def test_expertise_decides_between_otherwise_equal_members():
    ranked = rank_candidates([profile("novice", expertise=20), profile("expert", expertise=90)], 5, now=NOW)

    assert [c.profile.staff_id for c in ranked] == ["expert", "novice"]


def test_ties_go_to_member_idle_longest():
    ranked = rank_candidates([profile("recent", idle_hours=300), profile("idle", idle_hours=400)], 5, now=NOW)

    assert ranked[0].score == pytest.approx(ranked[1].score)
    assert [c.profile.staff_id for c in ranked] == ["idle", "recent"]


def test_efficiency_bounds():
    assert compute_efficiency_score(0, 0, 0) == 0.0
    assert compute_efficiency_score(20, 0, 20) == 100.0
    assert compute_efficiency_score(1, 168, 0) == 2.0
    assert compute_efficiency_score(50, 0, 50) == 100.0


def test_more_resolutions_never_lower_the_score():
    scores = [compute_efficiency_score(n, 24, n) for n in range(1, 30)]

    assert scores == sorted(scores)


def test_faster_resolutions_never_lower_the_score():
    scores = [compute_efficiency_score(5, hours, 5) for hours in (300, 168, 72, 24, 1, 0)]

    assert scores == sorted(scores)


def test_fewer_reopens_never_lower_the_score():
    scores = [compute_efficiency_score(5, 24, clean) for clean in range(0, 6)]

    assert scores == sorted(scores)


def test_score_from_resolutions():
    records = [
        ResolutionRecord(created_at=NOW - timedelta(hours=24), resolved_at=NOW, reopen_count=0),
        ResolutionRecord(created_at=NOW - timedelta(hours=72), resolved_at=NOW, reopen_count=1),
    ]

    # volume 2/20*40=4, speed (1-48/168)*40, quality 1/2*20=10
    expected = round(4 + (1 - 48 / 168) * 40 + 10, 2)
    assert score_from_resolutions(records) == expected
    assert score_from_resolutions([]) is None
