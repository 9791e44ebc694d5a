# competition/services/leaderboard.py
"""
Per-course ranking.

Course points are the sum of ``points_earned`` over a student's passed
attempts on the course's quizzes. Only ACTIVE enrollments are ranked.
Ordering is points desc, then earliest most-recent qualifying attempt, then
student id; equal points share a rank and the next distinct total ranks at
(number of strictly-better students + 1), e.g. 100, 100, 90 -> 1, 1, 3.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db.models import Avg, F, Max, Sum
from django.utils import timezone

from common.enums import AttemptStatus
from learning.models import Course, Enrollment
from ..models import LeaderboardEntry, QuizAttempt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Standing:
    student_id: int
    points: int = 0
    last_qualified_at: datetime | None = None
    avg_score: int = 0


@dataclass(frozen=True)
class RankedStanding:
    student_id: int
    points: int
    rank: int
    last_qualified_at: datetime | None = None
    avg_score: int = 0


def _order_key(s: Standing):
    # students who never qualified sort after everyone on the same total
    return (-s.points, s.last_qualified_at is None, s.last_qualified_at or datetime.min, s.student_id)


def rank_standings(standings) -> list[RankedStanding]:
    ordered = sorted(standings, key=_order_key)
    ranked = []
    rank = 0
    prev_points = None
    for position, s in enumerate(ordered, start=1):
        if s.points != prev_points:
            rank = position
            prev_points = s.points
        ranked.append(RankedStanding(
            student_id=s.student_id,
            points=s.points,
            rank=rank,
            last_qualified_at=s.last_qualified_at,
            avg_score=s.avg_score,
        ))
    return ranked


def course_standings(course_id) -> list[Standing]:
    members = list(
        Enrollment.objects.active().filter(course_id=course_id).values_list("student_id", flat=True)
    )
    totals = {
        row["student_id"]: row
        for row in (QuizAttempt.objects
                    .filter(quiz__lesson__course_id=course_id,
                            student_id__in=members,
                            status=AttemptStatus.SUBMITTED,
                            passed=True)
                    .values("student_id")
                    .annotate(points=Sum("points_earned"), last=Max("completed_at")))
    }
    # mean over every submitted attempt, passed or not; expired attempts are left out
    averages = dict(
        QuizAttempt.objects
        .filter(quiz__lesson__course_id=course_id,
                student_id__in=members,
                status=AttemptStatus.SUBMITTED)
        .values("student_id")
        .annotate(avg=Avg("score"))
        .values_list("student_id", "avg")
    )
    standings = []
    for sid in members:
        avg_score = round(averages.get(sid) or 0)
        row = totals.get(sid)
        if row:
            standings.append(Standing(sid, int(row["points"] or 0), row["last"], avg_score))
        else:
            standings.append(Standing(sid, avg_score=avg_score))
    return standings


def recompute_leaderboard(course_id, *, now=None) -> list[LeaderboardEntry]:
    """
    Replace every leaderboard row of the course in one step.

    Must run inside a transaction: the course row is locked first, so two
    recomputations of the same course are serialized while different courses
    proceed in parallel. Readers only ever see the committed full set.
    """
    now = now or timezone.now()
    course = Course.objects.select_for_update().get(pk=course_id)

    ranked = rank_standings(course_standings(course.pk))

    LeaderboardEntry.objects.filter(course=course).delete()
    rows = LeaderboardEntry.objects.bulk_create([
        LeaderboardEntry(
            course=course,
            student_id=r.student_id,
            total_points=r.points,
            rank_position=r.rank,
            last_qualified_at=r.last_qualified_at,
            avg_quiz_score=r.avg_score,
            updated_at=now,
        )
        for r in ranked
    ])
    logger.info("Leaderboard recomputed for course %s: %s rows", course.pk, len(rows))
    return rows


def leaderboard_for(course_id):
    return (LeaderboardEntry.objects
            .filter(course_id=course_id)
            .select_related("student")
            .order_by("rank_position", F("last_qualified_at").asc(nulls_last=True), "student_id"))


def rank_of(course_id, student_id) -> int | None:
    return (LeaderboardEntry.objects
            .filter(course_id=course_id, student_id=student_id)
            .values_list("rank_position", flat=True)
            .first())
