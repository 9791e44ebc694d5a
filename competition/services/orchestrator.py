# competition/services/orchestrator.py
"""
Entry points used by views, tasks and commands.

One attempt completion = finalize -> progression -> leaderboard, all in one
transaction. The finalize step is the one-way STARTED -> terminal gate, so a
second submit/expire for the same attempt fails before anything else runs and
progression is applied at most once per attempt.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.utils import timezone

from common.enums import AttemptStatus
from learning.models import Enrollment
from ..exceptions import AttemptAlreadyFinalized, AttemptNotOverdue, StorageUnavailable, StudentNotEnrolled
from ..models import Quiz, QuizAttempt
from . import attempts, leaderboard, progression
from .storage import run_in_transaction

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass(frozen=True)
class CompletionResult:
    attempt: QuizAttempt
    score: int
    passed: bool
    points_awarded: int
    previous_rank: int | None
    rank: int | None

    @property
    def rank_delta(self) -> int | None:
        """Positive when the student moved up the course leaderboard."""
        if self.previous_rank is None or self.rank is None:
            return None
        return self.previous_rank - self.rank


def _complete(finalize, attempt_id, now):
    outcome = finalize(attempt_id, now=now)
    previous = leaderboard.rank_of(outcome.course_id, outcome.student_id)
    progression.apply_outcome(outcome)
    leaderboard.recompute_leaderboard(outcome.course_id, now=now)
    return CompletionResult(
        attempt=outcome.attempt,
        score=outcome.score,
        passed=outcome.passed,
        points_awarded=outcome.points_earned if outcome.passed else 0,
        previous_rank=previous,
        rank=leaderboard.rank_of(outcome.course_id, outcome.student_id),
    )


def _start(student_id, quiz_id, now):
    student = User.objects.get(pk=student_id)
    quiz = Quiz.objects.select_related("lesson").get(pk=quiz_id)
    if not Enrollment.objects.is_active_member(student.pk, quiz.lesson.course_id):
        raise StudentNotEnrolled()
    return attempts.start(student, quiz, now=now)


def _expire_stale(student_id, quiz_id, now):
    stale = (QuizAttempt.objects
             .select_related("quiz")
             .filter(student_id=student_id, quiz_id=quiz_id, status=AttemptStatus.STARTED)
             .first())
    if not stale or not stale.is_overdue(now):
        return
    try:
        expire_attempt(stale.pk, now=now)
    except (AttemptAlreadyFinalized, AttemptNotOverdue):
        # finalized concurrently
        pass


def start_attempt(student_id, quiz_id, *, now=None) -> QuizAttempt:
    """
    Open a new attempt. A stale open attempt on the same quiz would block it,
    so that one is expired first, through the full pipeline and in its own
    transaction: the expiry stays committed even when the start itself is
    then refused.
    """
    now = now or timezone.now()
    _expire_stale(student_id, quiz_id, now)
    return run_in_transaction(_start, student_id, quiz_id, now)


def submit_attempt(attempt_id, answers, *, now=None) -> CompletionResult:
    now = now or timezone.now()

    def finalize(pk, now):
        return attempts.submit(pk, answers, now=now)

    return run_in_transaction(_complete, finalize, attempt_id, now)


def expire_attempt(attempt_id, *, now=None) -> CompletionResult:
    return run_in_transaction(_complete, attempts.expire, attempt_id, now or timezone.now())


def expire_overdue_attempts(*, now=None, limit=None) -> int:
    """
    Background sweep: expire open attempts past their deadline, oldest first.
    Each attempt is its own unit of work; one that cannot be stored is logged
    and left for the next sweep. Returns the number expired.
    """
    now = now or timezone.now()
    candidates = list(attempts.overdue_attempts(now).values_list("pk", flat=True)[:limit])

    expired = failed = 0
    for attempt_id in candidates:
        try:
            expire_attempt(attempt_id, now=now)
        except (AttemptAlreadyFinalized, AttemptNotOverdue):
            # finalized by a concurrent submit between the scan and the lock
            continue
        except StorageUnavailable:
            logger.warning("Expiry sweep skipped attempt %s: storage unavailable", attempt_id)
            failed += 1
            continue
        expired += 1
    if expired or failed:
        logger.info("Expiry sweep closed %s attempt(s), %s left for the next run", expired, failed)
    return expired


def refresh_course_leaderboard(course_id, *, now=None):
    return run_in_transaction(leaderboard.recompute_leaderboard, course_id, now=now)


# ---------- Enrollment changes ----------
# The enrollment write and the course re-rank commit together or not at all.

def _enroll(student_id, course_id, now):
    enrollment, created = Enrollment.objects.get_or_create(student_id=student_id, course_id=course_id)
    if created:
        leaderboard.recompute_leaderboard(course_id, now=now)
    return enrollment, created


def enroll_student(student_id, course_id, *, now=None):
    """Returns (enrollment, created)."""
    return run_in_transaction(_enroll, student_id, course_id, now)


def _set_enrollment_status(enrollment_id, status, now):
    enrollment = Enrollment.objects.select_for_update().get(pk=enrollment_id)
    enrollment.status = status
    enrollment.save(update_fields=["status"])
    leaderboard.recompute_leaderboard(enrollment.course_id, now=now)
    return enrollment


def set_enrollment_status(enrollment_id, status, *, now=None):
    return run_in_transaction(_set_enrollment_status, enrollment_id, status, now)


def _remove_enrollment(enrollment_id, now):
    enrollment = Enrollment.objects.select_for_update().get(pk=enrollment_id)
    course_id = enrollment.course_id
    enrollment.delete()
    leaderboard.recompute_leaderboard(course_id, now=now)


def remove_enrollment(enrollment_id, *, now=None):
    run_in_transaction(_remove_enrollment, enrollment_id, now)
