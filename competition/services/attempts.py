# competition/services/attempts.py
"""
Quiz-attempt state machine: STARTED -> SUBMITTED | EXPIRED.

The terminal transition is a conditional UPDATE on ``status=STARTED`` so it
can succeed at most once per attempt, whatever the callers do concurrently.
These functions expect to run inside a transaction (see services.storage).
"""
from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from datetime import timedelta
from functools import reduce

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from common.enums import AnswerOption, AttemptStatus, TERMINAL_ATTEMPT_STATUSES
from ..exceptions import (
    AttemptAlreadyFinalized,
    AttemptAlreadyInProgress,
    AttemptLimitExceeded,
    AttemptNotOverdue,
    QuizNotPublished,
)
from ..models import AttemptAnswer, QuizAttempt
from .scoring import ScoreResult, answer_key_for, score_answers

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass(frozen=True)
class AttemptOutcome:
    """What the rest of the pipeline needs to know about a finalized attempt."""
    attempt: QuizAttempt
    course_id: int
    student_id: int
    status: str
    score: int
    passed: bool
    points_earned: int
    result: ScoreResult | None = None


def completed_attempt_count(student, quiz) -> int:
    return QuizAttempt.objects.filter(
        student=student, quiz=quiz, status__in=TERMINAL_ATTEMPT_STATUSES
    ).count()


def start(student, quiz, *, now=None) -> QuizAttempt:
    if not quiz.is_published:
        raise QuizNotPublished()

    now = now or timezone.now()
    # serialize starts per student; the partial unique constraint backs this up
    User.objects.select_for_update().filter(pk=student.pk).first()

    if QuizAttempt.objects.filter(student=student, quiz=quiz, status=AttemptStatus.STARTED).exists():
        raise AttemptAlreadyInProgress()
    if completed_attempt_count(student, quiz) >= quiz.max_attempts:
        raise AttemptLimitExceeded()

    try:
        with transaction.atomic():
            attempt = QuizAttempt.objects.create(quiz=quiz, student=student, started_at=now)
    except IntegrityError as exc:
        raise AttemptAlreadyInProgress() from exc

    logger.info("Attempt %s started: student=%s quiz=%s", attempt.pk, student.pk, quiz.pk)
    return attempt


def _lock_open_attempt(attempt_id) -> QuizAttempt:
    attempt = (QuizAttempt.objects
               .select_for_update(of=("self",))
               .select_related("quiz", "quiz__lesson")
               .get(pk=attempt_id))
    if attempt.status != AttemptStatus.STARTED:
        raise AttemptAlreadyFinalized()
    return attempt


def _close(attempt: QuizAttempt, *, status, score, passed, points, now) -> QuizAttempt:
    elapsed = max(0, int((now - attempt.started_at).total_seconds()))
    updated = (QuizAttempt.objects
               .filter(pk=attempt.pk, status=AttemptStatus.STARTED)
               .update(status=status, score=score, passed=passed, points_earned=points,
                       time_taken_seconds=elapsed, completed_at=now, updated_at=now))
    if not updated:
        raise AttemptAlreadyFinalized()
    attempt.refresh_from_db()
    return attempt


def _expired_outcome(attempt: QuizAttempt, now) -> AttemptOutcome:
    attempt = _close(attempt, status=AttemptStatus.EXPIRED, score=0, passed=False, points=0, now=now)
    logger.info("Attempt %s expired after %ss", attempt.pk, attempt.time_taken_seconds)
    return AttemptOutcome(
        attempt=attempt,
        course_id=attempt.quiz.lesson.course_id,
        student_id=attempt.student_id,
        status=attempt.status,
        score=0,
        passed=False,
        points_earned=0,
    )


def submit(attempt_id, answers, *, now=None) -> AttemptOutcome:
    """
    Finalize an open attempt. Late submissions are void: the attempt is
    expired with score 0 and the answers are not graded.
    """
    now = now or timezone.now()
    attempt = _lock_open_attempt(attempt_id)
    quiz = attempt.quiz

    if attempt.is_overdue(now):
        return _expired_outcome(attempt, now)

    result = score_answers(answer_key_for(quiz), answers, is_published=quiz.is_published)
    passed = result.passed(quiz.passing_score)
    attempt = _close(attempt, status=AttemptStatus.SUBMITTED, score=result.score, passed=passed,
                     points=result.earned_points, now=now)
    _record_answers(attempt, answers or {}, result)

    logger.info("Attempt %s submitted: score=%s passed=%s points=%s",
                attempt.pk, result.score, passed, result.earned_points)
    return AttemptOutcome(
        attempt=attempt,
        course_id=quiz.lesson.course_id,
        student_id=attempt.student_id,
        status=attempt.status,
        score=result.score,
        passed=passed,
        points_earned=result.earned_points,
        result=result,
    )


def expire(attempt_id, *, now=None) -> AttemptOutcome:
    now = now or timezone.now()
    attempt = _lock_open_attempt(attempt_id)
    if not attempt.is_overdue(now):
        raise AttemptNotOverdue()
    return _expired_outcome(attempt, now)


def _record_answers(attempt: QuizAttempt, answers, result: ScoreResult):
    submitted = {str(k): (v.strip().upper() if isinstance(v, str) else "") for k, v in answers.items()}
    points = dict(attempt.quiz.questions.values_list("id", "points"))
    rows = []
    for qid, pts in points.items():
        ok = result.correctness.get(str(qid), False)
        choice = submitted.get(str(qid), "")
        rows.append(AttemptAnswer(
            attempt=attempt,
            question_id=qid,
            selected_option=choice if choice in AnswerOption.values else "",
            is_correct=ok,
            points_awarded=pts if ok else 0,
        ))
    AttemptAnswer.objects.bulk_create(rows)


def overdue_attempts(now=None):
    """
    Open attempts strictly past their deadline, oldest first.

    Deadlines depend on each quiz's time limit, so the filter is one
    ``started_at`` cut-off per distinct limit among open attempts.
    """
    now = now or timezone.now()
    open_attempts = QuizAttempt.objects.filter(status=AttemptStatus.STARTED)
    limits = (open_attempts.order_by()
              .values_list("quiz__time_limit_minutes", flat=True)
              .distinct())
    cutoffs = [Q(quiz__time_limit_minutes=m, started_at__lt=now - timedelta(minutes=m)) for m in limits]
    if not cutoffs:
        return open_attempts.none()
    return open_attempts.filter(reduce(operator.or_, cutoffs)).order_by("started_at", "pk")
