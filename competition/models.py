from __future__ import annotations

import uuid
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from common.enums import AnswerOption, AttemptStatus

User = settings.AUTH_USER_MODEL


# ----------------------------
# Common
# ----------------------------

class TimeStampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Quiz(TimeStampedModel):
    lesson = models.OneToOneField("learning.Lesson", on_delete=models.CASCADE, related_name="quiz")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    time_limit_minutes = models.PositiveIntegerField(default=30, validators=[MinValueValidator(1)])
    passing_score = models.PositiveIntegerField(
        default=70, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    max_attempts = models.PositiveIntegerField(default=3, validators=[MinValueValidator(1)])
    is_published = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=Q(passing_score__lte=100), name="quiz_passing_score_lte_100"),
            models.CheckConstraint(condition=Q(max_attempts__gte=1), name="quiz_max_attempts_gte_1"),
            models.CheckConstraint(condition=Q(time_limit_minutes__gte=1), name="quiz_time_limit_gte_1"),
        ]

    @property
    def course_id(self):
        return self.lesson.course_id

    @property
    def time_limit(self) -> timedelta:
        return timedelta(minutes=self.time_limit_minutes)

    def __str__(self):
        return self.title


class QuizQuestion(TimeStampedModel):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    text = models.TextField()
    option_a = models.CharField(max_length=500)
    option_b = models.CharField(max_length=500)
    option_c = models.CharField(max_length=500, blank=True)
    option_d = models.CharField(max_length=500, blank=True)
    correct_answer = models.CharField(max_length=1, choices=AnswerOption.choices)
    points = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    order = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ("quiz", "order", "created_at")
        indexes = [models.Index(fields=["quiz", "order"], name="quizquestion_quiz_order_idx")]
        constraints = [
            models.CheckConstraint(condition=Q(points__gte=1), name="quizquestion_points_gte_1"),
        ]

    def options(self) -> dict[str, str]:
        slots = {
            AnswerOption.A: self.option_a,
            AnswerOption.B: self.option_b,
            AnswerOption.C: self.option_c,
            AnswerOption.D: self.option_d,
        }
        return {str(k): v for k, v in slots.items() if v}

    def clean(self):
        if self.correct_answer not in self.options():
            raise ValidationError("correct_answer must point at a filled option slot")

    def __str__(self):
        return f"Q{self.order}: {self.text[:60]}"


class QuizAttempt(TimeStampedModel):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="attempts")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="quiz_attempts")

    status = models.CharField(max_length=16, choices=AttemptStatus.choices, default=AttemptStatus.STARTED)
    score = models.PositiveSmallIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    points_earned = models.PositiveIntegerField(default=0)
    passed = models.BooleanField(default=False)
    time_taken_seconds = models.PositiveIntegerField(default=0)

    started_at   = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["quiz", "student", "status"], name="attempt_quiz_student_idx"),
            models.Index(fields=["student", "passed", "completed_at"], name="attempt_student_passed_idx"),
            models.Index(fields=["status", "started_at"], name="attempt_status_started_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["quiz", "student"],
                condition=Q(status=AttemptStatus.STARTED),
                name="uniq_open_attempt_per_student_quiz",
            ),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status != AttemptStatus.STARTED

    def deadline(self):
        return self.started_at + self.quiz.time_limit

    def is_overdue(self, now=None) -> bool:
        now = now or timezone.now()
        return now - self.started_at > self.quiz.time_limit

    def clean(self):
        if self.completed_at and self.completed_at < self.started_at:
            raise ValidationError("completed_at cannot be earlier than started_at")

    def __str__(self):
        return f"{self.student} · {self.quiz} · {self.status}"


class AttemptAnswer(TimeStampedModel):
    attempt  = models.ForeignKey(QuizAttempt, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(QuizQuestion, on_delete=models.CASCADE, related_name="answers")

    selected_option = models.CharField(max_length=1, choices=AnswerOption.choices, blank=True)
    is_correct      = models.BooleanField(default=False)
    points_awarded  = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["attempt", "question"], name="uq_attempt_answer_question"),
        ]


class LeaderboardEntry(models.Model):
    """
    One row per (course, student) holding the course-scoped point total.
    Rows of a course are replaced wholesale on every ranking pass.
    """
    course  = models.ForeignKey("learning.Course", on_delete=models.CASCADE, related_name="leaderboard")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="leaderboard_rows")

    total_points  = models.PositiveIntegerField(default=0)
    rank_position = models.PositiveIntegerField()
    last_qualified_at = models.DateTimeField(null=True, blank=True)
    avg_quiz_score = models.PositiveSmallIntegerField(default=0)  # rounded mean of submitted scores, 0-100
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ("course", "rank_position", F("last_qualified_at").asc(nulls_last=True), "student_id")
        unique_together = ("course", "student")
        indexes = [models.Index(fields=["course", "rank_position"], name="leaderboard_course_rank_idx")]

    def __str__(self):
        return f"#{self.rank_position} {self.student} ({self.total_points})"
