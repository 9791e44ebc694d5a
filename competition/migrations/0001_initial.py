import uuid

import django.core.validators
import django.db.models.deletion
import django.db.models.expressions
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("learning", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Quiz",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("time_limit_minutes", models.PositiveIntegerField(
                    default=30, validators=[django.core.validators.MinValueValidator(1)],
                )),
                ("passing_score", models.PositiveIntegerField(
                    default=70,
                    validators=[
                        django.core.validators.MinValueValidator(0),
                        django.core.validators.MaxValueValidator(100),
                    ],
                )),
                ("max_attempts", models.PositiveIntegerField(
                    default=3, validators=[django.core.validators.MinValueValidator(1)],
                )),
                ("is_published", models.BooleanField(default=False)),
                ("lesson", models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="quiz",
                    to="learning.lesson",
                )),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("passing_score__lte", 100)), name="quiz_passing_score_lte_100",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("max_attempts__gte", 1)), name="quiz_max_attempts_gte_1",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("time_limit_minutes__gte", 1)), name="quiz_time_limit_gte_1",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuizQuestion",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("text", models.TextField()),
                ("option_a", models.CharField(max_length=500)),
                ("option_b", models.CharField(max_length=500)),
                ("option_c", models.CharField(blank=True, max_length=500)),
                ("option_d", models.CharField(blank=True, max_length=500)),
                ("correct_answer", models.CharField(
                    choices=[("A", "Option A"), ("B", "Option B"), ("C", "Option C"), ("D", "Option D")],
                    max_length=1,
                )),
                ("points", models.PositiveIntegerField(
                    default=1, validators=[django.core.validators.MinValueValidator(1)],
                )),
                ("order", models.PositiveIntegerField(default=1)),
                ("quiz", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="questions",
                    to="competition.quiz",
                )),
            ],
            options={
                "ordering": ("quiz", "order", "created_at"),
                "indexes": [models.Index(fields=["quiz", "order"], name="quizquestion_quiz_order_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("points__gte", 1)), name="quizquestion_points_gte_1",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuizAttempt",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("status", models.CharField(
                    choices=[("started", "Started"), ("submitted", "Submitted"), ("expired", "Expired")],
                    default="started",
                    max_length=16,
                )),
                ("score", models.PositiveSmallIntegerField(
                    default=0,
                    validators=[
                        django.core.validators.MinValueValidator(0),
                        django.core.validators.MaxValueValidator(100),
                    ],
                )),
                ("points_earned", models.PositiveIntegerField(default=0)),
                ("passed", models.BooleanField(default=False)),
                ("time_taken_seconds", models.PositiveIntegerField(default=0)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("quiz", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="attempts",
                    to="competition.quiz",
                )),
                ("student", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="quiz_attempts",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "indexes": [
                    models.Index(fields=["quiz", "student", "status"], name="attempt_quiz_student_idx"),
                    models.Index(fields=["student", "passed", "completed_at"], name="attempt_student_passed_idx"),
                    models.Index(fields=["status", "started_at"], name="attempt_status_started_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "started")),
                        fields=("quiz", "student"),
                        name="uniq_open_attempt_per_student_quiz",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AttemptAnswer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("selected_option", models.CharField(
                    blank=True,
                    choices=[("A", "Option A"), ("B", "Option B"), ("C", "Option C"), ("D", "Option D")],
                    max_length=1,
                )),
                ("is_correct", models.BooleanField(default=False)),
                ("points_awarded", models.PositiveIntegerField(default=0)),
                ("attempt", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="answers",
                    to="competition.quizattempt",
                )),
                ("question", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="answers",
                    to="competition.quizquestion",
                )),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("attempt", "question"), name="uq_attempt_answer_question"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LeaderboardEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("rank_position", models.PositiveIntegerField()),
                ("last_qualified_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField()),
                ("course", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="leaderboard",
                    to="learning.course",
                )),
                ("student", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="leaderboard_rows",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "ordering": (
                    "course",
                    "rank_position",
                    django.db.models.expressions.OrderBy(
                        django.db.models.expressions.F("last_qualified_at"), nulls_last=True,
                    ),
                    "student_id",
                ),
                "unique_together": {("course", "student")},
                "indexes": [models.Index(fields=["course", "rank_position"], name="leaderboard_course_rank_idx")],
            },
        ),
    ]
