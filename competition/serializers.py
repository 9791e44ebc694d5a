# competition/serializers.py
from rest_framework import serializers

from .models import AttemptAnswer, LeaderboardEntry, Quiz, QuizAttempt, QuizQuestion


# ---------- Quiz (student-facing, no answer keys) ----------
class PublicQuestionSerializer(serializers.ModelSerializer):
    options = serializers.SerializerMethodField()

    class Meta:
        model = QuizQuestion
        fields = ["id", "order", "text", "points", "options"]

    def get_options(self, obj):
        return obj.options()


class QuizSerializer(serializers.ModelSerializer):
    course_id = serializers.IntegerField(source="lesson.course_id", read_only=True)
    questions = PublicQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = Quiz
        fields = [
            "id", "title", "description", "lesson", "course_id",
            "time_limit_minutes", "passing_score", "max_attempts", "is_published",
            "questions",
        ]


# ---------- Attempts ----------
class AttemptStartSerializer(serializers.Serializer):
    quiz_id = serializers.UUIDField()


class AttemptSubmitSerializer(serializers.Serializer):
    attempt_id = serializers.UUIDField()
    answers = serializers.DictField(child=serializers.CharField(allow_blank=True), allow_empty=True)


class AttemptAnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = AttemptAnswer
        fields = ["question", "selected_option", "is_correct", "points_awarded"]


class QuizAttemptSerializer(serializers.ModelSerializer):
    deadline = serializers.SerializerMethodField()
    answers = AttemptAnswerSerializer(many=True, read_only=True)

    class Meta:
        model = QuizAttempt
        fields = [
            "id", "quiz", "status", "score", "points_earned", "passed",
            "time_taken_seconds", "started_at", "completed_at", "deadline", "answers",
        ]

    def get_deadline(self, obj):
        return obj.deadline()


# ---------- Leaderboard ----------
class LeaderboardEntrySerializer(serializers.ModelSerializer):
    student_id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(source="student.username", read_only=True)
    points = serializers.IntegerField(source="total_points", read_only=True)
    rank = serializers.IntegerField(source="rank_position", read_only=True)

    class Meta:
        model = LeaderboardEntry
        fields = ["student_id", "username", "points", "rank", "avg_quiz_score", "last_qualified_at", "updated_at"]
