# competition/views.py
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrInstructor, IsStudent
from common.enums import AttemptStatus
from learning.models import Course

from .models import Quiz, QuizAttempt
from .serializers import (
    AttemptStartSerializer,
    AttemptSubmitSerializer,
    LeaderboardEntrySerializer,
    QuizAttemptSerializer,
    QuizSerializer,
)
from .services import leaderboard, orchestrator


class QuizViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Students see published quizzes only; admin/instructor see all.
    Answer keys are never serialized.
    """
    serializer_class = QuizSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["lesson", "lesson__course", "is_published"]

    def get_queryset(self):
        qs = Quiz.objects.select_related("lesson").prefetch_related("questions").order_by("lesson__course", "lesson__sequence_order")
        if IsAdminOrInstructor().has_permission(self.request, self):
            return qs
        return qs.filter(is_published=True)


class AttemptViewSet(viewsets.ReadOnlyModelViewSet):
    """Current user's own attempts, newest first."""
    serializer_class = QuizAttemptSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["quiz", "status", "passed"]

    def get_queryset(self):
        return (QuizAttempt.objects
                .filter(student=self.request.user)
                .select_related("quiz")
                .prefetch_related("answers")
                .order_by("-started_at"))


class AttemptStartView(APIView):
    """
    POST /api/attempts/start/
    Body: { "quiz_id": "<uuid>" }
    """
    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def post(self, request):
        ser = AttemptStartSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        quiz = get_object_or_404(Quiz, pk=ser.validated_data["quiz_id"])

        attempt = orchestrator.start_attempt(request.user.pk, quiz.pk)
        attempt.quiz = quiz
        return Response({
            "attempt_id": str(attempt.id),
            "status": attempt.status,
            "started_at": attempt.started_at,
            "deadline": attempt.deadline(),
        }, status=status.HTTP_201_CREATED)


class AttemptSubmitView(APIView):
    """
    POST /api/attempts/submit/
    Body: { "attempt_id": "<uuid>", "answers": { "<question_id>": "A", ... } }
    """
    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def post(self, request):
        ser = AttemptSubmitSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        attempt = get_object_or_404(QuizAttempt, pk=ser.validated_data["attempt_id"], student=request.user)

        result = orchestrator.submit_attempt(attempt.pk, ser.validated_data["answers"])
        done = result.attempt
        return Response({
            "attempt_id": str(done.id),
            "status": done.status,
            "expired": done.status == AttemptStatus.EXPIRED,
            "score": result.score,
            "passed": result.passed,
            "points_awarded": result.points_awarded,
            "rank": result.rank,
            "previous_rank": result.previous_rank,
            "rank_delta": result.rank_delta,
            "time_taken_seconds": done.time_taken_seconds,
        }, status=status.HTTP_200_OK)


class CourseLeaderboardView(APIView):
    """
    GET /api/courses/<course_id>/leaderboard/?limit=50
    Visible to admins, instructors and students enrolled in the course.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id):
        courses = Course.objects.all()
        if not IsAdminOrInstructor().has_permission(request, self):
            courses = courses.filter(enrollments__student=request.user).distinct()
        course = get_object_or_404(courses, pk=course_id)
        try:
            limit = int(request.query_params.get("limit", 100))
            limit = max(1, min(500, limit))
        except (TypeError, ValueError):
            limit = 100

        rows = leaderboard.leaderboard_for(course.pk)[:limit]
        return Response({
            "course_id": course.pk,
            "results": LeaderboardEntrySerializer(rows, many=True).data,
        }, status=status.HTTP_200_OK)
