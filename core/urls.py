# core/urls.py
from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from accounts.views import RegisterView, UsersViewSet
from competition.views import (
    AttemptStartView,
    AttemptSubmitView,
    AttemptViewSet,
    CourseLeaderboardView,
    QuizViewSet,
)
from learning.views import CourseViewSet, EnrollmentViewSet

router = DefaultRouter()
router.register(r"quizzes", QuizViewSet, basename="quiz")
router.register(r"attempts", AttemptViewSet, basename="attempt")
router.register(r"courses", CourseViewSet, basename="course")
router.register(r"enrollments", EnrollmentViewSet, basename="enrollment")
router.register(r"users", UsersViewSet, basename="user")


urlpatterns = [
    path("admin/", admin.site.urls),

    path("api/auth/register/", RegisterView.as_view(), name="auth-register"),
    path("api/auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    path("api/attempts/start/", AttemptStartView.as_view(), name="attempt-start"),
    path("api/attempts/submit/", AttemptSubmitView.as_view(), name="attempt-submit"),
    path("api/courses/<int:course_id>/leaderboard/", CourseLeaderboardView.as_view(), name="course-leaderboard"),

    path("api/", include(router.urls)),
]
