from unittest import mock

from django.contrib.auth import get_user_model
from django.db import OperationalError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from common.enums import EnrollmentStatus, Role
from competition.models import LeaderboardEntry
from learning.models import Course, Enrollment

User = get_user_model()


class CourseApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.instructor = User.objects.create_user("t1", None, "pass", role=Role.INSTRUCTOR)

    def test_instructor_creates_course(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.post("/api/courses/", {"title": "Intro", "code": "intro"}, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(Course.objects.get(code="intro").instructor, self.instructor)

    def test_student_cannot_create_course(self):
        self.client.force_authenticate(User.objects.create_user("s1", None, "pass"))
        resp = self.client.post("/api/courses/", {"title": "Intro", "code": "intro"}, format="json")
        self.assertEqual(resp.status_code, 403)


class EnrollmentApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.instructor = User.objects.create_user("t1", None, "pass", role=Role.INSTRUCTOR)
        self.student = User.objects.create_user("s1", None, "pass")
        self.course = Course.objects.create(instructor=self.instructor, title="Intro", code="intro")

    def _enroll(self):
        self.client.force_authenticate(self.student)
        return self.client.post("/api/enrollments/", {"course": self.course.pk}, format="json")

    def test_self_enroll_joins_leaderboard(self):
        resp = self._enroll()
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["status"], EnrollmentStatus.ACTIVE)
        entry = LeaderboardEntry.objects.get(course=self.course, student=self.student)
        self.assertEqual((entry.total_points, entry.rank_position), (0, 1))

    def test_enrolling_twice_is_ok(self):
        self._enroll()
        self.assertEqual(self._enroll().status_code, 200)
        self.assertEqual(Enrollment.objects.filter(student=self.student).count(), 1)

    def test_my_enrollments(self):
        self._enroll()
        resp = self.client.get("/api/enrollments/my/")
        self.assertEqual([e["course"] for e in resp.data], [self.course.pk])

    def test_dropping_removes_from_leaderboard(self):
        enrollment_id = self._enroll().data["id"]
        self.client.force_authenticate(self.instructor)
        resp = self.client.patch(f"/api/enrollments/{enrollment_id}/set-status/",
                                 {"status": EnrollmentStatus.DROPPED}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(LeaderboardEntry.objects.filter(course=self.course).exists())

    def test_set_status_rejects_unknown_value(self):
        enrollment_id = self._enroll().data["id"]
        self.client.force_authenticate(self.instructor)
        resp = self.client.patch(f"/api/enrollments/{enrollment_id}/set-status/", {"status": "PAUSED"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_student_cannot_set_status(self):
        enrollment_id = self._enroll().data["id"]
        resp = self.client.patch(f"/api/enrollments/{enrollment_id}/set-status/",
                                 {"status": EnrollmentStatus.DROPPED}, format="json")
        self.assertEqual(resp.status_code, 403)


@override_settings(COMPETITION={"STORAGE_RETRY_ATTEMPTS": 3, "STORAGE_RETRY_BACKOFF": 0})
class EnrollmentRollbackTests(TestCase):
    """An enrollment change and its leaderboard refresh commit together or not at all."""

    def setUp(self):
        self.client = APIClient()
        self.instructor = User.objects.create_user("t1", None, "pass", role=Role.INSTRUCTOR)
        self.student = User.objects.create_user("s1", None, "pass")
        self.course = Course.objects.create(instructor=self.instructor, title="Intro", code="intro")

    def _failing_refresh(self):
        return mock.patch("competition.services.leaderboard.recompute_leaderboard",
                          side_effect=OperationalError("database is locked"))

    def _enrolled(self):
        self.client.force_authenticate(self.student)
        return self.client.post("/api/enrollments/", {"course": self.course.pk}, format="json").data["id"]

    def test_failed_refresh_undoes_status_change(self):
        enrollment_id = self._enrolled()
        self.client.force_authenticate(self.instructor)
        with self._failing_refresh():
            resp = self.client.patch(f"/api/enrollments/{enrollment_id}/set-status/",
                                     {"status": EnrollmentStatus.DROPPED}, format="json")

        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.data["code"], "storage_unavailable")
        self.assertEqual(Enrollment.objects.get(pk=enrollment_id).status, EnrollmentStatus.ACTIVE)
        self.assertTrue(LeaderboardEntry.objects.filter(course=self.course, student=self.student).exists())

    def test_failed_refresh_undoes_self_enroll(self):
        self.client.force_authenticate(self.student)
        with self._failing_refresh():
            resp = self.client.post("/api/enrollments/", {"course": self.course.pk}, format="json")

        self.assertEqual(resp.status_code, 503)
        self.assertFalse(Enrollment.objects.filter(student=self.student, course=self.course).exists())

    def test_failed_refresh_undoes_delete(self):
        enrollment_id = self._enrolled()
        with self._failing_refresh():
            resp = self.client.delete(f"/api/enrollments/{enrollment_id}/")

        self.assertEqual(resp.status_code, 503)
        self.assertTrue(Enrollment.objects.filter(pk=enrollment_id).exists())
        self.assertTrue(LeaderboardEntry.objects.filter(course=self.course, student=self.student).exists())

    def test_delete_removes_leaderboard_row(self):
        enrollment_id = self._enrolled()
        resp = self.client.delete(f"/api/enrollments/{enrollment_id}/")
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(LeaderboardEntry.objects.filter(course=self.course).exists())
