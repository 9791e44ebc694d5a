# learning/models.py
from django.conf import settings
from django.db import models

from common.enums import CourseStatus, DifficultyLevel, EnrollmentStatus

User = settings.AUTH_USER_MODEL


class Course(models.Model):
    instructor = models.ForeignKey(User, on_delete=models.CASCADE, related_name="courses_taught")
    title = models.CharField(max_length=200)
    code = models.SlugField(max_length=60, unique=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=CourseStatus.choices, default=CourseStatus.DRAFT)
    difficulty_level = models.CharField(
        max_length=16, choices=DifficultyLevel.choices, default=DifficultyLevel.BEGINNER
    )
    is_featured = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class Lesson(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="lessons")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    content = models.TextField(blank=True)
    sequence_order = models.PositiveIntegerField(default=1)
    is_published = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("course", "sequence_order")
        unique_together = ("course", "sequence_order")

    def __str__(self):
        return f"{self.course} · {self.sequence_order}. {self.title}"


class EnrollmentQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=EnrollmentStatus.ACTIVE)

    def is_active_member(self, student_id, course_id) -> bool:
        """The only capability check the competition engine needs."""
        return self.active().filter(student_id=student_id, course_id=course_id).exists()


class Enrollment(models.Model):
    Status = EnrollmentStatus

    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="enrollments")
    course  = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    status  = models.CharField(max_length=20, choices=EnrollmentStatus.choices, default=EnrollmentStatus.ACTIVE)
    progress_percentage = models.PositiveSmallIntegerField(default=0)
    enrolled_at = models.DateTimeField(auto_now_add=True)

    objects = EnrollmentQuerySet.as_manager()

    class Meta:
        unique_together = ("student", "course")
        indexes = [models.Index(fields=["course", "status"], name="enrollment_course_status_idx")]

    def __str__(self):
        return f"{self.student} -> {self.course} ({self.status})"
