from django.db import models


class Role(models.TextChoices):
    STUDENT    = "STUDENT",    "Student"
    INSTRUCTOR = "INSTRUCTOR", "Instructor"
    ADMIN      = "ADMIN",      "Admin"


class CourseStatus(models.TextChoices):
    DRAFT     = "DRAFT",     "Draft"
    PUBLISHED = "PUBLISHED", "Published"
    ARCHIVED  = "ARCHIVED",  "Archived"


class DifficultyLevel(models.TextChoices):
    BEGINNER     = "BEGINNER",     "Beginner"
    INTERMEDIATE = "INTERMEDIATE", "Intermediate"
    ADVANCED     = "ADVANCED",     "Advanced"


class EnrollmentStatus(models.TextChoices):
    ACTIVE    = "ACTIVE",    "Active"
    COMPLETED = "COMPLETED", "Completed"
    DROPPED   = "DROPPED",   "Dropped"


class AnswerOption(models.TextChoices):
    A = "A", "Option A"
    B = "B", "Option B"
    C = "C", "Option C"
    D = "D", "Option D"


class AttemptStatus(models.TextChoices):
    STARTED   = "started",   "Started"
    SUBMITTED = "submitted", "Submitted"
    EXPIRED   = "expired",   "Expired"


TERMINAL_ATTEMPT_STATUSES = (AttemptStatus.SUBMITTED, AttemptStatus.EXPIRED)
