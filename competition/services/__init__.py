from .orchestrator import (
    CompletionResult,
    enroll_student,
    expire_attempt,
    expire_overdue_attempts,
    refresh_course_leaderboard,
    remove_enrollment,
    set_enrollment_status,
    start_attempt,
    submit_attempt,
)

__all__ = [
    "CompletionResult",
    "enroll_student",
    "expire_attempt",
    "expire_overdue_attempts",
    "refresh_course_leaderboard",
    "remove_enrollment",
    "set_enrollment_status",
    "start_attempt",
    "submit_attempt",
]
