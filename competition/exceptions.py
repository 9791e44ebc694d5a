# competition/exceptions.py
"""
Policy and storage errors raised by the competition engine.

None of these are retried by the engine itself; they are reported straight
back to the caller. ``core.exceptions.api_exception_handler`` renders them
for the REST layer.
"""


class CompetitionError(Exception):
    status_code = 400
    code = "competition_error"
    default_detail = "Competition request failed."

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.default_detail)


class QuizNotPublished(CompetitionError):
    status_code = 409
    code = "quiz_not_published"
    default_detail = "This quiz is not published."


class AttemptLimitExceeded(CompetitionError):
    status_code = 409
    code = "attempt_limit_exceeded"
    default_detail = "You have used all attempts for this quiz."


class AttemptAlreadyInProgress(CompetitionError):
    status_code = 409
    code = "attempt_in_progress"
    default_detail = "An attempt for this quiz is already in progress."


class AttemptAlreadyFinalized(CompetitionError):
    status_code = 409
    code = "attempt_finalized"
    default_detail = "This attempt has already been finalized."


class AttemptNotOverdue(CompetitionError):
    status_code = 409
    code = "attempt_not_overdue"
    default_detail = "This attempt is still within its time limit."


class InvalidSubmission(CompetitionError):
    status_code = 400
    code = "invalid_submission"
    default_detail = "The submission cannot be scored."


class StudentNotEnrolled(CompetitionError):
    status_code = 403
    code = "student_not_enrolled"
    default_detail = "You are not actively enrolled in this course."


class StorageUnavailable(CompetitionError):
    status_code = 503
    code = "storage_unavailable"
    default_detail = "Storage is temporarily unavailable. Please try again."
