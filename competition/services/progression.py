# competition/services/progression.py
import logging

from django.contrib.auth import get_user_model

from accounts.models import Badge

logger = logging.getLogger(__name__)

User = get_user_model()

# current-streak length -> (badge name, description)
STREAK_BADGES = {
    3: ("On a Roll", "Passed 3 quizzes in a row."),
    5: ("Hot Streak", "Passed 5 quizzes in a row."),
    10: ("Unstoppable", "Passed 10 quizzes in a row."),
}


def advance_streak(current: int, longest: int, passed: bool) -> tuple[int, int]:
    """A pass extends the streak (and maybe the record); anything else resets it."""
    if not passed:
        return 0, max(longest, current)
    current += 1
    return current, max(longest, current)


def apply_outcome(outcome):
    """
    Apply one finalized attempt to the student's platform-wide totals.

    Not idempotent: the caller guarantees one call per terminal transition.
    The user row is locked so concurrent outcomes for the same student
    cannot lose an increment.
    """
    user = User.objects.select_for_update().get(pk=outcome.student_id)

    current, longest = advance_streak(user.current_streak, user.longest_streak, outcome.passed)
    if outcome.passed:
        user.total_points += outcome.points_earned
    elif user.current_streak:
        logger.info("Streak reset for user %s (was %s)", user.pk, user.current_streak)

    user.current_streak = current
    user.longest_streak = longest
    user.save(update_fields=["total_points", "current_streak", "longest_streak"])
    if outcome.passed:
        award_streak_badge(user)
    return user


def award_streak_badge(user):
    """Grant the badge for the streak the user just reached, once per user."""
    milestone = STREAK_BADGES.get(user.current_streak)
    if not milestone:
        return None
    name, description = milestone
    badge, created = Badge.objects.get_or_create(user=user, name=name, defaults={"description": description})
    if created:
        logger.info("Badge \"%s\" awarded to user %s", name, user.pk)
    return badge
