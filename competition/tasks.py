# competition/tasks.py
from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings

from .exceptions import StorageUnavailable
from .services import orchestrator

logger = logging.getLogger(__name__)


@shared_task(bind=True, ignore_result=True)
def expire_overdue_attempts(self):
    """
    Periodic task (safe to run every minute):
      closes every STARTED attempt whose time limit has passed, applying the
      same progression and leaderboard updates as a late submission.
    """
    batch = getattr(settings, "COMPETITION", {}).get("EXPIRY_SWEEP_BATCH")
    return orchestrator.expire_overdue_attempts(limit=batch)


@shared_task(bind=True, max_retries=3)
def recompute_course_leaderboard(self, course_id):
    try:
        rows = orchestrator.refresh_course_leaderboard(course_id)
    except StorageUnavailable as exc:
        logger.warning("Leaderboard refresh for course %s deferred: %s", course_id, exc)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    return len(rows)
