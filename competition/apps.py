# competition/apps.py
from django.apps import AppConfig

class CompetitionConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "competition"

    def ready(self):
        # Ensures Celery sees competition.tasks (for @shared_task)
        import competition.tasks  # noqa: F401
