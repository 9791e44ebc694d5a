from django.core.management.base import BaseCommand, CommandError

from competition.exceptions import StorageUnavailable
from competition.services import refresh_course_leaderboard
from learning.models import Course


class Command(BaseCommand):
    help = "Rebuild course leaderboards from submitted attempts (all courses, or one with --course)."

    def add_arguments(self, parser):
        parser.add_argument("--course", type=int, help="Only rebuild this course id")

    def handle(self, *args, **opts):
        course_ids = Course.objects.order_by("pk").values_list("pk", flat=True)
        if opts["course"] is not None:
            if not Course.objects.filter(pk=opts["course"]).exists():
                raise CommandError(f"Course {opts['course']} not found.")
            course_ids = [opts["course"]]

        total = 0
        for course_id in course_ids:
            try:
                rows = refresh_course_leaderboard(course_id)
            except StorageUnavailable as exc:
                raise CommandError(f"Course {course_id}: {exc}") from exc
            total += 1
            self.stdout.write(f"Course {course_id}: {len(rows)} ranked student(s)")

        self.stdout.write(self.style.SUCCESS(f"Rebuilt {total} leaderboard(s)."))
