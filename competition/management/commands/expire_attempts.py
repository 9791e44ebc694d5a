from django.core.management.base import BaseCommand

from competition.services import expire_overdue_attempts


class Command(BaseCommand):
    help = "Expire every in-progress attempt whose time limit has passed (one sweep, same as the beat task)."

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None, help="Stop after expiring this many attempts")

    def handle(self, *args, **opts):
        count = expire_overdue_attempts(limit=opts["limit"])
        self.stdout.write(self.style.SUCCESS(f"Expired {count} attempt(s)."))
