from django.core.management.base import BaseCommand
import logging

from services.request_lifecycle import expire_overdue_requests

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Mark active requests past their expiry date as expired."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show how many requests would expire without changing them.",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        count = expire_overdue_requests(dry_run=dry_run)

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f"DRY RUN: Would expire {count} requests.")
            )
        else:
            logger.info("Expired %s overdue requests", count)
            self.stdout.write(self.style.SUCCESS(f"Expired {count} requests."))
