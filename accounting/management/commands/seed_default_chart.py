# accounting/management/commands/seed_default_chart.py

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from accounting.services.chart_seed import seed_default_chart


class Command(BaseCommand):
    help = "Seed the default Chart of Accounts for an organization (safe to re-run)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--organization",
            dest="organization_id",
            default=None,
            help="Organization id (defaults to DEFAULT_ORGANIZATION_ID)",
        )

    def handle(self, *args, **options):
        organization_id = (options.get("organization_id") or settings.DEFAULT_ORGANIZATION_ID or "").strip()
        if not organization_id:
            raise CommandError("An organization id is required (--organization)")

        self.stdout.write(f"Seeding default Chart of Accounts for {organization_id}...")

        summary = seed_default_chart(organization_id)

        self.stdout.write(
            self.style.SUCCESS(
                f"Done: {summary['created']} created, {summary['existing']} already present "
                f"({summary['total']} accounts)"
            )
        )
        for account_type, count in sorted(summary["by_type"].items()):
            self.stdout.write(f"  {account_type}: {count}")
