"""
Management command to import crops from a CSV file.

Usage:
    python manage.py import_crops /path/to/crops.csv
    python manage.py import_crops /path/to/crops.csv --dry-run

Row format (no header):
    name,en_wikipedia_url,parent name,"scientific, names","alternate, names"
"""

import csv

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from crops.exceptions import CropbotMissing
from crops.importer import import_rows


class DryRunRollback(Exception):
    """Raised to roll back a dry run."""

    pass


class Command(BaseCommand):
    help = "Import crops from a CSV file"

    def add_arguments(self, parser):
        parser.add_argument("csv_file", type=str, help="Path to CSV file with crops")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be imported without saving",
        )

    def handle(self, *args, **options):
        csv_file = options["csv_file"]
        dry_run = options["dry_run"]

        try:
            with open(csv_file, "r", encoding="utf-8-sig", newline="") as f:
                rows = list(csv.reader(f))
        except OSError as e:
            raise CommandError(f"Cannot read {csv_file}: {e}")

        self.stdout.write(f"Found {len(rows)} rows in {csv_file}")

        try:
            if dry_run:
                with transaction.atomic():
                    report = import_rows(rows)
                    raise DryRunRollback()
            else:
                report = import_rows(rows)
        except DryRunRollback:
            self.stdout.write(self.style.WARNING("Dry run: no changes saved"))
        except CropbotMissing as e:
            raise CommandError(str(e))

        for crop in report.created:
            self.stdout.write(self.style.SUCCESS(f"  Created: {crop.name}"))
        for crop in report.updated:
            self.stdout.write(f"  Updated: {crop.name}")
        for error in report.errors:
            self.stdout.write(self.style.ERROR(f"  Error {error}"))

        # Summary
        self.stdout.write("")
        self.stdout.write("=" * 60)
        self.stdout.write("Import complete!" if not dry_run else "Dry run complete!")
        self.stdout.write(f"  Created: {len(report.created)}")
        self.stdout.write(f"  Updated: {len(report.updated)}")
        self.stdout.write(f"  Skipped: {report.skipped}")
        self.stdout.write(f"  Errors: {len(report.errors)}")
