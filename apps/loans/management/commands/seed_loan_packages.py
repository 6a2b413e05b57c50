from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.core.exceptions import ValidationError
from django.db import transaction
from apps.loans.catalog import DEFAULT_PACKAGES, default_catalog, package_fields
from apps.loans.models import LoanPackage
from apps.loans.services import quote_package
import logging

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Load the default loan package catalog (idempotent by package name)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--update',
            action='store_true',
            help='Overwrite terms of packages that already exist',
        )

    def handle(self, *args, **options):
        created_count = 0
        updated_count = 0

        # Every entry must quote cleanly before anything is written
        catalog = default_catalog()
        estimates = {}
        for entry in DEFAULT_PACKAGES:
            try:
                _, result = quote_package(catalog, entry['key'])
            except ValidationError as e:
                raise CommandError(f"Catalog entry {entry['key']} is invalid: {e}")
            estimates[entry['key']] = result.monthly_payment

        with transaction.atomic():
            for entry in DEFAULT_PACKAGES:
                fields = package_fields(entry)
                name = fields.pop('name')
                estimate = f"from {estimates[entry['key']]} {settings.LOAN_CURRENCY}/month"

                package = LoanPackage.objects.filter(name=name).first()
                if package is None:
                    LoanPackage.objects.create(name=name, **fields)
                    created_count += 1
                    self.stdout.write(f"  + {name} ({estimate})")
                elif options['update']:
                    for field, value in fields.items():
                        setattr(package, field, value)
                    package.save()
                    updated_count += 1
                    self.stdout.write(f"  ~ {name} ({estimate})")

        logger.info(f"Seeded loan packages: {created_count} created, {updated_count} updated")
        self.stdout.write(self.style.SUCCESS(
            f"Loan packages: {created_count} created, {updated_count} updated, "
            f"{LoanPackage.objects.count()} total"
        ))
