"""
Seed the database with sample customers, invoices and telephone numbers.

Counts default to settings.SEED and can be overridden per run:

    python manage.py seed_records --customers 200 --max-invoices 8
"""

import logging
import random

import factory.random
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.customers.factories import CustomerFactory
from apps.invoices.factories import InvoiceFactory
from apps.telephone_numbers.factories import TelephoneNumberFactory

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Create sample customers with invoices and telephone numbers'

    def add_arguments(self, parser):
        seed = settings.SEED
        parser.add_argument('--customers', type=int, default=seed['CUSTOMER_COUNT'])
        parser.add_argument('--min-invoices', type=int, default=seed['MIN_INVOICES_PER_CUSTOMER'])
        parser.add_argument('--max-invoices', type=int, default=seed['MAX_INVOICES_PER_CUSTOMER'])
        parser.add_argument('--min-phones', type=int, default=seed['MIN_PHONE_NUMBERS_PER_CUSTOMER'])
        parser.add_argument('--max-phones', type=int, default=seed['MAX_PHONE_NUMBERS_PER_CUSTOMER'])
        parser.add_argument('--seed', type=int, help='Random seed for reproducible data')

    def handle(self, *args, **options):
        if options['customers'] < 0:
            raise CommandError('--customers cannot be negative')
        for kind in ('invoices', 'phones'):
            low, high = options[f'min_{kind}'], options[f'max_{kind}']
            if low < 0 or high < low:
                raise CommandError(f'Invalid range for {kind}: {low}..{high}')

        rng = random.Random(options['seed'])
        if options['seed'] is not None:
            factory.random.reseed_random(options['seed'])
        invoice_total = phone_total = 0

        with transaction.atomic():
            for _ in range(options['customers']):
                customer = CustomerFactory()

                invoice_count = rng.randint(options['min_invoices'], options['max_invoices'])
                InvoiceFactory.create_batch(invoice_count, customer=customer)
                invoice_total += invoice_count

                phone_count = rng.randint(options['min_phones'], options['max_phones'])
                TelephoneNumberFactory.create_batch(phone_count, customer=customer)
                phone_total += phone_count

        logger.info(
            f"Seeded {options['customers']} customers, {invoice_total} invoices, "
            f"{phone_total} telephone numbers"
        )
        self.stdout.write(self.style.SUCCESS(
            f"Created {options['customers']} customers, {invoice_total} invoices "
            f"and {phone_total} telephone numbers"
        ))
