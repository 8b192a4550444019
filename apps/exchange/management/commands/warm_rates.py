from django.core.management.base import BaseCommand, CommandError

from apps.exchange.application.tasks import warm_rate_cache


class Command(BaseCommand):
    help = 'Pre-fill the exchange rate cache for a base currency'

    def add_arguments(self, parser):
        parser.add_argument(
            '--base',
            dest='base_currency',
            type=str,
            default='USD',
            help='Base currency code (default: USD)'
        )
        parser.add_argument(
            '--currency',
            dest='currencies',
            action='append',
            help='Target currency code; repeat for several (default: all supported)'
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Execute synchronously instead of using Celery task queue'
        )

    def handle(self, **options):
        base_currency = options['base_currency'].upper()
        currencies = options['currencies']

        if len(base_currency) != 3:
            raise CommandError('Base currency must be a 3-letter code')

        self.stdout.write(
            self.style.SUCCESS(f'Warming rate cache for {base_currency}...')
        )

        if options['sync']:
            self.stdout.write('Running in synchronous mode...')
            result = warm_rate_cache(base_currency, currencies)

            if not result['success']:
                raise CommandError(f"Failed: {'; '.join(result['errors']) or 'no rate resolved'}")

            self.stdout.write(
                self.style.SUCCESS(f"Resolved {result['rates_resolved']} rates")
            )
            if result['stale_rates']:
                self.stdout.write(
                    self.style.WARNING(f"Stale: {', '.join(result['stale_rates'])}")
                )
            if result['errors']:
                self.stdout.write(
                    self.style.WARNING(f"Errors: {len(result['errors'])}")
                )
        else:
            self.stdout.write('Dispatching Celery task...')
            task = warm_rate_cache.delay(base_currency, currencies)

            self.stdout.write(
                self.style.SUCCESS(f'Task dispatched with ID: {task.id}')
            )
            self.stdout.write(
                'Use "celery -A remittance inspect active" to check task status'
            )
