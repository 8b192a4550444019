from django.core.management.base import BaseCommand, CommandError

from apps.exchange.domain.exceptions import DomainError
from apps.transfers.application.factory import get_transfer_ledger
from apps.transfers.domain.models import TransferStatus
from apps.transfers.infrastructure.persistence.repositories import TransferRepository


class Command(BaseCommand):
    help = 'Move a transfer to a new status, e.g. when a partner confirms the payout'

    def add_arguments(self, parser):
        parser.add_argument(
            'reference',
            type=str,
            help='Transfer reference number (e.g. RFLX0A1B2C3D)'
        )
        parser.add_argument(
            'status',
            type=str,
            choices=[status.value for status in TransferStatus],
            help='New status'
        )
        parser.add_argument(
            '--notes',
            type=str,
            default=None,
            help='Note stored in the status history (the failure reason for "failed")'
        )

    def handle(self, **options):
        transfer = TransferRepository.get_by_reference(options['reference'].strip().upper())
        if transfer is None:
            raise CommandError(f"Transfer {options['reference']} not found")

        previous = transfer.status
        try:
            transfer = get_transfer_ledger().transition(transfer.id, options['status'], options['notes'])
        except DomainError as e:
            raise CommandError(e.message)

        self.stdout.write(
            self.style.SUCCESS(f'{transfer.reference_number}: {previous} -> {transfer.status}')
        )
