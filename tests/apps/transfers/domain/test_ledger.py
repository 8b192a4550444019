import threading
import pytest
from datetime import timedelta
from decimal import Decimal

from django.db import connection

from apps.exchange.domain.calculator import QuoteCalculator
from apps.exchange.domain.exceptions import InvalidAmount
from apps.exchange.domain.models import Quote
from apps.transfers.application.config import TransferConfig
from apps.transfers.domain.exceptions import (
    CurrencyMismatch,
    IllegalTransition,
    InvalidPaymentMethod,
    NotCancellable,
    QuoteExpired,
    ReferenceCollision,
    TransferNotFound,
)
from apps.transfers.domain.models import TransferStatus
from apps.transfers.domain.services import TransferLedger
from apps.transfers.infrastructure.directory import OrmRecipientDirectory
from apps.transfers.infrastructure.persistence.models import Transfer, TransferStatusHistory
from apps.transfers.infrastructure.persistence.repositories import TransferRepository


def make_quote(clock, amount="100", receive_currency="MXN", rate="17.15"):
    calculation = QuoteCalculator.calculate(Decimal(amount), Decimal(rate), Decimal("1.5"), Decimal("2.99"))
    return Quote(
        send_amount=calculation.send_amount,
        send_currency="USD",
        receive_amount=calculation.receive_amount,
        receive_currency=receive_currency,
        exchange_rate=calculation.exchange_rate,
        fee=calculation.fee,
        total_amount=calculation.total_amount,
        issued_at=clock.now,
        expires_at=clock.now + timedelta(minutes=15),
        rate_timestamp=clock.now,
    )


def sequence_generator(*references):
    """Reference generator that hands out the given values in order."""
    remaining = list(references)

    def generate(prefix, now):
        return remaining.pop(0) if len(remaining) > 1 else remaining[0]
    return generate


@pytest.fixture
def ledger(clock):
    return TransferLedger(TransferRepository(), TransferConfig(), clock=clock)


@pytest.fixture
def recipient_info(recipient, user):
    return OrmRecipientDirectory().get(recipient.id, user.id)


@pytest.fixture
def transfer(ledger, user, recipient_info, clock):
    return ledger.create(
        user_id=user.id,
        recipient=recipient_info,
        send_amount=Decimal("100"),
        receive_currency="MXN",
        payment_method="card",
        quote=make_quote(clock),
    )


def history_statuses(transfer_id):
    return list(
        TransferStatusHistory.objects.filter(transfer_id=transfer_id)
        .order_by("sequence")
        .values_list("status", flat=True)
    )


@pytest.mark.django_db(transaction=True)
class TestTransferCreation:
    """Tests for TransferLedger.create."""

    def test_create_persists_transfer_and_history(self, transfer, clock):
        transfer.refresh_from_db()

        assert transfer.status == TransferStatus.PROCESSING.value
        assert transfer.reference_number.startswith("RF")
        assert transfer.reference_number == transfer.reference_number.upper()
        assert transfer.send_amount == Decimal("100.00")
        assert transfer.fee_amount == Decimal("2.99")
        assert transfer.total_amount == Decimal("102.99")
        assert transfer.receive_amount == Decimal("1715.00")
        assert transfer.exchange_rate == Decimal("17.150000")
        assert transfer.delivery_method == "bank_deposit"
        assert transfer.estimated_delivery == clock.now + timedelta(days=3)
        assert transfer.created_at == clock.now

        history = list(TransferStatusHistory.objects.filter(transfer=transfer))
        assert len(history) == 1
        assert history[0].status == "processing"
        assert history[0].notes == "Transfer initiated"
        assert history[0].sequence == 1

    def test_mobile_wallet_delivers_next_day(self, ledger, user, wallet_recipient, clock):
        info = OrmRecipientDirectory().get(wallet_recipient.id, user.id)

        transfer = ledger.create(
            user_id=user.id,
            recipient=info,
            send_amount=Decimal("10"),
            receive_currency="PHP",
            payment_method="debit",
            quote=make_quote(clock, amount="10", receive_currency="PHP", rate="55.89"),
        )

        assert transfer.estimated_delivery == clock.now + timedelta(days=1)
        assert transfer.total_amount == Decimal("12.99")
        assert transfer.receive_amount == Decimal("558.90")

    @pytest.mark.parametrize("amount", ["9.99", "10000.01", "0", "-50"])
    def test_amount_out_of_bounds(self, ledger, user, recipient_info, clock, amount):
        with pytest.raises(InvalidAmount):
            ledger.create(
                user_id=user.id,
                recipient=recipient_info,
                send_amount=Decimal(amount),
                receive_currency="MXN",
                payment_method="card",
                quote=make_quote(clock),
            )

        assert Transfer.objects.count() == 0

    def test_currency_mismatch(self, ledger, user, recipient_info, clock):
        with pytest.raises(CurrencyMismatch) as exc_info:
            ledger.create(
                user_id=user.id,
                recipient=recipient_info,
                send_amount=Decimal("100"),
                receive_currency="PHP",
                payment_method="card",
                quote=make_quote(clock, receive_currency="PHP"),
            )

        assert exc_info.value.message == "Recipient's country uses MXN"
        assert Transfer.objects.count() == 0

    def test_invalid_payment_method(self, ledger, user, recipient_info, clock):
        with pytest.raises(InvalidPaymentMethod):
            ledger.create(
                user_id=user.id,
                recipient=recipient_info,
                send_amount=Decimal("100"),
                receive_currency="MXN",
                payment_method="crypto",
                quote=make_quote(clock),
            )

    def test_expired_quote_rejected(self, ledger, user, recipient_info, clock):
        """
        Test that a quote older than 15 minutes cannot be committed.
        """
        quote = make_quote(clock)
        clock.advance(minutes=15)

        with pytest.raises(QuoteExpired):
            ledger.create(
                user_id=user.id,
                recipient=recipient_info,
                send_amount=Decimal("100"),
                receive_currency="MXN",
                payment_method="card",
                quote=quote,
            )

        assert Transfer.objects.count() == 0

    def test_quote_for_other_amount_rejected(self, ledger, user, recipient_info, clock):
        with pytest.raises(QuoteExpired):
            ledger.create(
                user_id=user.id,
                recipient=recipient_info,
                send_amount=Decimal("150"),
                receive_currency="MXN",
                payment_method="card",
                quote=make_quote(clock, amount="100"),
            )

    def test_reference_collision_is_retried(self, user, recipient_info, clock):
        """
        Test that a duplicate reference number is regenerated instead of failing.
        """
        ledger = TransferLedger(
            TransferRepository(),
            TransferConfig(),
            clock=clock,
            reference_generator=sequence_generator("RFTAKEN0001", "RFTAKEN0001", "RFTAKEN0001", "RFFRESH0001"),
        )
        kwargs = dict(
            user_id=user.id,
            recipient=recipient_info,
            send_amount=Decimal("100"),
            receive_currency="MXN",
            payment_method="card",
        )

        first = ledger.create(quote=make_quote(clock), **kwargs)
        second = ledger.create(quote=make_quote(clock), **kwargs)

        assert first.reference_number == "RFTAKEN0001"
        assert second.reference_number == "RFFRESH0001"
        assert Transfer.objects.count() == 2
        assert TransferStatusHistory.objects.count() == 2

    def test_reference_retries_exhausted(self, user, recipient_info, clock):
        ledger = TransferLedger(
            TransferRepository(),
            TransferConfig(reference_max_attempts=3),
            clock=clock,
            reference_generator=sequence_generator("RFTAKEN0001"),
        )
        kwargs = dict(
            user_id=user.id,
            recipient=recipient_info,
            send_amount=Decimal("100"),
            receive_currency="MXN",
            payment_method="card",
        )
        ledger.create(quote=make_quote(clock), **kwargs)

        with pytest.raises(ReferenceCollision) as exc_info:
            ledger.create(quote=make_quote(clock), **kwargs)

        assert exc_info.value.status_code == 500
        assert Transfer.objects.count() == 1
        assert TransferStatusHistory.objects.count() == 1


@pytest.mark.django_db(transaction=True)
class TestTransferTransitions:
    """Tests for the status state machine."""

    def test_processing_to_completed(self, ledger, transfer, clock):
        clock.advance(hours=6)

        updated = ledger.transition(transfer.id, TransferStatus.COMPLETED, "Paid out")

        updated.refresh_from_db()
        assert updated.status == "completed"
        assert updated.completed_at == clock.now
        assert updated.updated_at == clock.now
        assert history_statuses(transfer.id) == ["processing", "completed"]

    def test_processing_to_failed_records_reason(self, ledger, transfer):
        updated = ledger.transition(transfer.id, "failed", "Beneficiary bank rejected the deposit")

        updated.refresh_from_db()
        assert updated.status == "failed"
        assert updated.failure_reason == "Beneficiary bank rejected the deposit"
        assert updated.completed_at is None

    def test_pending_to_cancelled(self, ledger, transfer):
        Transfer.objects.filter(pk=transfer.pk).update(status="pending")

        updated = ledger.transition(transfer.id, "cancelled")

        assert updated.status == "cancelled"

    def test_pending_to_processing(self, ledger, transfer):
        Transfer.objects.filter(pk=transfer.pk).update(status="pending")

        assert ledger.transition(transfer.id, "processing").status == "processing"

    def test_pending_cannot_complete(self, ledger, transfer):
        Transfer.objects.filter(pk=transfer.pk).update(status="pending")

        with pytest.raises(IllegalTransition):
            ledger.transition(transfer.id, "completed")

    @pytest.mark.parametrize("target", ["pending", "processing", "failed", "cancelled", "refunded", "completed"])
    def test_completed_is_terminal(self, ledger, transfer, target):
        """
        Test that no transition leaves `completed` and that the record is untouched.
        """
        ledger.transition(transfer.id, "completed")

        with pytest.raises(IllegalTransition):
            ledger.transition(transfer.id, target)

        transfer.refresh_from_db()
        assert transfer.status == "completed"
        assert history_statuses(transfer.id) == ["processing", "completed"]

    def test_unknown_status(self, ledger, transfer):
        with pytest.raises(IllegalTransition):
            ledger.transition(transfer.id, "teleported")

    @pytest.mark.parametrize("transfer_id", [
        "00000000-0000-0000-0000-000000000000",
        "not-a-uuid",
    ])
    def test_unknown_transfer(self, ledger, transfer_id):
        with pytest.raises(TransferNotFound):
            ledger.transition(transfer_id, "completed")

    def test_history_is_ordered_and_rereadable(self, ledger, transfer, clock):
        Transfer.objects.filter(pk=transfer.pk).update(status="pending")
        ledger.transition(transfer.id, "processing", "Payment captured")
        ledger.transition(transfer.id, "completed", "Paid out")

        first = ledger.get_history(transfer.id)
        second = ledger.get_history(transfer.id)

        assert [entry.status for entry in first] == ["processing", "processing", "completed"]
        assert [entry.sequence for entry in first] == [1, 2, 3]
        assert [entry.id for entry in first] == [entry.id for entry in second]


@pytest.mark.django_db(transaction=True)
class TestTransferCancellation:
    """Tests for TransferLedger.cancel."""

    def test_owner_cancels_processing_transfer(self, ledger, transfer, user):
        cancelled = ledger.cancel(transfer.id, user.id)

        assert cancelled.status == "cancelled"
        history = ledger.get_history(transfer.id)
        assert history[-1].status == "cancelled"
        assert history[-1].notes == "Cancelled by user"

    def test_other_user_cannot_see_transfer(self, ledger, transfer, other_user):
        with pytest.raises(TransferNotFound):
            ledger.cancel(transfer.id, other_user.id)

        transfer.refresh_from_db()
        assert transfer.status == "processing"

    def test_completed_transfer_not_cancellable(self, ledger, transfer, user):
        ledger.transition(transfer.id, "completed")

        with pytest.raises(NotCancellable) as exc_info:
            ledger.cancel(transfer.id, user.id)

        assert exc_info.value.message == "Transfer with status 'completed' cannot be cancelled"

    def test_concurrent_cancels_apply_once(self, ledger, transfer, user):
        """
        Test that two simultaneous cancels yield one success, one NotCancellable
        and a single new history entry.
        """
        barrier = threading.Barrier(2)
        outcomes = []

        def cancel():
            try:
                barrier.wait(5)
                ledger.cancel(transfer.id, user.id)
                outcomes.append("cancelled")
            except NotCancellable:
                outcomes.append("not_cancellable")
            finally:
                connection.close()

        threads = [threading.Thread(target=cancel) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(10)

        assert sorted(outcomes) == ["cancelled", "not_cancellable"]
        assert history_statuses(transfer.id) == ["processing", "cancelled"]
        transfer.refresh_from_db()
        assert transfer.status == "cancelled"


@pytest.mark.django_db(transaction=True)
class TestTransferTracking:
    """Tests for public tracking by reference number."""

    def test_unknown_reference(self, ledger):
        with pytest.raises(TransferNotFound) as exc_info:
            ledger.track("UNKNOWNREF")

        assert exc_info.value.kind == "NotFound"
        assert exc_info.value.status_code == 404

    def test_track_is_case_insensitive(self, ledger, transfer):
        view = ledger.track(f"  {transfer.reference_number.lower()} ")

        assert view.reference_number == transfer.reference_number
        assert view.status == "processing"
        assert view.recipient_first_name == "Ana"
        assert view.destination_country == "MEX"
        assert view.receive_amount == Decimal("1715.00")
        assert [entry.status for entry in view.timeline] == ["processing"]

    def test_timeline_follows_transitions(self, ledger, transfer, clock):
        clock.advance(hours=2)
        ledger.transition(transfer.id, "completed")

        view = ledger.track(transfer.reference_number)

        assert [entry.status for entry in view.timeline] == ["processing", "completed"]
        assert view.completed_at == clock.now
        assert view.timeline[-1].timestamp == clock.now
