import pytest
from datetime import datetime, timezone

from apps.transfers.domain.models import (
    ALLOWED_TRANSITIONS,
    TransferStatus,
    can_transition,
    delivery_days,
    is_terminal,
)
from apps.transfers.domain.references import BASE36_ALPHABET, generate_reference_number, to_base36


class TestTransitionTable:

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(TransferStatus)

    @pytest.mark.parametrize("current,new", [
        ("pending", "processing"),
        ("pending", "cancelled"),
        ("processing", "completed"),
        ("processing", "failed"),
        ("processing", "cancelled"),
    ])
    def test_allowed(self, current, new):
        assert can_transition(TransferStatus(current), TransferStatus(new))

    @pytest.mark.parametrize("current,new", [
        ("pending", "completed"),
        ("pending", "refunded"),
        ("processing", "pending"),
        ("processing", "refunded"),
        ("failed", "processing"),
        ("cancelled", "processing"),
    ])
    def test_rejected(self, current, new):
        assert not can_transition(TransferStatus(current), TransferStatus(new))

    def test_terminal_statuses(self):
        terminal = {status for status in TransferStatus if is_terminal(status)}

        assert terminal == {
            TransferStatus.COMPLETED,
            TransferStatus.FAILED,
            TransferStatus.CANCELLED,
            TransferStatus.REFUNDED,
        }


def test_delivery_days():
    assert delivery_days("mobile_wallet") == 1
    assert delivery_days("bank_deposit") == 3
    assert delivery_days("cash_pickup") == 3


class TestReferenceNumbers:

    def test_to_base36(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "Z"
        assert to_base36(36) == "10"
        assert to_base36(1716292800000) == "LWGCF400"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            to_base36(-1)

    def test_reference_layout(self):
        now = datetime(2024, 5, 21, 12, 0, tzinfo=timezone.utc)

        reference = generate_reference_number("RF", now)

        assert reference.startswith("RF" + to_base36(1716292800000))
        assert len(reference) == 2 + 8 + 4
        assert all(char in BASE36_ALPHABET for char in reference[2:])

    def test_references_differ_within_same_millisecond(self):
        now = datetime(2024, 5, 21, 12, 0, tzinfo=timezone.utc)

        references = {generate_reference_number("RF", now) for _ in range(20)}

        assert len(references) > 1
