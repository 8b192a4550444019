"""
Quote arithmetic.
Pure Decimal computation: no I/O, no shared state.
"""

from decimal import Decimal, ROUND_HALF_UP

from apps.exchange.domain.exceptions import InvalidAmount
from apps.exchange.domain.models import TransferCalculation

CENTS = Decimal("0.01")
RATE_PRECISION = Decimal("0.000001")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def round6(value: Decimal) -> Decimal:
    return value.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)


def validate_send_amount(send_amount, min_amount: Decimal, max_amount: Decimal) -> Decimal:
    """
    Parse a send amount and check it against the inclusive transfer bounds.

    Raises:
        InvalidAmount: not a number, not positive, or outside [min_amount, max_amount]
    """
    try:
        amount = to_decimal(send_amount)
    except ArithmeticError:
        raise InvalidAmount(f"Send amount must be a number, got {send_amount!r}")

    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount("Send amount must be a positive number")
    if amount < min_amount or amount > max_amount:
        raise InvalidAmount(f"Send amount must be between {min_amount} and {max_amount}")
    return amount


class QuoteCalculator:
    """
    Turns (send_amount, rate, fee_percent, minimum_fee) into transfer amounts.

    - fee = max(send_amount * fee_percent / 100, minimum_fee), 2 decimals
    - total_amount = send_amount + fee, 2 decimals
    - exchange_rate rounded to 6 decimals
    - receive_amount = send_amount * exchange_rate, 2 decimals

    The send amount is rounded to cents before anything else so that
    total_amount == send_amount + fee holds exactly.
    """

    @staticmethod
    def calculate(send_amount, rate, fee_percent, minimum_fee) -> TransferCalculation:
        send_amount = to_decimal(send_amount)
        rate = to_decimal(rate)
        fee_percent = to_decimal(fee_percent)
        minimum_fee = to_decimal(minimum_fee)

        if not send_amount.is_finite() or send_amount <= 0:
            raise InvalidAmount(f"Send amount must be positive, got {send_amount}")
        if not rate.is_finite() or rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if fee_percent < 0 or minimum_fee < 0:
            raise ValueError("fee_percent and minimum_fee must not be negative")

        send_amount = round2(send_amount)
        fee = round2(max(send_amount * fee_percent / Decimal(100), minimum_fee))
        exchange_rate = round6(rate)

        return TransferCalculation(
            send_amount=send_amount,
            fee=fee,
            total_amount=round2(send_amount + fee),
            exchange_rate=exchange_rate,
            receive_amount=round2(send_amount * exchange_rate),
        )
