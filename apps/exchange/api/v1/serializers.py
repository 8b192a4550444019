"""
Serializers for the exchange bounded context.
Handles validation and transformation between API and domain objects.
"""

from decimal import Decimal

from rest_framework import serializers


class CurrencyCodeField(serializers.CharField):

    def __init__(self, **kwargs):
        kwargs.setdefault("min_length", 3)
        kwargs.setdefault("max_length", 3)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        return super().to_internal_value(data).upper()


class RateQuerySerializer(serializers.Serializer):
    to = CurrencyCodeField()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # "from" is a reserved word, so the field is declared here
        self.fields["from"] = CurrencyCodeField(required=False, default="USD")


class RateResultSerializer(serializers.Serializer):
    base_currency = serializers.CharField()
    target_currency = serializers.CharField()
    rate = serializers.DecimalField(max_digits=18, decimal_places=6)
    timestamp = serializers.DateTimeField()
    stale = serializers.BooleanField()

    def to_representation(self, instance):
        data = super().to_representation(instance)
        return {
            "from": data["base_currency"],
            "to": data["target_currency"],
            "rate": data["rate"],
            "timestamp": data["timestamp"],
            "stale": data["stale"],
        }


class CalculateRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    to = CurrencyCodeField()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["from"] = CurrencyCodeField(required=False, default="USD")


class CalculationResultSerializer(serializers.Serializer):
    sendAmount = serializers.DecimalField(source="send_amount", max_digits=14, decimal_places=2)
    sendCurrency = serializers.CharField(source="send_currency")
    receiveAmount = serializers.DecimalField(source="receive_amount", max_digits=20, decimal_places=2)
    receiveCurrency = serializers.CharField(source="receive_currency")
    exchangeRate = serializers.DecimalField(source="exchange_rate", max_digits=18, decimal_places=6)
    fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    feePercent = serializers.DecimalField(source="fee_percent", max_digits=6, decimal_places=2)
    totalToPay = serializers.DecimalField(source="total_to_pay", max_digits=14, decimal_places=2)
    rateTimestamp = serializers.DateTimeField(source="rate_timestamp")
    stale = serializers.BooleanField()


class QuoteSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    sendAmount = serializers.DecimalField(source="send_amount", max_digits=14, decimal_places=2)
    sendCurrency = serializers.CharField(source="send_currency")
    receiveAmount = serializers.DecimalField(source="receive_amount", max_digits=20, decimal_places=2)
    receiveCurrency = serializers.CharField(source="receive_currency")
    exchangeRate = serializers.DecimalField(source="exchange_rate", max_digits=18, decimal_places=6)
    fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    totalAmount = serializers.DecimalField(source="total_amount", max_digits=14, decimal_places=2)
    expiresAt = serializers.DateTimeField(source="expires_at")
