"""
Serializers for the transfers bounded context.
Field names follow the public camelCase contract.
"""

from rest_framework import serializers

from apps.exchange.api.v1.serializers import CurrencyCodeField
from apps.transfers.domain.models import TransferStatus
from apps.transfers.infrastructure.persistence.models import (
    Recipient,
    Transfer,
    TransferStatusHistory,
)


class QuoteRequestSerializer(serializers.Serializer):
    sendAmount = serializers.DecimalField(max_digits=14, decimal_places=2)
    sendCurrency = CurrencyCodeField(required=False, default="USD")
    receiveCurrency = CurrencyCodeField()


class CreateTransferSerializer(serializers.Serializer):
    recipientId = serializers.UUIDField()
    sendAmount = serializers.DecimalField(max_digits=14, decimal_places=2)
    receiveCurrency = CurrencyCodeField()
    paymentMethod = serializers.CharField(max_length=20)
    notes = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    quoteId = serializers.UUIDField()


class TransferListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    limit = serializers.IntegerField(required=False, default=10, min_value=1, max_value=50)
    status = serializers.ChoiceField(choices=TransferStatus.choices(), required=False)
    recipientId = serializers.UUIDField(required=False)


class RecipientSummarySerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()
    deliveryMethod = serializers.CharField(source="delivery_method")

    class Meta:
        model = Recipient
        fields = ["name", "country", "deliveryMethod"]

    def get_name(self, obj) -> str:
        return f"{obj.first_name} {obj.last_name}"


class RecipientDetailSerializer(RecipientSummarySerializer):
    bankName = serializers.CharField(source="bank_name")

    class Meta(RecipientSummarySerializer.Meta):
        fields = ["name", "email", "phone", "country", "deliveryMethod", "bankName"]


class TransferSerializer(serializers.ModelSerializer):
    referenceNumber = serializers.CharField(source="reference_number")
    sendAmount = serializers.DecimalField(source="send_amount", max_digits=12, decimal_places=2)
    sendCurrency = serializers.CharField(source="send_currency")
    receiveAmount = serializers.DecimalField(source="receive_amount", max_digits=18, decimal_places=2)
    receiveCurrency = serializers.CharField(source="receive_currency")
    exchangeRate = serializers.DecimalField(source="exchange_rate", max_digits=18, decimal_places=6)
    fee = serializers.DecimalField(source="fee_amount", max_digits=10, decimal_places=2)
    totalAmount = serializers.DecimalField(source="total_amount", max_digits=12, decimal_places=2)
    deliveryMethod = serializers.CharField(source="delivery_method")
    estimatedDelivery = serializers.DateTimeField(source="estimated_delivery")
    completedAt = serializers.DateTimeField(source="completed_at")
    createdAt = serializers.DateTimeField(source="created_at")
    recipient = RecipientSummarySerializer()

    class Meta:
        model = Transfer
        fields = [
            "id",
            "referenceNumber",
            "sendAmount",
            "sendCurrency",
            "receiveAmount",
            "receiveCurrency",
            "exchangeRate",
            "fee",
            "totalAmount",
            "status",
            "deliveryMethod",
            "estimatedDelivery",
            "completedAt",
            "recipient",
            "createdAt",
        ]


class StatusHistoryEntrySerializer(serializers.ModelSerializer):
    timestamp = serializers.DateTimeField(source="created_at")

    class Meta:
        model = TransferStatusHistory
        fields = ["status", "notes", "timestamp"]


class TransferDetailSerializer(TransferSerializer):
    paymentMethod = serializers.CharField(source="payment_method")
    failureReason = serializers.CharField(source="failure_reason", allow_null=True)
    recipient = RecipientDetailSerializer()

    class Meta(TransferSerializer.Meta):
        fields = TransferSerializer.Meta.fields + ["paymentMethod", "failureReason", "notes"]


class TimelineEntrySerializer(serializers.Serializer):
    status = serializers.CharField()
    timestamp = serializers.DateTimeField()


class TrackingSerializer(serializers.Serializer):
    """Public projection: no account, payment or contact details."""

    referenceNumber = serializers.CharField(source="reference_number")
    status = serializers.CharField()
    recipientFirstName = serializers.CharField(source="recipient_first_name")
    destinationCountry = serializers.CharField(source="destination_country")
    sendAmount = serializers.DecimalField(source="send_amount", max_digits=12, decimal_places=2)
    sendCurrency = serializers.CharField(source="send_currency")
    receiveAmount = serializers.DecimalField(source="receive_amount", max_digits=18, decimal_places=2)
    receiveCurrency = serializers.CharField(source="receive_currency")
    estimatedDelivery = serializers.DateTimeField(source="estimated_delivery")
    completedAt = serializers.DateTimeField(source="completed_at")
    createdAt = serializers.DateTimeField(source="created_at")
    timeline = TimelineEntrySerializer(many=True)
