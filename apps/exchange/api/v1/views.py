"""
ViewSets for the exchange API v1.
Public, read-only access to rates and fee calculations.
"""

from rest_framework import serializers, viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.exchange.api.errors import domain_error_response
from apps.exchange.api.v1.serializers import (
    CalculateRequestSerializer,
    CalculationResultSerializer,
    CurrencyCodeField,
    RateQuerySerializer,
    RateResultSerializer,
)
from apps.exchange.application.dto import CalculationResultDTO
from apps.exchange.application.factory import get_exchange_rate_service
from apps.exchange.domain.calculator import QuoteCalculator
from apps.exchange.domain.exceptions import DomainError


@extend_schema(tags=['Rates'])
class ExchangeRateViewSet(viewsets.ViewSet):

    permission_classes = [AllowAny]

    @extend_schema(
        parameters=[
            OpenApiParameter("from", OpenApiTypes.STR, description="Base currency code (defaults to USD)"),
            OpenApiParameter("to", OpenApiTypes.STR, required=True, description="Target currency code (e.g. MXN)"),
        ],
        responses=RateResultSerializer,
        description="Get the exchange rate for a currency pair. `stale` is true when the upstream source failed "
                    "and an expired cached rate was served instead."
    )
    @action(detail=False, methods=['get'], url_path='rate')
    def rate(self, request):
        query = RateQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(
                {"error": "Missing parameter", "message": "Target currency (to) is required", "details": query.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            result = get_exchange_rate_service().get_rate(
                query.validated_data["from"],
                query.validated_data["to"],
            )
        except DomainError as e:
            return domain_error_response(e)

        return Response(RateResultSerializer(result).data)

    @extend_schema(
        parameters=[
            OpenApiParameter("base", OpenApiTypes.STR, description="Base currency code (defaults to USD)"),
        ],
        description="Get rates from a base currency to every supported currency"
    )
    @action(detail=False, methods=['get'], url_path='rates')
    def rates(self, request):
        field = CurrencyCodeField()
        try:
            base = field.run_validation(request.query_params.get("base", "USD"))
        except serializers.ValidationError:
            return Response(
                {"error": "Invalid parameter", "message": "base must be a 3-letter currency code"},
                status=status.HTTP_400_BAD_REQUEST
            )

        all_rates = get_exchange_rate_service().get_all_rates(base)

        return Response({
            "base": all_rates["base"],
            "rates": {code: str(rate) for code, rate in all_rates["rates"].items()},
            "timestamp": all_rates["timestamp"].isoformat(),
        })

    @extend_schema(
        request=CalculateRequestSerializer,
        responses=CalculationResultSerializer,
        description="Calculate the amount received and the fee for a send amount"
    )
    @action(detail=False, methods=['post'], url_path='calculate')
    def calculate(self, request):
        payload = CalculateRequestSerializer(data=request.data)
        if not payload.is_valid():
            return Response(
                {"error": "Invalid parameters", "message": "A positive amount and target currency (to) are required",
                 "details": payload.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        service = get_exchange_rate_service()
        send_currency = payload.validated_data["from"]
        receive_currency = payload.validated_data["to"]

        try:
            rate = service.get_rate(send_currency, receive_currency)
            calculation = QuoteCalculator.calculate(
                payload.validated_data["amount"],
                rate.rate,
                service.config.fee_percent,
                service.config.minimum_fee,
            )
        except DomainError as e:
            return domain_error_response(e)

        result = CalculationResultDTO(
            send_amount=calculation.send_amount,
            send_currency=send_currency,
            receive_amount=calculation.receive_amount,
            receive_currency=receive_currency,
            exchange_rate=calculation.exchange_rate,
            fee=calculation.fee,
            fee_percent=service.config.fee_percent,
            total_to_pay=calculation.total_amount,
            rate_timestamp=rate.timestamp,
            stale=rate.stale,
        )
        return Response(CalculationResultSerializer(result).data)
