"""
ViewSet for the transfers API v1.
Quoting, creation and the owner's view of transfers require authentication;
tracking by reference number is public.
"""

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.exchange.api.errors import domain_error_response
from apps.exchange.api.v1.serializers import QuoteSerializer
from apps.exchange.domain.exceptions import DomainError
from apps.transfers.api.v1.permissions import IsKycVerified
from apps.transfers.api.v1.serializers import (
    CreateTransferSerializer,
    QuoteRequestSerializer,
    StatusHistoryEntrySerializer,
    TrackingSerializer,
    TransferDetailSerializer,
    TransferListQuerySerializer,
    TransferSerializer,
)
from apps.transfers.application.factory import get_transfer_service


def validation_error_response(message: str, errors) -> Response:
    return Response(
        {"error": "Validation failed", "message": message, "details": errors},
        status=status.HTTP_400_BAD_REQUEST
    )


@extend_schema(tags=['Transfers'])
class TransferViewSet(viewsets.ViewSet):

    def get_permissions(self):
        if self.action == 'track':
            return [AllowAny()]
        if self.action == 'create':
            return [IsAuthenticated(), IsKycVerified()]
        return [IsAuthenticated()]

    @extend_schema(
        request=QuoteRequestSerializer,
        description="Quote a transfer. The quote is valid for 15 minutes and must be passed to "
                    "transfer creation as `quoteId`."
    )
    @action(detail=False, methods=['post'], url_path='quote')
    def quote(self, request):
        payload = QuoteRequestSerializer(data=request.data)
        if not payload.is_valid():
            return validation_error_response("sendAmount and receiveCurrency are required", payload.errors)

        try:
            quote = get_transfer_service().quote(
                payload.validated_data["sendAmount"],
                payload.validated_data["receiveCurrency"],
                send_currency=payload.validated_data["sendCurrency"],
            )
        except DomainError as e:
            return domain_error_response(e)

        return Response({
            "quote": QuoteSerializer(quote).data,
            "rateInfo": {
                "stale": quote.stale,
                "timestamp": quote.rate_timestamp.isoformat(),
            },
        })

    @extend_schema(
        request=CreateTransferSerializer,
        responses={201: TransferSerializer},
        description="Create a transfer for a recipient owned by the caller from a prior quote. "
                    "Requires a verified identity."
    )
    def create(self, request):
        payload = CreateTransferSerializer(data=request.data)
        if not payload.is_valid():
            return validation_error_response("Invalid transfer request", payload.errors)

        data = payload.validated_data
        try:
            transfer = get_transfer_service().create_transfer(
                user_id=request.user.id,
                recipient_id=data["recipientId"],
                send_amount=data["sendAmount"],
                receive_currency=data["receiveCurrency"],
                payment_method=data["paymentMethod"],
                quote_id=data["quoteId"],
                notes=data.get("notes"),
            )
        except DomainError as e:
            return domain_error_response(e)

        return Response(
            {"message": "Transfer initiated successfully", "transfer": TransferSerializer(transfer).data},
            status=status.HTTP_201_CREATED
        )

    @extend_schema(
        parameters=[
            OpenApiParameter("page", OpenApiTypes.INT, description="Page number (default 1)"),
            OpenApiParameter("limit", OpenApiTypes.INT, description="Page size, at most 50 (default 10)"),
            OpenApiParameter("status", OpenApiTypes.STR, description="Filter by status"),
            OpenApiParameter("recipientId", OpenApiTypes.UUID, description="Filter by recipient"),
        ],
        description="List the caller's transfers, newest first"
    )
    def list(self, request):
        query = TransferListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_error_response("Invalid filter or pagination parameters", query.errors)

        result = get_transfer_service().list_transfers(
            request.user.id,
            page=query.validated_data["page"],
            limit=query.validated_data["limit"],
            status=query.validated_data.get("status"),
            recipient_id=query.validated_data.get("recipientId"),
        )
        pagination = result.pagination

        return Response({
            "transfers": TransferSerializer(result.transfers, many=True).data,
            "pagination": {
                "page": pagination.page,
                "limit": pagination.limit,
                "totalCount": pagination.total_count,
                "totalPages": pagination.total_pages,
                "hasMore": pagination.has_more,
            },
        })

    @extend_schema(responses=TransferDetailSerializer, description="Transfer details with its status history")
    def retrieve(self, request, pk=None):
        try:
            detail = get_transfer_service().get_transfer(pk, request.user.id)
        except DomainError as e:
            return domain_error_response(e)

        data = TransferDetailSerializer(detail.transfer).data
        data["statusHistory"] = StatusHistoryEntrySerializer(detail.status_history, many=True).data
        return Response(data)

    @extend_schema(
        responses=TrackingSerializer,
        description="Public tracking by reference number. Shows only the recipient's first name."
    )
    @action(detail=False, methods=['get'], url_path=r'track/(?P<reference>[^/.]+)')
    def track(self, request, reference=None):
        try:
            view = get_transfer_service().track_transfer(reference)
        except DomainError as e:
            return domain_error_response(e)

        return Response(TrackingSerializer(view).data)

    @extend_schema(request=None, description="Cancel a pending or processing transfer")
    @action(detail=True, methods=['post'], url_path='cancel')
    def cancel(self, request, pk=None):
        try:
            transfer = get_transfer_service().cancel_transfer(pk, request.user.id)
        except DomainError as e:
            return domain_error_response(e)

        return Response({
            "message": "Transfer cancelled successfully",
            "transfer": TransferSerializer(transfer).data,
        })
