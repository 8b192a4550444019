from rest_framework.permissions import BasePermission

from apps.transfers.infrastructure.identity import is_kyc_verified


class IsKycVerified(BasePermission):
    """Only identity-verified customers may move money."""

    message = "KYC verification required"
    code = "Forbidden"

    def has_permission(self, request, view):
        return is_kyc_verified(request.user)
