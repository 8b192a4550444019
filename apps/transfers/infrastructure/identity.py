"""
Identity collaborator: reads the KYC flag kept on the customer profile.
"""

from apps.transfers.infrastructure.persistence.models import CustomerProfile


def is_kyc_verified(user) -> bool:
    if user is None or not user.is_authenticated:
        return False
    profile = CustomerProfile.objects.filter(user=user).first()
    return profile is not None and profile.is_kyc_verified
