from rest_framework.response import Response

from apps.exchange.domain.exceptions import DomainError


def domain_error_response(error: DomainError) -> Response:
    """Render a domain error as {"error": kind, "message": reason} with its status."""
    return Response(error.to_dict(), status=error.status_code)
