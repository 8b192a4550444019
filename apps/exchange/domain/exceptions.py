"""
Domain error taxonomy.
Every error carries a kind, a human-readable message and the HTTP status
the API layer answers with.
"""


class DomainError(Exception):
    kind = "DomainError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class RateUnavailable(DomainError):
    kind = "RateUnavailable"
    status_code = 503


class InvalidAmount(DomainError):
    kind = "InvalidAmount"
    status_code = 400
