"""Error taxonomy shared by the Identity and Fulfillment contexts.

Malformed input keeps using Protean's ``ValidationError`` and missing
aggregates keep using Protean's ``ObjectNotFoundError`` (raised by
``repository.get``). The classes below cover the outcomes Protean has no
name for. None of them is retried; each surfaces to the caller verbatim.
"""


class FulfillmentError(Exception):
    """Base class for terminal, caller-visible rejections."""

    kind = "Error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class NotFound(FulfillmentError):
    kind = "NotFound"
    status_code = 404


class Forbidden(FulfillmentError):
    kind = "Forbidden"
    status_code = 403


class Conflict(FulfillmentError):
    kind = "Conflict"
    status_code = 409


class InvalidState(FulfillmentError):
    """A state-machine guard rejected the transition."""

    kind = "InvalidState"
    status_code = 409

    def __init__(self, message: str, current_status: str | None) -> None:
        super().__init__(f"{message} (current status: {current_status})")
        self.current_status = current_status

    def to_dict(self) -> dict:
        return {**super().to_dict(), "current_status": self.current_status}

