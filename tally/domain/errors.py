"""Domain errors for the counter service."""


class CounterError(Exception):
    """Base class for errors reported back to callers as ``{"error": ...}``."""


class InvalidField(CounterError):
    def __init__(self, field: str | None):
        self.field = field
        super().__init__(
            f"Invalid field: {field}. Must be likes, dislikes, or infos."
        )


class UnknownAction(CounterError):
    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Unknown action: {action}. Valid actions are: get, bump")


class MalformedPayload(CounterError):
    """Request body present but not a JSON object. Recovered by the transport layer."""


class StoreError(CounterError):
    """The backing store rejected or failed a request."""
