"""Error types raised by the ride planner."""


class RidePlannerError(Exception):
    """Base class for all ride planner errors."""


class InvalidInput(RidePlannerError, ValueError):
    """Caller supplied an empty required collection or a malformed value."""


class ProviderError(RidePlannerError):
    """An external routing or POI service call failed."""

    def __init__(self, message: str, provider: str = "unknown", status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class RouteGenerationFailed(RidePlannerError):
    """No usable route could be produced."""

    def __init__(
        self,
        message: str,
        mode: str,
        attempts: int,
        last_error: ProviderError | None = None,
    ):
        super().__init__(message)
        self.mode = mode
        self.attempts = attempts
        self.last_error = last_error

    def __str__(self) -> str:
        text = f"{self.args[0]} (mode={self.mode}, attempts={self.attempts})"
        if self.last_error is not None:
            text += f": {self.last_error}"
        return text


class RideNotFound(RidePlannerError):
    """The requested ride does not exist in the store."""
