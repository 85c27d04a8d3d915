"""Error taxonomy shared by providers, the analyzer and the session controller."""

from __future__ import annotations


class WeatherWearError(Exception):
    """Base class for every failure surfaced to the user as a notice."""

    user_message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)

    @property
    def message(self) -> str:
        return str(self)


class TransportError(WeatherWearError):
    """No response, a network failure or a non-success HTTP status."""

    user_message = "Could not reach the service, please retry"


class UpstreamError(WeatherWearError):
    """The service answered with an error payload."""

    user_message = "The service reported an error, please retry"


class MalformedResponse(WeatherWearError):
    """The response shape violates the expected contract."""

    user_message = "Failed to parse analysis response"


class NotFound(WeatherWearError):
    """Geocoding returned zero matches."""

    user_message = "Location not found"


class ValidationError(WeatherWearError):
    """A precondition on user-supplied data failed."""

    user_message = "Invalid input"


class MissingLocation(ValidationError):
    user_message = "Please select a location first"


class EmptySelection(ValidationError):
    user_message = "Please select at least one clothing item"


class InvalidGarment(ValidationError):
    user_message = "Unknown garment"


class PasswordMismatch(ValidationError):
    user_message = "Passwords do not match"


class AuthError(WeatherWearError):
    """Identity provider failure carrying a provider error code."""

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or code)


__all__ = [
    "WeatherWearError",
    "TransportError",
    "UpstreamError",
    "MalformedResponse",
    "NotFound",
    "ValidationError",
    "MissingLocation",
    "EmptySelection",
    "InvalidGarment",
    "PasswordMismatch",
    "AuthError",
]
