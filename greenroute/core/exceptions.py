"""Custom exception classes."""

from fastapi import status


class GreenRouteException(Exception):
    """Base exception for GreenRoute application."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(GreenRouteException):
    """Invalid input coordinates or request data."""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY)


class NotFoundError(GreenRouteException):
    """Resource not found."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class NoRouteFoundError(GreenRouteException):
    """No requested transport mode produced a route."""

    def __init__(self, message: str = "No valid routes found for any preferred mode"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class UpstreamError(GreenRouteException):
    """A collaborator the request cannot do without (route store, traffic store) failed."""

    def __init__(self, message: str = "Upstream service unavailable"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


class ExternalServiceError(GreenRouteException):
    """External HTTP API (Google Directions, OpenChargeMap) error."""

    def __init__(self, message: str = "External service unavailable"):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY)
