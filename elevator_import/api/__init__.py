from .client import ApiAuthError, ApiError, ElevatorApiClient

__all__ = ["ApiAuthError", "ApiError", "ElevatorApiClient"]
