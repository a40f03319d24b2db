# issuer/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from issuer.core import errors as api_errors
from issuer.services._shared.errors import (
    ConfigurationError,
    InvalidCredentials,
    KeyGenerationError,
    KeyNotFound,
    RedeemFailed,
    ServiceError,
    StoreError,
    TokenNotFound,
)
from issuer.services._shared.workers import CryptoWorkers, InlineWorkers

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


class BaseService:
    """
    Base class for key and token services.

    Responsibilities
    ----------------
    * Own the injectable clock so expiry logic is testable.
    * Route CPU-bound crypto through :class:`CryptoWorkers`.
    * Centralize error translation for the HTTP layer.

    Notes
    -----
    - Services never read configuration from the environment; everything
      arrives through the constructor.
    - Services never touch Flask request state.
    """

    def __init__(
        self,
        *,
        workers: CryptoWorkers | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the base service.

        :param workers: Pool for cryptographic work (inline when omitted).
        :type workers: CryptoWorkers | None
        :param clock: Callable returning aware UTC datetimes.
        :type clock: Callable[[], datetime] | None
        """
        self.workers = workers or InlineWorkers()
        self._clock = clock or utc_now

    def now_utc(self) -> datetime:
        return self._clock()

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, InvalidCredentials | RedeemFailed):
            # → 401 Unauthorized (message is fixed, never the cause)
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, KeyNotFound | TokenNotFound):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, StoreError):
            return api_errors.APIError(
                message="Service temporarily unavailable",
                status_code=503,
                code="service_unavailable",
            )

        if isinstance(exc, ConfigurationError | KeyGenerationError):
            return api_errors.APIError(
                message="Issuer is misconfigured",
                status_code=500,
                code="configuration_error",
            )

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
