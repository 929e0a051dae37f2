"""
Service layer exceptions.
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, service_id: str | None = None):
        self.service_id = service_id
        super().__init__(message)


class UpstreamError(ServiceError):
    """A raw upstream call failed (network, non-2xx, or malformed response)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: BaseException | None = None,
        service_id: str | None = None,
        retry_after: float | None = None,
    ):
        self.status_code = status_code
        self.cause = cause
        self.retry_after = retry_after
        super().__init__(message, service_id=service_id)

    @property
    def is_client_error(self) -> bool:
        """4xx other than 429; the request itself is wrong, retrying won't help."""
        return (
            self.status_code is not None
            and 400 <= self.status_code < 500
            and self.status_code != 429
        )


class UpstreamTimeoutError(UpstreamError):
    """Request timed out."""

    def __init__(
        self,
        service_id: str,
        timeout: float,
        cause: BaseException | None = None,
    ):
        self.timeout = timeout
        super().__init__(
            f"Request to service '{service_id}' timed out after {timeout}s",
            cause=cause,
            service_id=service_id,
        )


class CircuitOpenError(ServiceError):
    """Circuit breaker is open, request blocked."""

    status_code = 503

    def __init__(self, service_id: str, reset_after_seconds: float):
        self.reset_after_seconds = reset_after_seconds
        super().__init__(
            f"Service '{service_id}' temporarily unavailable (circuit open), "
            f"retry after {reset_after_seconds:.1f}s",
            service_id=service_id,
        )


class RateLimitError(ServiceError):
    """Outbound request budget exceeded."""

    def __init__(self, service_id: str, retry_after: float | None = None):
        self.retry_after = retry_after
        msg = f"Rate limit exceeded for service '{service_id}'"
        if retry_after:
            msg += f", retry after {retry_after}s"
        super().__init__(msg, service_id=service_id)
