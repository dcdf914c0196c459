"""
Analytics exception hierarchy.

Every calculator and the record gateway raise these types, so the
blueprint registers one handler per class and callers can degrade a single
dashboard widget without inspecting messages.

    AnalyticsError
     ├── ConfigurationError      bad tenant id / bad call arguments (HTTP 400)
     └── AggregationError        a metric could not be aggregated (HTTP 500)
          └── GatewayError       the record store query failed (HTTP 503)

Zero matching records is NOT an error: calculators return their
well-defined zero-valued or empty outputs.

Usage:
    from opspulse.core.exceptions import ConfigurationError, GatewayError

    raise ConfigurationError("tenant_id must be a positive integer", details={"tenant_id": raw})
    raise GatewayError("query_members", tenant_id=7, cause=exc) from exc
"""


class AnalyticsError(Exception):
    """Base class for every error raised by the analytics engine."""


class ConfigurationError(AnalyticsError):
    """Raised synchronously when a call is mis-configured.

    Covers a missing or invalid tenant identifier, a snapshot captured for a
    different tenant, and out-of-range arguments (horizon, date range); all
    of these are raised before any record query.

    One case is detected later: an unknown IANA zone configured on the
    tenant itself. It surfaces right after the ``tenant_timezone`` lookup
    (the first read of a call without an injected clock) and before any
    record query.

    Args:
        message: Human-readable explanation.
        details: Optional field-level breakdown for the API response.
        missing: True when a required argument was absent rather than
            malformed; the API reports ERR_VALIDATION_REQUIRED for it.
    """

    def __init__(self, message: str, details: dict | None = None, *,
                 missing: bool = False) -> None:
        self.details = details or {}
        self.missing = missing
        super().__init__(message)


class AggregationError(AnalyticsError):
    """Raised when a calculator cannot produce its result."""


class GatewayError(AggregationError):
    """Raised when the record store fails to answer a query.

    The gateway raises this from the original driver exception
    (``raise GatewayError(...) from exc``) so the cause stays on the
    traceback. Nothing in the engine retries it.

    Args:
        operation: Gateway method that failed (e.g. "query_work_items").
        tenant_id: Tenant the query was scoped to.
        cause: Original exception, kept for logging.
    """

    def __init__(
        self,
        operation: str,
        tenant_id: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.operation = operation
        self.tenant_id = tenant_id
        self.cause = cause
        msg = f"Record gateway {operation} failed"
        if tenant_id is not None:
            msg += f" (tenant={tenant_id})"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)
