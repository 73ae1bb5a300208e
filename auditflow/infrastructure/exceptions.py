"""Infrastructure exceptions for real-time transport.

They extend AuditflowException so presentation can map them to HTTP
responses consistently; the notification router records them as partial
delivery failures instead of raising.
"""

from auditflow.domain.exceptions import AuditflowException


class RealtimeUnavailableException(AuditflowException):
    """The real-time transport (Redis pub/sub) is not connected."""

    def __init__(self, channel: str) -> None:
        super().__init__(
            f"Real-time transport unavailable for channel: {channel}",
            "REALTIME_UNAVAILABLE",
            {"channel": channel},
        )
