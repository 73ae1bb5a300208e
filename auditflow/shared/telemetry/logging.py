"""Logging configuration for the application.

Every record carries the tenant and acting user of the current request
(``-`` and ``system`` outside a request), so permission decisions and
notification fan-out can be traced per tenant without threading ids into
every message.
"""

import logging
import sys

from auditflow.core.config import get_settings
from auditflow.core.tenant_context import get_tenant_id
from auditflow.shared.context import get_current_actor_id, get_current_actor_type
from auditflow.shared.enums import ActorType

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[tenant=%(tenant_id)s actor=%(actor_id)s] %(message)s"
)


class RequestContextFilter(logging.Filter):
    """Attach tenant_id and actor_id from the request context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.tenant_id = get_tenant_id() or "-"
        if get_current_actor_type() == ActorType.SYSTEM:
            record.actor_id = ActorType.SYSTEM.value
        else:
            record.actor_id = get_current_actor_id() or "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=[handler])


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)
