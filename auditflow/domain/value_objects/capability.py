"""Capability value object: a (module, action) pair such as auditProgram:approve.

The capability catalog is seeded in camelCase, so module names that arrive
hyphen- or underscore-separated (``audit-program``, ``audit_program``) are
normalized before lookup.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from auditflow.domain.exceptions import ValidationException

_SEPARATED = re.compile(r"[-_]+(.)")


def normalize_module_name(module: str) -> str:
    """Convert kebab-case or snake_case module names to camelCase.

    >>> normalize_module_name("audit-program")
    'auditProgram'
    >>> normalize_module_name("auditProgram")
    'auditProgram'
    """
    return _SEPARATED.sub(lambda m: m.group(1).upper(), module.strip())


@dataclass(frozen=True)
class Capability:
    """One grantable permission. Module is always stored normalized."""

    module: str
    action: str

    def __post_init__(self) -> None:
        if not self.module or not self.module.strip():
            raise ValidationException("Capability module must not be empty", field="module")
        if not self.action or not self.action.strip():
            raise ValidationException("Capability action must not be empty", field="action")
        object.__setattr__(self, "module", normalize_module_name(self.module))
        object.__setattr__(self, "action", self.action.strip())

    @classmethod
    def parse(cls, value: str) -> Capability:
        """Parse ``"<module>:<action>"`` (exactly one colon, both sides non-empty)."""
        if not isinstance(value, str) or value.count(":") != 1:
            raise ValidationException(
                f"Invalid capability {value!r}: expected '<module>:<action>'",
                field="capability",
            )
        module, action = value.split(":")
        if not module.strip() or not action.strip():
            raise ValidationException(
                f"Invalid capability {value!r}: module and action must be non-empty",
                field="capability",
            )
        return cls(module=module, action=action)

    @property
    def code(self) -> str:
        return f"{self.module}:{self.action}"

    def __str__(self) -> str:
        return self.code
