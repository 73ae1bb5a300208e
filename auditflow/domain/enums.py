"""Domain enumerations: workflow states, notification triggers, HOD role names."""

from enum import Enum

from auditflow.shared.enums import _ValuesMixin


class FindingStatus(_ValuesMixin, str, Enum):
    """Audit finding lifecycle: PENDING -> UNDER_REVIEW -> ACCEPTED | REFUSED."""

    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    ACCEPTED = "ACCEPTED"
    REFUSED = "REFUSED"


class AuditProgramStatus(_ValuesMixin, str, Enum):
    """Audit program lifecycle: DRAFT -> UNDER_REVIEW -> APPROVED (or back to DRAFT)."""

    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"


class TriggerType(_ValuesMixin, str, Enum):
    """Workflow transitions that fan out notifications.

    The value doubles as the persisted Notification.type.
    """

    FINDINGS_COMMITTED = "FINDINGS_COMMITTED"
    FINDING_REVIEWED = "FINDING_REVIEWED"
    FINDINGS_REVIEW_FINISHED = "FINDINGS_REVIEW_FINISHED"
    FINDINGS_CATEGORIZATION_FINISHED = "FINDINGS_CATEGORIZATION_FINISHED"
    AUDIT_PROGRAM_COMMITTED = "AUDIT_PROGRAM_APPROVAL"
    AUDIT_PROGRAM_APPROVED = "AUDIT_PROGRAM_APPROVED"
    AUDIT_PROGRAM_REJECTED = "AUDIT_PROGRAM_REJECTED"
    DOCUMENT_SUBMITTED_FOR_APPROVAL = "DOCUMENT_PENDING_APPROVAL"
    DOCUMENT_PUBLISHED = "DOCUMENT_PUBLISHED"
    CHANGE_REQUEST_SUBMITTED = "CHANGE_REQUEST_CREATED"
    CHANGE_REQUEST_APPROVED = "CHANGE_REQUEST_APPROVED"
    CHANGE_REQUEST_REJECTED = "CHANGE_REQUEST_REJECTED"


# Role names that make a department-scoped assignment the department's HOD.
HOD_ROLE_NAMES: frozenset[str] = frozenset({"HOD", "HOD AUDITOR", "HOD_AUDITOR"})
