"""Workflow notification templates: trigger -> title/message, link key -> deep link (Jinja)."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, Template

from auditflow.application.dtos.notification import TransitionContext
from auditflow.domain.enums import TriggerType

# Trigger value -> (title_template, message_template).
# Context: every TransitionContext attribute plus tenant_id, actor_id, subject_id, departments.
_DEFAULT_TEMPLATES: dict[str, tuple[str, str]] = {
    TriggerType.FINDINGS_COMMITTED.value: (
        "{% if department %}Audit Findings for {{ department }} Submitted for Review"
        "{% else %}Audit Findings Submitted for Review{% endif %}",
        "{% if department %}Audit findings for department \"{{ department }}\" in audit "
        "#{{ audit_no }} ({{ program_title }}) have been submitted for your review."
        "{% else %}Audit findings for audit #{{ audit_no }} ({{ program_title }}) "
        "have been submitted for your review.{% endif %}",
    ),
    TriggerType.FINDING_REVIEWED.value: (
        "Finding {{ status|lower }} by reviewer",
        "Your finding \"{{ finding_title }}\" has been {{ status|lower }} by a reviewer "
        "for {{ department }}.",
    ),
    TriggerType.FINDINGS_REVIEW_FINISHED.value: (
        "{% if department %}Findings Review Finished for {{ department }}"
        "{% else %}Findings Review Finished{% endif %}",
        "{% if department %}The HOD has finished reviewing findings for department "
        "\"{{ department }}\" in audit #{{ audit_no }} ({{ program_title }})."
        "{% else %}The HOD has finished reviewing findings in audit #{{ audit_no }} "
        "({{ program_title }}).{% endif %}",
    ),
    TriggerType.FINDINGS_CATEGORIZATION_FINISHED.value: (
        "{% if department %}Findings Categorization Completed for {{ department }}"
        "{% else %}Findings Categorization Completed{% endif %}",
        "{% if department %}Findings for department \"{{ department }}\" in audit "
        "#{{ audit_no }} ({{ program_title }}) have been categorized and completed."
        "{% else %}Findings for audit #{{ audit_no }} ({{ program_title }}) have been "
        "categorized and completed.{% endif %} {{ categorization_summary }}",
    ),
    TriggerType.AUDIT_PROGRAM_COMMITTED.value: (
        "Audit Program Pending Approval",
        "New audit program \"{{ program_title }}\" requires your approval.",
    ),
    TriggerType.AUDIT_PROGRAM_APPROVED.value: (
        "Audit Program Approved",
        "The audit program \"{{ program_title }}\" has been approved."
        "{% if comment %} Comment: {{ comment }}{% endif %}",
    ),
    TriggerType.AUDIT_PROGRAM_REJECTED.value: (
        "Audit Program Rejected",
        "Audit program \"{{ program_title }}\" has been rejected. Please review and resubmit."
        "{% if comment %} Rejection reason: {{ comment }}{% endif %}",
    ),
    TriggerType.DOCUMENT_SUBMITTED_FOR_APPROVAL.value: (
        "Document Pending Approval",
        "The document \"{{ document_title }}\" has been submitted for your approval.",
    ),
    TriggerType.DOCUMENT_PUBLISHED.value: (
        "New Document Published",
        "The document \"{{ document_title }}\" is now available.",
    ),
    TriggerType.CHANGE_REQUEST_SUBMITTED.value: (
        "New Change Request for Approval",
        "{{ requester_name or 'A user' }} has submitted a change request for document "
        "\"{{ document_title }}\"{% if clause_number %} (Clause {{ clause_number }}){% endif %}.",
    ),
    TriggerType.CHANGE_REQUEST_APPROVED.value: (
        "Change Request Approved",
        "Change request for document \"{{ document_title }}\" has been approved and is "
        "ready for implementation.",
    ),
    TriggerType.CHANGE_REQUEST_REJECTED.value: (
        "Change Request Rejected",
        "Your change request for document \"{{ document_title }}\" has been rejected.",
    ),
}

# Link key -> deep-link template (same context as above).
_DEFAULT_LINKS: dict[str, str] = {
    "findings_review": (
        "/hod/findings-review?auditId={{ audit_id }}"
        "{% if department %}&department={{ department|urlencode }}{% endif %}"
    ),
    "findings_manager": (
        "/audit-management/audits/findings?programId={{ program_id }}&auditId={{ audit_id }}"
    ),
    "program_audit": "/audit-management/audit-programs/{{ program_id }}/audits/{{ audit_id }}",
    "audit_program": "/audit-management/audit-programs/{{ program_id }}",
    "document": "/documents/{{ document_id }}",
    "change_request": "/change-requests/{{ change_request_id }}",
}


def _render_context(context: TransitionContext) -> dict[str, Any]:
    ctx: dict[str, Any] = {
        "tenant_id": context.tenant_id,
        "actor_id": context.actor_id,
        "subject_id": context.subject_id,
        "departments": list(context.departments),
    }
    ctx.update(context.attributes)
    return ctx


class NotificationTemplateRenderer:
    """Renders title/message per trigger and deep links per link key."""

    def __init__(
        self,
        templates: dict[str, tuple[str, str]] | None = None,
        links: dict[str, str] | None = None,
    ) -> None:
        """Initialize with optional template dicts; falls back to the defaults."""
        self._templates = templates or _DEFAULT_TEMPLATES
        self._links = links or _DEFAULT_LINKS
        self._env = Environment(autoescape=False)
        self._compiled: dict[str, tuple[Template, Template]] = {}
        for key, (title_str, message_str) in self._templates.items():
            self._compiled[key] = (
                self._env.from_string(title_str),
                self._env.from_string(message_str),
            )
        self._compiled_links: dict[str, Template] = {
            key: self._env.from_string(src) for key, src in self._links.items()
        }

    def render(
        self, trigger: TriggerType, context: TransitionContext
    ) -> tuple[str, str]:
        """Render title and message for the trigger. Raises KeyError if trigger unknown."""
        key = trigger.value
        if key not in self._compiled:
            raise KeyError(f"Unknown notification template: {key}")
        ctx = _render_context(context)
        title_tpl, message_tpl = self._compiled[key]
        return title_tpl.render(**ctx).strip(), message_tpl.render(**ctx).strip()

    def render_link(self, link_key: str | None, context: TransitionContext) -> str | None:
        """Render the deep link for link_key; None key means no link."""
        if link_key is None:
            return None
        if link_key not in self._compiled_links:
            raise KeyError(f"Unknown notification link: {link_key}")
        return self._compiled_links[link_key].render(**_render_context(context))
