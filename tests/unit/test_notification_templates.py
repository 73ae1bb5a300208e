"""Tests for NotificationTemplateRenderer."""

import pytest

from auditflow.application.dtos.notification import TransitionContext
from auditflow.application.services.notification_templates import (
    NotificationTemplateRenderer,
)
from auditflow.domain.enums import TriggerType
from auditflow.domain.value_objects.capability import Capability


@pytest.fixture
def renderer() -> NotificationTemplateRenderer:
    return NotificationTemplateRenderer()


def _ctx(**attributes) -> TransitionContext:
    return TransitionContext(tenant_id="t1", actor_id="u1", attributes=attributes)


def test_every_trigger_has_a_template(renderer) -> None:
    for trigger in TriggerType:
        title, message = renderer.render(trigger, _ctx())
        assert title
        assert message


def test_findings_committed_with_department(renderer) -> None:
    title, message = renderer.render(
        TriggerType.FINDINGS_COMMITTED,
        _ctx(department="Human Resources", audit_no=3, program_title="FY26"),
    )
    assert title == "Audit Findings for Human Resources Submitted for Review"
    assert '"Human Resources"' in message
    assert "#3 (FY26)" in message


def test_findings_committed_without_department(renderer) -> None:
    title, _ = renderer.render(TriggerType.FINDINGS_COMMITTED, _ctx(audit_no=3))
    assert title == "Audit Findings Submitted for Review"


def test_rejection_reason_only_when_given(renderer) -> None:
    _, with_comment = renderer.render(
        TriggerType.AUDIT_PROGRAM_REJECTED, _ctx(program_title="P", comment="Scope too wide")
    )
    _, without = renderer.render(TriggerType.AUDIT_PROGRAM_REJECTED, _ctx(program_title="P"))
    assert with_comment.endswith("Rejection reason: Scope too wide")
    assert "Rejection reason" not in without


def test_change_request_defaults_requester(renderer) -> None:
    _, message = renderer.render(
        TriggerType.CHANGE_REQUEST_SUBMITTED, _ctx(document_title="Policy", clause_number="4.2")
    )
    assert message == (
        'A user has submitted a change request for document "Policy" (Clause 4.2).'
    )


def test_findings_review_link_urlencodes_department(renderer) -> None:
    link = renderer.render_link(
        "findings_review", _ctx(audit_id="a1", department="Human Resources")
    )
    assert link == "/hod/findings-review?auditId=a1&department=Human%20Resources"


def test_link_none_key(renderer) -> None:
    assert renderer.render_link(None, _ctx()) is None


def test_unknown_link_key_raises(renderer) -> None:
    with pytest.raises(KeyError):
        renderer.render_link("nowhere", _ctx())


def test_unknown_trigger_raises() -> None:
    renderer = NotificationTemplateRenderer(templates={"OTHER": ("t", "m")})
    with pytest.raises(KeyError):
        renderer.render(TriggerType.DOCUMENT_PUBLISHED, _ctx())


def test_capability_codes_in_rules_are_valid() -> None:
    """Every capability named by a routing rule parses."""
    from auditflow.application.services.notification_router import TRIGGER_RULES

    for rule in TRIGGER_RULES.values():
        for audience in rule.audiences:
            if audience.capability:
                Capability.parse(audience.capability)
