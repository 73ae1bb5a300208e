"""auditflow: permission resolution and capability-based workflow notification routing."""
