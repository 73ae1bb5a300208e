"""Use cases: state transitions that return a notification outbox."""
