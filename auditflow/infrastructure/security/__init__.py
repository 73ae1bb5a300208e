"""Security: JWT issue/verify."""
