"""Core: configuration, tenant context, lifespan, exception handlers, rate limiting."""
