"""Shared cross-cutting helpers: request context, enums, logging, utilities."""
