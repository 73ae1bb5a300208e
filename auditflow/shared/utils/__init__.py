"""Small pure helpers (UTC time)."""
