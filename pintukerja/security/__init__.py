"""Admin activity logging."""
