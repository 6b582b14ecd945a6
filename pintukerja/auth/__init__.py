"""Accounts, sessions and role checks."""
