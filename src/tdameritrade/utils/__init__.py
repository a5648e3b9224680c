"""Shared helpers for the TD Ameritrade tools."""
