"""Shared helpers for Trello Monitor."""
