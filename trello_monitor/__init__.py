"""Trello Monitor - track card movements between Trello lists."""

__version__ = "0.1.0"
