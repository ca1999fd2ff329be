"""Error types and user-facing error reporting for Trello Monitor."""

import json
from typing import Optional

import click
import requests


class TrelloMonitorError(Exception):
    """Base class for all Trello Monitor errors."""


class ConfigurationError(TrelloMonitorError):
    """Invalid configuration file or missing credentials."""


class CacheStorageError(TrelloMonitorError):
    """A value could not be written to the cache."""


class MovementValidationError(TrelloMonitorError, ValueError):
    """Movement records passed to the merge engine are malformed."""


class SinkError(TrelloMonitorError):
    """A movement sink failed to read or write its collection."""


class TrelloAPIError(TrelloMonitorError):
    """The Trello API returned an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def create_user_friendly_error(error: Exception) -> str:
    """Convert an exception into a short message for the terminal.

    Args:
        error: Exception raised by a command

    Returns:
        One-line description of the problem
    """
    if isinstance(error, TrelloAPIError):
        if error.status_code in (401, 403):
            return "Trello rejected the credentials. Check TRELLO_API_KEY and TRELLO_TOKEN."
        if error.status_code == 404:
            return "Trello resource not found. Check the board ID."
        if error.status_code == 429:
            return "Trello rate limit exceeded. Try again later or rely on the cache."
        return str(error)
    if isinstance(error, TrelloMonitorError):
        return str(error)
    if isinstance(error, requests.ConnectionError):
        return "Could not connect to Trello. Check your network connection."
    if isinstance(error, requests.Timeout):
        return "Request to Trello timed out."
    if isinstance(error, FileNotFoundError):
        return f"File not found: {error.filename}"
    if isinstance(error, PermissionError):
        return f"Permission denied: {error.filename}"
    if isinstance(error, json.JSONDecodeError):
        return f"Invalid JSON data: {error.msg}"
    return str(error) or error.__class__.__name__


class ErrorHandler:
    """Prints command errors to stderr, with details in verbose mode."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def report(self, action: str, error: Exception) -> None:
        """Print an error raised while performing ``action``.

        Args:
            action: Short description, e.g. "syncing movements"
            error: The exception that was raised
        """
        click.echo(f"Error {action}: {create_user_friendly_error(error)}", err=True)
        if self.verbose:
            click.echo(f"Details: {error!r}", err=True)
