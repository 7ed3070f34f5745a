from __future__ import annotations


class FantasyHockeyError(Exception):
    """Base error for the league history tooling."""


class SourceDocumentError(FantasyHockeyError):
    """The league history document could not be read."""


class SnapshotError(FantasyHockeyError):
    """A generated snapshot is missing, unreadable or from a newer version."""
