# -*- coding: utf-8 -*-
"""Error taxonomy shared by the local store, the data manager and the sync client."""

from __future__ import annotations

from typing import Optional


class GymbroError(Exception):
    """Base class for every failure the app reports to the user."""


class ValidationError(GymbroError):
    """A required field is missing or unparseable."""


class NotFoundError(GymbroError):
    """A referenced record id does not exist in its collection."""


class StorageError(GymbroError):
    """The key/value storage could not be read or written."""


class NetworkError(GymbroError):
    """The sync backend could not be reached."""


class RemoteError(GymbroError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(GymbroError):
    """Bad credentials, or a missing/expired token."""
