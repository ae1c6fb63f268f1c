from __future__ import annotations


class DirectoryError(Exception):
    """Base class for directory engine errors."""


class ProfileNotFound(DirectoryError):
    """The requested user id has no account.

    Raised by the hydrator only; public operations return None instead.
    """

    def __init__(self, user_id: object):
        super().__init__(f"Profile not found: {user_id!r}")
        self.user_id = user_id
