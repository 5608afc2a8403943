# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations


class EventGateError(Exception):
    """Base class for errors the HTTP layer turns into a user-facing message."""


class DuplicateUsername(EventGateError):
    def __init__(self, username: str):
        super().__init__(f"Username already taken: {username}")
        self.username = username


class NotFound(EventGateError):
    pass


class StorageUnavailable(EventGateError):
    pass


class InvalidCredentials(EventGateError):
    pass


class ExternalServiceFailure(EventGateError):
    pass
