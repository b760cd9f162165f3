# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ConfigTree exceptions."""

from __future__ import annotations

from os import PathLike


class ConfigTreeError(Exception):
    """Base exception for ConfigTree errors."""

    pass


class InvalidInputError(ConfigTreeError, TypeError):
    """Raised when a config is built from something that is not a mapping or sequence."""

    pass


class UnknownEventError(ConfigTreeError, ValueError):
    """Raised when subscribing to or emitting an event the bus does not know."""

    pass


class DocumentError(ConfigTreeError):
    """Base class for document loading failures.

    Attributes:
        path: The document path that could not be loaded.
    """

    def __init__(self, message: str, path: str | PathLike | None = None) -> None:
        super().__init__(message)
        self.path = path


class DocumentParseError(DocumentError):
    """Raised when a config document is malformed."""

    pass


class DocumentIOError(DocumentError):
    """Raised when a config document cannot be read."""

    pass
