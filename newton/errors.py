"""Error types raised by the persistence layer."""

from __future__ import annotations

import functools
import os
import traceback
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_THIS_FILE = os.path.abspath(__file__)

F = TypeVar("F", bound=Callable)


class NewtonError(Exception):
    """Base class for every error raised by Newton."""


class NotFoundError(NewtonError):
    """The targeted entity does not exist or belongs to another owner."""


class MigrationError(NewtonError):
    """A schema migration step failed and was rolled back."""

    def __init__(self, message: str, version: int):
        super().__init__(message)
        self.version = version


class StorageError(NewtonError):
    """A storage failure annotated with the call site it came from.

    ``site`` is ``"<file>:<line>"`` of the deepest Newton frame involved in
    the failing statement. The driver/SQLAlchemy exception is chained as
    ``__cause__``.
    """

    def __init__(self, message: str, site: str = "???:0"):
        super().__init__(f"{site} {message}")
        self.site = site

    @classmethod
    def from_exception(cls, exc: BaseException) -> "StorageError":
        return cls(str(exc), site=_origin_site(exc))


def _origin_site(exc: BaseException) -> str:
    site = "???:0"
    for frame in traceback.extract_tb(exc.__traceback__):
        filename = os.path.abspath(frame.filename)
        if filename == _THIS_FILE:
            continue
        if os.path.dirname(filename) == _PACKAGE_DIR:
            site = f"{os.path.basename(filename)}:{frame.lineno}"
    return site


def wrap_storage_errors(func: F) -> F:
    """Translate SQLAlchemy errors raised by ``func`` into :class:`StorageError`."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as exc:
            raise StorageError.from_exception(exc) from exc

    return wrapper  # type: ignore[return-value]
