"""Small helpers shared across test modules."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import UTC, datetime, timedelta


@contextmanager
def not_raises(*exceptions: type[BaseException]):
    """Fail the test if any of ``exceptions`` escapes the managed block.

    Parameters
    ----------
    *exceptions: type[BaseException]
        Exception types that must not be raised. Defaults to ``Exception``.
    """
    caught = exceptions or (Exception,)
    try:
        yield
    except caught as exc:  # pragma: no cover
        raise AssertionError(f"Unexpected {type(exc).__name__}: {exc}") from exc


def utc_in(**delta) -> datetime:
    """Return an aware UTC instant offset from now by ``timedelta(**delta)``."""
    return datetime.now(UTC) + timedelta(**delta)
