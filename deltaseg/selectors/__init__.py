# deltaseg/selectors/__init__.py

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from deltaseg.core.errors import ConfigError
from deltaseg.models import DeltaRun


@runtime_checkable
class Selector(Protocol):
    """Protocol for choosing the next run to apply in the convergence loop.

    Receives the current candidates in domain order and returns one of
    them, or None to decline. Declining stops the loop with
    SelectionFailedError.
    """

    def __call__(self, candidates: list[DeltaRun]) -> Optional[DeltaRun]:
        ...


# --- Registry ---

_SELECTORS: dict[str, Selector] = {}


def get_registered_selectors() -> dict[str, Selector]:
    """Return all registered selectors by name."""
    return dict(_SELECTORS)


def get_selector(name: str) -> Selector:
    """Look up a registered selector by name."""
    try:
        return _SELECTORS[name]
    except KeyError:
        known = ", ".join(sorted(_SELECTORS))
        raise ConfigError(f"Unknown selector '{name}' (known: {known})") from None


def selector(name: str):
    """Decorator for registering a selector function.

    Usage:
        @selector("first")
        def select_first(candidates: list[DeltaRun]) -> Optional[DeltaRun]:
            ...
    """
    def decorator(fn):
        _SELECTORS[name] = fn
        return fn
    return decorator


# --- Explicit imports to trigger registration ---
from deltaseg.selectors import builtin  # noqa: E402,F401 registers built-in selectors
