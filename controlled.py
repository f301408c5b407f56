"""Controlled / uncontrolled state dispatch shared by every table state slice.

A slice is controlled when its prop holds anything other than ``UNSET``; the
prop is then authoritative on every read and the engine only reports
changes. An ``UNSET`` prop leaves the slice's internal cell in charge.
"""

import logging
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Unset:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()


def is_controlled(prop) -> bool:
    return prop is not UNSET


def resolve_state(prop, internal):
    """Return the value a slice should read: the prop when controlled, else the internal cell."""
    return prop if is_controlled(prop) else internal


class StateSlice(Generic[T]):
    def __init__(
        self,
        name: str,
        initial: T,
        prop: Any = UNSET,
        on_change: Optional[Callable[[T], Any]] = None,
    ):
        self.name = name
        self._internal = initial
        self.prop = prop
        self.on_change = on_change

    @property
    def controlled(self) -> bool:
        return is_controlled(self.prop)

    @property
    def value(self) -> T:
        return resolve_state(self.prop, self._internal)

    def sync(self, prop, on_change=None):
        self.prop = prop
        self.on_change = on_change

    def reset(self, value: T):
        """Replace the internal cell without reporting a change."""
        self._internal = value

    def commit(self, new_value: T) -> T:
        if not self.controlled:
            self._internal = new_value
        logger.debug(
            "%s -> %r (%s)",
            self.name,
            new_value,
            "controlled" if self.controlled else "internal",
        )
        if self.on_change is not None:
            self.on_change(new_value)
        return new_value
