"""Four-state remote data: not requested, in flight, failed, succeeded.

Every public client entry point returns one of these values.  UI code keeps
a field typed as :data:`RemoteData` and swaps the variant as a request
progresses, which removes the usual ``loading`` / ``error`` / ``data``
flag juggling::

    state: RemoteData[OutcomeError, Document] = NotRequested()
    state = InFlight()
    state = client.request(descriptor)

The variants are frozen dataclasses, so two results compare equal whenever
their payloads do.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

E = TypeVar("E")
S = TypeVar("S")
T = TypeVar("T")


@dataclass(frozen=True)
class NotRequested:
    """No request has been issued yet."""


@dataclass(frozen=True)
class InFlight:
    """A request has been issued and has not resolved yet."""


@dataclass(frozen=True)
class Failed(Generic[E]):
    """The request resolved with an error."""

    error: E


@dataclass(frozen=True)
class Succeeded(Generic[S]):
    """The request resolved with a value."""

    value: S


RemoteData = Union[NotRequested, InFlight, Failed[E], Succeeded[S]]


def map_value(result: RemoteData[E, S], fn: Callable[[S], T]) -> RemoteData[E, T]:
    """Apply *fn* to the value of a :class:`Succeeded`; other variants pass through."""
    if isinstance(result, Succeeded):
        return Succeeded(fn(result.value))
    return result


def map_error(result: RemoteData[E, S], fn: Callable[[E], T]) -> RemoteData[T, S]:
    """Apply *fn* to the error of a :class:`Failed`; other variants pass through."""
    if isinstance(result, Failed):
        return Failed(fn(result.error))
    return result


def with_default(result: RemoteData[Any, S], default: S) -> S:
    """Return the success value, or *default* for every other variant."""
    if isinstance(result, Succeeded):
        return result.value
    return default


def is_settled(result: RemoteData[Any, Any]) -> bool:
    """Return ``True`` once the result is :class:`Failed` or :class:`Succeeded`."""
    return isinstance(result, (Failed, Succeeded))
