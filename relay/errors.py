"""Error taxonomy and typed step results.

Pipeline steps that can fail return ``Ok`` or ``Failure`` instead of raising,
so the orchestrator decides explicitly whether to continue. Exceptions are
reserved for the boundaries (configuration, payload validation, transport).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class RelayError(Exception):
    """Base class for relay errors."""


class ConfigurationError(RelayError):
    """Required settings are missing or invalid."""


class PayloadError(RelayError):
    """The inbound webhook payload is malformed or incomplete."""


class UpstreamError(RelayError):
    """A remote call failed or returned inconsistent state."""


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    """A fatal step failure; ``reason`` is reported to the caller verbatim."""

    reason: str


Result = Union[Ok[T], Failure]
