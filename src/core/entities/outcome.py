"""
Caller-facing outcomes of endpoint session operations.

Failures the caller is expected to handle are returned as values, not
raised: exhaustion of the candidate list, remote write failures and
validation failures (local or server-side).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from src.core.exceptions import ServerValidationError, ValidationError


class OutcomeKind(str, Enum):
    """Discriminator shared by all outcomes."""

    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"
    REMOTE_SUCCESS = "remote_success"
    LOCAL_ONLY_SUCCESS = "local_only_success"
    REMOTE_FAILURE = "remote_failure"
    VALIDATION_FAILURE = "validation_failure"


class DataSource(str, Enum):
    """Where the items of a collection read came from."""

    REMOTE = "remote"
    SAMPLE = "sample"


@dataclass(frozen=True)
class Resolved:
    """A candidate answered; the session is ONLINE against `url`."""

    url: str

    kind: ClassVar[OutcomeKind] = OutcomeKind.RESOLVED


@dataclass(frozen=True)
class Exhausted:
    """Every candidate failed; the session is OFFLINE."""

    attempted: tuple[str, ...] = ()

    kind: ClassVar[OutcomeKind] = OutcomeKind.EXHAUSTED


@dataclass(frozen=True)
class RemoteSuccess:
    """The server accepted the write."""

    entity: dict[str, Any]

    kind: ClassVar[OutcomeKind] = OutcomeKind.REMOTE_SUCCESS
    succeeded: ClassVar[bool] = True
    remote: ClassVar[bool] = True


@dataclass(frozen=True)
class LocalOnlySuccess:
    """The write was applied to the local view only and is not persisted."""

    entity: dict[str, Any]
    reason: str = "offline"

    kind: ClassVar[OutcomeKind] = OutcomeKind.LOCAL_ONLY_SUCCESS
    succeeded: ClassVar[bool] = True
    remote: ClassVar[bool] = False


@dataclass(frozen=True)
class RemoteFailure:
    """
    The write did not reach the server and the local view is unchanged.

    The session itself may have gone OFFLINE if the re-probe that preceded
    this outcome found no reachable endpoint.
    """

    reason: str

    kind: ClassVar[OutcomeKind] = OutcomeKind.REMOTE_FAILURE
    succeeded: ClassVar[bool] = False
    remote: ClassVar[bool] = False


@dataclass(frozen=True)
class ValidationFailure:
    """Payload rejected, either before sending or by the server."""

    error: ValidationError | ServerValidationError

    kind: ClassVar[OutcomeKind] = OutcomeKind.VALIDATION_FAILURE
    succeeded: ClassVar[bool] = False
    remote: ClassVar[bool] = False

    @property
    def field_errors(self) -> dict[str, list[str]]:
        return self.error.field_errors

    @property
    def from_server(self) -> bool:
        return isinstance(self.error, ServerValidationError)


@dataclass
class CollectionResult:
    """Items of one resource, in server order, plus how trustworthy they are."""

    resource: str
    items: list[dict[str, Any]] = field(default_factory=list)
    source: DataSource = DataSource.REMOTE
    notice: str | None = None

    @property
    def degraded(self) -> bool:
        return self.source != DataSource.REMOTE


ResolveOutcome = Resolved | Exhausted
WriteOutcome = RemoteSuccess | LocalOnlySuccess | RemoteFailure | ValidationFailure
