"""
Endpoint session state.

A session is UNRESOLVED until the first probe cycle, ONLINE while a
candidate base URL answers, OFFLINE once every candidate failed (or the
user chose to work offline).
"""

from dataclasses import dataclass
from enum import Enum


class SessionStatus(str, Enum):
    """Connectivity status of an endpoint session."""

    UNRESOLVED = "unresolved"
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of a session's connectivity."""

    status: SessionStatus = SessionStatus.UNRESOLVED
    active_endpoint: str | None = None

    def __post_init__(self) -> None:
        if self.status == SessionStatus.ONLINE and not self.active_endpoint:
            raise ValueError("ONLINE state requires an active endpoint")
        if self.status != SessionStatus.ONLINE and self.active_endpoint is not None:
            raise ValueError(f"{self.status.value} state cannot carry an endpoint")

    @classmethod
    def unresolved(cls) -> "SessionState":
        return cls()

    @classmethod
    def online(cls, endpoint: str) -> "SessionState":
        return cls(SessionStatus.ONLINE, endpoint)

    @classmethod
    def offline(cls) -> "SessionState":
        return cls(SessionStatus.OFFLINE)

    @property
    def is_online(self) -> bool:
        return self.status == SessionStatus.ONLINE

    @property
    def is_offline(self) -> bool:
        return self.status == SessionStatus.OFFLINE

    @property
    def is_unresolved(self) -> bool:
        return self.status == SessionStatus.UNRESOLVED
