"""Session credential state machine for the qBittorrent Web API.

State transitions:
    UNAUTHENTICATED --LOGIN_SUCCEEDED(token)--> AUTHENTICATED
    UNAUTHENTICATED --LOGIN_FAILED----------> UNAUTHENTICATED
    AUTHENTICATED   --REJECTED--------------> UNAUTHENTICATED
    AUTHENTICATED   --LOGIN_SUCCEEDED(token)--> AUTHENTICATED (token replaced)

The transition function is pure; the HTTP client only feeds it events.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CredentialState(str, Enum):
    """Whether a session cookie is held."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATED = "AUTHENTICATED"


class CredentialEvent(str, Enum):
    """Things that happen to the session."""

    LOGIN_SUCCEEDED = "LOGIN_SUCCEEDED"
    LOGIN_FAILED = "LOGIN_FAILED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class SessionCredential:
    """Immutable credential value; `token` is None while unauthenticated."""

    token: Optional[str] = None

    @property
    def state(self) -> CredentialState:
        if self.token:
            return CredentialState.AUTHENTICATED
        return CredentialState.UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.state == CredentialState.AUTHENTICATED

    @classmethod
    def unauthenticated(cls) -> "SessionCredential":
        return cls(token=None)


def transition(
    credential: SessionCredential,
    event: CredentialEvent,
    token: Optional[str] = None,
) -> SessionCredential:
    """
    Compute the credential after an event.

    Args:
        credential: Current credential
        event: What happened
        token: New session token, required for LOGIN_SUCCEEDED

    Returns:
        The next credential

    Raises:
        ValueError: LOGIN_SUCCEEDED without a token
    """
    if event == CredentialEvent.LOGIN_SUCCEEDED:
        if not token:
            raise ValueError("LOGIN_SUCCEEDED requires a token")
        return SessionCredential(token=token)

    if event in (CredentialEvent.LOGIN_FAILED, CredentialEvent.REJECTED):
        return SessionCredential.unauthenticated()

    raise ValueError(f"Unknown credential event: {event}")
