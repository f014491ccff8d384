"""
ConfigurationService contract - the remote system whose configuration
is backed up and restored.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ConfigurationState:
    """Remote configuration document plus the token that guards the next write."""
    payload: bytes
    token: str


class ConfigurationService(ABC):
    """Narrow contract consumed by the snapshot engine.

    Implementations translate their transport errors into the confsnap
    taxonomy: NotFoundError for an unknown target, ConflictError for a
    stale token, TransportError for everything else (including timeouts).
    """

    @abstractmethod
    def fetch_current(self, target_id: str) -> ConfigurationState:
        """Fetch the live configuration and its current concurrency token."""

    @abstractmethod
    def apply_configuration(self, target_id: str, payload: bytes, token: str) -> str:
        """Replace the live configuration if token is still current.

        Returns:
            The new concurrency token
        """
