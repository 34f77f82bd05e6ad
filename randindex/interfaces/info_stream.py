"""Diagnostic message sink interface.

Engines report internal progress as ``(component, message)`` pairs. Consumers
declare per component whether they want messages at all, so producers can skip
formatting work for disabled components.
"""

from abc import ABC, abstractmethod


class InfoStream(ABC):
    """Abstract interface for engine diagnostic sinks."""

    @abstractmethod
    def message(self, component: str, message: str) -> None:
        """Consume one diagnostic message.

        Args:
            component: Channel name the message was emitted on
            message: Free-form message text
        """

    @abstractmethod
    def is_enabled(self, component: str) -> bool:
        """Report whether messages for ``component`` should be emitted.

        Args:
            component: Channel name to check

        Returns:
            True if the sink wants messages for this channel
        """

    def close(self) -> None:  # noqa: B027 - optional hook
        """Release resources held by the sink."""


class NullInfoStream(InfoStream):
    """Sink that is disabled for every component and drops all messages."""

    def message(self, component: str, message: str) -> None:
        del component, message

    def is_enabled(self, component: str) -> bool:
        del component
        return False
