"""Presentation hooks the coordinator reports through."""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Status banner, toasts, blocking alerts and yes/no confirmation."""

    @abstractmethod
    def set_status(self, message: str | None) -> None:
        """Show a persistent status message, or clear it with None."""
        ...

    @abstractmethod
    def toast(self, message: str, kind: str = "info") -> None:
        """Show a short-lived message. kind is info, success or error."""
        ...

    @abstractmethod
    def alert(self, message: str) -> None:
        """Show a blocking error message."""
        ...

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Ask a yes/no question synchronously."""
        ...
