"""Account directory port used by guest checkout to register a customer."""

from abc import ABC, abstractmethod


class AccountDirectory(ABC):
    @abstractmethod
    def register(self, username: str, email: str, password: str) -> str:
        """Create an account and return its user id.

        Raises ``Conflict`` when the username or email is already taken.
        """

    @abstractmethod
    def unregister(self, user_id: str) -> None:
        """Remove an account created by a checkout that did not complete."""
