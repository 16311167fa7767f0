"""Account directory wiring. Defaults to the in-memory directory."""

from ordering.accounts.memory_adapter import InMemoryAccountDirectory
from ordering.accounts.port import AccountDirectory

_directory: AccountDirectory | None = None


def get_account_directory() -> AccountDirectory:
    global _directory
    if _directory is None:
        _directory = InMemoryAccountDirectory()
    return _directory


def set_account_directory(directory: AccountDirectory) -> None:
    global _directory
    _directory = directory


def reset_account_directory() -> None:
    global _directory
    _directory = None
