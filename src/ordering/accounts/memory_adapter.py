"""In-memory account directory for development and tests."""

from dataclasses import dataclass
from uuid import uuid4

from passlib.context import CryptContext

from ordering.accounts.port import AccountDirectory
from shared.errors import BadRequest, Conflict

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Account:
    user_id: str
    username: str
    email: str
    password_hash: str


class InMemoryAccountDirectory(AccountDirectory):
    def __init__(self):
        self.accounts: dict[str, Account] = {}

    def register(self, username: str, email: str, password: str) -> str:
        if not username or not email or not password:
            raise BadRequest("Username, email and password are required to create an account", field="account")

        email = email.lower()
        for account in self.accounts.values():
            if account.username == username or account.email == email:
                raise Conflict("User with this username or email already exists")

        account = Account(
            user_id=str(uuid4()),
            username=username,
            email=email,
            password_hash=pwd_context.hash(password),
        )
        self.accounts[account.user_id] = account
        return account.user_id

    def unregister(self, user_id: str) -> None:
        self.accounts.pop(str(user_id), None)

    def verify_password(self, username: str, password: str) -> bool:
        account = next((a for a in self.accounts.values() if a.username == username), None)
        return account is not None and pwd_context.verify(password, account.password_hash)
