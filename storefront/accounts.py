"""
Demo accounts kept in local storage.

Passwords are stored and compared in plaintext; there is no security model here.
"""

import logging
from dataclasses import asdict
from typing import Tuple

from .domain import Account, Session
from .errors import StorageError
from .ftypes import Either, Maybe
from .storage import ACCOUNTS_SLOT, SESSION_SLOT, SlotStore

logger = logging.getLogger(__name__)


def _decode_accounts(raw) -> Tuple[Account, ...]:
    if not isinstance(raw, list):
        raise StorageError("Accounts slot is not a list")
    try:
        return tuple(Account(**u) for u in raw)
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Malformed account record: {e}") from e


def _decode_session(raw) -> Session:
    if not isinstance(raw, dict):
        raise StorageError("Session slot is not an object")
    try:
        return Session(**raw)
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Malformed session: {e}") from e


class AccountStore:
    def __init__(self, store: SlotStore):
        self.store = store

    def accounts(self) -> Tuple[Account, ...]:
        return _decode_accounts(self.store.read_json(ACCOUNTS_SLOT, []))

    def find(self, username: str) -> Maybe[Account]:
        return Maybe.of(next((a for a in self.accounts() if a.username == username), None))

    def register(
        self, username: str, password: str, email: str, fullname: str, dob: str
    ) -> Either[str, Account]:
        account = Account(
            username=(username or "").strip(),
            password=(password or "").strip(),
            email=(email or "").strip(),
            fullname=(fullname or "").strip(),
            dob=dob or "",
        )
        if not all(asdict(account).values()):
            return Either.left("Please fill all registration fields")
        if self.find(account.username).is_some():
            logger.warning(f"Registration rejected, username taken: {account.username}")
            return Either.left("Username exists")

        users = [asdict(a) for a in self.accounts()]
        users.append(asdict(account))
        self.store.write_json(ACCOUNTS_SLOT, users)
        logger.info(f"Registered user {account.username}")
        return Either.right(account)

    def login(self, username: str, password: str) -> Either[str, Session]:
        username = (username or "").strip()
        password = (password or "").strip()
        match = next(
            (
                a
                for a in self.accounts()
                if a.username == username and a.password == password
            ),
            None,
        )
        if match is None:
            logger.warning(f"Failed login for {username!r}")
            return Either.left("Invalid credentials")

        session = Session(username=match.username, fullname=match.fullname, email=match.email)
        self.store.write_json(SESSION_SLOT, asdict(session))
        logger.info(f"User {session.username} logged in")
        return Either.right(session)

    def logout(self) -> None:
        self.store.remove(SESSION_SLOT)
        logger.info("Logged out")

    def current(self) -> Maybe[Session]:
        data = self.store.read_json(SESSION_SLOT)
        if data is None:
            return Maybe.nothing()
        return Maybe.some(_decode_session(data))
