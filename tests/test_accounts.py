import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest
from storefront.accounts import AccountStore
from storefront.domain import Session
from storefront.errors import StorageError
from storefront.storage import ACCOUNTS_SLOT, SESSION_SLOT, MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def accounts(store):
    return AccountStore(store)


def register_jane(accounts):
    return accounts.register("jane", "secret", "jane@example.com", "Jane Brown", "1990-04-02")


def test_register_and_login(store, accounts):
    assert register_jane(accounts).is_right
    assert store.read_json(ACCOUNTS_SLOT)[0]["username"] == "jane"

    result = accounts.login(" jane ", "secret")
    assert result.is_right
    assert result.get_or_else(None) == Session("jane", "Jane Brown", "jane@example.com")
    assert store.read_json(SESSION_SLOT) == {
        "username": "jane",
        "fullname": "Jane Brown",
        "email": "jane@example.com",
    }
    assert accounts.current().get_or_else(None).username == "jane"


def test_register_requires_every_field(accounts):
    result = accounts.register("jane", "secret", "  ", "Jane Brown", "1990-04-02")
    assert result.is_left
    assert result.error_or_none() == "Please fill all registration fields"
    assert accounts.accounts() == ()


def test_duplicate_username_rejected(accounts):
    register_jane(accounts)
    result = accounts.register("jane", "other", "j2@example.com", "J Two", "2000-01-01")
    assert result.error_or_none() == "Username exists"
    assert len(accounts.accounts()) == 1


def test_bad_credentials(store, accounts):
    register_jane(accounts)
    assert accounts.login("jane", "wrong").error_or_none() == "Invalid credentials"
    assert accounts.login("nobody", "secret").is_left
    assert store.get(SESSION_SLOT) is None
    assert accounts.current().is_none()


def test_logout(accounts):
    register_jane(accounts)
    accounts.login("jane", "secret")
    accounts.logout()
    assert accounts.current().is_none()
    accounts.logout()


@pytest.mark.parametrize(
    "raw",
    [
        '[{"username": "a"}]',
        '{"username": "a", "password": "b"}',
        '["jane"]',
    ],
)
def test_corrupt_accounts_slot_raises(raw):
    """Malformed account records surface as StorageError"""
    accounts = AccountStore(MemoryStore({ACCOUNTS_SLOT: raw}))
    with pytest.raises(StorageError):
        accounts.accounts()
    with pytest.raises(StorageError):
        accounts.login("a", "b")


@pytest.mark.parametrize("raw", ['{"user": "a"}', '["jane"]', '{"username": "a"}'])
def test_corrupt_session_slot_raises(raw):
    with pytest.raises(StorageError):
        AccountStore(MemoryStore({SESSION_SLOT: raw})).current()
