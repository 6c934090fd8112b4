"""
Accounts, tokens and profile settings.
"""

import pytest
from pydantic import ValidationError as SchemaValidationError

from core.auth import ANONYMOUS, ViewerContext, create_access_token, decode_token, load_viewer
from core.exceptions import (
    AuthenticationRequiredError,
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from domain.profile.schemas import ProfileUpdate, RegisterRequest
from services.account_service import AccountService


def _registration(**overrides) -> RegisterRequest:
    data = {
        "email": "alice@example.com",
        "password": "password123",
        "username": "Alice_Dev",
        "full_name": "Alice Liddell",
    }
    data.update(overrides)
    return RegisterRequest(**data)


async def test_register_creates_account_and_profile(session):
    user = await AccountService(session).register(_registration())

    assert user.email == "alice@example.com"
    assert user.profile.username == "alice_dev"
    assert user.profile.full_name == "Alice Liddell"

    viewer = await load_viewer(session, user.id)
    assert viewer.profile_id == user.profile.id


async def test_register_rejects_duplicates(session):
    service = AccountService(session)
    await service.register(_registration())

    with pytest.raises(DuplicateResourceError):
        await service.register(_registration(username="someone_else"))
    with pytest.raises(DuplicateResourceError):
        await service.register(_registration(email="other@example.com", username="ALICE_DEV"))


@pytest.mark.parametrize("username", ["ab", "has space", "x" * 31, "émile"])
def test_username_rules(username):
    with pytest.raises(SchemaValidationError):
        _registration(username=username)


def test_password_needs_a_digit():
    with pytest.raises(SchemaValidationError):
        _registration(password="onlyletters")


async def test_login_and_refresh(session):
    service = AccountService(session)
    await service.register(_registration())

    user = await service.authenticate("ALICE@example.com", "password123")
    assert user.login_count == 1

    tokens = service.issue_tokens(user.id)
    assert decode_token(tokens.access_token)["sub"] == str(user.id)

    refreshed = await service.refresh(tokens.refresh_token)
    assert refreshed.access_token

    with pytest.raises(InvalidTokenError):
        await service.refresh(tokens.access_token)
    with pytest.raises(InvalidCredentialsError):
        await service.authenticate("alice@example.com", "wrong-password1")


def test_tampered_token_is_rejected():
    token = create_access_token({"sub": "not-checked-here"})

    with pytest.raises(InvalidTokenError):
        decode_token(token + "x")


async def test_update_profile(make_member, session):
    alice = await make_member("alice")
    await make_member("bob")
    service = AccountService(session)

    profile = await service.update_profile(
        alice, ProfileUpdate(headline="Builder", open_to_work=True, username="Alice2")
    )
    assert profile.username == "alice2"
    assert profile.headline == "Builder"
    assert profile.open_to_work is True

    with pytest.raises(DuplicateResourceError):
        await service.update_profile(alice, ProfileUpdate(username="bob"))

    # keeping your own name is not a conflict
    same = await service.update_profile(alice, ProfileUpdate(username="alice2"))
    assert same.username == "alice2"


async def test_username_availability(make_member, session):
    await make_member("alice")
    service = AccountService(session)

    assert await service.is_username_available("ALICE") is False
    assert await service.is_username_available("carol") is True


async def test_anonymous_has_no_account(session):
    with pytest.raises(AuthenticationRequiredError):
        await AccountService(session).get_own_profile(ANONYMOUS)


async def test_deleted_account_resolves_to_anonymous(make_member, session):
    alice = await make_member("alice")

    await AccountService(session).delete_account(alice)

    viewer = await load_viewer(session, alice.user_id)
    assert viewer == ViewerContext()
    assert await AccountService(session).is_username_available("alice")
