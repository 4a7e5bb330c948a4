"""Use-case tests for AccountService against the in-memory repository."""

from __future__ import annotations

import pytest

from account_service.domain.errors import (
    AccountNotFoundError,
    AlreadyExistsError,
    EmailTakenError,
    InternalError,
    InvalidCredentialError,
    LoginFailedError,
    UsernameTakenError,
)
from account_service.security.tokens import DEFAULT_TTL_SECONDS

from conftest import make_profile


def test_register_stores_hash_and_returns_bound_token(service, repository, token_service, password_hasher):
    token = service.register(make_profile(), "pw123456")

    account_id = token_service.validate(token)
    account = repository.get_account(account_id)
    assert account.username == "john"
    stored_hash = repository.password_hash_for(account_id)
    assert stored_hash != "pw123456"
    assert password_hasher.verify(stored_hash, "pw123456")


def test_register_defaults_active_flag_and_role(service, repository, token_service):
    token = service.register(make_profile(), "pw123456")
    account = repository.get_account(token_service.validate(token))
    assert account.is_active is True
    assert account.role_id == 1


def test_register_keeps_explicit_inactive_flag(service, repository, token_service):
    token = service.register(make_profile(is_active=False), "pw123456")
    assert repository.get_account(token_service.validate(token)).is_active is False


def test_register_rejects_duplicate_username(service):
    service.register(make_profile(), "pw123456")
    with pytest.raises(UsernameTakenError):
        service.register(make_profile(email="other@x.com"), "pw123456")


def test_register_rejects_duplicate_email(service):
    service.register(make_profile(), "pw123456")
    with pytest.raises(EmailTakenError):
        service.register(make_profile(username="jane"), "pw123456")


def test_register_allows_several_accounts_without_email(service):
    service.register(make_profile(username="anon1", email=None), "pw123456")
    service.register(make_profile(username="anon2", email=""), "pw123456")


def test_store_conflict_during_race_surfaces_as_already_exists(service, repository):
    service.register(make_profile(), "pw123456")
    repository.hide_existing = True

    with pytest.raises(UsernameTakenError):
        service.register(make_profile(email="fresh@x.com"), "pw123456")
    with pytest.raises(EmailTakenError):
        service.register(make_profile(username="jane"), "pw123456")


def test_store_failure_surfaces_as_internal_error(service, repository):
    repository.broken = True
    with pytest.raises(InternalError):
        service.register(make_profile(), "pw123456")


def test_login_returns_token_for_valid_credentials(service, token_service):
    registered = service.register(make_profile(), "pw123456")
    token = service.login("john", "pw123456")
    assert token_service.validate(token) == token_service.validate(registered)


def test_login_failures_are_indistinguishable(service):
    service.register(make_profile(), "pw123456")

    with pytest.raises(LoginFailedError) as wrong_password:
        service.login("john", "bad-password")
    with pytest.raises(LoginFailedError) as unknown_user:
        service.login("nobody", "pw123456")

    assert type(wrong_password.value) is type(unknown_user.value)
    assert wrong_password.value.message == unknown_user.value.message
    assert wrong_password.value.kind == unknown_user.value.kind


def test_get_profile_resolves_token_owner(service):
    token = service.register(make_profile(), "pw123456")
    assert service.get_profile(token).username == "john"


def test_expired_token_is_rejected_by_authenticated_calls(service, clock):
    token = service.register(make_profile(), "pw123456")
    clock.advance(DEFAULT_TTL_SECONDS + 1)
    with pytest.raises(InvalidCredentialError):
        service.get_profile(token)


def test_token_of_deleted_account_is_rejected(service, token_service):
    admin = service.register(make_profile(username="admin", email="admin@x.com"), "pw123456")
    victim = service.register(make_profile(), "pw123456")
    service.delete_user(admin, token_service.validate(victim))

    with pytest.raises(InvalidCredentialError):
        service.get_profile(victim)


def test_get_user_with_any_valid_token(service, token_service):
    token = service.register(make_profile(), "pw123456")
    other = service.create_user(token, make_profile(username="jane", email="jane@x.com"), "pw123456")

    fetched = service.get_user(token, other.account_id)
    assert fetched.username == "jane"
    with pytest.raises(AccountNotFoundError):
        service.get_user(token, 999)


def test_invalid_token_checked_before_target_lookup(service, repository):
    service.register(make_profile(), "pw123456")
    repository.calls.clear()
    with pytest.raises(InvalidCredentialError):
        service.get_user("garbage", 1)
    assert repository.calls == []


def test_create_user_applies_uniqueness_checks(service):
    token = service.register(make_profile(), "pw123456")
    with pytest.raises(AlreadyExistsError):
        service.create_user(token, make_profile(email="new@x.com"), "pw123456")
    with pytest.raises(AlreadyExistsError):
        service.create_user(token, make_profile(username="jane"), "pw123456")


def test_update_rejects_other_accounts_username_or_email(service):
    token = service.register(make_profile(), "pw123456")
    jane = service.create_user(token, make_profile(username="jane", email="jane@x.com"), "pw123456")

    with pytest.raises(UsernameTakenError):
        service.update_user(token, jane.account_id, make_profile(username="john", email="jane@x.com"))
    with pytest.raises(EmailTakenError):
        service.update_user(token, jane.account_id, make_profile(username="jane", email="john@x.com"))


def test_update_keeping_own_username_and_email_succeeds(service):
    token = service.register(make_profile(), "pw123456")
    me = service.get_profile(token)

    updated = service.update_user(
        token, me.account_id, make_profile(name="Johnny", phone="555-0100")
    )
    assert updated.account_id == me.account_id
    assert updated.name == "Johnny"
    assert updated.phone == "555-0100"
    assert updated.created_at == me.created_at


def test_update_replaces_full_profile(service):
    token = service.register(make_profile(phone="555-0100", mobile="555-0199", role_id=3), "pw123456")
    me = service.get_profile(token)

    updated = service.update_user(token, me.account_id, make_profile(email=None))
    assert updated.phone == ""
    assert updated.mobile == ""
    assert updated.email is None
    assert updated.role_id == 1


def test_update_does_not_touch_password(service, repository):
    token = service.register(make_profile(), "pw123456")
    me = service.get_profile(token)
    before = repository.password_hash_for(me.account_id)

    service.update_user(token, me.account_id, make_profile(username="john2"))
    assert repository.password_hash_for(me.account_id) == before
    assert service.login("john2", "pw123456")


def test_update_missing_account_is_not_found(service):
    token = service.register(make_profile(), "pw123456")
    with pytest.raises(AccountNotFoundError):
        service.update_user(token, 404, make_profile(username="ghost", email=None))


def test_update_race_conflict_surfaces_as_already_exists(service, repository):
    token = service.register(make_profile(), "pw123456")
    jane = service.create_user(token, make_profile(username="jane", email="jane@x.com"), "pw123456")
    repository.hide_existing = True

    with pytest.raises(EmailTakenError):
        service.update_user(token, jane.account_id, make_profile(username="jane", email="john@x.com"))


def test_delete_then_get_and_second_delete_are_not_found(service):
    token = service.register(make_profile(), "pw123456")
    jane = service.create_user(token, make_profile(username="jane", email="jane@x.com"), "pw123456")

    service.delete_user(token, jane.account_id)
    with pytest.raises(AccountNotFoundError):
        service.get_user(token, jane.account_id)
    with pytest.raises(AccountNotFoundError):
        service.delete_user(token, jane.account_id)


def test_deleted_username_and_email_can_be_registered_again(service):
    token = service.register(make_profile(), "pw123456")
    jane = service.create_user(token, make_profile(username="jane", email="jane@x.com"), "pw123456")
    service.delete_user(token, jane.account_id)

    again = service.create_user(token, make_profile(username="jane", email="jane@x.com"), "pw123456")
    assert again.account_id != jane.account_id
