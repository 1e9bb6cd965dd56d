"""Unit tests for IdentityService against an in-memory store."""

import asyncio
import threading
import uuid
from datetime import datetime, timezone

import pytest

from scrims.kernel.errors import Err, ErrorKind, Ok
from scrims.kernel.identity.identity_service import IdentityService
from scrims.kernel.identity.password import PasswordHasher


async def register(service, username="alice_smith", email="alice@example.com", password="Secret123"):
    outcome = await service.create_user(username, email, password)
    assert isinstance(outcome, Ok), outcome
    return outcome.value


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_register_stores_hash_not_plaintext(self, identity_service, identity_store, hasher):
        user = await register(identity_service)

        assert user.id is not None
        assert user.created_at is not None
        assert user.password_hash != "Secret123"
        assert hasher.verify("Secret123", user.password_hash)
        assert identity_store.users[user.id] is user

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username,email", [
        ("", "alice@example.com"),
        ("   ", "alice@example.com"),
        ("alice_smith", ""),
        ("alice_smith", "  "),
    ])
    async def test_blank_username_or_email(self, identity_service, username, email):
        outcome = await identity_service.create_user(username, email, "Secret123")

        assert isinstance(outcome, Err)
        assert outcome.kind is ErrorKind.INVALID_ARGUMENT

    @pytest.mark.asyncio
    async def test_duplicate_username(self, identity_service):
        await register(identity_service)

        outcome = await identity_service.create_user("alice_smith", "other@example.com", "Secret123")

        assert outcome == Err(ErrorKind.ALREADY_EXISTS, "User with this username already exists.")

    @pytest.mark.asyncio
    async def test_duplicate_email(self, identity_service):
        await register(identity_service)

        outcome = await identity_service.create_user("another_user", "alice@example.com", "Secret123")

        assert outcome == Err(ErrorKind.ALREADY_EXISTS, "User with this email already exists.")

    @pytest.mark.asyncio
    async def test_username_checked_before_email(self, identity_service):
        await register(identity_service)

        outcome = await identity_service.create_user("alice_smith", "alice@example.com", "Secret123")

        assert outcome.kind is ErrorKind.ALREADY_EXISTS
        assert "username" in outcome.message

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_registrations(self, racing_identity_store, hasher, token_issuer):
        """Both checks pass; the store's uniqueness rejects the second insert."""
        service = IdentityService(racing_identity_store, hasher, token_issuer)

        outcomes = await asyncio.gather(
            service.create_user("racer_one", "racer@example.com", "Secret123"),
            service.create_user("racer_one", "racer@example.com", "Secret123"),
        )

        assert sorted(type(o).__name__ for o in outcomes) == ["Err", "Ok"]
        err = next(o for o in outcomes if isinstance(o, Err))
        assert err.kind is ErrorKind.ALREADY_EXISTS
        assert racing_identity_store.duplicate_rejections == 1
        assert len(racing_identity_store.users) == 1


class TestLogin:

    @pytest.mark.asyncio
    async def test_unknown_email(self, identity_service):
        outcome = await identity_service.login("nobody@example.com", "Secret123")

        assert outcome.kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_wrong_password(self, identity_service):
        await register(identity_service)

        outcome = await identity_service.login("alice@example.com", "WrongPass1")

        assert outcome.kind is ErrorKind.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_success_returns_token_bundle(self, identity_service, token_issuer):
        user = await register(identity_service)
        before = datetime.now(timezone.utc)

        outcome = await identity_service.login("alice@example.com", "Secret123")

        assert isinstance(outcome, Ok)
        result = outcome.value
        assert result.expires_at > before
        assert (result.id, result.username, result.email) == (user.id, "alice_smith", "alice@example.com")

        claims = token_issuer.verify(result.token)
        assert claims.user_id == user.id
        assert claims.username == "alice_smith"
        assert claims.email == "alice@example.com"


class TestGetById:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [None, uuid.UUID(int=0)])
    async def test_empty_id(self, identity_service, bad_id):
        outcome = await identity_service.get_by_id(bad_id)

        assert outcome.kind is ErrorKind.INVALID_ARGUMENT

    @pytest.mark.asyncio
    async def test_unknown_id(self, identity_service):
        outcome = await identity_service.get_by_id(uuid.uuid4())

        assert outcome.kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_found(self, identity_service):
        user = await register(identity_service)

        outcome = await identity_service.get_by_id(user.id)

        assert outcome == Ok(user)


class TestSearchByUsername:

    @pytest.mark.asyncio
    async def test_substring_not_prefix(self, identity_service):
        for name in ("alice_1", "alicia_2", "bob_333", "malice_4"):
            await register(identity_service, username=name, email=f"{name}@example.com")

        outcome = await identity_service.search_by_username("ali")

        assert {u.username for u in outcome.value} == {"alice_1", "alicia_2", "malice_4"}

    @pytest.mark.asyncio
    async def test_prefix_shared_by_two_names(self, identity_service):
        for name in ("alice", "alicia", "bob"):
            # usernames shorter than six characters are only rejected at the HTTP layer
            await register(identity_service, username=name, email=f"{name}@example.com")

        outcome = await identity_service.search_by_username("ali")

        assert {u.username for u in outcome.value} == {"alice", "alicia"}

    @pytest.mark.asyncio
    async def test_no_match_is_empty(self, identity_service):
        await register(identity_service)

        outcome = await identity_service.search_by_username("zzz")

        assert outcome == Ok([])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "  ", None])
    async def test_blank_query(self, identity_service, query):
        outcome = await identity_service.search_by_username(query)

        assert outcome.kind is ErrorKind.INVALID_ARGUMENT


class TestListUsers:

    @pytest.mark.asyncio
    async def test_lists_everyone(self, identity_service):
        await register(identity_service)
        await register(identity_service, username="bob_jones", email="bob@example.com")

        outcome = await identity_service.list_users()

        assert {u.username for u in outcome.value} == {"alice_smith", "bob_jones"}


class TestUpdatePassword:

    @pytest.mark.asyncio
    async def test_rotation_switches_login_password(self, identity_service):
        user = await register(identity_service)
        backdated = datetime(2020, 1, 1, tzinfo=timezone.utc)
        user.updated_at = backdated

        outcome = await identity_service.update_password(user.id, "Secret123", "NewSecret456")

        assert outcome == Ok(True)
        assert user.updated_at > backdated
        assert (await identity_service.login("alice@example.com", "NewSecret456")).ok
        old = await identity_service.login("alice@example.com", "Secret123")
        assert old.kind is ErrorKind.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, identity_service):
        user = await register(identity_service)

        outcome = await identity_service.update_password(user.id, "NotMine1", "NewSecret456")

        assert outcome.kind is ErrorKind.INVALID_CREDENTIALS
        assert (await identity_service.login("alice@example.com", "Secret123")).ok

    @pytest.mark.asyncio
    async def test_unknown_user(self, identity_service):
        outcome = await identity_service.update_password(uuid.uuid4(), "Secret123", "NewSecret456")

        assert outcome.kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id,current,new", [
        (uuid.UUID(int=0), "Secret123", "NewSecret456"),
        (None, "Secret123", "NewSecret456"),
        (uuid.uuid4(), "", "NewSecret456"),
        (uuid.uuid4(), "Secret123", "   "),
    ])
    async def test_invalid_arguments(self, identity_service, user_id, current, new):
        outcome = await identity_service.update_password(user_id, current, new)

        assert outcome.kind is ErrorKind.INVALID_ARGUMENT

    @pytest.mark.asyncio
    async def test_old_token_still_valid_after_rotation(self, identity_service, token_issuer):
        user = await register(identity_service)
        token = (await identity_service.login("alice@example.com", "Secret123")).value.token

        await identity_service.update_password(user.id, "Secret123", "NewSecret456")

        assert token_issuer.verify(token) is not None


class ThreadRecordingHasher(PasswordHasher):
    """PasswordHasher that notes which thread each call ran on."""

    def __init__(self):
        self.threads = []

    def hash(self, password):
        self.threads.append(threading.get_ident())
        return PasswordHasher.hash(password)

    def verify(self, plain_password, hashed_password):
        self.threads.append(threading.get_ident())
        return PasswordHasher.verify(plain_password, hashed_password)


class TestHashingOffEventLoop:

    @pytest.mark.asyncio
    async def test_hash_and_verify_run_outside_loop_thread(self, identity_store, token_issuer):
        hasher = ThreadRecordingHasher()
        service = IdentityService(identity_store, hasher, token_issuer)
        loop_thread = threading.get_ident()

        user = await register(service)
        await service.login("alice@example.com", "Secret123")
        await service.update_password(user.id, "Secret123", "NewSecret456")

        # register: hash; login: verify; update_password: verify + hash
        assert len(hasher.threads) == 4
        assert loop_thread not in hasher.threads
