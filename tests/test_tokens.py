"""Unit tests for auth/tokens.py -- hashing, JWT issue/verify, the credential issuer.

Pure functions plus an in-memory UserStore. No HTTP.
"""

import pytest
from jose import JWTError, jwt

from auth.store import UserStore
from auth.tokens import (
    ALGORITHM,
    authenticate_user,
    create_access_token,
    decode_access_token,
    hash_password,
    register_user,
    verify_password,
)
from core.errors import InvalidInput

SECRET = "unit-test-secret-key-0123456789abcdef"
OTHER_SECRET = "another-secret-key-0123456789abcdef00"


@pytest.fixture
def store():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


class TestPasswordHashing:
    def test_hash_is_salted_and_not_plaintext(self):
        first = hash_password("hunter22")
        second = hash_password("hunter22")
        assert first != "hunter22"
        assert first != second

    def test_verify_roundtrip(self):
        hashed = hash_password("hunter22")
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)

    def test_verify_garbage_hash_is_false(self):
        assert verify_password("hunter22", "not-a-bcrypt-hash") is False


class TestAccessTokens:
    def test_decode_returns_embedded_user_id(self):
        token = create_access_token("a" * 24, SECRET, 3600)
        assert decode_access_token(token, SECRET) == "a" * 24

    def test_payload_shape(self):
        token = create_access_token("b" * 24, SECRET, 60)
        claims = jwt.decode(token, SECRET, algorithms=[ALGORITHM])
        assert claims["user"] == {"id": "b" * 24}
        assert "exp" in claims

    def test_expired_token_rejected(self):
        token = create_access_token("c" * 24, SECRET, -10)
        with pytest.raises(JWTError):
            decode_access_token(token, SECRET)

    def test_wrong_secret_rejected(self):
        token = create_access_token("d" * 24, OTHER_SECRET, 3600)
        with pytest.raises(JWTError):
            decode_access_token(token, SECRET)

    def test_garbage_rejected(self):
        with pytest.raises(JWTError):
            decode_access_token("not.a.token", SECRET)

    def test_payload_without_user_rejected(self):
        token = jwt.encode({"sub": "someone"}, SECRET, algorithm=ALGORITHM)
        with pytest.raises(JWTError):
            decode_access_token(token, SECRET)


class TestRegisterUser:
    def test_creates_user_with_hash_and_avatar(self, store):
        user = register_user(store, "Grace Hopper", "Grace@Example.com", "cobol123")
        stored = store.get_by_id(user.id)
        assert stored is not None
        assert stored.email == "grace@example.com"
        assert stored.hashed_password != "cobol123"
        assert verify_password("cobol123", stored.hashed_password)
        assert stored.avatar.startswith("https://gravatar.com/avatar/")

    def test_duplicate_email_rejected_without_second_record(self, store):
        register_user(store, "Grace", "grace@example.com", "cobol123")
        with pytest.raises(InvalidInput) as exc_info:
            register_user(store, "Imposter", "GRACE@example.com", "other123")
        assert exc_info.value.to_content() == {"errors": [{"msg": "User already exists"}]}
        assert store.count() == 1


class TestAuthenticateUser:
    def test_valid_credentials(self, store):
        user = register_user(store, "Linus", "linus@example.com", "kernel99")
        found = authenticate_user(store, "linus@example.com", "kernel99")
        assert found is not None and found.id == user.id

    def test_wrong_password(self, store):
        register_user(store, "Linus", "linus@example.com", "kernel99")
        assert authenticate_user(store, "linus@example.com", "kernel98") is None

    def test_unknown_email(self, store):
        assert authenticate_user(store, "nobody@example.com", "whatever") is None
