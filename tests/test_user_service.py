import pytest

from stock_core import user_service
from stock_core.errors import Conflict, InvalidInput, UserNotFound


def _register(db, email="ada@example.com", password="correct horse"):
    return user_service.register_user(db, name="Ada", email=email, password=password)


def test_password_hash_format_and_verification():
    encoded = user_service._hash_password("s3cret-pass")

    algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
    assert algorithm == "pbkdf2_sha256"
    assert int(iterations) == 390_000
    assert len(bytes.fromhex(salt_hex)) == 16
    assert user_service._verify_password("s3cret-pass", encoded)
    assert not user_service._verify_password("wrong", encoded)
    assert not user_service._verify_password("s3cret-pass", "garbage")


def test_register_normalises_email(db):
    user = _register(db, email="  Ada@Example.COM ")

    assert user.id
    assert user.email == "ada@example.com"


def test_register_duplicate_email_conflicts(db):
    _register(db)
    with pytest.raises(Conflict, match="Email already registered"):
        _register(db, email="ADA@example.com")


@pytest.mark.parametrize(
    "name, email, password",
    [
        ("", "a@b.c", "longenough"),
        ("Ada", "not-an-email", "longenough"),
        ("Ada", "a@b.c", "short"),
        ("Ada", None, "longenough"),
    ],
)
def test_register_validation(db, name, email, password):
    with pytest.raises(InvalidInput):
        user_service.register_user(db, name=name, email=email, password=password)


def test_authenticate_user(db):
    user = _register(db)

    assert user_service.authenticate_user(db, "ADA@example.com", "correct horse").id == user.id
    assert user_service.authenticate_user(db, "ada@example.com", "wrong password") is None
    assert user_service.authenticate_user(db, "nobody@example.com", "correct horse") is None
    assert user_service.authenticate_user(db, None, None) is None


def test_unknown_email_still_runs_a_hash_check(db, monkeypatch):
    checked = []
    real_verify = user_service._verify_password

    def spy(password, encoded):
        checked.append(encoded)
        return real_verify(password, encoded)

    monkeypatch.setattr(user_service, "_verify_password", spy)

    assert user_service.authenticate_user(db, "ghost@example.com", "whatever") is None
    assert checked == [user_service._DUMMY_HASH]


def test_list_users_paged(db):
    for index in range(3):
        _register(db, email=f"user{index}@example.com")

    page = user_service.list_users(db, page=2, limit=2)

    assert page.total == 3
    assert page.total_pages == 2
    assert len(page.items) == 1


def test_update_user(db):
    user = _register(db)
    other = _register(db, email="grace@example.com")

    updated = user_service.update_user(db, user.id, {"name": "Ada L.", "password": "new password"})
    assert updated.name == "Ada L."
    assert user_service.authenticate_user(db, "ada@example.com", "new password") is not None

    with pytest.raises(Conflict):
        user_service.update_user(db, user.id, {"email": other.email})
    with pytest.raises(UserNotFound):
        user_service.update_user(db, "missing", {"name": "x"})


def test_delete_user(db):
    user = _register(db)

    user_service.delete_user(db, user.id)

    with pytest.raises(UserNotFound):
        user_service.get_user(db, user.id)
    with pytest.raises(UserNotFound):
        user_service.delete_user(db, user.id)
