"""Tests for seeding the demo users, via the service and the CLI."""

import pytest
from sqlalchemy import text

from app import keygen, rotate
from app.application.services.seed_service import SEED_USERS, seed_users
from app.config import get_settings
from app.core.crypto import generate_key, key_fingerprint_of, parse_key
from app.core.exceptions import UniqueConstraintError
from app.domain.schemas.user import UserCreate
from app.infrastructure.database import get_client
from app.seed import main

EXPECTED_ID_CARD_NOS = [f"10000-10000-{n:03d}" for n in range(1, 13)]


class TestSeedService:

    def test_seed_list(self):
        assert [u.name for u in SEED_USERS] == [
            "Alice", "Bob", "Charlie", "Diana", "Edward", "Fiona",
            "George", "Hannah", "Isaac", "Julia", "Kevin", "Luna",
        ]
        assert [u.id_card_no for u in SEED_USERS] == EXPECTED_ID_CARD_NOS

    def test_seed_then_find_many(self, repo):
        created = seed_users(repo)

        assert [u.email for u in created] == [u.email for u in SEED_USERS]
        users = repo.find_many()
        assert len(users) == 12
        assert sorted(u.id_card_no for u in users) == EXPECTED_ID_CARD_NOS

    def test_partial_seed_is_kept_on_failure(self, repo):
        batch = [
            UserCreate(name="Alice", email="alice@prisma.io", id_card_no="1"),
            UserCreate(name="Dup", email="alice@prisma.io", id_card_no="2"),
            UserCreate(name="Never", email="never@prisma.io", id_card_no="3"),
        ]
        with pytest.raises(UniqueConstraintError):
            seed_users(repo, batch)

        assert [u.name for u in repo.find_many()] == ["Alice"]


class TestSeedCli:
    """seed-users exit codes."""

    def test_first_run_exits_zero(self, middleware):
        with pytest.raises(SystemExit) as exit_info:
            main()
        assert exit_info.value.code == 0

        from app.infrastructure.repositories.encrypted_repository import EncryptedUserRepository
        from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

        db = get_client().session()
        try:
            users = EncryptedUserRepository(SQLAlchemyUserRepository(db), middleware).find_many()
        finally:
            db.close()
        assert sorted(u.id_card_no for u in users) == EXPECTED_ID_CARD_NOS

    def test_rerun_exits_one(self):
        with pytest.raises(SystemExit) as first:
            main()
        assert first.value.code == 0

        with pytest.raises(SystemExit) as second:
            main()
        assert second.value.code == 1

    def test_missing_key_exits_one(self, monkeypatch):
        monkeypatch.setenv("FIELD_ENCRYPTION_KEY", "")
        get_settings.cache_clear()

        with pytest.raises(SystemExit) as exit_info:
            main()
        assert exit_info.value.code == 1


def _stored_fingerprints() -> set:
    db = get_client().session()
    try:
        rows = db.execute(text('SELECT "idCardNo" FROM "User"')).scalars().all()
    finally:
        db.close()
    return {key_fingerprint_of(value) for value in rows}


def _exit_code(entry_point) -> int:
    with pytest.raises(SystemExit) as exit_info:
        entry_point()
    return exit_info.value.code


class TestRotateCli:
    """rotate-field-keys exit codes and effect."""

    def test_rotation_moves_rows_to_new_key(self, monkeypatch, encryption_key):
        assert _exit_code(main) == 0
        assert _stored_fingerprints() == {parse_key(encryption_key).fingerprint}

        new_key = generate_key()
        monkeypatch.setenv("FIELD_ENCRYPTION_KEY", new_key)
        monkeypatch.setenv("FIELD_DECRYPTION_KEYS", encryption_key)
        get_settings.cache_clear()

        assert _exit_code(rotate.main) == 0
        assert _stored_fingerprints() == {parse_key(new_key).fingerprint}

    def test_old_key_not_configured_exits_one(self, monkeypatch, encryption_key):
        assert _exit_code(main) == 0

        monkeypatch.setenv("FIELD_ENCRYPTION_KEY", generate_key())
        get_settings.cache_clear()

        assert _exit_code(rotate.main) == 1
        assert _stored_fingerprints() == {parse_key(encryption_key).fingerprint}

    def test_malformed_key_exits_one(self, monkeypatch):
        monkeypatch.setenv("FIELD_ENCRYPTION_KEY", "k1.aesgcm256.not-a-key")
        get_settings.cache_clear()

        assert _exit_code(rotate.main) == 1

    def test_missing_key_exits_one(self, monkeypatch):
        monkeypatch.setenv("FIELD_ENCRYPTION_KEY", "")
        get_settings.cache_clear()

        assert _exit_code(rotate.main) == 1


def test_keygen_prints_a_usable_key(capsys):
    keygen.main()
    printed = capsys.readouterr().out.strip()
    assert len(parse_key(printed).raw) == 32
