from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lockbox.core.errors import ErrorKind, GENERIC_ERROR_MESSAGE
from lockbox.models import EncryptedData, Secret, User
from lockbox.schemas.user import Caller
from lockbox.security import crypto
from lockbox.services import container as container_service
from lockbox.services import secret as secret_service


def secret_payload(platform_id, envelope, **overrides):
    payload = {
        "name": "GitHub token",
        "value": envelope.ciphertext,
        "encryption_key": envelope.encryption_key,
        "iv": envelope.iv,
        "platform_id": platform_id,
    }
    payload.update(overrides)
    return payload


async def count(db, model):
    return await db.scalar(select(func.count()).select_from(model))


async def test_create_and_get_round_trip(db, alice, github, envelope):
    created = await secret_service.create_secret(db, alice, secret_payload(github.id, envelope))

    assert created.success
    secret = created.secret
    assert secret.name == "GitHub token"
    assert secret.value == envelope.ciphertext
    assert secret.encryption_key == envelope.encryption_key
    assert secret.iv == envelope.iv
    assert secret.type.value == "API_KEY"
    assert secret.status.value == "ACTIVE"
    assert secret.user_id == alice.id
    assert secret.container_id is None

    fetched = await secret_service.get_secret_by_id(db, alice, secret.id)

    assert fetched.success
    assert fetched.secret.value == envelope.ciphertext
    assert fetched.secret.encryption_key == envelope.encryption_key
    assert fetched.secret.iv == envelope.iv


async def test_create_with_plaintext_seals_on_server(db, alice, github):
    created = await secret_service.create_secret(
        db, alice, {"name": "DB", "plaintext": "postgres://u:p@h/db", "platform_id": github.id}
    )

    assert created.success
    assert created.secret.value != "postgres://u:p@h/db"
    revealed = await secret_service.reveal_secret_value(db, alice, created.secret.id)
    assert revealed.value == "postgres://u:p@h/db"


async def test_unauthenticated_caller_is_rejected_before_anything_else(db, github):
    result = await secret_service.create_secret(db, None, {"name": ""})

    assert not result.success
    assert result.error_kind == ErrorKind.UNAUTHENTICATED
    assert result.error == "Not authenticated"
    assert result.issues is None
    assert await count(db, Secret) == 0


async def test_validation_failure_writes_nothing(db, alice, github, envelope):
    result = await secret_service.create_secret(db, alice, secret_payload(github.id, envelope, name=""))

    assert result.error_kind == ErrorKind.VALIDATION_FAILED
    assert [issue.path for issue in result.issues] == [["name"]]
    assert await count(db, Secret) == 0
    assert await count(db, EncryptedData) == 0


async def test_unknown_platform_is_not_found_and_writes_nothing(db, alice, envelope):
    result = await secret_service.create_secret(db, alice, secret_payload("missing", envelope))

    assert result.error_kind == ErrorKind.NOT_FOUND
    assert result.error == "Platform not found"
    assert await count(db, Secret) == 0
    assert await count(db, EncryptedData) == 0


async def test_foreign_container_is_not_found(db, alice, bob, github, envelope):
    bobs = await container_service.create_container(db, bob, {"name": "Bob", "icon": "box"})

    result = await secret_service.create_secret(
        db, alice, secret_payload(github.id, envelope, container_id=bobs.container.id)
    )

    assert result.error_kind == ErrorKind.NOT_FOUND
    assert result.error == "Container not found"


async def test_other_users_secret_looks_missing(db, alice, bob, github, envelope):
    created = await secret_service.create_secret(db, alice, secret_payload(github.id, envelope))
    secret_id = created.secret.id

    assert (await secret_service.get_secret_by_id(db, bob, secret_id)).error_kind == ErrorKind.NOT_FOUND
    assert (await secret_service.update_secret(db, bob, secret_id, {"name": "x"})).error_kind == ErrorKind.NOT_FOUND
    assert (await secret_service.delete_secret(db, bob, secret_id)).error_kind == ErrorKind.NOT_FOUND
    assert (await secret_service.reveal_secret_value(db, bob, secret_id)).error_kind == ErrorKind.NOT_FOUND
    assert (await secret_service.list_secrets(db, bob)).total == 0

    still_there = await secret_service.get_secret_by_id(db, alice, secret_id)
    assert still_there.secret.name == "GitHub token"


async def test_partial_update_changes_only_given_fields(db, alice, github, envelope):
    created = await secret_service.create_secret(
        db, alice, secret_payload(github.id, envelope, description="ci token")
    )
    before = created.secret

    updated = await secret_service.update_secret(db, alice, before.id, {"status": "REVOKED"})

    assert updated.success
    after = updated.secret
    assert after.status.value == "REVOKED"
    assert after.name == before.name
    assert after.description == "ci token"
    assert after.value == before.value
    assert after.encryption_key == before.encryption_key
    assert after.iv == before.iv
    assert after.updated_at >= before.updated_at


async def test_update_can_clear_description(db, alice, github, envelope):
    created = await secret_service.create_secret(
        db, alice, secret_payload(github.id, envelope, description="temp")
    )

    updated = await secret_service.update_secret(db, alice, created.secret.id, {"description": None})

    assert updated.secret.description is None


async def test_update_rejects_null_name(db, alice, github, envelope):
    created = await secret_service.create_secret(db, alice, secret_payload(github.id, envelope))

    result = await secret_service.update_secret(db, alice, created.secret.id, {"name": None})

    assert result.error_kind == ErrorKind.VALIDATION_FAILED
    assert [issue.path for issue in result.issues] == [["name"]]


async def test_rotation_replaces_envelope_as_a_whole(db, alice, github, envelope):
    created = await secret_service.create_secret(db, alice, secret_payload(github.id, envelope))
    rotated_envelope = crypto.seal("ghp_rotated456")

    updated = await secret_service.update_secret(
        db,
        alice,
        created.secret.id,
        {
            "value": rotated_envelope.ciphertext,
            "encryption_key": rotated_envelope.encryption_key,
            "iv": rotated_envelope.iv,
        },
    )

    assert updated.success
    assert updated.secret.value == rotated_envelope.ciphertext
    assert updated.secret.encryption_key == rotated_envelope.encryption_key
    assert updated.secret.iv == rotated_envelope.iv
    # the old envelope row is gone with the rotation
    assert await count(db, EncryptedData) == 1
    revealed = await secret_service.reveal_secret_value(db, alice, created.secret.id)
    assert revealed.value == "ghp_rotated456"


async def test_update_with_partial_envelope_is_rejected(db, alice, github, envelope):
    created = await secret_service.create_secret(db, alice, secret_payload(github.id, envelope))

    result = await secret_service.update_secret(db, alice, created.secret.id, {"value": "Y2lwaGVy"})

    assert result.error_kind == ErrorKind.VALIDATION_FAILED
    fetched = await secret_service.get_secret_by_id(db, alice, created.secret.id)
    assert fetched.secret.value == envelope.ciphertext


async def test_delete_removes_secret_and_envelope(db, alice, github, envelope):
    created = await secret_service.create_secret(db, alice, secret_payload(github.id, envelope))

    deleted = await secret_service.delete_secret(db, alice, created.secret.id)

    assert deleted.success
    assert (await secret_service.get_secret_by_id(db, alice, created.secret.id)).error_kind == ErrorKind.NOT_FOUND
    assert await count(db, Secret) == 0
    assert await count(db, EncryptedData) == 0


async def test_pagination_has_no_overlap_and_full_coverage(db, alice, github):
    for i in range(7):
        await secret_service.create_secret(
            db, alice, {"name": f"secret-{i}", "plaintext": f"value-{i}", "platform_id": github.id}
        )

    pages = [await secret_service.list_secrets(db, alice, page=p, limit=3) for p in (1, 2, 3)]

    assert [len(p.secrets) for p in pages] == [3, 3, 1]
    assert all(p.total == 7 for p in pages)
    ids = [s.id for p in pages for s in p.secrets]
    assert len(set(ids)) == 7
    # newest first
    assert pages[0].secrets[0].name == "secret-6"
    assert pages[2].secrets[0].name == "secret-0"


async def test_page_past_the_end_is_empty(db, alice, github, envelope):
    await secret_service.create_secret(db, alice, secret_payload(github.id, envelope))

    result = await secret_service.list_secrets(db, alice, page=5, limit=10)

    assert result.success
    assert result.secrets == []
    assert result.total == 1


async def test_invalid_page_is_a_validation_failure(db, alice):
    result = await secret_service.list_secrets(db, alice, page=0)

    assert result.error_kind == ErrorKind.VALIDATION_FAILED
    assert [issue.path for issue in result.issues] == [["page"]]


async def test_list_filters(db, alice, github, envelope):
    box = await container_service.create_container(db, alice, {"name": "Work", "icon": "briefcase"})
    await secret_service.create_secret(
        db, alice, secret_payload(github.id, envelope, name="in-box", container_id=box.container.id)
    )
    await secret_service.create_secret(
        db, alice, secret_payload(github.id, crypto.seal("x"), name="revoked", status="REVOKED")
    )

    in_box = await secret_service.list_secrets(db, alice, container_id=box.container.id)
    revoked = await secret_service.list_secrets(db, alice, status="REVOKED")

    assert [s.name for s in in_box.secrets] == ["in-box"]
    assert [s.name for s in revoked.secrets] == ["revoked"]


async def test_reveal_with_garbage_envelope_is_an_encryption_error(db, alice, github):
    created = await secret_service.create_secret(
        db,
        alice,
        {"name": "bad", "value": "Y2lwaGVy", "encryption_key": "a2V5", "iv": "aXY=", "platform_id": github.id},
    )

    result = await secret_service.reveal_secret_value(db, alice, created.secret.id)

    assert result.error_kind == ErrorKind.ENCRYPTION_ERROR
    assert result.error == GENERIC_ERROR_MESSAGE


class FailingCommitSession(AsyncSession):
    """Writes reach the database, then the commit itself fails."""

    async def commit(self):
        await self.flush()
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))


async def test_failed_commit_leaves_neither_envelope_nor_secret(engine, session_factory, alice, github, envelope):
    failing = async_sessionmaker(bind=engine, class_=FailingCommitSession, expire_on_commit=False)

    async with failing() as session:
        result = await secret_service.create_secret(session, alice, secret_payload(github.id, envelope))

    assert result.error_kind == ErrorKind.PERSISTENCE_ERROR
    assert result.error == GENERIC_ERROR_MESSAGE
    async with session_factory() as db:
        assert await count(db, Secret) == 0
        assert await count(db, EncryptedData) == 0


async def test_field_and_envelope_issues_come_back_together(db, alice, github):
    result = await secret_service.create_secret(db, alice, {"name": "", "platform_id": github.id})

    assert result.error_kind == ErrorKind.VALIDATION_FAILED
    assert [issue.path for issue in result.issues] == [["name"], ["value"]]


async def test_expires_at_keeps_its_instant_across_sessions(session_factory, alice, github):
    async with session_factory() as db:
        created = await secret_service.create_secret(
            db,
            alice,
            {
                "name": "cert",
                "plaintext": "pem",
                "platform_id": github.id,
                "expires_at": "2030-01-01T00:00:00+02:00",
            },
        )

    async with session_factory() as db:
        fetched = await secret_service.get_secret_by_id(db, alice, created.secret.id)

    expected = datetime(2029, 12, 31, 22, 0, tzinfo=timezone.utc)
    assert created.secret.expires_at == expected
    assert fetched.secret.expires_at == expected
    assert fetched.secret.expires_at.utcoffset() == timedelta(0)
    assert fetched.secret.created_at.tzinfo is not None
    assert fetched.secret.created_at == created.secret.created_at


async def test_first_write_of_unknown_caller_provisions_owner(db, github):
    newcomer = Caller(id="user-from-auth-service", email="new@example.com")

    first = await secret_service.create_secret(
        db, newcomer, {"name": "k", "plaintext": "v", "platform_id": github.id}
    )
    second = await secret_service.create_secret(
        db, newcomer, {"name": "k2", "plaintext": "v2", "platform_id": github.id}
    )

    assert first.success and second.success
    assert first.secret.user_id == "user-from-auth-service"
    owners = await db.scalar(select(func.count()).select_from(User).where(User.id == newcomer.id))
    assert owners == 1
