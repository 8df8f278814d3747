from lockbox.models import Credential, EncryptedData, Secret, Tag
from lockbox.schemas.secret import SecretRo
from lockbox.services.projection import credential_ro, secret_ro


def stored_secret():
    return Secret(
        id="s1",
        name="Stripe",
        description=None,
        type="API_KEY",
        status="ACTIVE",
        expires_at=None,
        platform_id="p1",
        container_id=None,
        user_id="u1",
        created_at="2026-01-01T00:00:00+00:00",
        updated_at="2026-01-02T00:00:00+00:00",
        value_encryption=EncryptedData(id="e1", encrypted_value="Y2lwaGVy", encryption_key="a2V5", iv="aXY="),
    )


def test_secret_envelope_is_flattened():
    ro = secret_ro(stored_secret())

    assert ro.value == "Y2lwaGVy"
    assert ro.encryption_key == "a2V5"
    assert ro.iv == "aXY="
    assert set(ro.model_dump()) == set(SecretRo.model_fields)
    assert "value_encryption" not in ro.model_dump()


def test_projection_is_idempotent():
    secret = stored_secret()

    assert secret_ro(secret) == secret_ro(secret)


def test_credential_tags_become_sorted_ids():
    credential = Credential(
        id="c1",
        username="octocat",
        status="ACTIVE",
        description=None,
        login_url=None,
        last_viewed=None,
        platform_id="p1",
        container_id=None,
        user_id="u1",
        created_at="2026-01-01T00:00:00+00:00",
        updated_at="2026-01-01T00:00:00+00:00",
        password_encryption=EncryptedData(encrypted_value="cA==", encryption_key="aw==", iv="aQ=="),
        tags=[Tag(id="t2", name="b"), Tag(id="t1", name="a")],
    )

    ro = credential_ro(credential)

    assert ro.password == "cA=="
    assert ro.tag_ids == ["t1", "t2"]
