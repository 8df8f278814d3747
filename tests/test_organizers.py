"""Containers, platforms and tags: the records secrets and credentials hang on."""
from lockbox.core.errors import ErrorKind
from lockbox.models import User
from lockbox.schemas.user import Caller
from lockbox.services import container as container_service
from lockbox.services import platform as platform_service
from lockbox.services import secret as secret_service
from lockbox.services import tag as tag_service


async def test_container_crud(db, alice):
    created = await container_service.create_container(db, alice, {"name": "Work", "icon": "briefcase"})
    assert created.success
    assert created.container.type.value == "MIXED"

    updated = await container_service.update_container(
        db, alice, created.container.id, {"type": "SECRETS_ONLY", "description": "api keys"}
    )
    assert updated.container.type.value == "SECRETS_ONLY"
    assert updated.container.name == "Work"

    assert (await container_service.delete_container(db, alice, created.container.id)).success
    gone = await container_service.get_container_by_id(db, alice, created.container.id)
    assert gone.error_kind == ErrorKind.NOT_FOUND


async def test_container_requires_icon(db, alice):
    result = await container_service.create_container(db, alice, {"name": "Work"})

    assert result.error_kind == ErrorKind.VALIDATION_FAILED
    assert [issue.path for issue in result.issues] == [["icon"]]


async def test_containers_listed_per_owner_and_type(db, alice, bob):
    await container_service.create_container(db, alice, {"name": "A", "icon": "a"})
    await container_service.create_container(db, alice, {"name": "B", "icon": "b", "type": "CREDENTIALS_ONLY"})
    await container_service.create_container(db, bob, {"name": "C", "icon": "c"})

    everything = await container_service.list_containers(db, alice)
    credentials_only = await container_service.list_containers(db, alice, type="CREDENTIALS_ONLY")

    assert everything.total == 2
    assert [c.name for c in credentials_only.containers] == ["B"]


async def test_deleting_container_keeps_members(session_factory, alice, github):
    async with session_factory() as db:
        box = (await container_service.create_container(db, alice, {"name": "Work", "icon": "w"})).container
        secret = (
            await secret_service.create_secret(
                db, alice, {"name": "k", "plaintext": "v", "platform_id": github.id, "container_id": box.id}
            )
        ).secret
        assert (await container_service.delete_container(db, alice, box.id)).success

    async with session_factory() as db:
        survivor = await secret_service.get_secret_by_id(db, alice, secret.id)

    assert survivor.success
    assert survivor.secret.container_id is None


async def test_global_platform_visible_but_not_editable(db, alice, github):
    assert (await platform_service.get_platform_by_id(db, alice, github.id)).success

    update = await platform_service.update_platform(db, alice, github.id, {"name": "GitHub Enterprise"})
    delete = await platform_service.delete_platform(db, alice, github.id)

    assert update.error_kind == ErrorKind.NOT_FOUND
    assert delete.error_kind == ErrorKind.NOT_FOUND


async def test_user_platforms_are_private(db, alice, bob, github):
    created = await platform_service.create_platform(
        db, alice, {"name": "Internal Jira", "login_url": "https://jira.internal.example"}
    )
    assert created.platform.status.value == "PENDING"
    assert created.platform.user_id == alice.id

    assert (await platform_service.get_platform_by_id(db, bob, created.platform.id)).error_kind == ErrorKind.NOT_FOUND
    assert (await platform_service.list_platforms(db, alice)).total == 2
    assert [p.id for p in (await platform_service.list_platforms(db, bob)).platforms] == [github.id]

    approved = await platform_service.list_platforms(db, alice, status="APPROVED")
    assert [p.id for p in approved.platforms] == [github.id]


async def test_platform_update(db, alice):
    created = await platform_service.create_platform(db, alice, {"name": "Jira"})

    updated = await platform_service.update_platform(
        db, alice, created.platform.id, {"logo": "jira.svg", "status": "APPROVED"}
    )

    assert updated.platform.logo == "jira.svg"
    assert updated.platform.status.value == "APPROVED"
    assert updated.platform.name == "Jira"


async def test_platform_in_use_cannot_be_deleted(db, alice):
    platform = (await platform_service.create_platform(db, alice, {"name": "Jira"})).platform
    await secret_service.create_secret(db, alice, {"name": "k", "plaintext": "v", "platform_id": platform.id})

    result = await platform_service.delete_platform(db, alice, platform.id)

    assert result.error_kind == ErrorKind.PERSISTENCE_ERROR
    assert (await platform_service.get_platform_by_id(db, alice, platform.id)).success


async def test_tag_crud_and_container_scope(db, alice, bob):
    box = (await container_service.create_container(db, alice, {"name": "Work", "icon": "w"})).container
    foreign = (await container_service.create_container(db, bob, {"name": "Bob", "icon": "b"})).container

    tag = (await tag_service.create_tag(db, alice, {"name": "prod", "container_id": box.id})).tag
    assert tag.container_id == box.id
    assert tag.user_id == alice.id

    rejected = await tag_service.create_tag(db, alice, {"name": "x", "container_id": foreign.id})
    assert rejected.error_kind == ErrorKind.NOT_FOUND

    renamed = await tag_service.update_tag(db, alice, tag.id, {"name": "production", "color": "#00ff00"})
    assert renamed.tag.name == "production"
    assert renamed.tag.color == "#00ff00"

    assert [t.id for t in (await tag_service.list_tags(db, alice, container_id=box.id)).tags] == [tag.id]
    assert (await tag_service.list_tags(db, bob)).total == 0

    assert (await tag_service.delete_tag(db, bob, tag.id)).error_kind == ErrorKind.NOT_FOUND
    assert (await tag_service.delete_tag(db, alice, tag.id)).success
    assert (await tag_service.get_tag_by_id(db, alice, tag.id)).error_kind == ErrorKind.NOT_FOUND


async def test_operations_fail_closed_without_caller(db):
    results = [
        await container_service.list_containers(db, None),
        await platform_service.list_platforms(db, None),
        await tag_service.create_tag(db, None, {"name": "x"}),
    ]

    assert all(r.error_kind == ErrorKind.UNAUTHENTICATED for r in results)


async def test_platform_for_caller_without_owner_row(db):
    newcomer = Caller(id="user-from-auth-service")

    result = await platform_service.create_platform(db, newcomer, {"name": "Mine"})

    assert result.success
    assert result.platform.user_id == "user-from-auth-service"
    assert (await db.get(User, "user-from-auth-service")).email is None
