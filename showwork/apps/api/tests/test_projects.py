"""
Owner lifecycle: create, edit, publish, delete and dashboard reads.
"""

import uuid

import pytest

from core.auth import ANONYMOUS
from core.exceptions import (
    AuthenticationRequiredError,
    OwnershipViolationError,
    ProjectNotFoundError,
    ValidationError,
)
from domain.project.models import ProjectStatus, Visibility
from domain.project.schemas import ProjectCreate, ProjectUpdate
from services.engagement_service import EngagementLedger
from services.project_service import ProjectService, slugify
from services.view_counter import ViewCounter


@pytest.mark.parametrize(
    "title,slug",
    [
        ("Weather App", "weather-app"),
        ("  My App (v2)!  ", "my-app-v2"),
        ("C++ / Rust", "c-rust"),
        ("!!!", "project"),
    ],
)
def test_slugify(title, slug):
    assert slugify(title) == slug


async def test_create_project_defaults(make_member, make_skills, session):
    await make_skills("React", "TypeScript")
    alice = await make_member("alice")

    view = await ProjectService(session).create_project(
        alice,
        ProjectCreate(
            title="Weather App",
            short_desc="Forecasts",
            tags=["react", "React", "Made Up", "typescript"],
            github_url="  ",
        ),
    )

    assert view.visibility == Visibility.PUBLIC
    assert view.status == ProjectStatus.COMPLETED
    assert view.slug == "weather-app"
    assert view.tags == ["React", "TypeScript"]
    assert view.github_url is None
    assert view.likes_count == view.saves_count == view.views_count == 0
    assert view.owner.username == "alice"
    assert view.is_owner is True


async def test_create_requires_viewer_and_title(make_member, session):
    alice = await make_member("alice")
    service = ProjectService(session)

    with pytest.raises(AuthenticationRequiredError):
        await service.create_project(ANONYMOUS, ProjectCreate(title="X"))
    with pytest.raises(ValidationError):
        await service.create_project(alice, ProjectCreate(title="   "))
    with pytest.raises(ValidationError):
        await service.create_project(alice, ProjectCreate(title="X", category="cooking"))


async def test_draft_is_invisible_to_others(make_member, session):
    alice = await make_member("alice")
    bob = await make_member("bob")
    service = ProjectService(session)
    draft = await service.create_project(
        alice, ProjectCreate(title="X", visibility=Visibility.DRAFT)
    )

    with pytest.raises(ProjectNotFoundError):
        await service.resolve_project(draft.id, ANONYMOUS)
    with pytest.raises(ProjectNotFoundError):
        await service.resolve_project(draft.id, bob)

    own = await service.resolve_project(draft.id, alice)
    assert own.title == "X"
    assert own.visibility == Visibility.DRAFT


@pytest.mark.parametrize("visibility", list(Visibility))
async def test_owner_always_reads_own_project(make_member, make_project, session, visibility):
    alice = await make_member("alice")
    project_id = await make_project(alice, "Mine", visibility=visibility)

    view = await ProjectService(session).resolve_project(project_id, alice)

    assert view.id == project_id
    assert view.is_owner is True


async def test_update_rederives_slug_and_replaces_tags(make_member, make_project, make_skills, session):
    await make_skills("React", "Python")
    alice = await make_member("alice")
    project_id = await make_project(alice, "Old Name", tags=("React",))

    view = await ProjectService(session).update_project(
        alice,
        project_id,
        ProjectUpdate(title="New Name", tags=["Python"], status=ProjectStatus.IN_PROGRESS),
    )

    assert view.title == "New Name"
    assert view.slug == "new-name"
    assert view.tags == ["Python"]
    assert view.status == ProjectStatus.IN_PROGRESS
    assert view.updated_at > view.created_at


async def test_update_keeps_omitted_fields(make_member, make_project, session):
    alice = await make_member("alice")
    project_id = await make_project(alice, "Keep", short_desc="Original", category="ml")

    view = await ProjectService(session).update_project(
        alice, project_id, ProjectUpdate(live_url="https://example.com")
    )

    assert view.short_desc == "Original"
    assert view.category == "ml"
    assert view.live_url == "https://example.com"


async def test_blank_title_leaves_project_untouched(make_member, make_project, session):
    alice = await make_member("alice")
    project_id = await make_project(alice, "Keep")
    service = ProjectService(session)

    with pytest.raises(ValidationError):
        await service.update_project(
            alice, project_id, ProjectUpdate(title=" ", short_desc="changed")
        )

    view = await service.resolve_project(project_id, alice)
    assert view.title == "Keep"
    assert view.short_desc is None


async def test_ownership_errors(make_member, make_project, session):
    alice = await make_member("alice")
    bob = await make_member("bob")
    public_id = await make_project(alice, "Public")
    draft_id = await make_project(alice, "Draft", visibility=Visibility.DRAFT)
    service = ProjectService(session)

    with pytest.raises(OwnershipViolationError) as exc_info:
        await service.update_project(bob, public_id, ProjectUpdate(title="Mine now"))
    assert exc_info.value.status_code == 403

    with pytest.raises(OwnershipViolationError):
        await service.delete_project(bob, public_id)

    # a hidden project is reported as missing, not forbidden
    with pytest.raises(ProjectNotFoundError):
        await service.update_project(bob, draft_id, ProjectUpdate(title="Mine now"))
    with pytest.raises(ProjectNotFoundError):
        await service.delete_project(bob, uuid.uuid4())


async def test_publish_makes_project_public(make_member, make_project, session):
    alice = await make_member("alice")
    bob = await make_member("bob")
    draft_id = await make_project(alice, "Draft", visibility=Visibility.DRAFT)
    service = ProjectService(session)

    published = await service.publish_project(alice, draft_id)

    assert published.visibility == Visibility.PUBLIC
    assert (await service.resolve_project(draft_id, bob)).visibility is None


async def test_delete_project(make_member, make_project, session):
    alice = await make_member("alice")
    project_id = await make_project(alice, "Doomed")
    service = ProjectService(session)

    await service.delete_project(alice, project_id)

    with pytest.raises(ProjectNotFoundError):
        await service.resolve_project(project_id, alice)


async def test_dashboard_and_analytics(make_member, make_project, session, view_store):
    alice = await make_member("alice")
    bob = await make_member("bob")
    public_id = await make_project(alice, "Public", age_minutes=5)
    draft_id = await make_project(alice, "Draft", visibility=Visibility.DRAFT)
    await make_project(bob, "Not mine")
    await EngagementLedger(session).toggle_like(bob, public_id)
    await EngagementLedger(session).toggle_save(bob, public_id)
    await ViewCounter(session, view_store).record_view("S1", public_id)
    await ViewCounter(session, view_store).record_view("S2", public_id)
    service = ProjectService(session)

    mine = await service.list_my_projects(alice)
    assert [item.id for item in mine] == [draft_id, public_id]

    analytics = await service.get_profile_analytics(alice)
    assert analytics.project_count == 2
    assert analytics.total_likes == 1
    assert analytics.total_saves == 1
    assert analytics.total_views == 2
