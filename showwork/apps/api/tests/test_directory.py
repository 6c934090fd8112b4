"""
Directory listings: filters, sorts, pagination and per-profile pages.
"""

import itertools

import pytest

from core.auth import ANONYMOUS
from core.exceptions import ProfileNotFoundError
from domain.project.models import Visibility
from domain.project.schemas import CATEGORIES, DirectoryFilter, SortOrder
from services.directory import Directory


@pytest.fixture
async def catalogue(make_member, make_project, make_skills):
    """A mix of public and hidden projects from two owners."""
    await make_skills("React", "Python", "Rust")
    alice = await make_member("alice", "Alice Liddell")
    bob = await make_member("bob", "Bob Stone")
    ids = {
        "weather": await make_project(
            alice, "Weather App", tags=("React",), category="frontend",
            likes_count=5, views_count=10, age_minutes=50,
        ),
        "crawler": await make_project(
            alice, "Web Crawler", tags=("Python",), category="backend",
            short_desc="Fast async crawler", likes_count=5, views_count=40, age_minutes=40,
        ),
        "kernel": await make_project(
            bob, "Toy Kernel", tags=("Rust",), category="embedded",
            likes_count=9, views_count=1, age_minutes=30,
        ),
        "dashboard": await make_project(
            bob, "Sales Dashboard", tags=("React", "Python"), category="frontend",
            likes_count=0, views_count=0, age_minutes=20,
        ),
        "draft": await make_project(
            alice, "Secret Draft", visibility=Visibility.DRAFT, category="frontend",
            likes_count=99, age_minutes=10,
        ),
        "private": await make_project(
            bob, "Private Thing", visibility=Visibility.PRIVATE, category="backend",
            likes_count=99, age_minutes=5,
        ),
    }
    return {"alice": alice, "bob": bob, "ids": ids}


async def test_recent_sort_lists_public_projects_newest_first(catalogue, session):
    ids = catalogue["ids"]

    page = await Directory(session).list_public_projects(DirectoryFilter())

    assert [item.id for item in page.items] == [
        ids["dashboard"],
        ids["kernel"],
        ids["crawler"],
        ids["weather"],
    ]
    assert page.total == 4
    assert page.has_more is False


async def test_popular_sort_breaks_like_ties_by_recency(catalogue, session):
    ids = catalogue["ids"]

    page = await Directory(session).list_public_projects(
        DirectoryFilter(sort=SortOrder.popular)
    )

    assert [item.id for item in page.items] == [
        ids["kernel"],
        ids["crawler"],
        ids["weather"],
        ids["dashboard"],
    ]


async def test_trending_sort_uses_likes_then_views(catalogue, session):
    ids = catalogue["ids"]

    page = await Directory(session).list_public_projects(
        DirectoryFilter(sort=SortOrder.trending)
    )

    assert [item.id for item in page.items][:3] == [
        ids["kernel"],
        ids["crawler"],
        ids["weather"],
    ]


@pytest.mark.parametrize(
    "sort,category,tag,q",
    list(
        itertools.product(
            list(SortOrder), [None, "frontend", "backend"], [None, "react"], [None, "secret"]
        )
    ),
)
async def test_hidden_projects_never_listed(catalogue, session, sort, category, tag, q):
    hidden = {catalogue["ids"]["draft"], catalogue["ids"]["private"]}

    page = await Directory(session).list_public_projects(
        DirectoryFilter(sort=sort, category=category, tag=tag, q=q, limit=100)
    )

    assert not hidden & {item.id for item in page.items}
    assert all(item.visibility is None for item in page.items)


async def test_category_and_tag_filters(catalogue, session):
    ids = catalogue["ids"]
    directory = Directory(session)

    frontend = await directory.list_public_projects(DirectoryFilter(category="frontend"))
    assert {item.id for item in frontend.items} == {ids["weather"], ids["dashboard"]}

    python = await directory.list_public_projects(DirectoryFilter(tag="PYTHON"))
    assert {item.id for item in python.items} == {ids["crawler"], ids["dashboard"]}
    assert all("Python" in item.tags for item in python.items)


async def test_search_matches_title_and_description(catalogue, session):
    ids = catalogue["ids"]
    directory = Directory(session)

    by_title = await directory.list_public_projects(DirectoryFilter(q="kernel"))
    assert [item.id for item in by_title.items] == [ids["kernel"]]

    by_description = await directory.list_public_projects(DirectoryFilter(q="ASYNC"))
    assert [item.id for item in by_description.items] == [ids["crawler"]]

    wildcard = await directory.list_public_projects(DirectoryFilter(q="%"))
    assert wildcard.total == 0


async def test_offset_pages_do_not_overlap(catalogue, session):
    directory = Directory(session)
    seen = []

    for offset in range(0, 4, 3):
        page = await directory.list_public_projects(
            DirectoryFilter(sort=SortOrder.popular, limit=3, offset=offset)
        )
        seen.extend(item.id for item in page.items)

    assert len(seen) == len(set(seen)) == 4

    first = await directory.list_public_projects(DirectoryFilter(limit=3))
    assert first.has_more is True


async def test_owner_is_a_single_record(catalogue, session):
    page = await Directory(session).list_public_projects(DirectoryFilter())

    owners = {item.owner.username for item in page.items}
    assert owners == {"alice", "bob"}
    assert page.items[0].owner.full_name == "Bob Stone"


async def test_profile_listing_depends_on_viewer(catalogue, session):
    alice = catalogue["alice"]
    ids = catalogue["ids"]
    directory = Directory(session)
    profile = await directory.get_profile("ALICE")

    as_stranger = await directory.list_profile_projects(profile, catalogue["bob"])
    assert {item.id for item in as_stranger} == {ids["weather"], ids["crawler"]}

    as_anonymous = await directory.list_profile_projects(profile, ANONYMOUS)
    assert len(as_anonymous) == 2

    as_owner = await directory.list_profile_projects(profile, alice)
    assert [item.id for item in as_owner] == [ids["draft"], ids["crawler"], ids["weather"]]
    assert as_owner[0].visibility == Visibility.DRAFT


async def test_unknown_profile(session):
    with pytest.raises(ProfileNotFoundError):
        await Directory(session).get_profile("nobody")


async def test_category_counts_cover_every_category(catalogue, session):
    counts = {c.category: c.count for c in await Directory(session).category_counts()}

    assert list(counts) == list(CATEGORIES)
    assert counts["frontend"] == 2
    assert counts["backend"] == 1
    assert counts["embedded"] == 1
    assert counts["ml"] == 0


async def test_search_profiles(catalogue, session):
    directory = Directory(session)

    assert [p.username for p in await directory.search_profiles("liddell")] == ["alice"]
    assert await directory.search_profiles("   ") == []


async def test_list_skills(catalogue, session):
    skills = await Directory(session).list_skills()

    assert [skill.name for skill in skills] == ["Python", "React", "Rust"]
