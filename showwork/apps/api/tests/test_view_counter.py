"""
Once-per-session view counting.
"""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from core.auth import ANONYMOUS
from core.cache_keys import view_seen_key
from core.exceptions import TransientStorageError
from domain.project.models import Visibility
from domain.project.repository import ProjectRepository
from services.view_counter import InMemoryViewDedupStore, ViewCounter, ViewDedupStore


class UnavailableStore(ViewDedupStore):
    async def claim(self, session_id, project_id):
        raise RedisConnectionError("Connection refused")

    async def release(self, session_id, project_id):
        raise AssertionError("nothing to release")


async def test_repeated_views_in_one_session_count_once(
    make_member, make_project, ledger_snapshot, session, view_store
):
    alice = await make_member("alice")
    project_id = await make_project(alice, "X")
    counter = ViewCounter(session, view_store)

    outcomes = [await counter.record_view("S1", project_id) for _ in range(3)]

    assert outcomes == [True, False, False]
    assert (await ledger_snapshot(project_id))["views_count"] == 1


async def test_each_session_counts(make_member, make_project, ledger_snapshot, session, view_store):
    alice = await make_member("alice")
    project_id = await make_project(alice, "X")
    counter = ViewCounter(session, view_store)

    assert await counter.record_view("S1", project_id)
    assert await counter.record_view("S2", project_id)
    assert (await ledger_snapshot(project_id))["views_count"] == 2


async def test_hidden_project_views_are_not_counted(
    make_member, make_project, ledger_snapshot, session, view_store
):
    alice = await make_member("alice")
    bob = await make_member("bob")
    draft_id = await make_project(alice, "Draft", visibility=Visibility.DRAFT)
    counter = ViewCounter(session, view_store)

    assert not await counter.record_view("S1", draft_id, ANONYMOUS)
    assert not await counter.record_view("S2", draft_id, bob)
    assert (await ledger_snapshot(draft_id))["views_count"] == 0

    # the owner previewing their draft still counts
    assert await counter.record_view("S3", draft_id, alice)


async def test_missing_session_is_ignored(make_member, make_project, session, view_store):
    alice = await make_member("alice")
    project_id = await make_project(alice, "X")

    assert not await ViewCounter(session, view_store).record_view("", project_id)


async def test_failed_increment_releases_claim(
    make_member, make_project, ledger_snapshot, session, view_store, monkeypatch
):
    alice = await make_member("alice")
    project_id = await make_project(alice, "X")
    counter = ViewCounter(session, view_store)
    original = ProjectRepository.adjust_counter

    async def broken(self, *args, **kwargs):
        raise OperationalError("UPDATE projects", {}, Exception("database is locked"))

    monkeypatch.setattr(ProjectRepository, "adjust_counter", broken)
    with pytest.raises(TransientStorageError):
        await counter.record_view("S1", project_id)

    monkeypatch.setattr(ProjectRepository, "adjust_counter", original)
    assert await counter.record_view("S1", project_id)
    assert (await ledger_snapshot(project_id))["views_count"] == 1


async def test_unavailable_dedup_store_skips_counting(
    make_member, make_project, ledger_snapshot, session
):
    alice = await make_member("alice")
    project_id = await make_project(alice, "X")

    counted = await ViewCounter(session, UnavailableStore()).record_view("S1", project_id)

    assert counted is False
    assert (await ledger_snapshot(project_id))["views_count"] == 0


async def test_in_memory_claims_expire():
    store = InMemoryViewDedupStore(ttl_seconds=0)

    assert await store.claim("S1", "p1")
    assert await store.claim("S1", "p1")


def test_session_ids_are_hashed_into_keys():
    key = view_seen_key("raw-client-token", "p1")

    assert key.startswith("views:seen:")
    assert key.endswith(":p1")
    assert "raw-client-token" not in key
