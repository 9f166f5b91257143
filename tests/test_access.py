from datetime import datetime

import pytest

from maajod.access import has_role, normalize_store_id, require_role, resolve_store_context
from maajod.adapters.memory import MemoryMembershipRepository
from maajod.errors import Forbidden, StoreRequired, Unauthenticated


@pytest.fixture()
def repo():
    r = MemoryMembershipRepository()
    r.add("alice", "s1", role="owner", created_at=datetime(2024, 1, 1))
    r.add("alice", "s2", role="member", is_default=True, created_at=datetime(2024, 2, 1))
    r.add("bob", "s3", role="admin", created_at=datetime(2024, 3, 1))
    r.add("bob", "s4", role="member", created_at=datetime(2024, 1, 15))
    return r


@pytest.mark.parametrize("raw", [None, "", "  ", "undefined", "null"])
def test_normalize_treats_placeholders_as_absent(raw):
    assert normalize_store_id(raw) is None


def test_normalize_keeps_real_ids():
    assert normalize_store_id(" s1 ") == "s1"


def test_explicit_store_returns_membership_role(repo):
    ctx = resolve_store_context(repo, "alice", "s1")
    assert ctx.store_id == "s1"
    assert ctx.role == "owner"


def test_missing_store_uses_flagged_default(repo):
    ctx = resolve_store_context(repo, "alice", None)
    assert ctx.store_id == "s2"
    assert ctx.role == "member"


def test_placeholder_store_uses_flagged_default(repo):
    assert resolve_store_context(repo, "alice", "undefined").store_id == "s2"


def test_without_default_falls_back_to_earliest_membership(repo):
    ctx = resolve_store_context(repo, "bob", None)
    assert ctx.store_id == "s4"


def test_no_memberships_requires_store(repo):
    with pytest.raises(StoreRequired):
        resolve_store_context(repo, "carol", None)


def test_non_member_is_forbidden(repo):
    with pytest.raises(Forbidden):
        resolve_store_context(repo, "bob", "s1")


def test_missing_user_is_unauthenticated(repo):
    with pytest.raises(Unauthenticated):
        resolve_store_context(repo, None, "s1")


def test_resolver_does_not_mutate_memberships(repo):
    before = [(r.user_id, r.store_id, r.role, r.is_default) for r in repo.rows]
    resolve_store_context(repo, "bob", None)
    resolve_store_context(repo, "alice", "s1")
    assert [(r.user_id, r.store_id, r.role, r.is_default) for r in repo.rows] == before


@pytest.mark.parametrize("role,minimum,ok", [
    ("owner", "owner", True),
    ("admin", "owner", False),
    ("member", "owner", False),
    ("owner", "admin", True),
    ("admin", "admin", True),
    ("member", "admin", False),
    ("member", "member", True),
    (None, "member", False),
])
def test_role_hierarchy(role, minimum, ok):
    assert has_role(role, minimum) is ok
    if ok:
        require_role(role, minimum)
    else:
        with pytest.raises(Forbidden):
            require_role(role, minimum)
