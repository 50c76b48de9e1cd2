import pytest

from tasktrack.models import UserRole
from tasktrack.utils.errors import HierarchyCycleError
from tasktrack.utils.hierarchy import HierarchyManager


def test_resolve_subordinates_is_transitive(db, make_user) -> None:
    manager = make_user(UserRole.MANAGER)
    lead = make_user(UserRole.MANAGER, manager=manager)
    member = make_user(UserRole.MEMBER, manager=lead)
    make_user(UserRole.MEMBER)  # unrelated

    assert HierarchyManager(db).resolve_subordinates(manager.id) == {lead.id, member.id}


def test_resolve_subordinates_for_leaf_is_empty(db, make_user) -> None:
    member = make_user(UserRole.MEMBER)

    assert HierarchyManager(db).resolve_subordinates(member.id) == set()


def test_resolve_subordinates_reads_current_links(db, make_user) -> None:
    manager = make_user(UserRole.MANAGER)
    member = make_user(UserRole.MEMBER)
    hierarchy = HierarchyManager(db)

    assert hierarchy.resolve_subordinates(manager.id) == set()

    member.manager_id = manager.id
    db.commit()

    assert hierarchy.resolve_subordinates(manager.id) == {member.id}


def test_resolve_subordinates_reports_cycles(db, make_user) -> None:
    top = make_user(UserRole.MANAGER)
    middle = make_user(UserRole.MANAGER, manager=top)
    bottom = make_user(UserRole.MANAGER, manager=middle)

    top.manager_id = bottom.id
    db.commit()

    with pytest.raises(HierarchyCycleError):
        HierarchyManager(db).resolve_subordinates(top.id)


def test_supervisory_chain_walks_upward(db, make_user) -> None:
    top = make_user(UserRole.MANAGER)
    middle = make_user(UserRole.MANAGER, manager=top)
    bottom = make_user(UserRole.MEMBER, manager=middle)

    chain = HierarchyManager(db).get_supervisory_chain(bottom.id)

    assert [user.id for user in chain] == [middle.id, top.id]


def test_would_create_cycle(db, make_user) -> None:
    top = make_user(UserRole.MANAGER)
    middle = make_user(UserRole.MANAGER, manager=top)
    bottom = make_user(UserRole.MEMBER, manager=middle)
    other = make_user(UserRole.MANAGER)
    hierarchy = HierarchyManager(db)

    assert hierarchy.would_create_cycle(top.id, bottom.id)
    assert hierarchy.would_create_cycle(top.id, top.id)
    assert not hierarchy.would_create_cycle(bottom.id, other.id)
