# tests/domain/test_hierarchy_index.py
#
# CompanyHierarchyIndex: navigation, ancestor/descendant duality, cycles.
import pytest

from ownership_api.domain.company.entities import Company
from ownership_api.domain.company.errors import CycleDetectedError, NotFoundError
from ownership_api.domain.hierarchy.index import MAX_LEVEL, CompanyHierarchyIndex


def _tree() -> CompanyHierarchyIndex:
    #        root
    #       /    \
    #   folder1  other
    #     |
    #   folder2
    return CompanyHierarchyIndex.build(
        [
            Company(id="root", name="Root"),
            Company(id="folder1", name="Folder1", parent_id="root"),
            Company(id="folder2", name="Folder2", parent_id="folder1"),
            Company(id="other", name="Other", parent_id="root"),
        ]
    )


def test_breadcrumb_and_ancestors() -> None:
    index = _tree()
    assert index.breadcrumb("folder2") == ["root", "folder1", "folder2"]
    assert index.ancestors_of("folder2") == ["root", "folder1"]
    assert index.ancestors_of("root") == []


def test_descendants_and_children() -> None:
    index = _tree()
    assert index.descendants_of("root") == {"folder1", "folder2", "other"}
    assert index.descendants_of("folder2") == set()
    assert index.children("root") == ["folder1", "other"]


def test_ancestor_descendant_duality() -> None:
    index = _tree()
    for a in index.companies:
        for b in index.companies:
            assert (b in index.descendants_of(a)) == (a in index.ancestors_of(b))


def test_roots_levels_and_is_descendant_of() -> None:
    index = _tree()
    assert index.roots() == ["root"]
    assert index.level_of("root") == 0
    assert index.level_of("folder2") == 2
    assert index.is_descendant_of("folder2", "root") is True
    assert index.is_descendant_of("root", "folder2") is False


def test_parent_outside_snapshot_is_a_root() -> None:
    index = CompanyHierarchyIndex.build([Company(id="x", parent_id="deleted")])
    assert index.parent_of("x") is None
    assert index.ancestors_of("x") == []


def test_unknown_id_raises_not_found() -> None:
    with pytest.raises(NotFoundError):
        _tree().ancestors_of("nope")


def test_level_is_capped() -> None:
    companies = [Company(id="c0")]
    companies += [Company(id=f"c{i}", parent_id=f"c{i - 1}") for i in range(1, MAX_LEVEL + 5)]
    index = CompanyHierarchyIndex.build(companies)
    assert index.level_of(f"c{MAX_LEVEL + 4}") == MAX_LEVEL


def test_cycle_fails_fast_on_every_traversal() -> None:
    index = CompanyHierarchyIndex.build(
        [
            Company(id="a", parent_id="c"),
            Company(id="b", parent_id="a"),
            Company(id="c", parent_id="b"),
        ]
    )
    with pytest.raises(CycleDetectedError) as exc:
        index.ancestors_of("a")
    assert exc.value.path[0] == exc.value.path[-1]
    with pytest.raises(CycleDetectedError):
        index.descendants_of("a")
    with pytest.raises(CycleDetectedError):
        index.breadcrumb("b")


def test_find_cycle() -> None:
    assert _tree().find_cycle() is None
    index = CompanyHierarchyIndex.build(
        [Company(id="ok"), Company(id="x", parent_id="y"), Company(id="y", parent_id="x")]
    )
    cycle = index.find_cycle()
    assert cycle is not None
    assert set(cycle) == {"x", "y"}


def test_with_parent_returns_new_index() -> None:
    index = _tree()
    moved = index.with_parent("folder2", "other")
    assert moved.ancestors_of("folder2") == ["root", "other"]
    assert index.ancestors_of("folder2") == ["root", "folder1"]
    with pytest.raises(CycleDetectedError):
        index.with_parent("root", "folder2").ancestors_of("root")
