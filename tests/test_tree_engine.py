from __future__ import annotations

from dataclasses import replace

import pytest

from checktree.core.config import default_config
from checktree.core.errors import (
    InvalidLabelError,
    NodeNotFoundError,
    RootDeleteNotSupportedError,
)
from checktree.core.models import NodeInfo
from checktree.core.tree import TreeStateEngine
from checktree.core.tri_state import CHECKED, UNCHECKED


def test_insert_root_appends_unchecked() -> None:
    engine = TreeStateEngine()
    first = engine.insert_root("First")
    second = engine.insert_root("Second")

    assert engine.list_roots() == [first, second]
    assert engine.get_state(first) == UNCHECKED
    assert engine.get_checked(second) is False
    assert engine.get_parent(first) is None
    assert len(engine) == 2


def test_insert_child_keeps_insertion_order() -> None:
    engine = TreeStateEngine()
    root = engine.insert_root("Root")
    a = engine.insert_child(root, "A")
    b = engine.insert_child(root, "B")
    c = engine.insert_child(root, "C")

    assert engine.list_children(root) == [a, b, c]
    assert engine.get_parent(b) == root
    assert engine.list_children(a) == []


def test_query_results_are_copies() -> None:
    engine = TreeStateEngine()
    root = engine.insert_root("Root")
    engine.insert_child(root, "A")

    engine.list_roots().clear()
    engine.list_children(root).clear()

    assert engine.list_roots() == [root]
    assert len(engine.list_children(root)) == 1


def test_walk_is_pre_order() -> None:
    engine = TreeStateEngine()
    r1 = engine.insert_root("R1")
    a = engine.insert_child(r1, "A")
    a1 = engine.insert_child(a, "A1")
    b = engine.insert_child(r1, "B")
    r2 = engine.insert_root("R2")
    c = engine.insert_child(r2, "C")

    assert list(engine.walk()) == [r1, a, a1, b, r2, c]
    assert list(engine.walk(a)) == [a, a1]


def test_node_info_snapshot() -> None:
    engine = TreeStateEngine()
    root = engine.insert_root("Root")
    child = engine.insert_child(root, "Child")
    engine.set_checked(child, True)

    assert engine.node_info(root) == NodeInfo(
        id=root,
        label="Root",
        state=CHECKED,
        parent=None,
        children=(child,),
        edited=False,
    )


def test_unknown_ids_raise_not_found() -> None:
    engine = TreeStateEngine()
    engine.insert_root("Root")

    for call in (
        lambda: engine.get_checked(42),
        lambda: engine.get_state(42),
        lambda: engine.get_label(42),
        lambda: engine.get_parent(42),
        lambda: engine.is_edited(42),
        lambda: engine.list_children(42),
        lambda: engine.node_info(42),
        lambda: engine.walk(42),
        lambda: engine.insert_child(42, "x"),
        lambda: engine.set_checked(42, True),
        lambda: engine.set_label(42, "x"),
        lambda: engine.delete(42),
    ):
        with pytest.raises(NodeNotFoundError) as excinfo:
            call()
        assert excinfo.value.node_id == 42


def test_deleted_subtree_ids_are_stale() -> None:
    engine = TreeStateEngine()
    root = engine.insert_root("Root")
    a = engine.insert_child(root, "A")
    a1 = engine.insert_child(a, "A1")
    a2 = engine.insert_child(a, "A2")
    b = engine.insert_child(root, "B")

    engine.delete(a)

    for stale in (a, a1, a2):
        assert stale not in engine
        with pytest.raises(NodeNotFoundError):
            engine.get_checked(stale)
        with pytest.raises(NodeNotFoundError):
            engine.set_checked(stale, True)
        with pytest.raises(NodeNotFoundError):
            engine.delete(stale)
    with pytest.raises(NodeNotFoundError):
        engine.insert_child(a, "late")
    assert engine.list_children(root) == [b]
    assert len(engine) == 2


def test_delete_root_removes_only_that_root() -> None:
    engine = TreeStateEngine()
    r1 = engine.insert_root("R1")
    engine.insert_child(r1, "A")
    r2 = engine.insert_root("R2")

    assert engine.delete(r1) == []
    assert engine.list_roots() == [r2]
    assert len(engine) == 1


def test_root_delete_policy() -> None:
    engine = TreeStateEngine(replace(default_config(), allow_root_delete=False))
    root = engine.insert_root("Root")
    child = engine.insert_child(root, "Child")

    with pytest.raises(RootDeleteNotSupportedError) as excinfo:
        engine.delete(root)
    assert excinfo.value.node_id == root
    assert engine.list_roots() == [root]
    assert engine.list_children(root) == [child]

    engine.delete(child)
    assert engine.list_children(root) == []


def test_labels_are_stripped_and_blank_rejected() -> None:
    engine = TreeStateEngine()
    root = engine.insert_root("  Fruits ")
    assert engine.get_label(root) == "Fruits"

    with pytest.raises(InvalidLabelError):
        engine.insert_root("   ")
    with pytest.raises(InvalidLabelError):
        engine.insert_child(root, "")
    with pytest.raises(InvalidLabelError):
        engine.insert_root(None)  # type: ignore[arg-type]
    assert len(engine) == 1
    assert engine.list_children(root) == []


def test_label_policy_can_be_relaxed() -> None:
    config = replace(default_config(), reject_blank_labels=False, strip_labels=False)
    engine = TreeStateEngine(config)
    padded = engine.insert_root("  padded ")
    blank = engine.insert_root("")

    assert engine.get_label(padded) == "  padded "
    assert engine.get_label(blank) == ""


def test_set_label_marks_edited_without_touching_state() -> None:
    engine = TreeStateEngine()
    root = engine.insert_root("Root")
    child = engine.insert_child(root, "Child")
    engine.set_checked(child, True)
    calls: list = []
    engine.subscribe(calls.append)

    engine.set_label(child, " Renamed ")

    assert engine.get_label(child) == "Renamed"
    assert engine.is_edited(child) is True
    assert engine.is_edited(root) is False
    assert engine.get_state(child) == CHECKED
    assert calls == []


def test_invalid_set_label_keeps_old_label() -> None:
    engine = TreeStateEngine()
    root = engine.insert_root("Root")

    with pytest.raises(InvalidLabelError) as excinfo:
        engine.set_label(root, "  ")

    assert excinfo.value.label == "  "
    assert engine.get_label(root) == "Root"
    assert engine.is_edited(root) is False


def test_clear_removes_everything_and_ids_are_not_reused() -> None:
    engine = TreeStateEngine()
    root = engine.insert_root("Root")
    child = engine.insert_child(root, "Child")

    engine.clear()

    assert len(engine) == 0
    assert engine.list_roots() == []
    with pytest.raises(NodeNotFoundError):
        engine.get_label(child)
    fresh = engine.insert_root("Fresh")
    assert fresh not in (root, child)


def test_deep_chain_does_not_recurse() -> None:
    engine = TreeStateEngine()
    top = engine.insert_root("0")
    node = top
    for depth in range(1, 5000):
        node = engine.insert_child(node, str(depth))

    engine.set_checked(top, True)
    assert engine.get_checked(node) is True

    changes = engine.set_checked(node, False)
    assert len(changes) == 5000
    assert engine.get_state(top) == UNCHECKED
