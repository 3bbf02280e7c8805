from __future__ import annotations

from checktree.core.demo import DEMO_TREE, load_demo
from checktree.core.tree import TreeStateEngine
from checktree.core.tri_state import CHECKED, MIXED


def _count(items) -> int:
    return sum(1 + _count(children) for _label, children in items)


def test_load_demo_builds_tree_in_order() -> None:
    engine = TreeStateEngine()
    existing = engine.insert_root("Existing")

    roots = load_demo(engine)

    assert engine.list_roots() == [existing, *roots]
    assert [engine.get_label(r) for r in roots] == ["Documents", "Media", "Projects"]
    documents = roots[0]
    assert [engine.get_label(c) for c in engine.list_children(documents)] == [
        "Reports",
        "Invoices",
        "Notes",
    ]
    assert len(engine) == 1 + _count(DEMO_TREE)


def test_demo_tree_propagates() -> None:
    engine = TreeStateEngine()
    media = load_demo(engine)[1]
    photos = engine.list_children(media)[0]

    engine.set_checked(photos, True)

    assert engine.get_state(media) == MIXED
    assert all(engine.get_state(c) == CHECKED for c in engine.list_children(photos))
