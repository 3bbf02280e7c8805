from __future__ import annotations

from checktree.core.tree import TreeStateEngine

DemoNode = tuple[str, tuple["DemoNode", ...]]

DEMO_TREE: tuple[DemoNode, ...] = (
    (
        "Documents",
        (
            ("Reports", (("Q1 Summary", ()), ("Q2 Summary", ()))),
            ("Invoices", ()),
            ("Notes", ()),
        ),
    ),
    (
        "Media",
        (
            ("Photos", (("Holiday", ()), ("Family", ()), ("Screenshots", ()))),
            ("Music", ()),
        ),
    ),
    (
        "Projects",
        (
            ("Website", (("Frontend", ()), ("Backend", ()))),
            ("Mobile App", ()),
        ),
    ),
)


def load_demo(engine: TreeStateEngine, tree: tuple[DemoNode, ...] = DEMO_TREE) -> list[int]:
    """Append the demo forest after any existing roots and return the new root ids."""
    roots: list[int] = []
    for label, children in tree:
        root_id = engine.insert_root(label)
        roots.append(root_id)
        stack = [(root_id, children)]
        while stack:
            parent_id, items = stack.pop()
            for child_label, grandchildren in items:
                child_id = engine.insert_child(parent_id, child_label)
                if grandchildren:
                    stack.append((child_id, grandchildren))
    return roots
