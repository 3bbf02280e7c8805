from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from checktree.core.config import AppConfig, default_config
from checktree.core.errors import (
    InvalidLabelError,
    NodeNotFoundError,
    ReentrantMutationError,
    RootDeleteNotSupportedError,
)
from checktree.core.errors_log import log_error, resolve_errors_log_path
from checktree.core.models import NodeInfo, StateChange
from checktree.core.tri_state import CHECKED, UNCHECKED, derive_state

Listener = Callable[[list[StateChange]], None]


@dataclass
class _Node:
    label: str
    parent: Optional[int] = None
    state: int = UNCHECKED
    children: list[int] = field(default_factory=list)
    edited: bool = False


class _Mutation:
    """State touched by one public call, in first-touched order."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._before: dict[int, int] = {}

    def record(self, node_id: int, state: int) -> None:
        self._before.setdefault(node_id, state)

    def changes(self, nodes: dict[int, _Node]) -> list[StateChange]:
        return [
            StateChange(node_id=node_id, state=nodes[node_id].state)
            for node_id, before in self._before.items()
            if node_id in nodes and nodes[node_id].state != before
        ]


class TreeStateEngine:
    """Forest of tri-state checkbox nodes.

    Checking or unchecking a node overwrites its whole subtree, then each
    ancestor is re-derived from its children until one comes out unchanged.
    Every public call either applies fully or raises before touching the tree.
    State changes are returned to the caller and handed to subscribed
    listeners once per call; listeners may query but not mutate. A listener
    that raises does not fail the call or starve later listeners: the error is
    kept in `delivery_errors` and appended to the errors log.
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self.config = config or default_config()
        self._nodes: dict[int, _Node] = {}
        self._roots: list[int] = []
        self._ids = itertools.count(1)
        self._listeners: list[Listener] = []
        self._dispatching: Optional[_Mutation] = None
        self.delivery_errors: list[Exception] = []

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Mutations

    def insert_root(self, label: str) -> int:
        self._ensure_idle("insert root")
        label = self._validate_label(label)
        node_id = next(self._ids)
        self._nodes[node_id] = _Node(label=label)
        self._roots.append(node_id)
        return node_id

    def insert_child(self, parent_id: int, label: str) -> int:
        self._ensure_idle("insert child")
        parent = self._node(parent_id)
        label = self._validate_label(label)

        mutation = _Mutation("insert child")
        node_id = next(self._ids)
        self._nodes[node_id] = _Node(label=label, parent=parent_id)
        parent.children.append(node_id)
        self._recompute_upward(parent_id, mutation)
        self._finish(mutation)
        return node_id

    def delete(self, node_id: int) -> list[StateChange]:
        self._ensure_idle("delete")
        node = self._node(node_id)
        mutation = _Mutation("delete")

        if node.parent is None:
            if not self.config.allow_root_delete:
                raise RootDeleteNotSupportedError(node_id)
            self._roots.remove(node_id)
            self._drop_subtree(node_id)
            return self._finish(mutation)

        parent_id = node.parent
        parent = self._nodes[parent_id]
        parent.children.remove(node_id)
        self._drop_subtree(node_id)

        if parent.children:
            self._recompute_upward(parent_id, mutation)
        else:
            # A node that lost its last child falls back to unchecked.
            self._set_state(parent_id, UNCHECKED, mutation)
            self._recompute_upward(parent.parent, mutation)
        return self._finish(mutation)

    def set_checked(self, node_id: int, checked: bool) -> list[StateChange]:
        self._ensure_idle("set check state")
        node = self._node(node_id)
        state = CHECKED if checked else UNCHECKED

        mutation = _Mutation("set check state")
        self._set_state(node_id, state, mutation)
        self._propagate_downward(node_id, state, mutation)
        self._recompute_upward(node.parent, mutation)
        return self._finish(mutation)

    def set_label(self, node_id: int, label: str) -> None:
        self._ensure_idle("set label")
        node = self._node(node_id)
        node.label = self._validate_label(label)
        node.edited = True

    def clear(self) -> None:
        self._ensure_idle("clear")
        self._nodes.clear()
        self._roots.clear()

    # Queries

    def get_checked(self, node_id: int) -> bool:
        return self._node(node_id).state == CHECKED

    def get_state(self, node_id: int) -> int:
        return self._node(node_id).state

    def get_label(self, node_id: int) -> str:
        return self._node(node_id).label

    def get_parent(self, node_id: int) -> Optional[int]:
        return self._node(node_id).parent

    def is_edited(self, node_id: int) -> bool:
        return self._node(node_id).edited

    def list_children(self, node_id: int) -> list[int]:
        return list(self._node(node_id).children)

    def list_roots(self) -> list[int]:
        return list(self._roots)

    def walk(self, node_id: Optional[int] = None) -> Iterator[int]:
        """Yield ids in pre-order, for one subtree or for the whole forest."""
        if node_id is None:
            stack = list(reversed(self._roots))
        else:
            self._node(node_id)
            stack = [node_id]
        order: list[int] = []
        while stack:
            current = stack.pop()
            order.append(current)
            stack.extend(reversed(self._nodes[current].children))
        return iter(order)

    def node_info(self, node_id: int) -> NodeInfo:
        node = self._node(node_id)
        return NodeInfo(
            id=node_id,
            label=node.label,
            state=node.state,
            parent=node.parent,
            children=tuple(node.children),
            edited=node.edited,
        )

    # Internals

    def _node(self, node_id: int) -> _Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def _ensure_idle(self, operation: str) -> None:
        if self._dispatching is not None:
            raise ReentrantMutationError(operation, self._dispatching.operation)

    def _validate_label(self, label: str) -> str:
        if not isinstance(label, str):
            raise InvalidLabelError(label)
        normalized = self.config.normalize_label(label)
        if not self.config.is_valid_label(normalized):
            raise InvalidLabelError(label)
        return normalized

    def _set_state(self, node_id: int, state: int, mutation: _Mutation) -> None:
        node = self._nodes[node_id]
        mutation.record(node_id, node.state)
        node.state = state

    def _propagate_downward(self, node_id: int, state: int, mutation: _Mutation) -> None:
        stack = list(reversed(self._nodes[node_id].children))
        while stack:
            current = stack.pop()
            self._set_state(current, state, mutation)
            stack.extend(reversed(self._nodes[current].children))

    def _recompute_upward(self, node_id: Optional[int], mutation: _Mutation) -> None:
        while node_id is not None:
            node = self._nodes[node_id]
            new_state = derive_state(self._nodes[child].state for child in node.children)
            if new_state == node.state:
                return
            self._set_state(node_id, new_state, mutation)
            node_id = node.parent

    def _drop_subtree(self, node_id: int) -> None:
        stack = [node_id]
        while stack:
            current = stack.pop()
            stack.extend(self._nodes.pop(current).children)

    def _finish(self, mutation: _Mutation) -> list[StateChange]:
        changes = mutation.changes(self._nodes)
        self.delivery_errors = []
        if not changes or not self._listeners:
            return changes
        errors_log = resolve_errors_log_path(None, self.config.errors_log_path)
        self._dispatching = mutation
        try:
            for listener in list(self._listeners):
                try:
                    listener(list(changes))
                except Exception as exc:
                    self.delivery_errors.append(exc)
                    log_error(errors_log, f"deliver {mutation.operation}", exc)
        finally:
            self._dispatching = None
        return changes
