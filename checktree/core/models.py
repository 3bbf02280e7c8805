from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StateChange:
    node_id: int
    state: int


@dataclass(frozen=True)
class NodeInfo:
    id: int
    label: str
    state: int
    parent: Optional[int]
    children: tuple[int, ...]
    edited: bool
