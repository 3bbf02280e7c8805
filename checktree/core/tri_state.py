from __future__ import annotations

from typing import Iterable

# Values line up with Qt.CheckState so renderers can map them directly.
UNCHECKED = 0
MIXED = 1
CHECKED = 2

STATE_NAMES = {
    UNCHECKED: "unchecked",
    MIXED: "mixed",
    CHECKED: "checked",
}


def derive_state(child_states: Iterable[int]) -> int:
    """Return the state a parent takes from its children's states.

    No children reads as unchecked. A single mixed child makes the parent
    mixed even when every other child agrees.
    """
    states = list(child_states)
    if not states:
        return UNCHECKED

    any_checked = any(state == CHECKED for state in states)
    all_checked = all(state == CHECKED for state in states)
    any_mixed = any(state == MIXED for state in states)

    if all_checked:
        return CHECKED
    if any_mixed or any_checked:
        return MIXED
    return UNCHECKED


def state_name(state: int) -> str:
    return STATE_NAMES[state]
