from __future__ import annotations


class TreeError(RuntimeError):
    pass


class NodeNotFoundError(TreeError):
    def __init__(self, node_id: int) -> None:
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class InvalidLabelError(TreeError):
    def __init__(self, label: str | None) -> None:
        super().__init__(f"Invalid label: {label!r}")
        self.label = label


class RootDeleteNotSupportedError(TreeError):
    def __init__(self, node_id: int) -> None:
        super().__init__(f"Deleting top-level node {node_id} is disabled")
        self.node_id = node_id


class ReentrantMutationError(TreeError):
    def __init__(self, operation: str, active: str) -> None:
        super().__init__(f"Cannot {operation} while changes from {active} are being delivered")
        self.operation = operation
        self.active = active
