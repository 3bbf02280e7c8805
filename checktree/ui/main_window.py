from __future__ import annotations

from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QPoint, Qt
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMainWindow,
    QMenu,
    QMessageBox,
    QPushButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from checktree.core.config import AppConfig, load_config
from checktree.core.demo import load_demo
from checktree.core.errors import TreeError
from checktree.core.errors_log import log_error, resolve_errors_log_path
from checktree.core.models import StateChange
from checktree.core.tree import TreeStateEngine
from checktree.core.tri_state import CHECKED, MIXED, UNCHECKED


ROLE_NODE_ID = Qt.ItemDataRole.UserRole

QT_STATES = {
    UNCHECKED: Qt.CheckState.Unchecked,
    MIXED: Qt.CheckState.PartiallyChecked,
    CHECKED: Qt.CheckState.Checked,
}


class MainWindow(QMainWindow):
    def __init__(self, config: Optional[AppConfig] = None) -> None:
        super().__init__()
        from checktree import __version__

        self.setWindowTitle(f"Checkbox Tree {__version__}")

        self.config = config or load_config(Path("config.yaml"))
        self.errors_log: Optional[Path] = resolve_errors_log_path(None, self.config.errors_log_path)
        self.engine = TreeStateEngine(self.config)
        self.engine.subscribe(self.apply_changes)
        self.items: dict[int, QTreeWidgetItem] = {}
        self.root_counter = 1
        self.edit_mode = False
        self.context_node: Optional[int] = None

        self.tree = QTreeWidget()
        self.tree.setHeaderLabel("Tree Items")
        self.tree.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)

        self.title_label = QLabel("Hierarchical Checkbox Tree")
        self.status_label = QLabel("Ready")
        self.add_root_button = QPushButton("Add Root")
        self.load_demo_button = QPushButton("Load Demo")
        self.clear_button = QPushButton("Clear All")
        self.edit_mode_checkbox = QCheckBox("Edit mode")
        self.edit_mode_checkbox.setChecked(self.edit_mode)

        self.context_menu = QMenu(self)
        self.add_root_action = self.context_menu.addAction("Add Root Item")
        self.add_child_action = self.context_menu.addAction("Add Child Item")
        self.context_menu.addSeparator()
        self.edit_action = self.context_menu.addAction("Edit Item")
        self.delete_action = self.context_menu.addAction("Delete Item")

        self.add_root_button.clicked.connect(self.prompt_add_root)
        self.load_demo_button.clicked.connect(self.load_demo)
        self.clear_button.clicked.connect(self.confirm_clear)
        self.edit_mode_checkbox.toggled.connect(self.set_edit_mode)
        self.add_root_action.triggered.connect(self.prompt_add_root)
        self.add_child_action.triggered.connect(self.prompt_add_child)
        self.edit_action.triggered.connect(self.prompt_edit)
        self.delete_action.triggered.connect(self.confirm_delete)
        self.tree.customContextMenuRequested.connect(self.show_context_menu)
        self.tree.itemChanged.connect(self.on_item_changed)

        layout = QVBoxLayout()
        layout.addWidget(self.title_label)

        button_row = QHBoxLayout()
        button_row.addWidget(self.add_root_button)
        button_row.addWidget(self.load_demo_button)
        button_row.addWidget(self.clear_button)
        button_row.addWidget(self.edit_mode_checkbox)
        button_row.addStretch()
        layout.addLayout(button_row)

        layout.addWidget(self.tree)
        layout.addWidget(self.status_label)

        container = QWidget()
        container.setLayout(layout)
        self.setCentralWidget(container)

    # Engine -> widget

    def apply_changes(self, changes: list[StateChange]) -> None:
        self.tree.blockSignals(True)
        try:
            for change in changes:
                item = self.items.get(change.node_id)
                if item is not None:
                    item.setCheckState(0, QT_STATES[change.state])
        finally:
            self.tree.blockSignals(False)

    def _sync_item(self, node_id: int) -> None:
        self.apply_changes([StateChange(node_id=node_id, state=self.engine.get_state(node_id))])

    def _make_item(self, node_id: int, parent: Optional[QTreeWidgetItem]) -> QTreeWidgetItem:
        item = QTreeWidgetItem([self.engine.get_label(node_id)])
        item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
        item.setData(0, ROLE_NODE_ID, node_id)
        item.setCheckState(0, QT_STATES[self.engine.get_state(node_id)])
        if parent is None:
            self.tree.addTopLevelItem(item)
        else:
            parent.addChild(item)
            parent.setExpanded(True)
        self.items[node_id] = item
        return item

    def rebuild(self) -> None:
        self.tree.blockSignals(True)
        try:
            self.tree.clear()
            self.items.clear()
            for node_id in self.engine.walk():
                parent_id = self.engine.get_parent(node_id)
                self._make_item(node_id, self.items.get(parent_id) if parent_id is not None else None)
        finally:
            self.tree.blockSignals(False)
        self.tree.expandAll()

    # Widget -> engine

    def on_item_changed(self, item: QTreeWidgetItem, column: int) -> None:
        if not item or column != 0:
            return
        node_id = item.data(0, ROLE_NODE_ID)
        if node_id is None or node_id not in self.engine:
            return
        requested = item.checkState(0)
        if requested == QT_STATES[self.engine.get_state(node_id)]:
            return
        # Clicking a partially checked box asks for the whole subtree.
        checked = requested != Qt.CheckState.Unchecked
        if self._run("set check state", node_id, lambda: self.engine.set_checked(node_id, checked)):
            self._sync_item(node_id)

    def _run(self, operation: str, node_id: Optional[int], action) -> bool:
        try:
            action()
        except TreeError as exc:
            log_error(self.errors_log, operation, exc, node_id=node_id)
            self.status_label.setText(f"Error: {exc}")
            QMessageBox.warning(self, "Tree error", str(exc))
            if node_id is not None and node_id in self.engine:
                self._sync_item(node_id)
            return False
        return True

    def add_root(self, label: str) -> Optional[int]:
        result: list[int] = []
        if not self._run("insert root", None, lambda: result.append(self.engine.insert_root(label))):
            return None
        node_id = result[0]
        self.tree.blockSignals(True)
        try:
            self._make_item(node_id, None)
        finally:
            self.tree.blockSignals(False)
        self.root_counter += 1
        self.status_label.setText(f"Added root item: {self.engine.get_label(node_id)}")
        return node_id

    def add_child(self, parent_id: int, label: str) -> Optional[int]:
        result: list[int] = []
        if not self._run(
            "insert child",
            parent_id,
            lambda: result.append(self.engine.insert_child(parent_id, label)),
        ):
            return None
        node_id = result[0]
        self.tree.blockSignals(True)
        try:
            self._make_item(node_id, self.items[parent_id])
        finally:
            self.tree.blockSignals(False)
        self.status_label.setText(f"Added child item: {self.engine.get_label(node_id)}")
        return node_id

    def rename(self, node_id: int, label: str) -> None:
        if not self._run("set label", node_id, lambda: self.engine.set_label(node_id, label)):
            return
        item = self.items[node_id]
        self.tree.blockSignals(True)
        try:
            item.setText(0, self.engine.get_label(node_id))
            font = item.font(0)
            font.setItalic(True)
            item.setFont(0, font)
        finally:
            self.tree.blockSignals(False)
        self.status_label.setText(f"Item edited: {self.engine.get_label(node_id)}")

    def delete(self, node_id: int) -> None:
        label = self.engine.get_label(node_id)
        subtree = list(self.engine.walk(node_id))
        item = self.items[node_id]
        if not self._run("delete", node_id, lambda: self.engine.delete(node_id)):
            return
        self.tree.blockSignals(True)
        try:
            parent = item.parent()
            if parent is not None:
                parent.removeChild(item)
            else:
                self.tree.takeTopLevelItem(self.tree.indexOfTopLevelItem(item))
        finally:
            self.tree.blockSignals(False)
        for removed in subtree:
            self.items.pop(removed, None)
        self.status_label.setText(f"Item deleted: {label}")

    # Dialogs and menus

    def show_context_menu(self, pos: QPoint) -> None:
        item = self.tree.itemAt(pos)
        self.context_node = item.data(0, ROLE_NODE_ID) if item else None
        has_item = self.context_node is not None
        self.add_child_action.setEnabled(has_item)
        self.edit_action.setEnabled(has_item and self.edit_mode)
        self.delete_action.setEnabled(has_item and self.edit_mode)
        self.context_menu.exec(self.tree.viewport().mapToGlobal(pos))

    def prompt_add_root(self) -> None:
        default = f"{self.config.default_root_label} {self.root_counter}"
        text, ok = QInputDialog.getText(self, "Add Root Item", "Enter text for new root item:", text=default)
        if ok:
            self.add_root(text)

    def prompt_add_child(self) -> None:
        if self.context_node is None:
            return
        text, ok = QInputDialog.getText(
            self, "Add Child Item", "Enter item text:", text=self.config.default_child_label
        )
        if ok:
            self.add_child(self.context_node, text)

    def prompt_edit(self) -> None:
        if self.context_node is None or not self.edit_mode:
            return
        current = self.engine.get_label(self.context_node)
        text, ok = QInputDialog.getText(self, "Edit Item", "Enter new text:", text=current)
        if ok:
            self.rename(self.context_node, text)

    def confirm_delete(self) -> None:
        if self.context_node is None or not self.edit_mode:
            return
        label = self.engine.get_label(self.context_node)
        answer = QMessageBox.question(
            self,
            "Delete Item",
            f"Are you sure you want to delete '{label}'?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if answer == QMessageBox.StandardButton.Yes:
            self.delete(self.context_node)
            self.context_node = None

    def load_demo(self) -> None:
        self._run("load demo", None, lambda: load_demo(self.engine))
        self.rebuild()
        self.status_label.setText("Demo data loaded successfully")

    def confirm_clear(self) -> None:
        answer = QMessageBox.question(
            self,
            "Clear All Items",
            "Are you sure you want to remove all items from the tree?\n\nThis action cannot be undone.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        self.engine.clear()
        self.tree.clear()
        self.items.clear()
        self.root_counter = 1
        self.status_label.setText("All items cleared")

    def set_edit_mode(self, enabled: bool) -> None:
        self.edit_mode = enabled
        if enabled:
            self.status_label.setText("Edit mode enabled - items can be modified")
        else:
            self.status_label.setText("Edit mode disabled - items are read-only")
