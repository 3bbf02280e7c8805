from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


@dataclass(frozen=True)
class AppConfig:
    reject_blank_labels: bool
    strip_labels: bool
    allow_root_delete: bool
    errors_log_path: str
    default_root_label: str
    default_child_label: str

    def normalize_label(self, label: str) -> str:
        return label.strip() if self.strip_labels else label

    def is_valid_label(self, label: str) -> bool:
        if not self.reject_blank_labels:
            return True
        return bool(label.strip())


DEFAULT_ROOT_LABEL = "Root Item"
DEFAULT_CHILD_LABEL = "New Child"


TRUE_WORDS = {"1", "true", "yes", "on"}
FALSE_WORDS = {"0", "false", "no", "off"}


def _as_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_WORDS:
            return True
        if text in FALSE_WORDS:
            return False
        return default
    return bool(value)


def default_config() -> AppConfig:
    return AppConfig(
        reject_blank_labels=True,
        strip_labels=True,
        allow_root_delete=True,
        errors_log_path="",
        default_root_label=DEFAULT_ROOT_LABEL,
        default_child_label=DEFAULT_CHILD_LABEL,
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        return default_config()

    data = yaml.safe_load(path.read_text()) or {}
    return AppConfig(
        reject_blank_labels=_as_bool(data.get("reject_blank_labels"), True),
        strip_labels=_as_bool(data.get("strip_labels"), True),
        allow_root_delete=_as_bool(data.get("allow_root_delete"), True),
        errors_log_path=str(data.get("errors_log_path") or ""),
        default_root_label=str(data.get("default_root_label") or DEFAULT_ROOT_LABEL),
        default_child_label=str(data.get("default_child_label") or DEFAULT_CHILD_LABEL),
    )
