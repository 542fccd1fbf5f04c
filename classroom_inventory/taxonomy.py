from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple, Union


@dataclass(frozen=True)
class Taxonomy:
    """Ordered class names (index == class id) and optional display icons."""

    names: Tuple[str, ...]
    icons: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.names:
            raise ValueError("taxonomy must define at least one class")
        if self.icons and len(self.icons) != len(self.names):
            raise ValueError(f"got {len(self.icons)} icons for {len(self.names)} classes")

    @property
    def num_classes(self) -> int:
        return len(self.names)

    def name(self, class_id: int) -> str:
        return self.names[class_id]

    def icon(self, class_id: int) -> str:
        return self.icons[class_id] if self.icons else ""

    def label(self, class_id: int) -> str:
        icon = self.icon(class_id)
        return f"{icon} {self.names[class_id]}" if icon else self.names[class_id]

    @classmethod
    def from_class_names(cls, class_names: Dict[int, str]) -> "Taxonomy":
        ids = sorted(class_names)
        if ids != list(range(len(ids))):
            raise ValueError(f"class ids must be contiguous from 0 (got {ids})")
        return cls(names=tuple(class_names[i] for i in ids))


DEFAULT_TAXONOMY = Taxonomy(
    names=("CPU", "Mesa", "Mouse", "Pantalla", "Silla", "Teclado"),
    icons=("🖥️", "🪑", "🖱️", "💻", "💺", "⌨️"),
)


_ENTRY = re.compile(r"^\s*(\d+)\s*:\s*(.*?)\s*$")


def _unquote(text: str) -> str:
    return text.strip().strip("'\"")


def _parse_inline(value: str) -> Dict[int, str]:
    """`[CPU, Mesa]` or `{0: CPU, 1: Mesa}` on the `names:` line itself."""

    body = value[1:-1]
    items = [item for item in body.split(",") if item.strip()]
    if value.startswith("["):
        return {idx: _unquote(item) for idx, item in enumerate(items)}

    names: Dict[int, str] = {}
    for item in items:
        match = _ENTRY.match(item)
        if match is None:
            raise ValueError(f"Bad class entry in metadata names: {item.strip()!r}")
        names[int(match.group(1))] = _unquote(match.group(2))
    return names


def load_class_names(metadata_path: Union[str, Path]) -> Dict[int, str]:
    """
    Read the class names of an exported model from its `metadata.yaml`.

    Handles the block form written by YOLO exports

        names:
          0: CPU
          1: Mesa

    as well as the inline forms `names: [CPU, Mesa]` and
    `names: {0: CPU, 1: Mesa}`. Every other key is ignored.
    """

    path = Path(metadata_path)
    if not path.is_file():
        raise FileNotFoundError(f"Model metadata not found: {path}")

    lines = path.read_text(encoding="utf-8").splitlines()
    names: Dict[int, str] = {}
    block = False

    for raw in lines:
        if not raw.strip() or raw.lstrip().startswith("#"):
            continue

        if not raw[0].isspace():
            if block:
                break
            key, _, value = raw.partition(":")
            if key.strip() != "names":
                continue
            value = value.strip()
            if value[:1] in ("[", "{") and value[-1:] in ("]", "}"):
                return _parse_inline(value)
            block = True
            continue

        if block:
            match = _ENTRY.match(raw)
            if match is not None:
                names[int(match.group(1))] = _unquote(match.group(2))

    return names
