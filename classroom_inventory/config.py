from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from detect_kit.postprocess import PostConfig

from .taxonomy import DEFAULT_TAXONOMY, Taxonomy


@dataclass(frozen=True)
class InventoryProfile:
    schema_version: int = 1
    confidence_threshold: float = 0.25
    iou_threshold: float = 0.45
    # network input resolution; informational, the buffer is already normalized
    img_size: int = 640
    class_names: Tuple[str, ...] = DEFAULT_TAXONOMY.names
    # None: the default icons for the default classes, no icons otherwise
    class_icons: Optional[Tuple[str, ...]] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if self.class_icons is None:
            icons = DEFAULT_TAXONOMY.icons if tuple(self.class_names) == DEFAULT_TAXONOMY.names else ()
            object.__setattr__(self, "class_icons", icons)
        if self.schema_version != 1:
            raise ValueError("inventory profile schema_version must be 1")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError("confidence_threshold must be in [0, 1]")
        if not 0.0 <= self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be in [0, 1]")
        if self.img_size <= 0:
            raise ValueError("img_size must be > 0")
        # raises on empty names or mismatched icons
        Taxonomy(names=tuple(self.class_names), icons=tuple(self.class_icons))

    @property
    def taxonomy(self) -> Taxonomy:
        return Taxonomy(names=tuple(self.class_names), icons=tuple(self.class_icons))

    def post_config(self) -> PostConfig:
        return PostConfig(
            conf_threshold=self.confidence_threshold,
            iou_threshold=self.iou_threshold,
            num_classes=len(self.class_names),
        )


def _require_int(payload: Dict[str, Any], key: str) -> int:
    if key not in payload:
        raise ValueError(f"Missing required key: {key}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _optional_number(payload: Dict[str, Any], key: str, default: float) -> float:
    if key not in payload:
        return default
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _optional_int(payload: Dict[str, Any], key: str, default: int) -> int:
    if key not in payload:
        return default
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _optional_str_tuple(
    payload: Dict[str, Any], key: str, default: Optional[Tuple[str, ...]]
) -> Optional[Tuple[str, ...]]:
    if key not in payload:
        return default
    value = payload[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be a list of strings")
    return tuple(value)


def load_inventory_profile(path: Path) -> InventoryProfile:
    if not path.exists():
        raise FileNotFoundError(f"Inventory profile not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid inventory profile JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Inventory profile must be a JSON object")

    allowed = {
        "schema_version",
        "confidence_threshold",
        "iou_threshold",
        "img_size",
        "class_names",
        "class_icons",
        "notes",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown inventory profile keys: {unknown}")

    class_names = _optional_str_tuple(payload, "class_names", DEFAULT_TAXONOMY.names)
    class_icons = _optional_str_tuple(payload, "class_icons", None)

    notes = payload.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise ValueError("notes must be a string if provided")

    return InventoryProfile(
        schema_version=_require_int(payload, "schema_version"),
        confidence_threshold=_optional_number(payload, "confidence_threshold", 0.25),
        iou_threshold=_optional_number(payload, "iou_threshold", 0.45),
        img_size=_optional_int(payload, "img_size", 640),
        class_names=class_names,
        class_icons=class_icons,
        notes=notes,
    )
