"""
Classroom inventory layer built on top of `detect_kit`.

`detect_kit` stays a generic post-processor; this package adds the class
taxonomy, profile configuration, the decode -> suppress -> aggregate
pipeline and the report rows shown to users.
"""

from __future__ import annotations

from .config import InventoryProfile, load_inventory_profile
from .pipeline import InventoryResult, run_inventory
from .reporting import detection_rows, format_inventory_table, inventory_rows, report_to_dict, summary
from .taxonomy import DEFAULT_TAXONOMY, Taxonomy, load_class_names

__all__ = [
    "InventoryProfile",
    "load_inventory_profile",
    "InventoryResult",
    "run_inventory",
    "detection_rows",
    "format_inventory_table",
    "inventory_rows",
    "report_to_dict",
    "summary",
    "DEFAULT_TAXONOMY",
    "Taxonomy",
    "load_class_names",
]
