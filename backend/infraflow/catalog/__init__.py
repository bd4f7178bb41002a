"""
Component catalog: display labels and default tiers for component kinds.
"""

from infraflow.catalog.components import (
    COMPONENT_CATALOG,
    ComponentKind,
    get_component,
    label_for_type,
    tier_for_type,
)

__all__ = [
    "COMPONENT_CATALOG",
    "ComponentKind",
    "get_component",
    "label_for_type",
    "tier_for_type",
]
