# backend/infraflow/catalog/components.py
"""
Component Catalog - Known infrastructure component kinds

Maps a component kind (the ``type`` of a node) to its category, display
label and default network tier. Used to label and place nodes created by
add/replace operations when the request does not say otherwise.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional


DEFAULT_TIER = "internal"


@dataclass(frozen=True)
class ComponentKind:
    """A catalogued component kind"""
    type: str
    label: str
    category: str       # security, network, compute, cloud, storage, auth, external
    tier: str = DEFAULT_TIER


def _kinds(category: str, tier: str, entries: Dict[str, str]) -> Dict[str, ComponentKind]:
    return {
        kind: ComponentKind(type=kind, label=label, category=category, tier=tier)
        for kind, label in entries.items()
    }


_CATALOG: Dict[str, ComponentKind] = {}

# ============================================================
# EXTERNAL
# ============================================================
_CATALOG.update(_kinds("external", "external", {
    "user": "User",
    "internet": "Internet",
}))

# ============================================================
# SECURITY
# ============================================================
_CATALOG.update(_kinds("security", "dmz", {
    "firewall": "Firewall",
    "waf": "WAF",
    "ids-ips": "IDS/IPS",
    "vpn-gateway": "VPN Gateway",
}))
_CATALOG.update(_kinds("security", "internal", {
    "nac": "NAC",
    "dlp": "DLP",
}))

# ============================================================
# NETWORK
# ============================================================
_CATALOG.update(_kinds("network", "dmz", {
    "load-balancer": "Load Balancer",
    "cdn": "CDN",
    "dns": "DNS",
}))
_CATALOG.update(_kinds("network", "internal", {
    "router": "Router",
    "switch-l2": "L2 Switch",
    "switch-l3": "L3 Switch",
    "sd-wan": "SD-WAN",
}))

# ============================================================
# COMPUTE
# ============================================================
_CATALOG.update(_kinds("compute", "dmz", {
    "web-server": "Web Server",
}))
_CATALOG.update(_kinds("compute", "internal", {
    "app-server": "App Server",
    "container": "Container",
    "vm": "Virtual Machine",
    "kubernetes": "Kubernetes",
}))
_CATALOG.update(_kinds("compute", "data", {
    "db-server": "DB Server",
}))

# ============================================================
# CLOUD
# ============================================================
_CATALOG.update(_kinds("cloud", "internal", {
    "aws-vpc": "AWS VPC",
    "azure-vnet": "Azure VNet",
    "gcp-network": "GCP Network",
    "private-cloud": "Private Cloud",
}))

# ============================================================
# STORAGE
# ============================================================
_CATALOG.update(_kinds("storage", "data", {
    "san-nas": "SAN/NAS",
    "object-storage": "Object Storage",
    "backup": "Backup",
    "cache": "Cache",
    "storage": "Storage",
}))

# ============================================================
# AUTH
# ============================================================
_CATALOG.update(_kinds("auth", "internal", {
    "ldap-ad": "LDAP/AD",
    "sso": "SSO",
    "mfa": "MFA",
    "iam": "IAM",
}))


COMPONENT_CATALOG: Mapping[str, ComponentKind] = MappingProxyType(_CATALOG)


def get_component(kind: str) -> Optional[ComponentKind]:
    return COMPONENT_CATALOG.get(kind)


def tier_for_type(kind: str) -> str:
    """Default tier for a component kind; unknown kinds sit in the internal tier."""
    component = COMPONENT_CATALOG.get(kind)
    return component.tier if component else DEFAULT_TIER


def label_for_type(kind: str) -> str:
    """Display label for a component kind, e.g. 'api-server' -> 'Api Server' when not catalogued."""
    component = COMPONENT_CATALOG.get(kind)
    if component:
        return component.label
    return " ".join(part.capitalize() for part in kind.replace("_", "-").split("-") if part)
