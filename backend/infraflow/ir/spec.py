import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


TierType = Literal["external", "dmz", "internal", "data"]
FlowType = Literal["request", "response", "sync", "blocked", "encrypted"]

TIERS = ("external", "dmz", "internal", "data")
FLOW_TYPES = ("request", "response", "sync", "blocked", "encrypted")

DEFAULT_FLOW_TYPE = "request"


@dataclass
class Node:
    id: str
    type: str                               # component kind: firewall, web-server, ...
    label: str
    tier: Optional[str] = None              # external | dmz | internal | data
    zone: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"id": self.id, "type": self.type, "label": self.label}
        for key in ("tier", "zone", "description"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            id=data["id"],
            type=data.get("type", "unknown"),
            label=data.get("label") or data["id"],
            tier=data.get("tier"),
            zone=data.get("zone"),
            description=data.get("description"),
        )


@dataclass
class Connection:
    source: str
    target: str
    flow_type: Optional[str] = None         # request | response | sync | blocked | encrypted
    label: Optional[str] = None

    @property
    def key(self) -> tuple:
        return (self.source, self.target)

    def to_dict(self) -> dict:
        data = {"source": self.source, "target": self.target}
        if self.flow_type is not None:
            data["flowType"] = self.flow_type
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        return cls(
            source=data["source"],
            target=data["target"],
            flow_type=data.get("flowType", data.get("flow_type")),
            label=data.get("label"),
        )


@dataclass
class Spec:
    """
    Infrastructure topology graph.

    Node ids are unique and every connection endpoint names an existing
    node. Both are checked by the spec validator before operations run.
    """
    nodes: List[Node] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)

    def copy(self) -> "Spec":
        return copy.deepcopy(self)

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> Optional[Node]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def first_of_type(self, node_type: str) -> Optional[Node]:
        return next((n for n in self.nodes if n.type == node_type), None)

    def remove_node(self, node_id: str) -> None:
        """Remove a node and every connection touching it."""
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.connections = [
            c for c in self.connections
            if c.source != node_id and c.target != node_id
        ]

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "connections": [c.to_dict() for c in self.connections],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Spec":
        if not data:
            return cls()
        return cls(
            nodes=[Node.from_dict(n) for n in data.get("nodes", [])],
            connections=[Connection.from_dict(c) for c in data.get("connections", [])],
        )
