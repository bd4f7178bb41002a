"""
Intent Synthesizer - Maps a classified intent onto spec mutations.

Used when the model returned an intent (kind + requested components)
instead of an explicit operation list. Every branch returns a
MutationResult; expected failures (no diagram yet, component not found,
too few components) are returned, never raised.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from infraflow.catalog.components import label_for_type, tier_for_type
from infraflow.ir.errors import ApplicationError, ErrorCode
from infraflow.ir.spec import DEFAULT_FLOW_TYPE, Connection, Node, Spec, TierType
from infraflow.mutation.applier import generate_node_id
from infraflow.validation.spec_validator import raise_on_errors

logger = logging.getLogger(__name__)

IntentKind = Literal["create", "add", "remove", "modify", "connect", "disconnect", "query"]

USER_NODE_ID = "user"


# ---- Intent IR ----

class IntentComponent(BaseModel):
    type: str
    label: Optional[str] = None
    zone: Optional[str] = None
    description: Optional[str] = None
    tier: Optional[TierType] = None


class PositionInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["before", "after", "between", "start", "end"] = "end"
    reference: Optional[str] = None
    reference_second: Optional[str] = Field(default=None, alias="referenceSecond")


class Intent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: IntentKind = Field(alias="intent")
    components: List[IntentComponent] = Field(default_factory=list)
    position: Optional[PositionInfo] = None
    reasoning: Optional[str] = None
    confidence: float = 1.0


# ---- Results ----

@dataclass
class SpecModification:
    type: str                           # add-node | remove-node | modify-node | add-connection | remove-connection
    target: Optional[str] = None
    data: Optional[Any] = None          # Node or Connection

    def to_dict(self) -> dict:
        payload = self.data.to_dict() if hasattr(self.data, "to_dict") else self.data
        return {"type": self.type, "target": self.target, "data": payload}


@dataclass
class MutationResult:
    success: bool
    command: str
    spec: Optional[Spec] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    modifications: List[SpecModification] = field(default_factory=list)
    confidence: float = 0.0
    query: Optional[str] = None

    @classmethod
    def failure(cls, command: str, error: ApplicationError, confidence: float = 0.0) -> "MutationResult":
        logger.info("[INTENT] %s failed: %s", command, error.message)
        return cls(
            success=False,
            command=command,
            error=error.message,
            error_code=error.code,
            confidence=confidence,
        )

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "command": self.command,
            "spec": self.spec.to_dict() if self.spec else None,
            "error": self.error,
            "error_code": self.error_code.value if self.error_code else None,
            "modifications": [m.to_dict() for m in self.modifications],
            "confidence": self.confidence,
            "query": self.query,
        }


def _resolve(spec: Spec, component: IntentComponent, exclude: Optional[set] = None) -> Optional[Node]:
    """First node of the requested type (or with that id), skipping ``exclude``."""
    exclude = exclude or set()
    for node in spec.nodes:
        if node.id in exclude:
            continue
        if node.type == component.type or node.id == component.type:
            return node
    return None


def _node_from_component(component: IntentComponent, node_id: str) -> Node:
    return Node(
        id=node_id,
        type=component.type,
        label=component.label or label_for_type(component.type),
        tier=component.tier or tier_for_type(component.type),
        zone=component.zone,
        description=component.description,
    )


class IntentSynthesizer:
    """
    Applies an Intent to the current spec.

    Usage:
        synthesizer = IntentSynthesizer()
        result = synthesizer.apply(intent, current_spec)
        if result.success:
            current_spec = result.spec
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[[Intent, Optional[Spec]], MutationResult]] = {
            "create": self._handle_create,
            "add": self._handle_add,
            "remove": self._handle_remove,
            "modify": self._handle_modify,
            "connect": self._handle_connect,
            "disconnect": self._handle_disconnect,
            "query": self._handle_query,
        }

    def apply(self, intent: Intent, spec: Optional[Spec] = None) -> MutationResult:
        if spec is not None and intent.kind != "create":
            raise_on_errors(spec)

        handler = self._handlers.get(intent.kind)
        if handler is None:
            return MutationResult.failure(
                intent.kind,
                ApplicationError(f"Unknown intent: {intent.kind}", ErrorCode.INVALID_OPERATION),
            )

        logger.debug("[INTENT] %s with %d component(s)", intent.kind, len(intent.components))
        return handler(intent, spec)

    # ============================================================
    # CREATE
    # ============================================================

    def _handle_create(self, intent: Intent, spec: Optional[Spec]) -> MutationResult:
        new_spec = Spec()
        modifications: List[SpecModification] = []

        # An empty request yields an empty diagram, without the implicit user
        if intent.components and not any(c.type == "user" for c in intent.components):
            new_spec.nodes.append(Node(
                id=USER_NODE_ID,
                type="user",
                label="User",
                tier=tier_for_type("user"),
            ))

        for component in intent.components:
            node = _node_from_component(component, generate_node_id(component.type, new_spec.node_ids()))
            new_spec.nodes.append(node)
            modifications.append(SpecModification("add-node", node.id, node))

        # Linear chain through every node, implicit user first
        for previous, current in zip(new_spec.nodes, new_spec.nodes[1:]):
            conn = Connection(previous.id, current.id, DEFAULT_FLOW_TYPE)
            new_spec.connections.append(conn)
            modifications.append(SpecModification("add-connection", f"{conn.source}->{conn.target}", conn))

        return MutationResult(
            success=True,
            command="create",
            spec=new_spec,
            modifications=modifications,
            confidence=intent.confidence,
        )

    # ============================================================
    # ADD
    # ============================================================

    def _handle_add(self, intent: Intent, spec: Optional[Spec]) -> MutationResult:
        if spec is None:
            return MutationResult.failure("add", ApplicationError.empty_diagram())
        if not intent.components:
            return MutationResult.failure(
                "add", ApplicationError.missing_components("No components recognised to add"), 0.3,
            )

        new_spec = spec.copy()
        modifications: List[SpecModification] = []

        for component in intent.components:
            node = _node_from_component(component, generate_node_id(component.type, new_spec.node_ids()))
            new_spec.nodes.append(node)
            modifications.append(SpecModification("add-node", node.id, node))

            if intent.position is not None:
                for conn in self._connect_from_position(new_spec, node, intent.position):
                    modifications.append(SpecModification("add-connection", f"{conn.source}->{conn.target}", conn))

        return MutationResult(
            success=True,
            command="add",
            spec=new_spec,
            modifications=modifications,
            confidence=intent.confidence,
        )

    def _connect_from_position(self, spec: Spec, node: Node, position: PositionInfo) -> List[Connection]:
        """Wire a freshly added node relative to a reference node."""
        others = [n for n in spec.nodes if n.id != node.id]
        if not others:
            return []

        if position.reference is None:
            anchor = others[0] if position.type == "start" else others[-1]
            conn = (
                Connection(node.id, anchor.id, DEFAULT_FLOW_TYPE)
                if position.type in ("start", "before")
                else Connection(anchor.id, node.id, DEFAULT_FLOW_TYPE)
            )
            spec.connections.append(conn)
            return [conn]

        reference = next((n for n in others if n.type == position.reference or n.id == position.reference), None)
        if reference is None:
            return []

        if position.type == "before":
            conns = [Connection(node.id, reference.id, DEFAULT_FLOW_TYPE)]
        elif position.type == "between" and position.reference_second:
            second = next(
                (n for n in others if n.type == position.reference_second or n.id == position.reference_second),
                None,
            )
            if second is None:
                conns = [Connection(reference.id, node.id, DEFAULT_FLOW_TYPE)]
            else:
                # Re-route the existing link between the two references
                for i, c in enumerate(spec.connections):
                    if {c.source, c.target} == {reference.id, second.id}:
                        del spec.connections[i]
                        break
                conns = [
                    Connection(reference.id, node.id, DEFAULT_FLOW_TYPE),
                    Connection(node.id, second.id, DEFAULT_FLOW_TYPE),
                ]
        else:
            conns = [Connection(reference.id, node.id, DEFAULT_FLOW_TYPE)]

        spec.connections.extend(conns)
        return conns

    # ============================================================
    # REMOVE / MODIFY
    # ============================================================

    def _handle_remove(self, intent: Intent, spec: Optional[Spec]) -> MutationResult:
        if spec is None:
            return MutationResult.failure("remove", ApplicationError.empty_diagram())

        new_spec = spec.copy()
        removed: set = set()
        modifications: List[SpecModification] = []

        for component in intent.components:
            node = _resolve(new_spec, component, exclude=removed)
            if node is not None:
                removed.add(node.id)
                modifications.append(SpecModification("remove-node", node.id))

        if not removed:
            return MutationResult.failure(
                "remove", ApplicationError("No matching component to remove", ErrorCode.NODE_NOT_FOUND), 0.3,
            )

        for node_id in removed:
            new_spec.remove_node(node_id)

        return MutationResult(
            success=True,
            command="remove",
            spec=new_spec,
            modifications=modifications,
            confidence=intent.confidence,
        )

    def _handle_modify(self, intent: Intent, spec: Optional[Spec]) -> MutationResult:
        if spec is None:
            return MutationResult.failure("modify", ApplicationError.empty_diagram())

        new_spec = spec.copy()
        modifications: List[SpecModification] = []

        for component in intent.components:
            node = _resolve(new_spec, component)
            if node is None:
                continue
            for attr in ("label", "zone", "description", "tier"):
                value = getattr(component, attr)
                if value:
                    setattr(node, attr, value)
            modifications.append(SpecModification("modify-node", node.id, node))

        if not modifications:
            return MutationResult.failure(
                "modify", ApplicationError("No matching component to modify", ErrorCode.NODE_NOT_FOUND), 0.3,
            )

        return MutationResult(
            success=True,
            command="modify",
            spec=new_spec,
            modifications=modifications,
            confidence=intent.confidence,
        )

    # ============================================================
    # CONNECT / DISCONNECT
    # ============================================================

    def _resolve_pair(self, command: str, intent: Intent, spec: Optional[Spec]):
        if spec is None:
            raise ApplicationError.empty_diagram()
        if len(intent.components) < 2:
            raise ApplicationError.missing_components(f"{command} needs two components")

        source = _resolve(spec, intent.components[0])
        target = _resolve(spec, intent.components[1])
        if source is None or target is None:
            missing = intent.components[0].type if source is None else intent.components[1].type
            raise ApplicationError.node_not_found(missing)
        return source, target

    def _handle_connect(self, intent: Intent, spec: Optional[Spec]) -> MutationResult:
        try:
            source, target = self._resolve_pair("connect", intent, spec)
        except ApplicationError as e:
            return MutationResult.failure("connect", e, 0.3)

        new_spec = spec.copy()
        conn = Connection(source.id, target.id, DEFAULT_FLOW_TYPE)
        new_spec.connections.append(conn)

        return MutationResult(
            success=True,
            command="connect",
            spec=new_spec,
            modifications=[SpecModification("add-connection", f"{source.id}->{target.id}", conn)],
            confidence=intent.confidence,
        )

    def _handle_disconnect(self, intent: Intent, spec: Optional[Spec]) -> MutationResult:
        try:
            source, target = self._resolve_pair("disconnect", intent, spec)
        except ApplicationError as e:
            return MutationResult.failure("disconnect", e, 0.3)

        new_spec = spec.copy()
        pair = {source.id, target.id}
        index = next(
            (i for i, c in enumerate(new_spec.connections) if {c.source, c.target} == pair),
            None,
        )
        modifications: List[SpecModification] = []
        if index is not None:
            removed = new_spec.connections.pop(index)
            modifications.append(
                SpecModification("remove-connection", f"{removed.source}->{removed.target}", removed)
            )

        return MutationResult(
            success=True,
            command="disconnect",
            spec=new_spec,
            modifications=modifications,
            confidence=intent.confidence,
        )

    # ============================================================
    # QUERY
    # ============================================================

    def _handle_query(self, intent: Intent, spec: Optional[Spec]) -> MutationResult:
        return MutationResult(
            success=True,
            command="query",
            spec=spec,
            query=intent.reasoning or "",
            confidence=intent.confidence,
        )


def apply_intent(intent: Intent, spec: Optional[Spec] = None) -> MutationResult:
    """Convenience function to apply an intent to the current spec."""
    return IntentSynthesizer().apply(intent, spec)
