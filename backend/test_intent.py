"""Tests for the IntentSynthesizer"""

from infraflow.ir.errors import ErrorCode
from infraflow.ir.spec import Connection, Node, Spec
from infraflow.mutation import Intent, IntentComponent, PositionInfo, apply_intent


def make_node(id: str, type: str, tier: str = "internal") -> Node:
    return Node(id=id, type=type, label=id.title(), tier=tier)


def make_spec() -> Spec:
    return Spec(
        nodes=[
            make_node("user", "user", "external"),
            make_node("fw", "firewall", "dmz"),
            make_node("web", "web-server", "dmz"),
        ],
        connections=[Connection("user", "fw", "request"), Connection("fw", "web", "request")],
    )


def intent(kind: str, *types: str, **kwargs) -> Intent:
    return Intent(kind=kind, components=[IntentComponent(type=t) for t in types], **kwargs)


def pairs(spec: Spec):
    return [(c.source, c.target) for c in spec.connections]


def test_create_builds_chain_with_implicit_user():
    result = apply_intent(intent("create", "firewall", "web-server"))

    assert result.success
    spec = result.spec
    assert len(spec.nodes) == 3
    user, fw, web = spec.nodes
    assert user.id == "user"
    assert user.tier == "external"
    assert fw.type == "firewall"
    assert web.type == "web-server"
    assert pairs(spec) == [("user", fw.id), (fw.id, web.id)]
    assert all(c.flow_type == "request" for c in spec.connections)


def test_create_with_explicit_user():
    result = apply_intent(intent("create", "user", "load-balancer"))
    assert [n.type for n in result.spec.nodes] == ["user", "load-balancer"]
    assert len(result.spec.connections) == 1


def test_create_without_components_gives_empty_spec():
    result = apply_intent(intent("create"), make_spec())
    assert result.success
    assert result.spec.nodes == []
    assert result.spec.connections == []
    assert result.modifications == []


def test_intent_accepts_wire_alias():
    parsed = Intent.model_validate({
        "intent": "add",
        "components": [{"type": "waf"}],
        "position": {"type": "between", "reference": "firewall", "referenceSecond": "web-server"},
    })
    assert parsed.kind == "add"
    assert parsed.position.reference_second == "web-server"


def test_add_without_diagram():
    result = apply_intent(intent("add", "waf"))
    assert not result.success
    assert result.error_code is ErrorCode.EMPTY_DIAGRAM


def test_add_without_components():
    result = apply_intent(intent("add"), make_spec())
    assert not result.success
    assert result.error_code is ErrorCode.MISSING_COMPONENTS
    assert result.confidence == 0.3


def test_add_after_reference():
    result = apply_intent(
        intent("add", "waf", position=PositionInfo(type="after", reference="firewall")),
        make_spec(),
    )

    waf = result.spec.nodes[-1]
    assert waf.type == "waf"
    assert ("fw", waf.id) in pairs(result.spec)
    assert [m.type for m in result.modifications] == ["add-node", "add-connection"]


def test_add_between_reroutes_link():
    result = apply_intent(
        intent("add", "waf", position=PositionInfo(type="between", reference="firewall", reference_second="web-server")),
        make_spec(),
    )

    waf = result.spec.nodes[-1]
    assert ("fw", "web") not in pairs(result.spec)
    assert ("fw", waf.id) in pairs(result.spec)
    assert (waf.id, "web") in pairs(result.spec)


def test_add_without_position_leaves_node_unconnected():
    spec = make_spec()
    result = apply_intent(intent("add", "cache"), spec)
    assert len(result.spec.nodes) == 4
    assert pairs(result.spec) == pairs(spec)


def test_remove_cascades():
    result = apply_intent(intent("remove", "firewall"), make_spec())
    assert result.success
    assert result.spec.node_ids() == ["user", "web"]
    assert result.spec.connections == []


def test_remove_not_found():
    result = apply_intent(intent("remove", "db-server"), make_spec())
    assert not result.success
    assert result.error_code is ErrorCode.NODE_NOT_FOUND


def test_modify_overlays_fields():
    result = apply_intent(
        Intent(kind="modify", components=[IntentComponent(type="web-server", label="Nginx", tier="internal")]),
        make_spec(),
    )
    web = result.spec.get_node("web")
    assert web.label == "Nginx"
    assert web.tier == "internal"


def test_connect_needs_two_components():
    result = apply_intent(intent("connect", "firewall"), make_spec())
    assert not result.success
    assert result.error_code is ErrorCode.MISSING_COMPONENTS


def test_connect():
    result = apply_intent(intent("connect", "user", "web-server"), make_spec())
    assert result.success
    assert ("user", "web") in pairs(result.spec)


def test_disconnect_either_direction():
    result = apply_intent(intent("disconnect", "web-server", "firewall"), make_spec())
    assert result.success
    assert pairs(result.spec) == [("user", "fw")]


def test_disconnect_without_link_succeeds():
    result = apply_intent(intent("disconnect", "user", "web-server"), make_spec())
    assert result.success
    assert result.modifications == []


def test_query_echoes_spec():
    spec = make_spec()
    result = apply_intent(intent("query", reasoning="What protects the web tier?"), spec)
    assert result.success
    assert result.spec is spec
    assert result.query == "What protects the web tier?"


def test_input_spec_untouched():
    spec = make_spec()
    apply_intent(intent("remove", "firewall"), spec)
    assert spec.node_ids() == ["user", "fw", "web"]
