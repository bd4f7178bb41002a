"""Tests for the OperationApplier"""

import pytest

from infraflow.ir.errors import ErrorCode, SpecContractError
from infraflow.ir.operations import OperationBatch
from infraflow.ir.spec import Connection, Node, Spec
from infraflow.mutation import apply_operations, find_node


def make_node(id: str, type: str, tier: str = "internal") -> Node:
    return Node(id=id, type=type, label=id.title(), tier=tier)


def make_spec() -> Spec:
    return Spec(
        nodes=[
            make_node("user", "user", "external"),
            make_node("fw", "firewall", "dmz"),
            make_node("web", "web-server", "dmz"),
            make_node("db", "db-server", "data"),
        ],
        connections=[
            Connection("user", "fw", "request"),
            Connection("fw", "web", "request"),
            Connection("web", "db", "sync"),
        ],
    )


def ops(*payloads):
    return OperationBatch.model_validate({"reasoning": "test", "operations": list(payloads)}).operations


def pairs(spec: Spec):
    return [(c.source, c.target) for c in spec.connections]


def test_remove_cascades_connections():
    spec = Spec(
        nodes=[make_node("web", "web-server"), make_node("db", "db-server")],
        connections=[Connection("web", "db")],
    )
    result = apply_operations(spec, ops({"type": "remove", "target": "db"}))

    assert result.success
    assert result.spec.connections == []
    assert result.spec.node_ids() == ["web"]


def test_input_spec_is_not_mutated():
    spec = make_spec()
    apply_operations(spec, ops({"type": "remove", "target": "fw"}))
    assert spec.node_ids() == ["user", "fw", "web", "db"]
    assert len(spec.connections) == 3


def test_find_node_resolution_order():
    spec = make_spec()
    assert find_node(spec, "web").id == "web"
    assert find_node(spec, "firewall").id == "fw"
    assert find_node(spec, "db-serv").id == "db"
    assert find_node(spec, "ghost") is None


def test_remove_by_type():
    result = apply_operations(make_spec(), ops({"type": "remove", "target": "firewall"}))
    assert "fw" not in result.spec.node_ids()
    assert pairs(result.spec) == [("web", "db")]


def test_remove_unknown_target():
    result = apply_operations(make_spec(), ops({"type": "remove", "target": "ghost"}))

    assert not result.success
    assert result.applied_ops == 0
    assert result.errors[0].code is ErrorCode.NODE_NOT_FOUND
    assert result.errors[0].index == 0
    assert len(result.spec.nodes) == 4


def test_replace_preserves_connections():
    result = apply_operations(make_spec(), ops(
        {"type": "replace", "target": "fw", "data": {"newType": "waf"}},
    ))

    new_id = result.node_id_mappings["fw"]
    assert new_id.startswith("waf-")
    node = result.spec.get_node(new_id)
    assert node.type == "waf"
    assert node.label == "WAF"
    assert node.tier == "dmz"
    assert result.spec.node_ids()[1] == new_id
    assert pairs(result.spec) == [("user", new_id), (new_id, "web"), ("web", "db")]


def test_replace_drops_connections():
    result = apply_operations(make_spec(), ops(
        {"type": "replace", "target": "fw", "data": {"newType": "waf", "preserveConnections": False}},
    ))
    assert pairs(result.spec) == [("web", "db")]


def test_add_between_nodes():
    result = apply_operations(make_spec(), ops(
        {"type": "add", "target": "ids-ips", "data": {"betweenNodes": ["fw", "web"]}},
    ))

    new_node = result.spec.nodes[-1]
    assert new_node.type == "ids-ips"
    assert new_node.tier == "dmz"
    assert ("fw", "web") not in pairs(result.spec)
    assert ("fw", new_node.id) in pairs(result.spec)
    assert (new_node.id, "web") in pairs(result.spec)


def test_add_between_missing_node_fails_cleanly():
    result = apply_operations(make_spec(), ops(
        {"type": "add", "target": "waf", "data": {"betweenNodes": ["fw", "ghost"]}},
    ))

    assert not result.success
    assert result.errors[0].code is ErrorCode.NODE_NOT_FOUND
    assert len(result.spec.nodes) == 4
    assert pairs(result.spec) == pairs(make_spec())


def test_add_after_and_before():
    result = apply_operations(make_spec(), ops(
        {"type": "add", "target": "cache", "data": {"afterNode": "web", "beforeNode": "db", "label": "Redis"}},
    ))

    cache = result.spec.nodes[-1]
    assert cache.label == "Redis"
    assert cache.tier == "data"
    assert ("web", cache.id) in pairs(result.spec)
    assert (cache.id, "db") in pairs(result.spec)


def test_operations_apply_in_order():
    result = apply_operations(make_spec(), ops(
        {"type": "add", "target": "cache"},
        {"type": "connect", "data": {"source": "cache", "target": "db"}},
    ))

    assert result.success
    assert result.applied_ops == 2
    cache = result.spec.first_of_type("cache")
    conn = result.spec.connections[-1]
    assert (conn.source, conn.target, conn.flow_type) == (cache.id, "db", "request")


def test_failure_does_not_roll_back():
    result = apply_operations(make_spec(), ops(
        {"type": "remove", "target": "db"},
        {"type": "remove", "target": "ghost"},
        {"type": "modify", "target": "web", "data": {"label": "Frontend"}},
    ))

    assert not result.success
    assert result.applied_ops == 2
    assert [e.index for e in result.errors] == [1]
    assert "db" not in result.spec.node_ids()
    assert result.spec.get_node("web").label == "Frontend"


def test_last_write_wins():
    result = apply_operations(make_spec(), ops(
        {"type": "modify", "target": "web", "data": {"label": "A", "tier": "internal"}},
        {"type": "modify", "target": "web", "data": {"label": "B"}},
    ))

    web = result.spec.get_node("web")
    assert web.label == "B"
    assert web.tier == "internal"


def test_connect_existing_is_noop():
    result = apply_operations(make_spec(), ops(
        {"type": "connect", "data": {"source": "fw", "target": "web"}},
    ))
    assert result.success
    assert len(result.spec.connections) == 3


def test_connect_missing_source():
    result = apply_operations(make_spec(), ops(
        {"type": "connect", "data": {"source": "ghost", "target": "web"}},
    ))
    assert result.errors[0].message.startswith("Source node not found")


def test_disconnect():
    result = apply_operations(make_spec(), ops(
        {"type": "disconnect", "data": {"source": "fw", "target": "web-server"}},
    ))
    assert result.success
    assert pairs(result.spec) == [("user", "fw"), ("web", "db")]


def test_rejects_spec_with_duplicate_ids():
    spec = make_spec()
    spec.nodes.append(make_node("web", "app-server"))
    with pytest.raises(SpecContractError):
        apply_operations(spec, ops({"type": "remove", "target": "db"}))


def test_rejects_spec_with_dangling_connection():
    spec = make_spec()
    spec.connections.append(Connection("web", "ghost"))
    with pytest.raises(SpecContractError) as exc_info:
        apply_operations(spec, ops({"type": "remove", "target": "db"}))
    assert not exc_info.value.recoverable
