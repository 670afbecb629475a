"""Tests for the decision node schema."""

import pytest
from pydantic import ValidationError

from compliance_engine.core.ontology import ComplianceStatus, JurisdictionRole
from compliance_engine.rules import (
    ConditionNode,
    ConflictAnchorNode,
    GroupNode,
    LeafNode,
    RouterNode,
    TraceNode,
    parse_node,
)


LEAF = {"type": "leaf", "nodeId": "l", "decision": "Done", "status": "compliant"}


class TestParseNode:
    """Tests for discriminated node parsing."""

    def test_leaf(self):
        node = parse_node(LEAF)
        assert isinstance(node, LeafNode)
        assert node.status == ComplianceStatus.COMPLIANT
        assert node.obligations == []

    def test_condition(self):
        node = parse_node({
            "type": "condition",
            "nodeId": "c",
            "condition": {"fact": "a.b", "op": "eq", "value": 1},
            "children": {"true": LEAF, "false": {**LEAF, "nodeId": "l2"}},
        })
        assert isinstance(node, ConditionNode)
        assert node.children.false.node_id == "l2"

    def test_snake_case_keys(self):
        node = parse_node({"type": "leaf", "node_id": "l", "decision": "D", "status": "blocked"})
        assert node.node_id == "l"

    def test_group(self):
        node = parse_node({
            "type": "group",
            "nodeId": "g",
            "label": "Authorisation",
            "entryNodeId": "l",
            "exitNodeId": "l",
            "children": [LEAF],
        })
        assert isinstance(node, GroupNode)
        assert node.entry_node_id == "l"
        assert isinstance(node.children[0], LeafNode)

    def test_router(self):
        node = parse_node({
            "type": "router",
            "nodeId": "r",
            "branches": [{"jurisdiction": "EU", "role": "issuer_home", "targetNodeId": "eu"}],
        })
        assert isinstance(node, RouterNode)
        assert node.branches[0].role == JurisdictionRole.ISSUER_HOME

    def test_conflict_anchor(self):
        node = parse_node({
            "type": "conflict_anchor",
            "nodeId": "a",
            "conflictId": "c-1",
            "pairedAnchorId": "b",
        })
        assert isinstance(node, ConflictAnchorNode)
        assert node.paired_anchor_id == "b"

    def test_source_ref_and_scope(self):
        node = parse_node({
            **LEAF,
            "sourceRef": {"document_id": "mica_2023", "article": "48", "url": "https://example.org"},
            "scope": {"jurisdictions": ["EU"], "roles": ["issuer_home"]},
            "tags": ["authorisation"],
        })
        assert node.source_ref.document_id == "mica_2023"
        assert node.scope.jurisdictions == ["EU"]
        assert node.tags == ["authorisation"]

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            parse_node({**LEAF, "type": "switch"})

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            parse_node({**LEAF, "status": "maybe"})

    def test_unknown_operator_still_loads(self):
        node = parse_node({
            "type": "condition",
            "nodeId": "c",
            "condition": {"fact": "x", "op": "approximately", "value": 1},
            "children": {"true": LEAF, "false": LEAF},
        })
        assert node.condition.op == "approximately"


class TestSerialization:
    """camelCase dumping."""

    def test_dump_by_alias(self):
        dumped = parse_node({**LEAF, "sourceRef": {"document_id": "d"}}).model_dump(by_alias=True)
        assert dumped["nodeId"] == "l"
        assert dumped["sourceRef"]["document_id"] == "d"

    def test_round_trip(self):
        data = {
            "type": "condition",
            "nodeId": "c",
            "condition": {"fact": "x", "op": "in", "value": ["a", "b"]},
            "children": {"true": LEAF, "false": {**LEAF, "nodeId": "l2"}},
        }
        node = parse_node(data)
        assert parse_node(node.model_dump(by_alias=True)) == node


class TestTraceNode:
    """TraceNode is immutable."""

    def test_frozen(self):
        step = TraceNode(
            node_id="c",
            condition="x equals 1",
            fact_path="x",
            fact_value=1,
            fact_present=True,
            expected_value=1,
            op="eq",
            result=True,
            depth=0,
        )
        with pytest.raises(ValidationError):
            step.result = False
