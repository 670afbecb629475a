"""Pytest fixtures for test suite."""

import pytest
from pathlib import Path

from compliance_engine.core.ontology import ComplianceStatus
from compliance_engine.rules import (
    BranchChildren,
    Condition,
    ConditionNode,
    EvaluationCache,
    LeafNode,
    RuleLoader,
    reset_evaluation_cache,
)


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_global_cache():
    """Every test starts with an empty process-wide evaluation cache."""
    reset_evaluation_cache()
    yield
    reset_evaluation_cache()


@pytest.fixture
def rules_dir() -> Path:
    """Path to the bundled rules directory."""
    return Path(__file__).parent.parent / "compliance_engine" / "rules" / "data"


@pytest.fixture
def rule_loader(rules_dir: Path) -> RuleLoader:
    """Rule loader with rules loaded from the rules directory."""
    loader = RuleLoader(rules_dir)
    loader.load_directory()
    return loader


@pytest.fixture
def cache() -> EvaluationCache:
    """An isolated evaluation cache."""
    return EvaluationCache()


# =============================================================================
# Tree Fixtures
# =============================================================================


def make_leaf(node_id: str, decision: str, status=ComplianceStatus.COMPLIANT, obligations=None) -> LeafNode:
    return LeafNode(
        node_id=node_id,
        decision=decision,
        status=status,
        obligations=obligations or [],
    )


def make_condition(node_id: str, fact: str, op: str, value, true, false) -> ConditionNode:
    return ConditionNode(
        node_id=node_id,
        condition=Condition(fact=fact, op=op, value=value),
        children=BranchChildren(true=true, false=false),
    )


@pytest.fixture
def disclosure_tree() -> ConditionNode:
    """Single threshold check on the offer amount."""
    return make_condition(
        "amount_check", "amount", "gte", 8000000,
        true=make_leaf(
            "enhanced", "Enhanced disclosure required",
            status=ComplianceStatus.REQUIRES_ACTION,
            obligations=["Publish enhanced disclosure document"],
        ),
        false=make_leaf("standard", "Standard disclosure"),
    )


@pytest.fixture
def nested_tree() -> ConditionNode:
    """Two-level tree: jurisdiction first, then retail targeting."""
    return make_condition(
        "root", "issuer.jurisdiction", "eq", "EU",
        true=make_condition(
            "retail", "offer.retail", "eq", True,
            true=make_leaf(
                "eu_retail", "Classified as e-money token",
                status=ComplianceStatus.REQUIRES_ACTION,
                obligations=["Notify regulator 20 days before offer"],
            ),
            false=make_leaf("eu_wholesale", "Classified as e-money token"),
        ),
        false=make_leaf("non_eu", "Out of scope", status=ComplianceStatus.NO_APPLICABLE_RULES),
    )


@pytest.fixture
def cross_border_facts() -> dict:
    """Facts for a retail stablecoin offer by an authorised issuer."""
    return {
        "instrument": {"type": "stablecoin", "investment_contract": False},
        "issuer": {"authorized": True},
        "offer": {"retail": True},
    }
