"""Routes for inspecting rules."""

from typing import Literal

from fastapi import APIRouter, HTTPException

from compliance_engine.core.visualization import tree_to_graph
from compliance_engine.rules import collect_fact_paths, count_nodes, get_evaluation_cache
from .dependencies import get_loader, set_loader
from .models import RuleDetailResponse, RuleGraphResponse, RuleInfo, RulesListResponse

router = APIRouter(prefix="/rules", tags=["Rules"])


@router.get("", response_model=RulesListResponse)
async def list_rules(jurisdiction: str | None = None) -> RulesListResponse:
    """List all available rules.

    Optionally filter by jurisdiction.
    """
    loader = get_loader()

    if jurisdiction:
        rules = loader.get_rules_for_jurisdiction(jurisdiction)
    else:
        rules = loader.get_all_rules()

    rule_infos = [
        RuleInfo(
            rule_id=rule.id,
            name=rule.name,
            version=rule.version,
            jurisdiction=rule.metadata.jurisdiction,
            framework=rule.metadata.framework,
            description=rule.description,
            tags=rule.metadata.tags,
        )
        for rule in rules
    ]

    return RulesListResponse(rules=rule_infos, total=len(rule_infos))


@router.get("/{rule_id}", response_model=RuleDetailResponse)
async def get_rule(rule_id: str) -> RuleDetailResponse:
    """Get a rule with the fact paths it reads and its node counts."""
    rule = get_loader().get_rule(rule_id)

    if not rule:
        raise HTTPException(status_code=404, detail=f"Rule not found: {rule_id}")

    counts = count_nodes(rule.tree)
    return RuleDetailResponse(
        rule=rule,
        fact_paths=collect_fact_paths(rule.tree),
        node_counts=counts,
        node_total=counts.total,
    )


@router.get("/{rule_id}/graph", response_model=RuleGraphResponse)
async def get_rule_graph(
    rule_id: str,
    format: Literal["dot", "mermaid"] = "dot",
) -> RuleGraphResponse:
    """Render a rule's tree as Graphviz DOT or Mermaid source."""
    rule = get_loader().get_rule(rule_id)

    if not rule:
        raise HTTPException(status_code=404, detail=f"Rule not found: {rule_id}")

    graph = tree_to_graph(rule.tree)
    source = graph.to_dot() if format == "dot" else graph.to_mermaid()

    return RuleGraphResponse(rule_id=rule.id, format=format, source=source)


@router.post("/reload")
async def reload_rules() -> dict:
    """Reload rules from disk and drop cached evaluations."""
    set_loader(None)
    cleared = get_evaluation_cache().clear()

    loader = get_loader()
    return {
        "status": "reloaded",
        "rules_loaded": len(loader.get_all_rules()),
        "cache_entries_cleared": cleared,
    }
