"""Routes for cross-jurisdiction conflict detection."""

import logging

from fastapi import APIRouter, HTTPException

from compliance_engine.core.config import get_settings
from compliance_engine.jurisdiction import EvaluatedRule, detect_conflicts, merge_obligations
from compliance_engine.rules import TreeEvaluator, TreeStructureError
from .dependencies import get_loader
from .models import ConflictsRequest, ConflictsResponse, RuleOutcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conflicts", tags=["Conflicts"])


@router.post("", response_model=ConflictsResponse)
async def check_conflicts(request: ConflictsRequest) -> ConflictsResponse:
    """Evaluate each listed rule and compare the outcomes across jurisdictions."""
    loader = get_loader()
    evaluator = TreeEvaluator()
    use_cache = get_settings().evaluation_cache_enabled

    evaluated: list[EvaluatedRule] = []
    for item in request.evaluations:
        rule = loader.get_rule(item.rule_id)
        if rule is None:
            raise HTTPException(status_code=404, detail=f"Rule not found: {item.rule_id}")
        try:
            result = evaluator.evaluate(
                rule.tree, item.facts, cache_key=rule.id if use_cache else None
            )
        except TreeStructureError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        evaluated.append(EvaluatedRule(rule, result))

    try:
        merged = merge_obligations(evaluated, request.strategy)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    conflicts = detect_conflicts(evaluated, include_decisions=request.include_decisions)
    if conflicts:
        logger.info(
            "Found %d conflict(s) across %s",
            len(conflicts), ", ".join(rule.jurisdiction for rule in evaluated),
        )

    outcomes = [
        RuleOutcome(
            rule_id=rule.definition.id,
            jurisdiction=rule.jurisdiction,
            leaf_id=rule.result.leaf.node_id,
            decision=rule.result.leaf.decision,
            status=rule.result.leaf.status.value,
            obligations=rule.result.leaf.obligations,
        )
        for rule in evaluated
    ]

    return ConflictsResponse(
        outcomes=outcomes,
        conflicts=conflicts,
        merged_obligations=merged,
        strategy=request.strategy,
    )
