"""Routes for evaluating decision trees."""

from fastapi import APIRouter, HTTPException

from compliance_engine.core.config import get_settings
from compliance_engine.rules import TreeEvaluator, TreeStructureError
from .dependencies import resolve_tree
from .models import EvaluateRequest, EvaluateResponse, PartialEvaluateResponse

router = APIRouter(prefix="/evaluate", tags=["Evaluation"])


@router.post("", response_model=EvaluateResponse)
async def evaluate(request: EvaluateRequest) -> EvaluateResponse:
    """Evaluate facts against a rule or inline tree.

    Returns the reached leaf with a trace of every condition checked.
    """
    tree, rule_id = resolve_tree(request.rule_id, request.tree)

    settings = get_settings()
    cache_key = rule_id if request.use_cache and settings.evaluation_cache_enabled else None

    try:
        result = TreeEvaluator().evaluate(tree, request.facts, cache_key=cache_key)
    except TreeStructureError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return EvaluateResponse(rule_id=rule_id, result=result)


@router.post("/partial", response_model=PartialEvaluateResponse)
async def evaluate_partial(request: EvaluateRequest) -> PartialEvaluateResponse:
    """Evaluate with incomplete facts.

    Lists every leaf still reachable and the facts that would narrow the outcome.
    """
    tree, rule_id = resolve_tree(request.rule_id, request.tree)

    try:
        result = TreeEvaluator().evaluate_partial(tree, request.facts)
    except TreeStructureError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return PartialEvaluateResponse(
        rule_id=rule_id,
        result=result,
        determinate=result.is_determinate,
    )
