"""Routes for tree layout."""

from fastapi import APIRouter, HTTPException

from compliance_engine.core.visualization import LayoutConfig, calculate_layout
from compliance_engine.rules import TreeEvaluator, TreeStructureError
from .dependencies import resolve_tree
from .models import LayoutRequest, LayoutResponse

router = APIRouter(prefix="/layout", tags=["Layout"])


@router.post("", response_model=LayoutResponse)
async def layout_tree(request: LayoutRequest) -> LayoutResponse:
    """Position a tree's nodes on a canvas.

    When facts are supplied the tree is evaluated first and the resulting
    path is marked on nodes and edges.
    """
    tree, _ = resolve_tree(request.rule_id, request.tree)

    highlighted: set[str] = set()
    if request.facts is not None:
        try:
            result = TreeEvaluator().evaluate(tree, request.facts)
        except TreeStructureError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        highlighted = result.path_node_ids()

    layout = calculate_layout(tree, LayoutConfig.from_settings(), highlighted)

    return LayoutResponse(
        **layout.to_dict(),
        highlighted=sorted(highlighted),
    )
