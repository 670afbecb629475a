"""Shared rule loader and tree resolution for the API routes."""

import logging

from fastapi import HTTPException

from compliance_engine.core.config import get_settings
from compliance_engine.rules import DecisionNode, RuleLoader

logger = logging.getLogger(__name__)

# Global instance
_loader: RuleLoader | None = None


def get_loader() -> RuleLoader:
    """Get or create the rule loader instance."""
    global _loader
    if _loader is None:
        settings = get_settings()
        _loader = RuleLoader(settings.rules_dir)
        try:
            _loader.load_directory()
        except FileNotFoundError:
            logger.warning("Rules directory not found: %s", settings.rules_dir)
    return _loader


def set_loader(loader: RuleLoader | None) -> None:
    """Replace the loader (None forces a reload on next access)."""
    global _loader
    _loader = loader


def resolve_tree(rule_id: str | None, tree: DecisionNode | None) -> tuple[DecisionNode, str | None]:
    """Pick the tree a request refers to.

    Returns:
        (tree, cache key) where the key is the rule id for stored rules

    Raises:
        HTTPException: 404 for unknown rule ids, 422 when neither is given
    """
    if rule_id is not None:
        rule = get_loader().get_rule(rule_id)
        if rule is None:
            raise HTTPException(status_code=404, detail=f"Rule not found: {rule_id}")
        return rule.tree, rule.id

    if tree is None:
        raise HTTPException(status_code=422, detail="Provide either rule_id or tree")

    return tree, None
