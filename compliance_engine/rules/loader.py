"""YAML/JSON rule loader and registry."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .conditions import KNOWN_OPERATORS
from .evaluator import walk_nodes
from .schema import ConditionNode, RuleDefinition

logger = logging.getLogger(__name__)

RULE_FILE_SUFFIXES = (".yaml", ".yml", ".json")


class RuleLoadError(Exception):
    """Raised when a rule file cannot be parsed into RuleDefinitions."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load rules from {path}: {reason}")


class RuleLoader:
    """Loads and validates rule definitions from files or directories."""

    def __init__(self, rules_dir: str | Path | None = None):
        self.rules_dir = Path(rules_dir) if rules_dir else None
        self._rules: dict[str, RuleDefinition] = {}

    def load_file(self, path: str | Path) -> list[RuleDefinition]:
        """Load rules from a single YAML or JSON file.

        The file may hold one rule or a list of rules.

        Raises:
            FileNotFoundError: If the file does not exist
            RuleLoadError: If the content is not valid rule data
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Rule file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            try:
                if path.suffix == ".json":
                    content = json.load(f)
                else:
                    content = yaml.safe_load(f)
            except (json.JSONDecodeError, yaml.YAMLError) as e:
                raise RuleLoadError(path, str(e)) from e

        items = content if isinstance(content, list) else [content]

        rules = []
        for item in items:
            rule = self._parse_rule(item, path)
            rules.append(rule)
            self._rules[rule.id] = rule

        return rules

    def load_directory(self, path: str | Path | None = None) -> list[RuleDefinition]:
        """Load all rule files from a directory.

        Files that fail to load are logged and skipped.
        """
        path = Path(path) if path else self.rules_dir
        if not path:
            raise ValueError("No rules directory specified")
        if not path.exists():
            raise FileNotFoundError(f"Rules directory not found: {path}")

        rules = []
        for rule_file in sorted(path.iterdir()):
            if rule_file.suffix not in RULE_FILE_SUFFIXES:
                continue
            try:
                rules.extend(self.load_file(rule_file))
            except RuleLoadError as e:
                logger.warning("Skipping %s: %s", rule_file.name, e.reason)

        logger.info("Loaded %d rule(s) from %s", len(rules), path)
        return rules

    def add_rule(self, rule: RuleDefinition) -> None:
        """Register an already-built rule."""
        self._rules[rule.id] = rule

    def get_rule(self, rule_id: str) -> RuleDefinition | None:
        """Get a loaded rule by ID."""
        return self._rules.get(rule_id)

    def get_all_rules(self) -> list[RuleDefinition]:
        """Get all loaded rules."""
        return list(self._rules.values())

    def get_all_rule_ids(self) -> list[str]:
        """Get the ids of all loaded rules."""
        return list(self._rules.keys())

    def get_rules_for_jurisdiction(self, jurisdiction: str) -> list[RuleDefinition]:
        """Get all rules whose metadata names the given jurisdiction."""
        return [
            rule for rule in self._rules.values()
            if rule.metadata.jurisdiction == jurisdiction
        ]

    def _parse_rule(self, data: Any, path: Path) -> RuleDefinition:
        """Parse a rule from dictionary data."""
        if not isinstance(data, dict):
            raise RuleLoadError(path, f"expected a mapping, got {type(data).__name__}")
        try:
            rule = RuleDefinition.model_validate(data)
        except ValidationError as e:
            raise RuleLoadError(path, str(e)) from e

        # Unknown operators still load; they evaluate to False
        for node in walk_nodes(rule.tree):
            if isinstance(node, ConditionNode) and node.condition.op not in KNOWN_OPERATORS:
                logger.warning(
                    "Rule %s node %s uses unknown operator %r",
                    rule.id, node.node_id, node.condition.op,
                )
        return rule
