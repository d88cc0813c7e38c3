"""
Workflow rule table and YAML loader.

One rule per operation answers two questions about an objective set:
which caller relationships may act (owner, coach, admin), and which statuses
the set must be in. Transitions carry the status the set moves to.

Key ideas:
- Load YAML once (statuses + operations).
- Validate it: unknown statuses/relationships, transitions out of a terminal
  status and missing operations are configuration errors.
- At runtime, answer:
    is_permitted(operation, caller, subject)?
    check(operation, caller, subject) -> target status, or raise

This module has no FastAPI or database dependency.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from .context import Caller, Subject, relationships
from .errors import Forbidden, InvalidState, WorkflowConfigError
from .statuses import Operation, Relationship, UserRole

logger = logging.getLogger(__name__)

ANY_STATE = "any"

_KNOWN_ACTORS = frozenset(r.value for r in Relationship)
_KNOWN_ROLES = frozenset(r.value for r in UserRole)


# ---- Data structures -----------------------------------------------------------------


@dataclass(frozen=True)
class OperationRule:
    """Who may run an operation, from which statuses, and where it leads."""

    name: str
    actors: frozenset[str]
    from_states: frozenset[str] | None  # None means any status
    to_state: str | None = None
    bypass_state_for_roles: frozenset[str] = frozenset()

    @property
    def is_transition(self) -> bool:
        return self.to_state is not None

    def allows_state(self, status: str, caller: Caller) -> bool:
        if self.from_states is None:
            return True
        if caller.role in self.bypass_state_for_roles:
            return True
        return status in self.from_states


@dataclass(frozen=True)
class WorkflowRules:
    """Fully-loaded workflow configuration."""

    initial_state: str
    states: tuple[str, ...]
    terminal_states: frozenset[str]
    operations: Mapping[str, OperationRule]

    def rule(self, operation: Operation | str) -> OperationRule:
        name = operation.value if isinstance(operation, Operation) else operation
        try:
            return self.operations[name]
        except KeyError:
            raise WorkflowConfigError(f"no rule for operation {name!r}") from None

    def is_permitted(self, operation: Operation | str, caller: Caller, subject: Subject) -> bool:
        rule = self.rule(operation)
        if not (relationships(caller, subject) & rule.actors):
            return False
        return rule.allows_state(subject.status, caller)

    def check(self, operation: Operation | str, caller: Caller, subject: Subject) -> str | None:
        """
        Authorize `operation` and return the status it leads to.

        Relationship is checked before status, so a stranger always gets
        Forbidden regardless of where the objective set is in its lifecycle.
        """

        rule = self.rule(operation)
        rels = relationships(caller, subject)
        if not (rels & rule.actors):
            logger.info(
                "Workflow: denied op=%s caller=%s relationships=%s allowed=%s",
                rule.name,
                caller.user_id,
                sorted(rels),
                sorted(rule.actors),
            )
            raise Forbidden(f"Not allowed to {rule.name.replace('_', ' ')}")

        if not rule.allows_state(subject.status, caller):
            logger.info(
                "Workflow: invalid state op=%s caller=%s status=%s allowed=%s",
                rule.name,
                caller.user_id,
                subject.status,
                sorted(rule.from_states or ()),
            )
            raise InvalidState(
                f"Cannot {rule.name.replace('_', ' ')} while status is {subject.status!r}",
                details={"status": subject.status, "allowed": sorted(rule.from_states or ())},
            )

        return rule.to_state


# ---- Loader --------------------------------------------------------------------------


def _state_list(value: Any, where: str, states: frozenset[str]) -> frozenset[str] | None:
    if value == ANY_STATE:
        return None
    if not isinstance(value, list) or not value:
        raise WorkflowConfigError(f"{where} must be {ANY_STATE!r} or a non-empty list of statuses")
    parsed = frozenset(str(s) for s in value)
    unknown = parsed.difference(states)
    if unknown:
        raise WorkflowConfigError(f"{where} references unknown statuses: {sorted(unknown)}")
    return parsed


def parse_workflow_rules(raw: Mapping[str, Any]) -> WorkflowRules:
    """
    Validate an already-parsed YAML document.

    Expected shape (simplified):

        workflow:
          initial_state: draft
          terminal_states: [evaluated]
          states: [draft, submitted, ...]
          operations:
            submit_objectives:
              actors: [owner, admin]
              from: [draft]
              to: submitted
    """

    if "workflow" not in raw:
        raise WorkflowConfigError("missing top-level 'workflow' key")
    wf = raw["workflow"] or {}
    if not isinstance(wf, dict):
        raise WorkflowConfigError("workflow must be a mapping")

    states_raw = wf.get("states") or []
    if not isinstance(states_raw, list) or not states_raw:
        raise WorkflowConfigError("workflow.states must be a non-empty list")
    states = tuple(str(s) for s in states_raw)
    state_set = frozenset(states)

    initial = str(wf.get("initial_state", "")).strip()
    if initial not in state_set:
        raise WorkflowConfigError(f"initial_state {initial!r} is not a declared status")

    terminal_raw = wf.get("terminal_states") or []
    if not isinstance(terminal_raw, list):
        raise WorkflowConfigError("terminal_states must be a list when present")
    terminal = frozenset(str(s) for s in terminal_raw)
    if terminal - state_set:
        raise WorkflowConfigError(f"terminal_states references unknown statuses: {sorted(terminal - state_set)}")

    ops_raw = wf.get("operations") or {}
    if not isinstance(ops_raw, dict):
        raise WorkflowConfigError("workflow.operations must be a mapping")

    operations: dict[str, OperationRule] = {}
    for op_name, op_val in ops_raw.items():
        if not isinstance(op_val, dict):
            raise WorkflowConfigError(f"operation {op_name!r} must be a mapping")

        actors_raw = op_val.get("actors") or []
        if not isinstance(actors_raw, list) or not actors_raw:
            raise WorkflowConfigError(f"operation {op_name!r}.actors must be a non-empty list")
        actors = frozenset(str(a) for a in actors_raw)
        if actors - _KNOWN_ACTORS:
            raise WorkflowConfigError(f"operation {op_name!r} references unknown actors: {sorted(actors - _KNOWN_ACTORS)}")

        from_states = _state_list(op_val.get("from", ANY_STATE), f"operation {op_name!r}.from", state_set)

        to_state = op_val.get("to")
        if to_state is not None:
            to_state = str(to_state)
            if to_state not in state_set:
                raise WorkflowConfigError(f"operation {op_name!r}.to references unknown status {to_state!r}")
            if from_states is not None and from_states & terminal:
                raise WorkflowConfigError(
                    f"operation {op_name!r} leaves terminal statuses {sorted(from_states & terminal)}"
                )

        bypass_raw = op_val.get("bypass_state_for_roles") or []
        if not isinstance(bypass_raw, list):
            raise WorkflowConfigError(f"operation {op_name!r}.bypass_state_for_roles must be a list")
        bypass = frozenset(str(r) for r in bypass_raw)
        if bypass - _KNOWN_ROLES:
            raise WorkflowConfigError(f"operation {op_name!r} references unknown roles: {sorted(bypass - _KNOWN_ROLES)}")

        operations[str(op_name)] = OperationRule(
            name=str(op_name),
            actors=actors,
            from_states=from_states,
            to_state=to_state,
            bypass_state_for_roles=bypass,
        )

    missing = {op.value for op in Operation}.difference(operations.keys())
    if missing:
        raise WorkflowConfigError(f"missing rules for operations: {sorted(missing)}")

    return WorkflowRules(
        initial_state=initial,
        states=states,
        terminal_states=terminal,
        operations=operations,
    )


def load_workflow_rules(path: Path) -> WorkflowRules:
    raw_text = path.read_text(encoding="utf-8")
    raw = yaml.safe_load(raw_text) or {}
    if not isinstance(raw, dict):
        raise WorkflowConfigError(f"workflow rules must be a mapping: {path}")
    return parse_workflow_rules(raw)


def is_permitted(operation: Operation | str, caller: Caller, subject: Subject, rules: WorkflowRules) -> bool:
    """Pure permission predicate: may `caller` run `operation` on `subject` right now?"""
    return rules.is_permitted(operation, caller, subject)
