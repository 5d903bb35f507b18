# ============================================================================
# VISIBILITY RULES
# ============================================================================
# STATUS: Core - Visibility rule parsing and evaluation
# PURPOSE: Tri-state evaluation of field visibility rules over form values
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: parse_visibility_rule, parse_visibility_state, VisibilityEvaluator
# DEPENDENCIES: core.models
# ============================================================================
"""
Conditional Visibility.

Parses the declarative visibility rules published with parameters and
evaluates them over a snapshot of form values.

Rule shape (remote JSON):

    {"if": [{"$equals": {"parameter": "mode", "value": "advanced"},
             "then": "visibleEnabled"}],
     "default": {"value": "hiddenDisabled", "override": false}}

Evaluation is tri-state. Each clause is True, False or unknown (a
referenced value is missing). The first True clause decides the state.
When no clause is True but one was unknown, the field keeps its previous
state; otherwise the rule default applies. A default with ``override``
set always applies when no clause is True.

Exports:
    parse_visibility_state: Tolerant state parser (snake_case or camelCase)
    parse_visibility_rule: Raw rule dict -> VisibilityRule or None
    VisibilityEvaluator: Evaluates every field rule over one value snapshot
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from config.defaults import FormDefaults
from ..models.enums import VisibilityState
from ..models.fields import (
    DynamicFieldConfig,
    VisibilityClause,
    VisibilityDefault,
    VisibilityRule,
)
from .values import is_empty, normalize_parameter_value, to_boolean_value, to_number, to_trimmed_string
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SCHEMA, "VisibilityEvaluator")

# Tri-state result of a clause or condition
UNKNOWN = "unknown"
Outcome = Union[bool, str]
_UNRESOLVED = object()

_STATE_ALIASES = {
    "visibleenabled": VisibilityState.VISIBLE_ENABLED,
    "visible_enabled": VisibilityState.VISIBLE_ENABLED,
    "visibledisabled": VisibilityState.VISIBLE_DISABLED,
    "visible_disabled": VisibilityState.VISIBLE_DISABLED,
    # A hidden field never contributes a value, enabled or not
    "hiddenenabled": VisibilityState.HIDDEN_DISABLED,
    "hidden_enabled": VisibilityState.HIDDEN_DISABLED,
    "hiddendisabled": VisibilityState.HIDDEN_DISABLED,
    "hidden_disabled": VisibilityState.HIDDEN_DISABLED,
}


def parse_visibility_state(value: Any) -> Optional[VisibilityState]:
    """Parse a state string case-insensitively; None when unrecognized."""
    if isinstance(value, VisibilityState):
        return value
    if not isinstance(value, str):
        return None
    return _STATE_ALIASES.get(value.strip().lower())


def _unwrap_list(value: Any) -> Optional[List[Any]]:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        for key in ("data", "items", "options"):
            if isinstance(value.get(key), list):
                return value[key]
    return None


def _condition_keys(record: Mapping[str, Any]) -> List[str]:
    return [key for key in record if isinstance(key, str) and key.startswith("$")]


def parse_visibility_rule(raw: Any) -> Optional[VisibilityRule]:
    """
    Build a VisibilityRule from the raw ``visibility`` metadata entry.

    Clauses that are not objects or whose ``then`` is not a known state are
    dropped. A rule left with neither clauses nor a default is None.

    Args:
        raw: Value of the ``visibility`` metadata key

    Returns:
        Parsed rule, or None when there is nothing to evaluate
    """
    if not isinstance(raw, dict):
        return None

    clauses = []
    for entry in _unwrap_list(raw.get("if")) or []:
        if not isinstance(entry, dict):
            continue
        then = parse_visibility_state(entry.get("then"))
        if then is None:
            logger.debug(f"Dropping visibility clause with unknown state: {entry.get('then')!r}")
            continue
        conditions = {key: entry[key] for key in _condition_keys(entry)}
        clauses.append(VisibilityClause(then=then, conditions=conditions))

    default = None
    raw_default = raw.get("default")
    if isinstance(raw_default, dict):
        default_state = parse_visibility_state(raw_default.get("value"))
        if default_state is not None:
            default = VisibilityDefault(
                value=default_state,
                override=bool(to_boolean_value(raw_default.get("override")))
            )

    if not clauses and default is None:
        return None
    return VisibilityRule(clauses=clauses, default=default)


class VisibilityEvaluator:
    """
    Evaluates visibility rules over one snapshot of form values.

    ``$isEnabled`` conditions read the states of the previous pass, so the
    result of one pass does not depend on field declaration order.
    ``evaluate_all`` repeats passes until the states stop changing, which
    makes a second call with the same values return the same states.

    Args:
        max_regex_length: Longest ``$matchesRegex`` pattern that is compiled
    """

    def __init__(self, max_regex_length: int = FormDefaults.MAX_VISIBILITY_REGEX_LENGTH):
        self.max_regex_length = max_regex_length
        self._regex_cache: Dict[str, Optional[re.Pattern]] = {}

    def evaluate_all(
        self,
        values: Mapping[str, Any],
        fields: Iterable[DynamicFieldConfig],
        previous_states: Optional[Mapping[str, VisibilityState]] = None
    ) -> Dict[str, VisibilityState]:
        """
        Compute the state of every field.

        Args:
            values: Form values (read only)
            fields: Field configs in declaration order
            previous_states: States from the last evaluation, if any

        Returns:
            Mapping field name -> state for every field
        """
        field_list = list(fields)
        snapshot = dict(values)
        states: Dict[str, Optional[VisibilityState]] = {
            field.name: (previous_states or {}).get(field.name) for field in field_list
        }

        for _ in range(len(field_list) + 1):
            next_states = {
                field.name: self.evaluate_rule(field.visibility, snapshot, states, states.get(field.name))
                for field in field_list
            }
            if next_states == states:
                break
            states = next_states

        return {name: state or VisibilityState.VISIBLE_ENABLED for name, state in states.items()}

    def evaluate_rule(
        self,
        rule: Optional[VisibilityRule],
        values: Mapping[str, Any],
        states: Mapping[str, Optional[VisibilityState]],
        previous: Optional[VisibilityState] = None
    ) -> VisibilityState:
        """Evaluate one rule. Fields without a rule are always visibleEnabled."""
        if rule is None:
            return VisibilityState.VISIBLE_ENABLED

        saw_unknown = False
        for clause in rule.clauses:
            outcome = self._evaluate_clause(clause.conditions, values, states)
            if outcome is True:
                return clause.then
            if outcome == UNKNOWN:
                saw_unknown = True

        if rule.default is not None and rule.default.override:
            return rule.default.value
        if saw_unknown and previous is not None:
            return previous
        return rule.default_state

    # ------------------------------------------------------------------
    # Clause and operator evaluation
    # ------------------------------------------------------------------

    def _evaluate_clause(self, conditions: Mapping[str, Any], values, states) -> Outcome:
        if not conditions:
            return True
        saw_unknown = False
        for operator, operand in conditions.items():
            outcome = self._evaluate_condition(operator, operand, values, states)
            if outcome is False:
                return False
            if outcome == UNKNOWN:
                saw_unknown = True
        return UNKNOWN if saw_unknown else True

    def _evaluate_condition(self, operator: str, operand: Any, values, states) -> Outcome:
        if operator == "$equals":
            return self._equals(operand, values)
        if operator == "$lessThan":
            return self._compare(operand, values, lambda a, b: a < b)
        if operator == "$greaterThan":
            return self._compare(operand, values, lambda a, b: a > b)
        if operator == "$matchesRegex":
            return self._matches_regex(operand, values)
        if operator == "$isEnabled":
            return self._is_enabled(operand, states)
        if operator == "$isRuntimeValue":
            return self._is_runtime_value(operand, values)
        if operator == "$allOf":
            return self._all_of(operand, values, states)
        if operator == "$anyOf":
            return self._any_of(operand, values, states)
        if operator == "$not":
            return self._not(operand, values, states)
        logger.debug(f"Unsupported visibility operator: {operator}")
        return False

    @staticmethod
    def _parameter_name(operand: Any) -> Optional[str]:
        if not isinstance(operand, dict):
            return None
        name = operand.get("parameter", operand.get("$parameter"))
        return name if isinstance(name, str) else None

    @staticmethod
    def _lookup(values: Mapping[str, Any], name: str) -> Any:
        value = values.get(name)
        return None if is_empty(value) else value

    def _operand_value(self, operand: Dict[str, Any], values) -> Any:
        """Literal ``value`` of an operand, or the value of the field it references."""
        target = operand.get("value")
        reference = self._parameter_name(target) if isinstance(target, dict) else None
        if reference is not None:
            resolved = self._lookup(values, reference)
            return _UNRESOLVED if resolved is None else resolved
        return target

    def _equals(self, operand: Any, values) -> Outcome:
        name = self._parameter_name(operand)
        if name is None:
            return False
        current = self._lookup(values, name)
        if current is None:
            return UNKNOWN
        if "value" not in operand:
            return False
        target = self._operand_value(operand, values)
        if target is _UNRESOLVED:
            return UNKNOWN
        return normalize_parameter_value(current) == normalize_parameter_value(target)

    def _compare(self, operand: Any, values, comparator) -> Outcome:
        name = self._parameter_name(operand)
        if name is None or operand.get("value") is None:
            return False
        current = self._lookup(values, name)
        if current is None:
            return UNKNOWN
        target = self._operand_value(operand, values)
        if target is _UNRESOLVED:
            return UNKNOWN

        left = normalize_parameter_value(current)
        right = normalize_parameter_value(target)
        left_number, right_number = to_number(left), to_number(right)
        if left_number is not None and right_number is not None:
            return comparator(left_number, right_number)
        return comparator(str(left), str(right))

    def _compile(self, pattern: str) -> Optional[re.Pattern]:
        if pattern in self._regex_cache:
            return self._regex_cache[pattern]
        compiled = None
        if len(pattern) > self.max_regex_length:
            logger.warning(f"Visibility regex blocked: pattern length {len(pattern)} exceeds {self.max_regex_length}")
        else:
            try:
                compiled = re.compile(pattern)
            except re.error as e:
                logger.warning(f"Visibility regex blocked: {e}")
        self._regex_cache[pattern] = compiled
        return compiled

    def _matches_regex(self, operand: Any, values) -> Outcome:
        name = self._parameter_name(operand)
        pattern = operand.get("regex") if isinstance(operand, dict) else None
        if name is None or not isinstance(pattern, str):
            return False
        current = self._lookup(values, name)
        if current is None:
            return UNKNOWN
        pattern = pattern.strip()
        if not pattern:
            return False
        compiled = self._compile(pattern)
        if compiled is None:
            return UNKNOWN
        return compiled.search(str(normalize_parameter_value(current))) is not None

    def _is_enabled(self, operand: Any, states) -> Outcome:
        name = self._parameter_name(operand)
        if name is None or name not in states:
            return False
        state = states.get(name)
        if state is None:
            return UNKNOWN
        return state is VisibilityState.VISIBLE_ENABLED

    def _is_runtime_value(self, operand: Any, values) -> Outcome:
        name = self._parameter_name(operand)
        if name is None:
            return False
        current = self._lookup(values, name)
        if current is None:
            return False
        text = to_trimmed_string(current)
        if text is None:
            text = str(normalize_parameter_value(current))
        return text.startswith("$")

    def _all_of(self, operand: Any, values, states) -> Outcome:
        if not isinstance(operand, list) or not operand:
            return False
        saw_unknown = False
        for condition in operand:
            if not isinstance(condition, dict):
                return False
            for key in _condition_keys(condition):
                outcome = self._evaluate_condition(key, condition[key], values, states)
                if outcome is False:
                    return False
                if outcome == UNKNOWN:
                    saw_unknown = True
        return UNKNOWN if saw_unknown else True

    def _any_of(self, operand: Any, values, states) -> Outcome:
        if not isinstance(operand, list) or not operand:
            return False
        saw_unknown = False
        for condition in operand:
            if not isinstance(condition, dict) or not _condition_keys(condition):
                logger.debug(f"Skipping malformed $anyOf condition: {condition!r}")
                continue
            for key in _condition_keys(condition):
                outcome = self._evaluate_condition(key, condition[key], values, states)
                if outcome is True:
                    return True
                if outcome == UNKNOWN:
                    saw_unknown = True
        return UNKNOWN if saw_unknown else False

    def _not(self, operand: Any, values, states) -> Outcome:
        if not isinstance(operand, dict):
            return False
        keys = _condition_keys(operand)
        if not keys:
            return False
        outcome = self._evaluate_condition(keys[0], operand[keys[0]], values, states)
        if outcome == UNKNOWN:
            return UNKNOWN
        return not outcome
