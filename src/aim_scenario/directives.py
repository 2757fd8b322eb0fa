# aim_scenario/directives.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Directive extraction.

A directive is a line starting with the directive marker (``%`` by default).
It never becomes message content; instead it writes into one of the config
layers:

    % parse <key> <value>     parser config, mirrored to parser_overrides.<key>
    % use <key> <value>       scenario config
    % <key>=<value>           act config (or scenario./parser./act. prefixed)
    % <flag>                  act config, set to true

Assignments and flags met while scanning a message body are scoped to that
message under ``messages.<index>.`` in the act config.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from .coercion import restore_type
from .models import ActName, ScenarioData
from .utils import deep_set, split_path

logger = logging.getLogger(__name__)

ASSIGNMENT_REGEXP = re.compile(r'^\s*(?P<key>[^=]*?)\s*=\s*(?P<value>.*?)\s*$')
FLAG_REGEXP = re.compile(r'^[\w.-]+$')

PARSER_OVERRIDES_KEY = 'parser_overrides'
RESERVED_SCENARIO_KEYS = ('order',)


@dataclass
class DirectiveScope:
    """Where a directive writes to.

    Attributes:
        scenario: Scenario being compiled
        parser_config: Working parser config of the current compile
        act: Act the directive belongs to
        index: Message index when the directive sits in a message body
    """
    scenario: ScenarioData
    parser_config: dict[str, Any]
    act: ActName
    index: Optional[int] = None

    @property
    def marker(self) -> str:
        return str(self.parser_config.get('directive') or '%')

    def act_config(self) -> dict[str, Any]:
        return self.scenario.ensure_act(self.act).config

    def scoped_key(self, key: str) -> str:
        if self.index is None:
            return key
        return f"messages.{self.index}.{key}"


def update_config(config: dict[str, Any], key: str, value: Any) -> None:
    """Deep-set ``key`` after coercing string values."""
    deep_set(config, key, restore_type(value) if isinstance(value, str) else value)


def update_scenario_config(scope: DirectiveScope, key: str, value: Any) -> None:
    parts = split_path(key)
    if not parts or parts[0] in RESERVED_SCENARIO_KEYS:
        logger.debug(f"Ignoring directive writing reserved scenario key '{key}'")
        return
    update_config(scope.scenario.config, key, value)


def update_parser_config(scope: DirectiveScope, key: str, value: Any) -> None:
    """Change the parser's own behaviour and record it for the runtime."""
    update_config(scope.parser_config, key, value)
    update_config(scope.scenario.config, f"{PARSER_OVERRIDES_KEY}.{key}", value)


def _split_keyword(directive: str) -> tuple[str, str]:
    """``<keyword> <key> <value...>`` -> (key, joined value)."""
    _, key, *values = directive.split()
    return key, ' '.join(values).strip()


def store_parse(directive: str, scope: DirectiveScope) -> bool:
    if not directive.startswith('parse '):
        return False
    key, value = _split_keyword(directive)
    update_parser_config(scope, key, value)
    return True


def store_use(directive: str, scope: DirectiveScope) -> bool:
    if not directive.startswith('use '):
        return False
    key, value = _split_keyword(directive)
    update_scenario_config(scope, key, value)
    return True


def store_assignment(directive: str, scope: DirectiveScope) -> bool:
    if '=' not in directive:
        return False

    match = ASSIGNMENT_REGEXP.match(directive)
    key = match.group('key') if match else ''
    if not key:
        logger.debug(f"Dropping assignment without a key: '{directive}'")
        return True
    value = match.group('value')

    if key.startswith('scenario.'):
        update_scenario_config(scope, key[len('scenario.'):], value)
    elif key.startswith('parser.'):
        update_parser_config(scope, key[len('parser.'):], value)
    else:
        if key.startswith('act.'):
            key = key[len('act.'):]
        update_config(scope.act_config(), scope.scoped_key(key), value)
    return True


def store_flag(directive: str, scope: DirectiveScope) -> bool:
    if not FLAG_REGEXP.match(directive):
        return False
    update_config(scope.act_config(), scope.scoped_key(directive), True)
    return True


DIRECTIVE_FORMS = (store_parse, store_use, store_assignment, store_flag)


def store_directive(directive: str, scope: DirectiveScope) -> str:
    """Apply one directive (text after the marker) and return its replacement text.

    The replacement is always empty: recognised or not, a directive line is
    removed from the script.
    """
    directive = directive.strip()
    for form in DIRECTIVE_FORMS:
        if form(directive, scope):
            return ''

    logger.debug(f"Dropping unrecognised directive '{directive}' in act '{scope.act}'")
    return ''


def is_directive(line: str, marker: str) -> bool:
    return bool(marker) and line.lstrip().startswith(marker)


def extract_directives(lines: list[str], scope: DirectiveScope) -> list[str]:
    """Apply every directive line in ``lines`` and return the remaining lines.

    The marker is re-read for each line since ``% parse directive <marker>``
    can change it.
    """
    remaining = []
    for line in lines:
        marker = scope.marker
        if is_directive(line, marker):
            store_directive(line.lstrip()[len(marker):], scope)
        else:
            remaining.append(line)
    return remaining
