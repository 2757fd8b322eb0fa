# aim_scenario/parser.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""ScenarioParser - compiles scenario script text into ScenarioData.

A script is a sequence of blank-line separated blocks:

    % use title Colors          <- directives before the first act: default act
    system:                     <- role head
        Hello {name|stranger}   <- content with a placeholder

    [Final]                     <- act head, body is the act description
    % loop                      <- act flag

    user:
        Bye\\                   <- continuation: joined as a hard line break
        for now
"""

import copy
import logging
import re
from pathlib import Path
from typing import Any, ClassVar, Mapping, Optional, Union

from .coercion import restore_type
from .directives import DirectiveScope, extract_directives, is_directive
from .lexer import (
    Block,
    PLACEHOLDER_REGEXP,
    act_name,
    is_act_head,
    role_name,
    split_blocks,
    split_placeholder,
)
from .models import Act, ActName, ScenarioData
from .utils import merge_configs

logger = logging.getLogger(__name__)


def config_text(value: Any, default: str) -> str:
    """Read a parser setting that must be text (directive values may be coerced)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, list):
        return ','.join(config_text(item, '') for item in value)
    return str(value)


def get_keys(parser_config: Mapping[str, Any]) -> dict[str, Any]:
    keys = parser_config.get('keys')
    return keys if isinstance(keys, dict) else {}


def get_default_act(parser_config: Mapping[str, Any]) -> ActName:
    return config_text(get_keys(parser_config).get('default_act'), '') or 'default'


def is_comment(text: str, parser_config: Mapping[str, Any]) -> bool:
    marker = config_text(parser_config.get('comment'), '')
    return bool(marker) and text.startswith(marker)


class ScenarioParser:
    """Compiler from scenario text to ScenarioData.

    ``parse(text)`` is pure: it works on a copy of the parser config and
    leaves the instance alone. ``parse()`` without text compiles the text the
    parser was created with, lets ``parse`` directives change the instance
    config, and stores the result on ``self.scenario``.

    Usage:
        parser = ScenarioParser(text)
        data = parser.scenario
        # or
        data = ScenarioParser({'comment': '//'}).parse(text)
    """

    default_config: ClassVar[dict[str, Any]] = {
        'join': ' ',
        'comment': '#',
        'new_line': '\\',
        'directive': '%',
        'keys': {
            'role': 'role',
            'content': 'content',
            'default_act': 'default',
        },
    }

    def __init__(
        self,
        text: Optional[Union[str, Mapping[str, Any]]] = None,
        config: Optional[Mapping[str, Any]] = None,
    ):
        """Initialize parser, compiling ``text`` when given.

        Args:
            text: Scenario text, or the parser config when passed alone
            config: Parser config overrides, merged over the class defaults
        """
        if isinstance(text, Mapping):
            text, config = None, text

        self.config: dict[str, Any] = merge_configs(ScenarioParser.default_config, config)
        self.raw: Optional[str] = text
        self.scenario = ScenarioData()

        if text:
            self.scenario = self.parse()

    @classmethod
    def from_file(cls, path: Union[str, Path], config: Optional[Mapping[str, Any]] = None) -> "ScenarioParser":
        """Create a parser from a scenario file.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Scenario file not found: {path}")
        return cls(path.read_text(encoding='utf-8'), config)

    def parse(self, scenario_text: Optional[str] = None) -> ScenarioData:
        """Compile scenario text.

        Args:
            scenario_text: Text to compile without touching the parser. When
                omitted the parser's own text is compiled and stored.

        Returns:
            The compiled ScenarioData
        """
        if not scenario_text:
            if not self.raw:
                return self.scenario
            self.scenario = self._compile(self.raw, self.config)
            return self.scenario

        return self._compile(scenario_text, copy.deepcopy(self.config))

    def _compile(self, text: str, parser_config: dict[str, Any]) -> ScenarioData:
        scenario = ScenarioData()
        act = get_default_act(parser_config)
        in_preamble = True

        for block in split_blocks(text):
            if is_act_head(block.head):
                in_preamble = False
                act = act_name(block.head, get_default_act(parser_config))
                if not is_comment(act, parser_config):
                    self._store_act(block, scenario, act, parser_config)
                continue

            # commented blocks and blocks of commented acts are dropped whole
            if is_comment(block.head, parser_config) or is_comment(act, parser_config):
                continue

            if in_preamble:
                lines = self._extract_preamble_directives(block.lines, scenario, parser_config)
                act = get_default_act(parser_config)
            else:
                scope = DirectiveScope(scenario, parser_config, act)
                lines = self._extract_leading_directives(block.lines, scope)

            block = Block.from_lines(lines)
            if block is None or is_comment(block.head, parser_config):
                continue

            self._store_message(block, scenario, act, parser_config)

        logger.debug(
            f"Compiled scenario with {len(scenario.acts)} acts, "
            f"{sum(len(act.messages) for act in scenario.acts.values())} messages"
        )
        return scenario

    def _extract_preamble_directives(
        self,
        lines: list[str],
        scenario: ScenarioData,
        parser_config: dict[str, Any],
    ) -> list[str]:
        """Apply preamble directives to the default act as named at that line.

        ``% parse keys.default_act <name>`` renames the default act for every
        line after it.
        """
        remaining = []
        for line in lines:
            scope = DirectiveScope(scenario, parser_config, get_default_act(parser_config))
            remaining.extend(extract_directives([line], scope))
        return remaining

    def _extract_leading_directives(self, lines: list[str], scope: DirectiveScope) -> list[str]:
        """Apply directives that come before a role head at act level."""
        position = 0
        while position < len(lines) and is_directive(lines[position], scope.marker):
            position += 1
        extract_directives(lines[:position], scope)
        return lines[position:]

    def _store_act(
        self,
        block: Block,
        scenario: ScenarioData,
        act: ActName,
        parser_config: dict[str, Any],
    ) -> Act:
        """Register an act from its ``[Name]`` block; the body is description plus directives."""
        lines = [line for line in block.body if not is_comment(line, parser_config)]
        scope = DirectiveScope(scenario, parser_config, act)
        description = '\n'.join(extract_directives(lines, scope)).strip()
        return scenario.ensure_act(act, description or None)

    def _store_message(
        self,
        block: Block,
        scenario: ScenarioData,
        act: ActName,
        parser_config: dict[str, Any],
    ) -> None:
        act_data = scenario.ensure_act(act)
        scope = DirectiveScope(scenario, parser_config, act, index=len(act_data.messages))

        body = [line for line in block.body if not is_comment(line, parser_config)]
        body = extract_directives(body, scope)

        content = config_text(parser_config.get('join'), ' ').join(body)
        new_line_regexp = self._new_line_regexp(parser_config)
        if new_line_regexp is not None:
            content = new_line_regexp.sub('\n', content)
        content = PLACEHOLDER_REGEXP.sub(lambda match: self._store_placeholder(act_data, match), content)

        keys = get_keys(parser_config)
        act_data.messages.append({
            config_text(keys.get('role'), '') or 'role': role_name(block.head),
            config_text(keys.get('content'), '') or 'content': content,
        })

    @staticmethod
    def _new_line_regexp(parser_config: Mapping[str, Any]) -> Optional[re.Pattern]:
        """Continuation marker followed by the join string."""
        new_line = config_text(parser_config.get('new_line'), '\\')
        join = config_text(parser_config.get('join'), ' ')
        if not new_line:
            return None
        pattern = re.escape(new_line)
        if join:
            pattern += f"(?:{re.escape(join)})+"
        return re.compile(pattern)

    @staticmethod
    def _store_placeholder(act_data: Act, match: re.Match) -> str:
        """Register ``{name|default}`` on the act and rewrite it to ``{name}``."""
        parsed = split_placeholder(match.group('token'))
        if parsed is None:
            return match.group(0)

        name, default = parsed
        value = restore_type(default, check_for_array=False) if default else None
        act_data.store_placeholder(name, value)
        return '{' + name + '}'
