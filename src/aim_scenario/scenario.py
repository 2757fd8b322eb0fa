# aim_scenario/scenario.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Scenario - builds concrete messages from compiled ScenarioData."""

import logging
from collections import ChainMap
from typing import Any, Mapping, Optional, Union

from .lexer import PLACEHOLDER_REGEXP, split_placeholder
from .models import Act, ActName, Message, ScenarioData
from .parser import ScenarioParser, config_text
from .utils import deep_get, inherit, merge_configs

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = '???'

# Structural scenario keys that are not settings and stay out of act config views
STRUCTURAL_KEYS = ('order', 'parser_overrides')


def render_value(value: Any) -> str:
    """Render a context or default value as message text."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple)):
        return ','.join(render_value(item) for item in value)
    return str(value)


class Scenario:
    """Runtime view over a compiled scenario.

    Never mutates the compiled data: ``build`` returns fresh message dicts
    and config views are built over copies.
    """

    def __init__(
        self,
        scenario: Union[ScenarioData, Mapping[str, Any], str],
        config: Optional[Mapping[str, Any]] = None,
    ):
        """Initialize from script text, compiled data, or a dump of compiled data.

        Args:
            scenario: Scenario text or ScenarioData (or its dict dump)
            config: Parser config used when ``scenario`` is text; may also
                carry ``default_placeholder``
        """
        config = dict(config or {})
        self.config: dict[str, Any] = merge_configs(ScenarioParser.default_config, config)

        if isinstance(scenario, str):
            self.scenario = ScenarioParser(scenario, config).scenario
        elif isinstance(scenario, ScenarioData):
            self.scenario = scenario
        else:
            self.scenario = ScenarioData.model_validate(scenario)

        overrides = self.scenario.parser_overrides
        self.default_placeholder: str = config_text(
            config.get('default_placeholder', overrides.get('default_placeholder')),
            DEFAULT_PLACEHOLDER,
        )

    # --- Parser settings: parser_overrides, then the config given here ---

    def _override(self, path: str, default: str) -> str:
        value = deep_get(self.scenario.parser_overrides, path)
        if value is None:
            value = deep_get(self.config, path)
        return config_text(value, default) or default

    @property
    def default_act(self) -> ActName:
        return self._override('keys.default_act', 'default')

    @property
    def role_key(self) -> str:
        return self._override('keys.role', 'role')

    @property
    def content_key(self) -> str:
        return self._override('keys.content', 'content')

    @property
    def comment(self) -> str:
        return self._override('comment', '#')

    @property
    def order(self) -> list[ActName]:
        return self.scenario.order

    # --- Building ---

    def build(self, context: Optional[Mapping[str, Any]] = None, act: Optional[ActName] = None) -> list[Message]:
        """Build the act's messages with placeholders substituted.

        Args:
            context: Placeholder values, dot-path addressable
            act: Act to build (default act when omitted)

        Returns:
            New message dicts; empty if the act doesn't exist
        """
        return [message for _, message in self.build_indexed(context, act)]

    def build_indexed(
        self,
        context: Optional[Mapping[str, Any]] = None,
        act: Optional[ActName] = None,
    ) -> list[tuple[int, Message]]:
        """Like ``build`` but pairs each message with its index in the compiled act."""
        act = act or self.default_act
        act_data = self.scenario.get_act(act)
        if act_data is None:
            logger.debug(f"Cannot build unknown act '{act}'")
            return []

        context = context or {}
        role_key, content_key = self.role_key, self.content_key
        comment = self.comment
        role_placeholders = bool(self.scenario.config.get('role_placeholders'))

        built = []
        for index, message in enumerate(act_data.messages):
            role = str(message.get(role_key, ''))
            if comment and role.startswith(comment):
                continue

            message = dict(message)
            if role_placeholders:
                message[role_key] = self.replace_placeholders(role, context, act)
            message[content_key] = self.replace_placeholders(str(message.get(content_key, '')), context, act)
            built.append((index, message))

        return built

    def replace_placeholders(self, content: str, context: Mapping[str, Any], act: Optional[ActName] = None) -> str:
        """Substitute ``{name}`` tokens: context, then act default, then the sentinel."""
        act_data = self.scenario.get_act(act or self.default_act)
        placeholders = act_data.placeholders if act_data else {}

        def substitute(match) -> str:
            parsed = split_placeholder(match.group('token'))
            if parsed is None:
                return match.group(0)

            name, inline_default = parsed
            value = deep_get(context, name)
            if value is None and '.' in name:
                value = context.get(name)
            if value is None:
                value = placeholders.get(name)
            if value is None and inline_default:
                value = inline_default
            if value is None:
                value = self.default_placeholder
            return render_value(value)

        return PLACEHOLDER_REGEXP.sub(substitute, content)

    # --- Config resolution ---

    def get_configs_chain(self, act: Optional[ActName] = None) -> list[dict[str, Any]]:
        """Config layers from most to least specific: act, default act, scenario."""
        scenario_layer = {
            key: value for key, value in self.scenario.config.items()
            if key not in STRUCTURAL_KEYS
        }
        chain = []
        if act is not None and act != self.default_act:
            chain.append(self.scenario.acts[act].config)
        default_act = self.scenario.get_act(self.default_act)
        if default_act is not None:
            chain.append(default_act.config)
        chain.append(scenario_layer)
        return chain

    def get_act_config(self, act: Optional[ActName] = None, inherited: bool = True) -> Optional[Mapping[str, Any]]:
        """Resolve an act's config.

        Args:
            act: Act name, None for the default act
            inherited: Layer default-act and scenario config underneath

        Returns:
            The act's own config when ``inherited`` is False, otherwise a
            ChainMap over copies of the layers; None for an unknown act
        """
        if act is not None and act not in self.scenario.acts:
            logger.debug(f"No config for unknown act '{act}'")
            return None

        chain = self.get_configs_chain(act)
        if not inherited:
            return chain[0]
        return inherit(*chain)

    def get_message_config(self, act: ActName, index: int) -> Optional[dict[str, Any]]:
        """The ``messages.<index>`` overrides of an act, if any."""
        act_data = self.scenario.get_act(act)
        if act_data is None:
            return None
        messages = act_data.config.get('messages')
        if not isinstance(messages, dict):
            return None
        config = messages.get(str(index))
        return config if isinstance(config, dict) else None

    def inherit_configs(self, context: Optional[Mapping[str, Any]] = None, act: Optional[ActName] = None) -> ChainMap:
        """Context layered over the act's config chain."""
        if act is not None and act not in self.scenario.acts:
            act = None
        return inherit(context or {}, *self.get_configs_chain(act))

    # --- Lookups ---

    def get_act(self, act: Optional[ActName]) -> Optional[Act]:
        return self.scenario.get_act(act)

    def get_act_placeholders(self, act: ActName) -> list[str]:
        act_data = self.scenario.get_act(act)
        return list(act_data.placeholders) if act_data else []

    def get_acts_map(self, messages_only: bool = False) -> dict[ActName, Union[Act, list[Message]]]:
        """Acts (or just their messages) keyed by name, in scenario order."""
        if messages_only:
            return {act: self.scenario.acts[act].messages for act in self.order}
        return {act: self.scenario.acts[act] for act in self.order}
