# tests/unit/scenario/test_directives.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Unit tests for directive extraction."""

import pytest

from aim_scenario.directives import DirectiveScope, extract_directives, store_directive
from aim_scenario.models import ScenarioData


@pytest.fixture
def scope():
    """Act-level scope on an empty scenario."""
    return DirectiveScope(ScenarioData(), {"directive": "%"}, "main")


class TestStoreDirective:
    """Tests for the four directive forms."""

    def test_parse_updates_parser_and_overrides(self, scope):
        assert store_directive("parse comment //", scope) == ""
        assert scope.parser_config["comment"] == "//"
        assert scope.scenario.parser_overrides == {"comment": "//"}

    def test_use_updates_scenario(self, scope):
        store_directive("use title Colors imagination", scope)
        store_directive("use inputs.colors storable, required", scope)

        assert scope.scenario.config["title"] == "Colors imagination"
        assert scope.scenario.config["inputs"] == {"colors": ["storable", "required"]}

    def test_assignment_targets(self, scope):
        """Test assignment prefixes pick the config layer."""
        store_directive("stop_word = exit", scope)
        store_directive("act.retries=3", scope)
        store_directive("scenario.version=2", scope)
        store_directive("parser.join=_", scope)

        assert scope.act_config() == {"stop_word": "exit", "retries": 3}
        assert scope.scenario.config["version"] == 2
        assert scope.parser_config["join"] == "_"
        assert scope.scenario.parser_overrides == {"join": "_"}

    def test_flag(self, scope):
        store_directive("loop", scope)
        assert scope.act_config() == {"loop": True}

    def test_message_scope(self):
        """Test assignments and flags inside a message body are indexed."""
        scope = DirectiveScope(ScenarioData(), {}, "main", index=2)
        store_directive("temperature=0.2", scope)
        store_directive("sample", scope)

        assert scope.act_config() == {"messages": {"2": {"temperature": 0.2, "sample": True}}}

    def test_order_is_reserved(self, scope):
        """Test the act order can't be overwritten from a script."""
        scope.scenario.ensure_act("main")
        store_directive("use order other", scope)
        store_directive("scenario.order=x,y", scope)

        assert scope.scenario.order == ["main"]

    def test_unrecognised_directive_is_dropped(self, scope):
        assert store_directive("not a directive form", scope) == ""
        assert scope.scenario.acts == {}
        assert scope.scenario.config == {"order": []}


class TestExtractDirectives:
    """Tests for extracting directive lines."""

    def test_returns_remaining_lines(self, scope):
        lines = ["% loop", "keep me", "  % stop_word=exit", "and me"]
        assert extract_directives(lines, scope) == ["keep me", "and me"]
        assert scope.act_config() == {"loop": True, "stop_word": "exit"}

    def test_marker_change_applies_to_following_lines(self, scope):
        lines = ["% parse directive @", "@ loop", "% kept"]
        assert extract_directives(lines, scope) == ["% kept"]
        assert scope.act_config() == {"loop": True}
