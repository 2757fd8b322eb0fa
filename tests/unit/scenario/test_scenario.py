# tests/unit/scenario/test_scenario.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Unit tests for Scenario building and config resolution."""

import pytest

from aim_scenario.models import Act, ScenarioData
from aim_scenario.scenario import Scenario, render_value


@pytest.fixture
def layered():
    """Scenario with a config key defined on every layer."""
    data = ScenarioData(
        acts={
            "default": Act(
                messages=[{"role": "user", "content": "hi"}],
                config={"a": 1, "b": 2, "messages": {"0": {"temperature": 0.1}}},
            ),
            "next": Act(messages=[{"role": "user", "content": "bye"}], config={"b": 3}),
        },
        config={"a": 0, "c": 4},
    )
    return Scenario(data)


class TestBuild:
    """Tests for building messages."""

    def test_default_act_with_context(self, colors_text):
        scenario = Scenario(colors_text)
        messages = scenario.build({"name": "Ann"})

        assert [m["sender"] for m in messages] == ["system", "system", "user"]
        assert messages[2]["content"] == "Hi, my name is Ann"

    def test_act_default_used_without_context(self, colors_text):
        messages = Scenario(colors_text).build()
        assert messages[2]["content"] == "Hi, my name is I don't want to tell you my name"

    def test_missing_value_uses_sentinel(self, colors_text):
        messages = Scenario(colors_text).build(act="Final")
        assert messages[-1]["content"] == "Let it be something from ??? area"

    def test_custom_sentinel(self, colors_text):
        scenario = Scenario(colors_text, {"default_placeholder": "<none>"})
        assert scenario.build(act="Final")[-1]["content"] == "Let it be something from <none> area"

    def test_build_does_not_mutate_compiled_data(self, colors_text):
        scenario = Scenario(colors_text)
        scenario.build({"name": "Ann"})
        assert scenario.scenario.acts["default"].messages[2]["content"] == "Hi, my name is {name}"

    def test_unknown_act_builds_nothing(self, colors_text):
        assert Scenario(colors_text).build(act="Missing") == []

    def test_build_indexed(self, layered):
        assert layered.build_indexed(act="next") == [(0, {"role": "user", "content": "bye"})]

    def test_comment_roles_are_skipped(self):
        data = ScenarioData(acts={"default": Act(messages=[
            {"role": "#note", "content": "internal"},
            {"role": "user", "content": "hi"},
        ])})
        assert Scenario(data).build_indexed() == [(1, {"role": "user", "content": "hi"})]

    def test_role_placeholders(self):
        text = "% use role_placeholders true\n\n{who}:\n    hi"
        messages = Scenario(text).build({"who": "assistant"})
        assert messages == [{"role": "assistant", "content": "hi"}]

    def test_default_act_set_by_script(self):
        scenario = Scenario("% parse keys.default_act main\n\nuser:\n    hi")

        assert scenario.default_act == "main"
        assert scenario.order == ["main"]
        assert scenario.build() == [{"role": "user", "content": "hi"}]

    def test_from_scenario_dump(self, colors_text):
        dump = Scenario(colors_text).scenario.model_dump()
        scenario = Scenario(dump)
        assert scenario.role_key == "sender"
        assert scenario.order == ["default", "Choice", "Final"]


class TestReplacePlaceholders:
    """Tests for placeholder lookup."""

    def test_nested_path(self, layered):
        assert layered.replace_placeholders("{user.name}", {"user": {"name": "Ann"}}) == "Ann"

    def test_flat_dotted_key(self, layered):
        assert layered.replace_placeholders("{user.name}", {"user.name": "Bob"}) == "Bob"

    def test_inline_default(self, layered):
        assert layered.replace_placeholders("{mood|calm}", {}) == "calm"

    def test_rendered_values(self, layered):
        text = "{flag} {items} {count}"
        context = {"flag": False, "items": ["a", "b"], "count": 3}
        assert layered.replace_placeholders(text, context) == "false a,b 3"

    def test_literal_braces_kept(self, layered):
        assert layered.replace_placeholders('{ "a": 1 }', {}) == '{ "a": 1 }'


class TestConfigResolution:
    """Tests for act config inheritance."""

    def test_inherited_config(self, layered):
        config = layered.get_act_config("next")
        assert config["a"] == 1
        assert config["b"] == 3
        assert config["c"] == 4

    def test_layering_precedence(self):
        data = ScenarioData(
            acts={"default": Act(config={"a": 2, "b": 3}), "act": Act(config={"a": 1})},
            config={"c": 4},
        )
        assert dict(Scenario(data).get_act_config("act")) == {"a": 1, "b": 3, "c": 4}

    def test_default_act_config(self, layered):
        config = layered.get_act_config()
        assert (config["a"], config["b"], config["c"]) == (1, 2, 4)

    def test_own_config_only(self, layered):
        assert layered.get_act_config("next", inherited=False) == {"b": 3}

    def test_structural_keys_not_inherited(self, layered):
        config = layered.get_act_config("next")
        assert "order" not in config
        assert "parser_overrides" not in config

    def test_unknown_act(self, layered):
        assert layered.get_act_config("missing") is None

    def test_view_writes_do_not_leak(self, layered):
        config = layered.get_act_config("next")
        config["b"] = 100
        config.maps[1]["a"] = 100

        assert layered.scenario.acts["next"].config == {"b": 3}
        assert layered.scenario.acts["default"].config["a"] == 1

    def test_message_config(self, layered):
        assert layered.get_message_config("default", 0) == {"temperature": 0.1}
        assert layered.get_message_config("default", 1) is None
        assert layered.get_message_config("next", 0) is None

    def test_inherit_configs_puts_context_first(self, layered):
        config = layered.inherit_configs({"b": 9}, "next")
        assert config["b"] == 9
        assert config["a"] == 1


class TestLookups:
    """Tests for act lookups."""

    def test_acts_map(self, layered):
        acts = layered.get_acts_map()
        assert list(acts) == ["default", "next"]
        assert isinstance(acts["next"], Act)

    def test_acts_map_messages_only(self, layered):
        assert layered.get_acts_map(messages_only=True)["next"] == [{"role": "user", "content": "bye"}]

    def test_act_placeholders(self, colors_text):
        scenario = Scenario(colors_text)
        assert scenario.get_act_placeholders("Final") == ["area"]
        assert scenario.get_act_placeholders("Missing") == []


def test_render_value():
    assert render_value(True) == "true"
    assert render_value([1, "x", False]) == "1,x,false"
    assert render_value(2.5) == "2.5"
