# aim_scenario/hooks.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Lifecycle hook points and callback signatures for HistoryManager."""

from enum import Enum
from typing import Any, Callable, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .history import HistoryManager
    from .models import Message, ScenarioData, ScenarioState


class HookName(str, Enum):
    """Named extension points. Each is a linear reducer over a list value."""
    AFTER_INIT = "after_init"
    AFTER_LOAD = "after_load"
    BEFORE_SAVE = "before_save"
    BEFORE_CLEAR_CONTEXT = "before_clear_context"
    AFTER_BUILD = "after_build"
    BEFORE_NEXT = "before_next"
    NEXT_RETURNS = "next_returns"
    BEFORE_PRINT_HISTORY = "before_print_history"
    BEFORE_PUSH_MESSAGE = "before_push_message"
    BEFORE_PUSH_CONTEXT = "before_push_context"
    BEFORE_GET_MESSAGES = "before_get_messages"
    BEFORE_GET_CONTEXTS = "before_get_contexts"
    GET_ACT_QUEUE = "get_act_queue"


# (value, state, scenario_data, manager) -> replacement value or None
Hook = Callable[[list, "ScenarioState", "ScenarioData", "HistoryManager"], Optional[list]]

# (content, message_config, context, act, state) -> message, messages, or falsy to drop
ActionResult = Union["Message", list["Message"], None]
Action = Callable[[str, Optional[dict[str, Any]], dict[str, Any], str, "ScenarioState"], ActionResult]
