# aim_scenario/history.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""HistoryManager - drives a scenario act by act and keeps the session state.

Lifecycle:
    manager = HistoryManager().init(script)      # idle, queue = full order
    manager.next({'name': 'Ann'})                # builds first act, appends to history
    manager.answer({'role': 'assistant', ...})   # external reply
    manager.next()                               # ... until it returns None
    snapshot = manager.save()                    # plain dicts/lists
    HistoryManager().load(snapshot)              # resume elsewhere
"""

import copy
import logging
from typing import Any, Mapping, Optional, Union

from .config import HistoryConfig
from .hooks import Action, Hook, HookName
from .models import (
    Act,
    ActName,
    CostLedger,
    LogEntry,
    Message,
    ScenarioData,
    ScenarioState,
    TokenUsage,
)
from .scenario import Scenario
from .utils import deep_get, merge_contexts

logger = logging.getLogger(__name__)

ScenarioSource = Union[str, ScenarioData, Mapping[str, Any], Scenario]


class HistoryManager:
    """Owns one scenario session: act pointer, queue, context, history, log and cost.

    Not thread-safe; callers serialize access to an instance.
    """

    def __init__(self, config: Optional[HistoryConfig] = None, stash: Optional[dict[str, Any]] = None):
        """Initialize manager.

        Args:
            config: Logging/cost switches, role actions and lifecycle hooks
            stash: Free-form storage for the caller
        """
        self.config = config or HistoryConfig()
        self.stash: dict[str, Any] = stash if stash is not None else {}

        self.state: Optional[ScenarioState] = None
        self.scenario: Optional[Scenario] = None

    # --- Registration ---

    def add_action(self, role: str, action: Action) -> "HistoryManager":
        """Register a callback that rewrites or drops built messages of ``role``."""
        self.config.add_action(role, action)
        return self

    def add_hook(self, stage: Union[HookName, str], hook: Hook) -> "HistoryManager":
        self.config.add_hook(HookName(stage), hook)
        return self

    # --- Session lifecycle ---

    def init(self, scenario: ScenarioSource, parser_config: Optional[Mapping[str, Any]] = None) -> "HistoryManager":
        """Start a fresh session.

        A ready-made Scenario is used as it is: ``parser_config`` and the
        ``default_placeholder`` of the manager config only apply when the
        Scenario is built here.

        Args:
            scenario: Script text, compiled ScenarioData (or its dump), or a Scenario
            parser_config: Parser config used when ``scenario`` is text

        Returns:
            self
        """
        if isinstance(scenario, Scenario):
            self.scenario = scenario
        else:
            self.scenario = Scenario(scenario, self._runtime_config(parser_config))

        self.state = ScenarioState.initial(self.scenario.scenario)
        if self.config.full_log:
            self.state.log = []
        if self.config.cost_only:
            self.state.cost = CostLedger()

        logger.info(f"Initialized scenario session with acts {self.state.queue}")
        self.state.history = self.run_hooks(HookName.AFTER_INIT, self.state.history)
        return self

    def load(self, snapshot: Union[ScenarioState, Mapping[str, Any]]) -> "HistoryManager":
        """Resume a session from a snapshot produced by ``save``.

        Raises:
            pydantic.ValidationError: If the snapshot structure is invalid
        """
        state = snapshot if isinstance(snapshot, ScenarioState) else ScenarioState.model_validate(snapshot)
        self.scenario = Scenario(state.scenario, self._runtime_config())
        self.state = state

        logger.info(f"Loaded scenario session at act '{state.act}' with {len(state.history)} messages")
        self.state.history = self.run_hooks(HookName.AFTER_LOAD, self.state.history)
        return self

    def save(self) -> Optional[dict[str, Any]]:
        """Snapshot the session as plain dicts and lists."""
        if self.state is None:
            return None
        self.state.history = self.run_hooks(HookName.BEFORE_SAVE, self.state.history)
        return self.state.model_dump(mode="json")

    def clear_context(self) -> "HistoryManager":
        """Forget the merged context; chain with ``execute``."""
        if self.state is not None:
            self.run_hooks(HookName.BEFORE_CLEAR_CONTEXT, self.state.contexts)
            self.state.context = {}
        return self

    def end(self) -> list[Message]:
        """Abandon the remaining acts and return the final history."""
        if self.state is None:
            return []
        self.state.act = None
        self.state.queue = []
        return list(self.state.history)

    # --- Execution ---

    def execute(
        self,
        context: Optional[Union[Mapping[str, Any], ActName]] = None,
        act: Optional[ActName] = None,
    ) -> Optional[list[Message]]:
        """Build an act against the merged context and append it to history.

        Args:
            context: New context values (or the act name when passed alone)
            act: Act to run; defaults to the current act

        Returns:
            The produced messages, or None when there is no session or the
            act doesn't exist
        """
        if self.state is None or self.scenario is None:
            return None
        if isinstance(context, str):
            act, context = context, None
        context = dict(context or {})

        act = act or self.current_act
        if act is None or act not in self.state.scenario.acts:
            logger.debug(f"Nothing to execute for act '{act}'")
            return None

        self.state.act = act
        self.state.context = merge_contexts(self.state.context, context)
        self.state.contexts.append(context)

        messages = self._build_messages()
        self.state.history.extend(copy.deepcopy(messages))
        return messages

    def next(self, context: Optional[Mapping[str, Any]] = None, return_history: bool = False) -> Optional[list[Message]]:
        """Advance to the next queued act and execute it.

        Returns:
            The act's messages (or the full history with ``return_history``);
            None once the queue is exhausted
        """
        if self.state is None or self.scenario is None:
            return None

        self.state.history = self.run_hooks(HookName.BEFORE_NEXT, self.state.history)

        self.state.act = self.state.queue.pop(0) if self.state.queue else None
        if self.state.act is None:
            return None

        messages = self.execute(context or {}, self.state.act)
        if messages is None:
            return None
        if return_history:
            return list(self.state.history)
        return self.run_hooks(HookName.NEXT_RETURNS, messages)

    def answer(self, message: Message) -> None:
        """Record an external reply, bypassing actions and hooks."""
        if self.state is not None:
            self.state.history.append(message)

    def push_message(self, messages: Union[Message, list[Message]]) -> None:
        if self.state is None:
            return
        if not isinstance(messages, list):
            messages = [messages]
        self.state.history.extend(self.run_hooks(HookName.BEFORE_PUSH_MESSAGE, messages))

    def push_context(self, contexts: Union[Mapping[str, Any], list[Mapping[str, Any]]]) -> None:
        if self.state is None:
            return
        if not isinstance(contexts, list):
            contexts = [contexts]
        contexts = [dict(context) for context in contexts]
        self.state.contexts.extend(self.run_hooks(HookName.BEFORE_PUSH_CONTEXT, contexts))

    def get_messages(self, act: Optional[ActName] = None) -> Optional[list[Message]]:
        """History as seen through the ``before_get_messages`` hooks."""
        if self.state is None or self.scenario is None or not (act or self.current_act):
            return None
        return self.run_hooks(HookName.BEFORE_GET_MESSAGES, self.state.history)

    def get_contexts(self) -> Optional[list[dict[str, Any]]]:
        if self.state is None:
            return None
        return self.run_hooks(HookName.BEFORE_GET_CONTEXTS, self.state.contexts)

    # --- Cost and log ---

    def add_cost(self, cost: Union[TokenUsage, Mapping[str, Any]]) -> Optional[TokenUsage]:
        """Record token usage of one request.

        Returns:
            Running totals, or None when cost tracking is off
        """
        if self.state is None or not self.config.cost_only:
            return None
        if self.state.cost is None:
            self.state.cost = CostLedger()

        usage = cost if isinstance(cost, TokenUsage) else TokenUsage.model_validate(dict(cost))
        return self.state.cost.add(usage)

    def log(self, request: Any, response: Any, **rest: Any) -> None:
        if self.state is None or not self.config.full_log:
            return
        if self.state.log is None:
            self.state.log = []
        self.state.log.append(LogEntry(request=request, response=response, **rest))

    # --- Navigation ---

    @property
    def current_act(self) -> Optional[ActName]:
        """Current act, else the first act in order, else the default act."""
        if self.state is not None:
            if self.state.act is not None:
                return self.state.act
            if self.state.scenario.order:
                return self.state.scenario.order[0]
        return self.scenario.default_act if self.scenario else None

    @property
    def current_act_data(self) -> Optional[Act]:
        return self.get_act_data(self.current_act)

    def get_queue(self) -> list[ActName]:
        """Acts after the current one in scenario order."""
        act = self.current_act
        if act is None or self.state is None:
            return []
        order = self.state.scenario.order
        if act not in order:
            return []
        return order[order.index(act) + 1:]

    def _read_queue(self) -> list[ActName]:
        if self.state is None:
            return []
        return self.run_hooks(HookName.GET_ACT_QUEUE, list(self.state.queue))

    @property
    def has_next(self) -> bool:
        return len(self._read_queue()) > 0

    @property
    def next_act(self) -> Optional[ActName]:
        queue = self._read_queue()
        return queue[0] if queue else None

    @property
    def next_act_data(self) -> Optional[Act]:
        return self.get_act_data(self.next_act)

    def get_act_data(self, act: Optional[ActName]) -> Optional[Act]:
        if act is None or self.state is None:
            return None
        return self.state.scenario.get_act(act)

    def get_config_value(self, key: str, act: Optional[ActName] = None) -> Any:
        """Dotted lookup in the inherited config of ``act`` (current act by default).

        A bare empty value reads as True; a missing one as None.
        """
        if self.scenario is None:
            return None
        config = self.scenario.get_act_config(act or self.current_act)
        if config is None:
            return None
        value = deep_get(config, key)
        return True if value == '' else value

    def print_history(self, skip_roles: Union[str, list[str], tuple[str, ...]] = ()) -> Optional[str]:
        """Render history as ``role:`` blocks with tab-indented content."""
        if isinstance(skip_roles, str):
            skip_roles = [skip_roles]
        if self.state is None or self.scenario is None:
            return None

        role_key, content_key = self.scenario.role_key, self.scenario.content_key
        history = self.run_hooks(HookName.BEFORE_PRINT_HISTORY, self.state.history)

        blocks = []
        for message in history:
            role = message.get(role_key)
            if role in skip_roles:
                continue
            content = str(message.get(content_key, '')).replace('\n', '\n\t')
            blocks.append(f"{role}:\n\t{content}")
        return '\n\n'.join(blocks)

    # --- Internals ---

    def run_hooks(self, stage: HookName, value: Optional[list] = None) -> list:
        """Fold ``value`` through the hooks registered for ``stage``.

        Each hook receives (value, state, scenario data, manager); returning
        None keeps the current value.
        """
        value = value if value is not None else []
        for hook in self.config.hooks.get(HookName(stage), []):
            if self.state is None or self.scenario is None:
                break
            result = hook(value, self.state, self.state.scenario, self)
            if result is not None:
                value = result
        return value

    def _runtime_config(self, parser_config: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        config = dict(parser_config or {})
        if self.config.default_placeholder is not None:
            config.setdefault('default_placeholder', self.config.default_placeholder)
        return config

    def _build_messages(self) -> list[Message]:
        """Build the current act and pass each message through its role action."""
        act = self.state.act
        role_key, content_key = self.scenario.role_key, self.scenario.content_key

        messages: list[Message] = []
        for index, message in self.scenario.build_indexed(self.state.context, act):
            action = self.config.actions.get(message.get(role_key))
            if action is None:
                result = message
            elif callable(action):
                result = action(
                    message.get(content_key, ''),
                    self.scenario.get_message_config(act, index),
                    self.state.context,
                    act,
                    self.state,
                )
            else:
                result = copy.deepcopy(action)

            if not result:
                continue
            if isinstance(result, list):
                messages.extend(item for item in result if item)
            else:
                messages.append(result)

        return self.run_hooks(HookName.AFTER_BUILD, messages)
