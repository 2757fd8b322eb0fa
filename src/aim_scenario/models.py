# aim_scenario/models.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Pydantic models for compiled scenarios and runtime session state."""

from datetime import datetime, timezone
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

ActName = str
Message = dict[str, Any]
"""A message dict. Key names come from the parser config (``keys.role``, ``keys.content``)."""


class Act(BaseModel):
    """A named stage of the scenario.

    Attributes:
        messages: Compiled messages, placeholders rewritten to ``{name}``
        description: Free text found in the act's ``[Name]`` block
        has_placeholders: Whether any message references a placeholder
        placeholders: Placeholder name -> default value (or None)
        config: Act-local config; per-message overrides live under ``messages.<index>``
    """
    messages: list[Message] = Field(default_factory=list)
    description: Optional[str] = None
    has_placeholders: bool = False
    placeholders: dict[str, Any] = Field(default_factory=dict)
    config: dict[str, Any] = Field(default_factory=dict)

    def store_placeholder(self, name: str, default: Any = None) -> None:
        """Register a placeholder, keeping the first default supplied for it."""
        if self.placeholders.get(name) is None:
            self.placeholders[name] = default
        self.has_placeholders = True


class ScenarioData(BaseModel):
    """Compiled scenario: acts keyed by name plus scenario-wide config.

    ``config["order"]`` lists act names in first-seen order and always equals
    the key set of ``acts``. Acts must be registered through ``ensure_act``.
    """
    acts: dict[ActName, Act] = Field(default_factory=dict)
    config: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_order(self) -> "ScenarioData":
        """Ensure ``config.order`` exists and lists every act exactly once."""
        order = list(dict.fromkeys(self.config.get('order') or []))
        order = [act for act in order if act in self.acts]
        order += [act for act in self.acts if act not in order]
        self.config['order'] = order
        return self

    @property
    def order(self) -> list[ActName]:
        return self.config['order']

    @property
    def parser_overrides(self) -> dict[str, Any]:
        overrides = self.config.get('parser_overrides')
        return overrides if isinstance(overrides, dict) else {}

    def ensure_act(self, name: ActName, description: Optional[str] = None) -> Act:
        """Return the act, creating and registering it on first reference."""
        act = self.acts.get(name)
        if act is None:
            act = Act()
            self.acts[name] = act
            self.order.append(name)
        if description and not act.description:
            act.description = description
        return act

    def get_act(self, name: Optional[ActName]) -> Optional[Act]:
        if name is None:
            return None
        return self.acts.get(name)


class TokenUsage(BaseModel):
    """Token counts for one LLM request. Any extra keys of the record are kept."""
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CostLedger(BaseModel):
    """Append-only list of token usage records with running totals."""
    requests: list[TokenUsage] = Field(default_factory=list)
    total_tokens: TokenUsage = Field(default_factory=TokenUsage)

    def add(self, usage: TokenUsage) -> TokenUsage:
        self.requests.append(usage)
        self.total_tokens.prompt_tokens += usage.prompt_tokens
        self.total_tokens.completion_tokens += usage.completion_tokens
        self.total_tokens.total_tokens += usage.total_tokens
        return self.total_tokens


class LogEntry(BaseModel):
    """One request/response exchange recorded by the full log."""
    model_config = ConfigDict(extra="allow")

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request: Any = None
    response: Any = None

    @field_serializer('timestamp')
    def serialize_timestamp(self, dt: datetime, _info: Any) -> str:
        """Serialize datetime to ISO format string."""
        return dt.isoformat()


class ScenarioState(BaseModel):
    """Live session state. ``HistoryManager.save`` dumps it to plain dicts and lists.

    Attributes:
        scenario: The compiled scenario being played
        act: Current act, None before the first act and after the last
        queue: Act names not visited yet
        history: Every message produced or answered so far
        contexts: Each context passed to ``execute``, in call order
        context: All contexts merged together
        log: Request/response log, present when full logging is enabled
        cost: Token ledger, present when cost tracking is enabled
    """
    scenario: ScenarioData
    act: Optional[ActName] = None
    queue: list[ActName] = Field(default_factory=list)
    history: list[Message] = Field(default_factory=list)
    contexts: list[dict[str, Any]] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)
    log: Optional[list[LogEntry]] = None
    cost: Optional[CostLedger] = None

    @classmethod
    def initial(cls, scenario: ScenarioData) -> "ScenarioState":
        """Create an idle state with the full act order queued."""
        return cls(scenario=scenario, queue=list(scenario.order))
