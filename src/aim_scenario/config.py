# aim_scenario/config.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0

from dataclasses import dataclass, field, asdict
import os
from typing import Optional, Dict, Any, List

from dotenv import load_dotenv

from .hooks import Action, Hook, HookName


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def get_env(dotenv_path: Optional[str] = None) -> Dict[str, Any]:
    if dotenv_path is not None:
        load_dotenv(dotenv_path)
    else:
        load_dotenv()

    return {
        "scenarios_dir": os.getenv("SCENARIOS_DIR", "config/scenario"),
        "full_log": _env_flag("SCENARIO_FULL_LOG"),
        "cost_only": _env_flag("SCENARIO_COST_ONLY"),
        "default_placeholder": os.getenv("SCENARIO_DEFAULT_PLACEHOLDER", None),
    }


@dataclass
class HistoryConfig:
    full_log: bool = False
    cost_only: bool = False
    default_placeholder: Optional[str] = None

    # role -> callable, or a static replacement message
    actions: Dict[str, Any] = field(default_factory=dict)
    hooks: Dict[HookName, List[Hook]] = field(default_factory=dict)

    def __post_init__(self):
        self.hooks = {HookName(stage): list(hooks) for stage, hooks in self.hooks.items()}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def update(self, **kwargs):
        for key, value in kwargs.items():
            setattr(self, key, value)

    def add_action(self, role: str, action: Action) -> None:
        self.actions[role] = action

    def add_hook(self, stage: HookName, hook: Hook) -> None:
        self.hooks.setdefault(HookName(stage), []).append(hook)

    @classmethod
    def from_env(cls, dotenv_file: Optional[str] = None) -> "HistoryConfig":
        env = get_env(dotenv_file)
        return cls(
            full_log=env["full_log"],
            cost_only=env["cost_only"],
            default_placeholder=env["default_placeholder"],
        )
