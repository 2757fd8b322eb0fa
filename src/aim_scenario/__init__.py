# aim_scenario/__init__.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""
Scenario Module - scripted multi-act LLM dialogues.

Compiles the plain-text scenario language into ScenarioData and plays it
act by act with placeholder substitution, role actions, lifecycle hooks and
an accumulated history.
"""

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
from .hooks import HookName
from .coercion import restore_type
from .parser import ScenarioParser
from .scenario import Scenario
from .history import HistoryManager
from .config import HistoryConfig, get_env
from .loader import load_scenario, dump_snapshot, load_snapshot

__all__ = [
    # Models
    "Act",
    "ActName",
    "CostLedger",
    "LogEntry",
    "Message",
    "ScenarioData",
    "ScenarioState",
    "TokenUsage",
    # Compiler and runtime
    "HookName",
    "restore_type",
    "ScenarioParser",
    "Scenario",
    "HistoryManager",
    # Config and I/O
    "HistoryConfig",
    "get_env",
    "load_scenario",
    "dump_snapshot",
    "load_snapshot",
]
