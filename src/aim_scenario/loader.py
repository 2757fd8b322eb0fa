# aim_scenario/loader.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Scenario file loading and snapshot encoding."""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .config import get_env
from .models import ScenarioData
from .parser import ScenarioParser

logger = logging.getLogger(__name__)

SCENARIO_SUFFIX = ".scenario"


def load_scenario(
    name: str,
    scenarios_dir: Optional[Union[str, Path]] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> ScenarioData:
    """
    Load and compile a scenario script.

    Args:
        name: Name of the scenario (without .scenario extension)
        scenarios_dir: Directory containing scenario files (defaults to SCENARIOS_DIR)
        config: Parser config overrides

    Returns:
        Compiled ScenarioData

    Raises:
        FileNotFoundError: If scenario file doesn't exist
    """
    if scenarios_dir is None:
        scenarios_dir = get_env()["scenarios_dir"]

    scenario_path = Path(scenarios_dir) / f"{name}{SCENARIO_SUFFIX}"
    scenario = ScenarioParser.from_file(scenario_path, config).scenario

    logger.info(f"Loaded scenario '{name}' with acts {scenario.order}")
    return scenario


def dump_snapshot(snapshot: Mapping[str, Any]) -> str:
    """Encode a ``HistoryManager.save()`` snapshot as YAML text."""
    return yaml.safe_dump(dict(snapshot), sort_keys=False, allow_unicode=True)


def load_snapshot(text: str) -> dict[str, Any]:
    """
    Decode YAML text produced by ``dump_snapshot``.

    Raises:
        yaml.YAMLError: If YAML is invalid
        ValueError: If the document is not a mapping
    """
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError("Snapshot must be a YAML mapping")
    return data
