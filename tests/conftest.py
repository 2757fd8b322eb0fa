# tests/conftest.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""
Pytest configuration for aim-scenario tests.

Ensures the src package is importable and provides the sample scripts.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to path for local packages
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def colors_text() -> str:
    """Three-act scenario with a custom role key, comments and directives."""
    return (FIXTURES_DIR / "colors.scenario").read_text(encoding="utf-8")


@pytest.fixture
def chat_text() -> str:
    """Single-act scenario that switches the comment marker to //."""
    return (FIXTURES_DIR / "chat.scenario").read_text(encoding="utf-8")


@pytest.fixture
def colors_reference() -> dict:
    """Expected ScenarioData dump of colors.scenario."""
    return {
        "acts": {
            "default": {
                "messages": [
                    {
                        "sender": "system",
                        "content": "define constants:\nCOLORS=RED,GREEN,BLUE\nRED+GREEN=strawberry\n"
                                   "RED+BLUE=sea sunset\nGREEN+BLUE=forest",
                    },
                    {
                        "sender": "system",
                        "content": "Rules:\nYou greets the user by name and propose to choose a color from "
                                   "COLORS. Then, you take random color from COLORS and tell user the both "
                                   "colors and the result of their from GRB palette.",
                    },
                    {
                        "sender": "user",
                        "content": "Hi, my name is {name}",
                    },
                ],
                "description": None,
                "has_placeholders": True,
                "placeholders": {"name": "I don't want to tell you my name"},
                "config": {
                    "parsed_values": ["string with spaces", True, 42, " ", "\n", "\t", False, "NaN"],
                    "unused": False,
                },
            },
            "Choice": {
                "messages": [
                    {
                        "sender": "output",
                        "content": "If assistant suggests to choose just a COLOR,\n"
                                   "please choose it from red, green or blue.",
                    },
                    {
                        "sender": "user",
                        "content": "I choose random color to not use of the placeholder",
                    },
                ],
                "description": "this description will be excluded from messages\nit's a kind of a comment",
                "has_placeholders": False,
                "placeholders": {},
                "config": {},
            },
            "Final": {
                "messages": [
                    {
                        "sender": "output",
                        "content": "This output will be excluded in the runtime",
                    },
                    {
                        "sender": "system",
                        "content": "Now taking both colors, find in constants the result of their "
                                   "combination and describe the picture based on it.",
                    },
                    {
                        "sender": "user",
                        "content": "Let it be something from {area} area",
                    },
                ],
                "description": None,
                "has_placeholders": True,
                "placeholders": {"area": None},
                "config": {"loop": True, "stop_word": "exit"},
            },
        },
        "config": {
            "order": ["default", "Choice", "Final"],
            "parser_overrides": {
                "keys": {"role": "sender"},
                "unused": {"option": True},
            },
            "title": "Colors imagination",
            "version": 1,
            "inputs": {
                "colors": ["storable", "required"],
                "areas": "blank",
            },
        },
    }
