# aim_scenario/lexer.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Block lexer: script text -> blocks -> (head, body) lines."""

import re
from dataclasses import dataclass, field
from typing import Optional

ACT_HEAD_REGEXP = re.compile(r'^\[(?P<name>.*)\]$')
ROLE_SUFFIX_REGEXP = re.compile(r':\s*$')
PLACEHOLDER_REGEXP = re.compile(r'\{(?P<token>[^{}]+?)\}')
PLACEHOLDER_NAME_REGEXP = re.compile(r'^[\w.:-]+$')
PLACEHOLDER_DEFAULT_SPLITTER = re.compile(r'\s*\|\s*')


@dataclass
class Block:
    """A blank-line separated chunk of the script.

    Every line is trimmed. ``head`` is the first line, ``body`` the rest.
    """
    head: str
    body: list[str] = field(default_factory=list)

    @property
    def lines(self) -> list[str]:
        return [self.head, *self.body]

    @classmethod
    def from_lines(cls, lines: list[str]) -> Optional["Block"]:
        if not lines:
            return None
        return cls(head=lines[0], body=list(lines[1:]))


def normalize(text: str) -> str:
    """Drop carriage returns and surrounding whitespace."""
    return text.replace('\r', '').strip()


def split_blocks(text: str) -> list[Block]:
    """Split text on blank lines into blocks of trimmed lines."""
    blocks: list[Block] = []
    current: list[str] = []

    for raw_line in normalize(text).split('\n'):
        line = raw_line.strip()
        if line:
            current.append(line)
        elif current:
            blocks.append(Block.from_lines(current))
            current = []

    if current:
        blocks.append(Block.from_lines(current))

    return blocks


def is_act_head(head: str) -> bool:
    return ACT_HEAD_REGEXP.match(head) is not None


def act_name(head: str, default_act: str) -> str:
    """Inner text of an ``[Act]`` head, or the default act name when empty."""
    match = ACT_HEAD_REGEXP.match(head)
    name = match.group('name').strip() if match else ''
    return name or default_act


def role_name(head: str) -> str:
    """A message head with its trailing colon removed."""
    return ROLE_SUFFIX_REGEXP.sub('', head).strip()


def split_placeholder(token: str) -> Optional[tuple[str, Optional[str]]]:
    """Split the inside of ``{name|default}`` into (name, default).

    Returns None when the name is not a placeholder name, so literal braces
    such as inline JSON are left alone.
    """
    name, *defaults = PLACEHOLDER_DEFAULT_SPLITTER.split(token)
    name = name.strip()
    if not PLACEHOLDER_NAME_REGEXP.match(name):
        return None
    default = ' '.join(defaults).strip()
    return name, (default if defaults else None)
