# aim_scenario/coercion.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Type coercion for directive values.

Directive values arrive as raw strings. ``restore_type`` turns them into the
primitive kinds a scenario config can hold, trying each interpretation in a
fixed order:

1. array (top-level commas, double-quoted commas do not split)
2. quoted literal (``"..."`` or ``'...'``, kept as a string)
3. escape literal (``\\n``, ``\\t``, ``\\s``)
4. boolean (``true`` / ``false``)
5. number
6. the original string
"""

import re
from typing import Optional, Union

ConfigScalar = Union[str, int, float, bool]
ConfigValue = Union[ConfigScalar, list[ConfigScalar]]

# A comma followed by an even number of double quotes up to the end of the string
COMMA_REGEXP = re.compile(r',(?=(?:[^"]|"[^"]*")*$)')
NUMBER_REGEXP = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$')

SPECIAL_VALUES = {
    '\\n': '\n',
    '\\t': '\t',
    '\\s': ' ',
}


def unquote(value: str) -> Optional[str]:
    """Return the inner text of a value wrapped in matching quotes, else None."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return None


def try_special(value: str) -> Optional[str]:
    return SPECIAL_VALUES.get(value)


def try_boolean(value: str) -> Optional[bool]:
    if value == 'true':
        return True
    if value == 'false':
        return False
    return None


def try_number(value: str) -> Optional[Union[int, float]]:
    """Parse a decimal literal.

    Literals without a fraction or exponent become ints so that ``42`` stays
    ``42`` when rendered back into text.
    """
    if not NUMBER_REGEXP.match(value):
        return None
    if any(ch in value for ch in '.eE'):
        return float(value)
    return int(value)


def try_array(value: str) -> Optional[list[ConfigScalar]]:
    if not COMMA_REGEXP.search(value):
        return None

    items = (restore_type(item.strip(), check_for_array=False) for item in COMMA_REGEXP.split(value))
    return [item for item in items if item != '']


def restore_type(value: str, check_for_array: bool = True) -> ConfigValue:
    """Coerce a raw directive value into a typed config value.

    Never raises: anything that is not recognised comes back unchanged.

    Args:
        value: Trimmed raw value
        check_for_array: Whether comma-separated values become lists

    Returns:
        A string, number, boolean, or a list of those
    """
    if check_for_array:
        array = try_array(value)
        if array is not None:
            return array

    quoted = unquote(value)
    if quoted is not None:
        return quoted

    for attempt in (try_special, try_boolean, try_number):
        result = attempt(value)
        if result is not None:
            return result

    return value
