"""Convert OpenAPI identifiers to code identifiers.

  - operationId / parameter name -> camelCase  (to_camel)
  - schema / title / owner name  -> PascalCase (to_pascal)
  - enum value                   -> CONSTANT   (to_constant)

Examples:
  snake_case_name  -> snakeCaseName
  kebab-case-name  -> kebabCaseName
  x-trace-id       -> xTraceId
  getUserById      -> getUserById
  pet store        -> PetStore      (to_pascal)
  in-progress      -> IN_PROGRESS   (to_constant)
"""

from __future__ import annotations

import re

# Anything that is not a letter or digit separates words
_SEPARATORS = re.compile(r"[\W_]+")


def _split_words(name: str) -> list[str]:
    """Split an identifier on separators, dropping empty segments."""
    return [part for part in _SEPARATORS.split(name) if part]


def _upper_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def to_camel(name: str) -> str:
    """Convert a snake_case or kebab-case identifier to camelCase.

    The first segment gets a lower-case initial, every following segment an
    upper-case initial; the rest of each segment is left alone, so input that
    is already camelCase comes back unchanged.
    """
    words = _split_words(name)
    if not words:
        return ""
    first = words[0][:1].lower() + words[0][1:]
    return first + "".join(_upper_first(w) for w in words[1:])


def to_pascal(name: str) -> str:
    """Convert an identifier or title to PascalCase."""
    return "".join(_upper_first(w) for w in _split_words(name))


def _camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def to_constant(value: str) -> str:
    """Convert an enum value to an UPPER_SNAKE constant name."""
    words = _split_words(_camel_to_snake(value))
    name = "_".join(words).upper()
    if not name:
        return "EMPTY"
    if name[0].isdigit():
        return f"V_{name}"
    return name
