"""Convert HTTP method + path (or an operationId) to MCP tool names.

Pattern: {Prefix}{Resource}
  - GET collection       -> Get{Plural}
  - GET collection/{id}  -> Get{Singular}ById
  - POST collection      -> Create{Singular}
  - PUT/PATCH col/{id}   -> Update{Singular}
  - DELETE col/{id}      -> Delete{Singular}

Examples:
  GET    /users                 -> GetUsers
  GET    /users/{id}            -> GetUserById
  POST   /users                 -> CreateUser
  DELETE /users/{userId}        -> DeleteUser
  GET    /user-profiles         -> GetUserprofiles
  GET    /                      -> GetResources
  operationId "createPet"       -> CreatePet

Names are always valid Python identifiers, but two endpoints can still
produce the same name. assign_unique_names() resolves that over the
ordered endpoint sequence.
"""

from __future__ import annotations

import keyword
import re
from collections.abc import Iterable

import inflect

# Standard HTTP method to prefix mapping
_METHOD_PREFIXES: dict[str, str] = {
    "get": "Get",
    "post": "Create",
    "put": "Update",
    "patch": "Update",
    "delete": "Delete",
}

_OPERATION_ID = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
# Trailing lower-case word of a PascalCase name ("UserProfiles" -> "Profiles")
_LAST_WORD = re.compile(r"[A-Z]?[a-z]+$")

# Singular endings inflect would truncate ("address", "bus")
_SINGULAR_ENDINGS = ("ss", "us", "is")

_inflect = inflect.engine()


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _singular_of(word: str) -> str | None:
    """Return the singular of a plural word, or None when word is singular.

    inflect strips a trailing s from any word it is given, so a candidate is
    only accepted when it pluralizes back to the original word.
    """
    if word.endswith(_SINGULAR_ENDINGS):
        return None
    singular = _inflect.singular_noun(word)
    if singular and _inflect.plural_noun(singular) == word:
        return singular
    return None


def _pluralize(word: str) -> str:
    """Return the plural form of a single lower-case word."""
    if _singular_of(word):
        # already plural
        return word
    return _inflect.plural_noun(word) or word


def _singularize(word: str) -> str:
    """Return the singular form of a single lower-case word."""
    return _singular_of(word) or word


def _inflect_last_word(name: str, plural: bool) -> str:
    match = _LAST_WORD.search(name)
    if match is None:
        return name
    word = match.group()
    lowered = word.lower()
    inflected = _pluralize(lowered) if plural else _singularize(lowered)
    if word[0].isupper():
        inflected = _capitalize(inflected)
    return name[: match.start()] + inflected


def pluralize(name: str) -> str:
    """Pluralize the last word of a PascalCase resource name."""
    return _inflect_last_word(name, plural=True)


def singularize(name: str) -> str:
    """Singularize the last word of a PascalCase resource name."""
    return _inflect_last_word(name, plural=False)


def _operation_id_to_name(operation_id: str) -> str:
    """Capitalize an identifier-shaped operationId, keeping the rest as-is.

    Returns an empty string for ids made only of underscores.
    """
    if not operation_id.strip("_"):
        return ""
    return _capitalize(operation_id)


def _extract_path_parts(path: str) -> list[str]:
    """Extract the literal path segments, dropping {params} and punctuation."""
    parts = []
    for segment in path.lstrip("/").split("/"):
        if not segment or segment.startswith("{"):
            continue
        clean = _NON_ALNUM.sub("", segment)
        if clean:
            parts.append(clean)
    return parts


def has_id_segment(path: str) -> bool:
    """True when a template segment mentions an id ({id}, {userId}, ...)."""
    return any(
        "{" in segment and "id" in segment.lower()
        for segment in path.split("/")
    )


def method_prefix(method: str) -> str:
    """Return the tool-name prefix for an HTTP method."""
    method_lower = method.lower()
    if method_lower in _METHOD_PREFIXES:
        return _METHOD_PREFIXES[method_lower]
    return _capitalize(_NON_ALNUM.sub("", method_lower))


def _ensure_identifier(name: str) -> str:
    if not name or not (name[0].isalpha() or name[0] == "_"):
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def build_tool_name(method: str, path: str, operation_id: str | None = None) -> str:
    """Build a tool name from an operationId, or from HTTP method and path.

    Returns a name like 'CreatePet', 'GetUsers' or 'GetUserById'.
    """
    if operation_id and _OPERATION_ID.match(operation_id):
        name = _operation_id_to_name(operation_id)
        if name:
            return _ensure_identifier(name)

    base = "".join(_capitalize(p) for p in _extract_path_parts(path)) or "Resource"
    prefix = method_prefix(method)

    if prefix == "Get":
        if has_id_segment(path):
            return _ensure_identifier(f"Get{singularize(base)}ById")
        return _ensure_identifier(f"Get{pluralize(base)}")
    return _ensure_identifier(f"{prefix}{singularize(base)}")


def assign_unique_names(names: Iterable[str], reserved: Iterable[str] = ()) -> list[str]:
    """Disambiguate names in order; a repeat gets the lowest free suffix from 2.

    The first occurrence keeps its name. ``reserved`` names are treated as
    already taken.
    """
    taken = set(reserved)
    unique: list[str] = []
    for name in names:
        candidate = name
        suffix = 2
        while candidate in taken:
            candidate = f"{name}{suffix}"
            suffix += 1
        taken.add(candidate)
        unique.append(candidate)
    return unique
