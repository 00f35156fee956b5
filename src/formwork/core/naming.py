"""
Name conversion helpers shared by the IR builder and generators.
"""

import re

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """Convert PascalCase/camelCase to snake_case (UserProfile -> user_profile)."""
    return _WORD_BOUNDARY.sub("_", name).replace("-", "_").lower()


def kebab_case(name: str) -> str:
    """Convert PascalCase/camelCase to kebab-case (UserList -> user-list)."""
    return _WORD_BOUNDARY.sub("-", name).replace("_", "-").lower()


def pascal_case(name: str) -> str:
    """Convert snake_case or camelCase to PascalCase."""
    return "".join(word[:1].upper() + word[1:] for word in re.split(r"[_\-\s]+", name) if word)


def resolver_name(owner: str, field: str) -> str:
    """Stable resolver function name for a computed field: resolve_user_full_name."""
    return f"resolve_{snake_case(owner)}_{snake_case(field)}"


def plural(name: str) -> str:
    """Naive English plural used for table and route names."""
    if name.endswith("y") and name[-2:-1] not in ("a", "e", "i", "o", "u"):
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "z", "ch", "sh")):
        return name + "es"
    return name + "s"
