"""
Utility functions for metaModel name transformations.
"""


def capitalize(name: str) -> str:
    """Uppercase the first character and leave the rest untouched."""
    if not name:
        return ""
    return name[0].upper() + name[1:]


def strip_meta(name: str) -> str:
    """Strip the "$" and "_" meta prefixes used by internal protocol names."""
    if name.startswith("$"):
        name = name[1:]
    if name.startswith("_"):
        name = name[1:]
    return name


def export_name(name: str, reserved_prefixes: dict[str, str] | None = None) -> str:
    """Return a public type identifier for a schema name.

    A leading character listed in ``reserved_prefixes`` is replaced by its
    mapped value, then the result is capitalized.

    Examples:
        "position" -> "Position"
        "_InitializeParams" -> "XInitializeParams"
    """
    if not name:
        return ""
    if reserved_prefixes is None:
        reserved_prefixes = {"_": "X"}
    replacement = reserved_prefixes.get(name[0])
    if replacement is not None:
        name = replacement + name[1:]
    return capitalize(name)


def _is_all_upper(name: str) -> bool:
    return all(not c.isalpha() or c.isupper() for c in name)


def camel_to_snake(name: str) -> str:
    """Convert CamelCase to snake_case. Fully uppercase names are lowered as one word."""
    if _is_all_upper(name):
        return name.lower()
    result = []
    for i, c in enumerate(name):
        if c.isupper():
            if i > 0:
                result.append("_")
            result.append(c.lower())
        else:
            result.append(c)
    return "".join(result)


def camel_to_screaming_snake(name: str) -> str:
    """Convert CamelCase to SCREAMING_SNAKE_CASE. Fully uppercase names are returned as-is."""
    if _is_all_upper(name):
        return name.upper()
    result = []
    for i, c in enumerate(name):
        if c.isupper() and i > 0:
            result.append("_")
        result.append(c.upper())
    return "".join(result)


def method_name(method: str) -> str:
    """Convert a protocol method to a type-style identifier.

    Examples:
        "textDocument/hover" -> "TextDocumentHover"
        "$/cancelRequest" -> "CancelRequest"
    """
    if method.startswith("$/"):
        method = method[2:]
    return "".join(capitalize(part) for part in method.split("/") if part)


def lower_first(name: str) -> str:
    """Lowercase the first character (TextDocumentHover -> textDocumentHover)."""
    if not name:
        return ""
    return name[0].lower() + name[1:]
