"""``{{name}}`` variable substitution for prompts."""

import re
from typing import Any, Mapping, Optional

VARIABLE_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_.\-]*)\s*\}\}")


def substitute(text: Optional[str], variables: Mapping[str, Any]) -> Optional[str]:
    """Replace every ``{{name}}`` with ``variables[name]``.

    Unknown names are left in place verbatim. Substituted values are not
    scanned again, so a value containing ``{{x}}`` stays literal.

    Args:
        text: Template text; None passes through
        variables: Variable values, converted with ``str``

    Returns:
        The substituted text
    """
    if not text or not variables or "{{" not in text:
        return text

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name in variables:
            return str(variables[name])
        return match.group(0)

    return VARIABLE_PATTERN.sub(_replace, text)


def find_variables(text: Optional[str]) -> list[str]:
    """Names referenced in a template, in order of first appearance."""
    if not text:
        return []
    seen: list[str] = []
    for name in VARIABLE_PATTERN.findall(text):
        if name not in seen:
            seen.append(name)
    return seen


def unresolved_variables(text: Optional[str], variables: Mapping[str, Any]) -> list[str]:
    return [name for name in find_variables(text) if name not in variables]
