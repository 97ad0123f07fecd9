"""Render documentation attributes as C comments."""

from __future__ import annotations

from collections.abc import Iterable

from abikit.attrs import doc_values
from abikit.ir import Attribute


def render_docs(attrs: Iterable[Attribute], prefix: str = "") -> str:
    """Render every ``doc`` attribute as a ``///`` line.

    Multi-line values are split so each line gets its own prefix.

    :param attrs: Attributes of the documented item.
    :param prefix: Indentation put in front of every line (``"\\t"`` for
        fields and variants).
    :returns: The comment block, ending with a newline, or ``""``.
    """
    lines = []
    for value in doc_values(attrs):
        for line in value.split("\n"):
            lines.append(f"{prefix}///{line}\n")
    return "".join(lines)
