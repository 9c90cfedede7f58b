"""
rewrite.py

Responsibility: Pure text transformations applied to the readme before upload.

- `rewrite`: literal (non-regex) substring replacement across the whole text.
- `interpolate`: fill the `${repository}` / `${ref_name}` placeholders of the
  replacement template.

Placeholders are parsed with Jinja2 using `${` / `}` as the variable
delimiters. Only the two known names are accepted, and only as bare names:
filters, attribute access and literals inside `${...}` are rejected. Nothing
outside `${...}` is interpreted, so `{{`, `{%` and `{#` pass through as text.

This module intentionally does NOT know about files, registries, or the CLI.
"""

from __future__ import annotations

import re

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError, meta, nodes

from readme_sync.errors import InterpolationError

PLACEHOLDERS = ("repository", "ref_name")

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]*)\}?")
_NEWLINE_RE = re.compile(r"(\r\n|\r|\n)")


def _check_search(search: str) -> None:
    if not search:
        raise ValueError("search pattern must be a non-empty string")


def rewrite(content: str, search: str, replacement: str) -> str:
    """
    Replace every non-overlapping occurrence of `search` in `content`.

    Matches are found on the original text in a single left-to-right pass; the
    inserted replacement is never re-scanned. Returns `content` unchanged when
    `search` does not occur. Raises ValueError for an empty `search`.

    Note: applying this twice is only a no-op the second time when
    `replacement` does not itself contain `search`.
    """
    _check_search(search)
    return content.replace(search, replacement)


def count_occurrences(content: str, search: str) -> int:
    """Number of non-overlapping occurrences `rewrite` would replace."""
    _check_search(search)
    return content.count(search)


def _environment() -> Environment:
    # Block and comment delimiters are moved behind `${` so that plain text
    # never opens a Jinja construct.
    return Environment(
        variable_start_string="${",
        variable_end_string="}",
        block_start_string="${%",
        block_end_string="%}",
        comment_start_string="${#",
        comment_end_string="#}",
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def _validate(ast: nodes.Template) -> None:
    unknown = sorted(meta.find_undeclared_variables(ast) - set(PLACEHOLDERS))
    if unknown:
        names = ", ".join(f"${{{n}}}" for n in unknown)
        allowed = ", ".join(f"${{{n}}}" for n in PLACEHOLDERS)
        raise InterpolationError(f"Unknown placeholder(s) {names}; allowed: {allowed}")

    for output in ast.find_all(nodes.Output):
        for node in output.nodes:
            if isinstance(node, nodes.TemplateData):
                continue
            if isinstance(node, nodes.Name) and node.name in PLACEHOLDERS:
                continue
            raise InterpolationError(
                f"Unsupported placeholder expression on line {node.lineno}; "
                "use a bare ${repository} or ${ref_name}"
            )

    if any(not isinstance(node, nodes.Output) for node in ast.body):
        raise InterpolationError("Template statements are not supported in the replacement template")


def _check_delimiters(template: str) -> None:
    for m in _PLACEHOLDER_RE.finditer(template):
        inner = m.group(1)
        if inner.startswith(("-", "+", "%", "#")) or inner.endswith(("-", "+")):
            raise InterpolationError(
                f"Unsupported placeholder {m.group(0)!r}; use a bare ${{repository}} or ${{ref_name}}"
            )


def _render_line(env: Environment, text: str, values: dict[str, str]) -> str:
    try:
        ast = env.parse(text)
    except TemplateSyntaxError as e:
        raise InterpolationError(f"Malformed placeholder in replacement template: {e.message}") from e

    _validate(ast)
    return env.from_string(ast).render(**values)


def interpolate(template: str, *, repository: str, ref_name: str) -> str:
    """
    Substitute `${repository}` and `${ref_name}` in `template`.

    Raises InterpolationError for an unknown name, a non-trivial expression, or
    a malformed placeholder such as an unterminated `${repository` or one using
    whitespace control (`${-repository}`).

    Line breaks are kept exactly; a placeholder cannot span lines.
    """
    _check_delimiters(template)
    env = _environment()
    values = {"repository": repository, "ref_name": ref_name}

    # Jinja normalizes newlines, so only the text between line breaks is rendered.
    parts = _NEWLINE_RE.split(template)
    return "".join(
        part if i % 2 else (_render_line(env, part, values) if part else "")
        for i, part in enumerate(parts)
    )
