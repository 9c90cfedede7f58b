import pytest

from readme_sync.errors import InterpolationError
from readme_sync.rewrite import count_occurrences, interpolate, rewrite

RAW = "](https://raw.githubusercontent.com/acme/app/main/"


def test_rewrite_relative_link() -> None:
    out = rewrite("See [doc](./docs/x.md)", "](./", RAW)
    assert out == "See [doc](https://raw.githubusercontent.com/acme/app/main/docs/x.md)"


def test_rewrite_without_match_returns_content_unchanged() -> None:
    text = "No links here.\n[abs](https://example.com)\n"
    assert rewrite(text, "](./", RAW) == text


def test_rewrite_replaces_every_occurrence() -> None:
    text = "[a](./a.md) and ![b](./img/b.png)\n[c](./c.md)"
    out = rewrite(text, "](./", "](/")
    assert out == "[a](/a.md) and ![b](/img/b.png)\n[c](/c.md)"
    assert "](./" not in out


def test_rewrite_single_occurrence_replaced_once() -> None:
    out = rewrite("x](./y", "](./", "<R>")
    assert out.count("<R>") == 1
    assert out == "x<R>y"


def test_rewrite_is_literal_not_regex() -> None:
    assert rewrite("a.b axb", ".", "!") == "a!b axb"
    assert rewrite("(.*) stays", "(.*)", "ok") == "ok stays"


def test_rewrite_non_overlapping_left_to_right() -> None:
    assert rewrite("aaa", "aa", "b") == "ba"


def test_rewrite_does_not_rescan_replacement() -> None:
    # The replacement contains the search text; it is inserted once, not expanded again.
    assert rewrite("ab", "a", "aa") == "aab"


def test_rewrite_not_idempotent_when_replacement_contains_search() -> None:
    once = rewrite("[x](./x)", "](./", "](./sub/")
    twice = rewrite(once, "](./", "](./sub/")
    assert once == "[x](./sub/x)"
    assert twice == "[x](./sub/sub/x)"


def test_rewrite_idempotent_when_replacement_free_of_search() -> None:
    once = rewrite("[x](./x)", "](./", RAW)
    assert rewrite(once, "](./", RAW) == once


def test_rewrite_empty_search_fails_fast() -> None:
    with pytest.raises(ValueError):
        rewrite("anything", "", "x")


def test_count_occurrences() -> None:
    assert count_occurrences("[a](./a) [b](./b)", "](./") == 2
    assert count_occurrences("aaa", "aa") == 1
    assert count_occurrences("none", "](./") == 0
    with pytest.raises(ValueError):
        count_occurrences("x", "")


def test_interpolate_both_placeholders() -> None:
    out = interpolate(
        "](https://raw.githubusercontent.com/${repository}/${ref_name}/",
        repository="acme/app",
        ref_name="main",
    )
    assert out == RAW


def test_interpolate_tolerates_whitespace_in_braces() -> None:
    assert interpolate("${ repository }@${ref_name }", repository="o/n", ref_name="v1") == "o/n@v1"


def test_interpolate_without_placeholders_is_identity() -> None:
    assert interpolate("](/", repository="o/n", ref_name="main") == "](/"


def test_interpolate_leaves_other_braces_alone() -> None:
    text = "{{ not jinja }} {% nor this %} {# nor this #} $HOME {x}"
    assert interpolate(text, repository="o/n", ref_name="main") == text


def test_interpolate_unknown_placeholder() -> None:
    with pytest.raises(InterpolationError, match="branch"):
        interpolate("${repository}/${branch}", repository="o/n", ref_name="main")


def test_interpolate_unterminated_placeholder() -> None:
    with pytest.raises(InterpolationError):
        interpolate("https://x/${repository", repository="o/n", ref_name="main")


def test_interpolate_empty_placeholder() -> None:
    with pytest.raises(InterpolationError):
        interpolate("https://x/${}", repository="o/n", ref_name="main")


@pytest.mark.parametrize(
    "template",
    [
        "${ repository | upper }",
        "${ repository.split('/') }",
        "${ 'literal' }",
        "${% if repository %}x${% endif %}",
    ],
)
def test_interpolate_rejects_expressions(template: str) -> None:
    with pytest.raises(InterpolationError):
        interpolate(template, repository="o/n", ref_name="main")


@pytest.mark.parametrize(
    "template",
    [
        "](https://x/ ${-repository}/",
        "](https://x/${repository-} /",
        "${+ref_name}",
        "${ref_name +}",
        "${# note #}${repository}",
        "a ${-repository",
    ],
)
def test_interpolate_rejects_whitespace_control(template: str) -> None:
    with pytest.raises(InterpolationError):
        interpolate(template, repository="o/n", ref_name="main")


def test_interpolate_keeps_line_endings() -> None:
    out = interpolate("a\r\n${repository}\rb\n${ref_name}\n", repository="o/n", ref_name="main")
    assert out == "a\r\no/n\rb\nmain\n"


def test_interpolate_keeps_dashes_outside_placeholders() -> None:
    assert interpolate("x-} - ${repository} +}", repository="o/n", ref_name="main") == "x-} - o/n +}"


def test_interpolate_placeholder_cannot_span_lines() -> None:
    with pytest.raises(InterpolationError):
        interpolate("${\nrepository}", repository="o/n", ref_name="main")
