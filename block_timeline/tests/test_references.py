import pytest

from block_timeline.references import (
    CallReference,
    ReferenceSyntaxError,
    parse_reference,
    resolve_reference,
)


def test_bare_name() -> None:
    assert parse_reference("drawCircles") == CallReference("drawCircles", ())


def test_call_with_literal_arguments() -> None:
    ref = parse_reference("scene(1, -2.5, 'x', true, [1, [2, null]], False)")
    assert ref.name == "scene"
    assert ref.args == (1, -2.5, "x", True, [1, [2, None]], False)


def test_empty_call() -> None:
    assert parse_reference("  intro()  ") == CallReference("intro", ())


@pytest.mark.parametrize(
    "text",
    ["", "intro(1", "intro(x)", "obj.intro()", "intro(a=1)", "intro(1 + 2)", "1 + 2", "intro(-'a')"],
)
def test_rejects_text_outside_grammar(text: str) -> None:
    with pytest.raises(ReferenceSyntaxError):
        parse_reference(text)


def test_resolve_reference() -> None:
    def intro() -> None:
        pass

    functions = {"intro": intro, "value": 3}
    assert resolve_reference(CallReference("intro"), functions) is intro
    assert resolve_reference(CallReference("value"), functions) is None
    assert resolve_reference(CallReference("missing"), functions) is None
