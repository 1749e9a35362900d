"""Textual block references.

A block may name its callback as ``name`` or ``name(arg1, arg2, ...)``.  The
arguments are restricted to literals: numbers, strings, booleans, ``null`` /
``None`` and (nested) arrays.  Nothing is evaluated; the text is parsed with
:mod:`ast` and every argument node is checked against that grammar.
"""
from __future__ import annotations

import ast
from typing import Any, Callable, Mapping, NamedTuple, Optional, Tuple

# Literal names accepted in addition to Python's own constants, so that block
# titles written for a JavaScript sketch keep working.
_NAMED_LITERALS = {
    "true": True,
    "false": False,
    "null": None,
    "True": True,
    "False": False,
    "None": None,
}


class ReferenceSyntaxError(ValueError):
    pass


class CallReference(NamedTuple):
    name: str
    args: Tuple[Any, ...] = ()


def parse_reference(text: str) -> CallReference:
    """Split ``text`` into a function name and its literal arguments.

    Raises :class:`ReferenceSyntaxError` when ``text`` does not match the
    grammar.
    """
    if not isinstance(text, str) or not text.strip():
        raise ReferenceSyntaxError(f"Empty block reference: {text!r}.")
    try:
        node = ast.parse(text.strip(), mode="eval").body
    except SyntaxError as e:
        raise ReferenceSyntaxError(f"Malformed block reference {text!r}: {e.msg}.") from e

    if isinstance(node, ast.Name):
        return CallReference(node.id)
    if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Name):
        raise ReferenceSyntaxError(f"Block reference {text!r} is not 'name' or 'name(args)'.")
    if node.keywords:
        raise ReferenceSyntaxError(f"Block reference {text!r}: keyword arguments are not supported.")
    args = tuple(_literal(arg, text) for arg in node.args)
    return CallReference(node.func.id, args)


def resolve_reference(
    ref: CallReference, functions: Mapping[str, Callable[..., Any]]
) -> Optional[Callable[..., Any]]:
    """Return the callable registered under ``ref.name`` or ``None``."""
    func = functions.get(ref.name)
    if func is None or not callable(func):
        return None
    return func


# -- internal ----------------------------------------------------------------------
def _literal(node: ast.AST, text: str) -> Any:
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float, str, bool, type(None))):
        return node.value
    if isinstance(node, ast.Name) and node.id in _NAMED_LITERALS:
        return _NAMED_LITERALS[node.id]
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, (ast.USub, ast.UAdd)):
        operand = _literal(node.operand, text)
        if isinstance(operand, bool) or not isinstance(operand, (int, float)):
            raise ReferenceSyntaxError(f"Block reference {text!r}: sign applied to a non-number.")
        return -operand if isinstance(node.op, ast.USub) else operand
    if isinstance(node, (ast.List, ast.Tuple)):
        return [_literal(item, text) for item in node.elts]
    raise ReferenceSyntaxError(
        f"Block reference {text!r}: argument {ast.unparse(node)!r} is not a literal."
    )
