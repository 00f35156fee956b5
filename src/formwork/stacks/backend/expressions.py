"""
Translate expression ASTs into Python source for generated resolvers.
"""

from __future__ import annotations

from collections.abc import Callable

from formwork.core import ir


def to_python(expr: ir.Expr, ref: Callable[[ir.FieldRef], str]) -> str:
    """
    Render an expression as Python source.

    `+` goes through the generated `_add` helper so string concatenation
    with non-string operands works. `ref` renders field references.
    """
    if isinstance(expr, ir.Literal):
        return repr(expr.value)
    if isinstance(expr, ir.FieldRef):
        return ref(expr)
    if isinstance(expr, ir.UnaryExpr):
        return f"(-{to_python(expr.operand, ref)})"
    left = to_python(expr.left, ref)
    right = to_python(expr.right, ref)
    if expr.op == ir.BinaryOp.ADD:
        return f"_add({left}, {right})"
    return f"({left} {expr.op.value} {right})"


def path_access(root: str, path: list[str]) -> str:
    """obj.email, or _get(obj, "author", "email") through relations."""
    if len(path) == 1:
        return f"{root}.{path[0]}"
    return f"_get({root}, {', '.join(repr(p) for p in path)})"


def attribute_ref(root: str) -> Callable[[ir.FieldRef], str]:
    """Field references read from `root`."""

    def render(field_ref: ir.FieldRef) -> str:
        return path_access(root, field_ref.path)

    return render


def view_ref(defined: set[str]) -> Callable[[ir.FieldRef], str]:
    """
    Field references inside a view expression.

    Names of view fields defined earlier read from the row being built;
    everything else reads from the source entity.
    """

    def render(field_ref: ir.FieldRef) -> str:
        if len(field_ref.path) == 1 and field_ref.root in defined:
            return f"row[{field_ref.root!r}]"
        return path_access("obj", field_ref.path)

    return render
