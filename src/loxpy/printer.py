"""
AST printers for loxpy.

AstPrinter renders any node as a parenthesized prefix (Lisp-like) string;
RpnPrinter renders any node in reverse Polish notation. Both are
plain visitors and share the same accept() dispatch as every other AST pass.
"""

from typing import Any, List

from .ast import (
    AstNode, AstVisitor,
    Literal, Grouping, UnaryOp, BinaryOp, ConditionalExpr, Variable, Assign,
    LogicalOp, Call,
    ExpressionStatement, PrintStatement, VarDecl, Block, IfStatement,
    WhileStatement, BreakStatement, ReturnStatement, FunctionDef, Statement,
)
from .runtime.values import stringify


def _format_literal(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class AstPrinter(AstVisitor):
    """Print an AST as nested parenthesized forms, e.g. (+ 1.0 (* 2.0 3.0))."""

    def print(self, node: AstNode) -> str:
        return node.accept(self)

    def print_program(self, statements: List[Statement]) -> str:
        """Print a statement list, one top-level form per line."""
        return "\n".join(self.print(stmt) for stmt in statements)

    def _parenthesize(self, name: str, *parts: Any) -> str:
        pieces = [name]
        for part in parts:
            if isinstance(part, AstNode):
                pieces.append(part.accept(self))
            else:
                pieces.append(str(part))
        return "(" + " ".join(pieces) + ")"

    # Expressions

    def visit_Literal(self, node: Literal) -> str:
        return _format_literal(node.value)

    def visit_Grouping(self, node: Grouping) -> str:
        return self._parenthesize("group", node.expression)

    def visit_UnaryOp(self, node: UnaryOp) -> str:
        return self._parenthesize(node.operator.lexeme, node.operand)

    def visit_BinaryOp(self, node: BinaryOp) -> str:
        return self._parenthesize(node.operator.lexeme, node.left, node.right)

    def visit_ConditionalExpr(self, node: ConditionalExpr) -> str:
        return self._parenthesize("?:", node.condition, node.then_branch, node.else_branch)

    def visit_Variable(self, node: Variable) -> str:
        return node.name.lexeme

    def visit_Assign(self, node: Assign) -> str:
        return self._parenthesize("=", node.name.lexeme, node.value)

    def visit_LogicalOp(self, node: LogicalOp) -> str:
        return self._parenthesize(node.operator.lexeme, node.left, node.right)

    def visit_Call(self, node: Call) -> str:
        return self._parenthesize("call", node.callee, *node.arguments)

    # Statements

    def visit_ExpressionStatement(self, node: ExpressionStatement) -> str:
        return self._parenthesize(";", node.expression)

    def visit_PrintStatement(self, node: PrintStatement) -> str:
        return self._parenthesize("print", node.expression)

    def visit_VarDecl(self, node: VarDecl) -> str:
        if node.initializer is None:
            return self._parenthesize("var", node.name.lexeme)
        return self._parenthesize("var", node.name.lexeme, node.initializer)

    def visit_Block(self, node: Block) -> str:
        return self._parenthesize("block", *node.statements)

    def visit_IfStatement(self, node: IfStatement) -> str:
        if node.else_branch is None:
            return self._parenthesize("if", node.condition, node.then_branch)
        return self._parenthesize("if-else", node.condition, node.then_branch, node.else_branch)

    def visit_WhileStatement(self, node: WhileStatement) -> str:
        return self._parenthesize("while", node.condition, node.body)

    def visit_BreakStatement(self, node: BreakStatement) -> str:
        return "(break)"

    def visit_ReturnStatement(self, node: ReturnStatement) -> str:
        if node.value is None:
            return "(return)"
        return self._parenthesize("return", node.value)

    def visit_FunctionDef(self, node: FunctionDef) -> str:
        params = "(" + " ".join(param.lexeme for param in node.params) + ")"
        return self._parenthesize("fun", node.name.lexeme, params, *node.body)


class RpnPrinter(AstVisitor):
    """
    Print a node in reverse Polish notation.

    Operands come first, then the operator: -123 * (45.67) prints as
    "123 - 45.67 *". Grouping only affects tree shape, so it prints nothing.
    Statements follow the same rule, with their keyword last; block and
    function bodies are wrapped in braces.
    """

    def print(self, node: AstNode) -> str:
        return node.accept(self)

    def _join(self, *parts: str) -> str:
        return " ".join(parts)

    def visit_Literal(self, node: Literal) -> str:
        return stringify(node.value)

    def visit_Grouping(self, node: Grouping) -> str:
        return node.expression.accept(self)

    def visit_UnaryOp(self, node: UnaryOp) -> str:
        return self._join(node.operand.accept(self), node.operator.lexeme)

    def visit_BinaryOp(self, node: BinaryOp) -> str:
        return self._join(node.left.accept(self), node.right.accept(self), node.operator.lexeme)

    def visit_LogicalOp(self, node: LogicalOp) -> str:
        return self._join(node.left.accept(self), node.right.accept(self), node.operator.lexeme)

    def visit_ConditionalExpr(self, node: ConditionalExpr) -> str:
        return self._join(
            node.condition.accept(self),
            node.then_branch.accept(self),
            node.else_branch.accept(self),
            "?:",
        )

    def visit_Variable(self, node: Variable) -> str:
        return node.name.lexeme

    def visit_ExpressionStatement(self, node: ExpressionStatement) -> str:
        return node.expression.accept(self)

    def visit_PrintStatement(self, node: PrintStatement) -> str:
        return self._join(node.expression.accept(self), "print")

    def visit_Assign(self, node: Assign) -> str:
        return self._join(node.value.accept(self), node.name.lexeme, "=")

    def visit_Call(self, node: Call) -> str:
        args = [arg.accept(self) for arg in node.arguments]
        return self._join(*args, node.callee.accept(self), "call")

    def visit_VarDecl(self, node: VarDecl) -> str:
        if node.initializer is None:
            return self._join(node.name.lexeme, "var")
        return self._join(node.initializer.accept(self), node.name.lexeme, "var")

    def visit_Block(self, node: Block) -> str:
        body = [stmt.accept(self) for stmt in node.statements]
        return self._join("{", *body, "}")

    def visit_IfStatement(self, node: IfStatement) -> str:
        if node.else_branch is None:
            return self._join(node.condition.accept(self), node.then_branch.accept(self), "if")
        return self._join(
            node.condition.accept(self),
            node.then_branch.accept(self),
            node.else_branch.accept(self),
            "if-else",
        )

    def visit_WhileStatement(self, node: WhileStatement) -> str:
        return self._join(node.condition.accept(self), node.body.accept(self), "while")

    def visit_BreakStatement(self, node: BreakStatement) -> str:
        return "break"

    def visit_ReturnStatement(self, node: ReturnStatement) -> str:
        if node.value is None:
            return "return"
        return self._join(node.value.accept(self), "return")

    def visit_FunctionDef(self, node: FunctionDef) -> str:
        # Braces separate the parameters from the body
        params = [param.lexeme for param in node.params]
        body = [stmt.accept(self) for stmt in node.body]
        return self._join(*params, "{", *body, "}", node.name.lexeme, "fun")
