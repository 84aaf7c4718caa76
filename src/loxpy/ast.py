"""
Abstract Syntax Tree (AST) node definitions for loxpy.

The AST represents the structure of a parsed program, which is then walked
by the interpreter or by one of the printers in printer.py. Nodes own their
children exclusively (a strict tree); tokens are kept on nodes that need a
source line for error reporting.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional
from abc import ABC

from .tokens import Token


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class Literal(Expression):
    """A literal value: number (float), string, bool or nil (None)."""
    value: Any


@dataclass
class Grouping(Expression):
    """A parenthesized expression."""
    expression: Expression


@dataclass
class UnaryOp(Expression):
    """A unary operation (e.g., !x, -n)."""
    operator: Token
    operand: Expression


@dataclass
class BinaryOp(Expression):
    """A binary operation (e.g., a + b).

    The comma operator reuses this node with a COMMA operator token.
    """
    left: Expression
    operator: Token
    right: Expression


@dataclass
class ConditionalExpr(Expression):
    """A conditional expression: condition ? then_branch : else_branch."""
    condition: Expression
    then_branch: Expression
    else_branch: Expression


@dataclass
class Variable(Expression):
    """A variable reference."""
    name: Token


@dataclass
class Assign(Expression):
    """An assignment expression (name = value)."""
    name: Token
    value: Expression


@dataclass
class LogicalOp(Expression):
    """A short-circuiting 'and' / 'or' expression."""
    left: Expression
    operator: Token
    right: Expression


@dataclass
class Call(Expression):
    """A function call. `paren` is the closing ')' used for error lines."""
    callee: Expression
    paren: Token
    arguments: List[Expression] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class ExpressionStatement(Statement):
    """An expression evaluated for its side effects."""
    expression: Expression


@dataclass
class PrintStatement(Statement):
    """print <expression>;"""
    expression: Expression


@dataclass
class VarDecl(Statement):
    """A variable declaration; initializer is None for 'var x;'."""
    name: Token
    initializer: Optional[Expression] = None


@dataclass
class Block(Statement):
    """A braced block of statements with its own scope."""
    statements: List[Statement] = field(default_factory=list)


@dataclass
class IfStatement(Statement):
    """if (condition) then_branch [else else_branch]"""
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None


@dataclass
class WhileStatement(Statement):
    """while (condition) body. 'for' loops are desugared into this."""
    condition: Expression
    body: Statement


@dataclass
class BreakStatement(Statement):
    """break; (only valid inside a loop)"""
    keyword: Token


@dataclass
class ReturnStatement(Statement):
    """return [value];"""
    keyword: Token
    value: Optional[Expression] = None


@dataclass
class FunctionDef(Statement):
    """fun name(params) { body }"""
    name: Token
    params: List[Token] = field(default_factory=list)
    body: List[Statement] = field(default_factory=list)
