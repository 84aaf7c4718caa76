"""
Tree-walking interpreter for loxpy.

Evaluates AST nodes by dispatching on node type. Expressions produce values;
statements produce a control-flow signal (None, BREAK or a ReturnSignal) that
blocks, loops and function bodies pass outward. Runtime faults are raised as
LoxRuntimeError and stop at the interpret() boundary.
"""

import sys
from collections import deque
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, TextIO, Union

from .environment import Environment
from .values import (
    BREAK, BreakSignal, ReturnSignal, LoxCallable, LoxFunction,
    is_truthy, is_equal, stringify,
)
from .builtins import get_builtin_registry

from ..ast import (
    AstNode,
    Statement, ExpressionStatement, PrintStatement, VarDecl, Block,
    IfStatement, WhileStatement, BreakStatement, ReturnStatement, FunctionDef,
    Expression, Literal, Grouping, UnaryOp, BinaryOp, ConditionalExpr,
    Variable, Assign, LogicalOp, Call,
)
from ..errors import DiagnosticCollector, LoxRuntimeError
from ..tokens import Token, TokenType


Signal = Optional[Union[BreakSignal, ReturnSignal]]


class Interpreter:
    """
    Tree-walking interpreter.

    The interpreter keeps a persistent global environment, so successive
    interpret() calls (e.g. interactive input chunks) share variables.
    """

    def __init__(self, out: Optional[TextIO] = None,
                 diagnostics: Optional[DiagnosticCollector] = None):
        """
        Initialize the interpreter.

        Args:
            out: Stream receiving 'print' output (defaults to stdout)
            diagnostics: Collector receiving runtime errors
        """
        self.out = out if out is not None else sys.stdout
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self.globals = Environment()
        get_builtin_registry().install(self.globals)
        self.environment = self.globals

    # =========================================================================
    # Entry Points
    # =========================================================================

    def interpret(self, statements: List[Statement]) -> bool:
        """
        Execute statements in order.

        Returns:
            False if a runtime error stopped execution (it is reported to
            self.diagnostics), True otherwise
        """
        try:
            for stmt in statements:
                self.execute(stmt)
        except LoxRuntimeError as error:
            self.diagnostics.add_error(error)
            return False
        except RecursionError:
            self.diagnostics.add_error(_stack_overflow(stmt))
            return False
        return True

    def interpret_expression(self, expr: Expression, echo: bool = True) -> bool:
        """Evaluate a single expression, printing its value when echo is set."""
        try:
            value = self.evaluate(expr)
        except LoxRuntimeError as error:
            self.diagnostics.add_error(error)
            return False
        except RecursionError:
            self.diagnostics.add_error(_stack_overflow(expr))
            return False
        if echo:
            self._write(stringify(value))
        return True

    # =========================================================================
    # Statements
    # =========================================================================

    def execute(self, stmt: Statement) -> Signal:
        """Execute a statement."""
        if isinstance(stmt, ExpressionStatement):
            self.evaluate(stmt.expression)
        elif isinstance(stmt, PrintStatement):
            self._write(stringify(self.evaluate(stmt.expression)))
        elif isinstance(stmt, VarDecl):
            self._execute_var(stmt)
        elif isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(self.environment))
        elif isinstance(stmt, IfStatement):
            return self._execute_if(stmt)
        elif isinstance(stmt, WhileStatement):
            return self._execute_while(stmt)
        elif isinstance(stmt, BreakStatement):
            return BREAK
        elif isinstance(stmt, ReturnStatement):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return ReturnSignal(value)
        elif isinstance(stmt, FunctionDef):
            function = LoxFunction(stmt, self.environment)
            self.environment.define(stmt.name.lexeme, function)
        else:
            raise RuntimeError(f"Unknown statement type: {type(stmt).__name__}")
        return None

    def execute_block(self, statements: List[Statement], environment: Environment) -> Signal:
        """Execute statements with `environment` as the current scope."""
        with self._scope(environment):
            for stmt in statements:
                signal = self.execute(stmt)
                if signal is not None:
                    return signal
        return None

    @contextmanager
    def _scope(self, environment: Environment) -> Iterator[Environment]:
        """
        Make `environment` current for the duration of the block.

        The previous environment is restored even when a statement faults.
        """
        previous = self.environment
        self.environment = environment
        try:
            yield environment
        finally:
            self.environment = previous

    def _execute_var(self, stmt: VarDecl) -> None:
        """Execute a variable declaration."""
        name = stmt.name.lexeme
        if stmt.initializer is None:
            self.environment.define_uninitialized(name)
            return

        # A local variable cannot be read in its own initializer. Globals may be
        # redeclared from their old value (var a = a + 1;).
        if not self.environment.is_global:
            self.environment.define_uninitialized(name)
        value = self.evaluate(stmt.initializer)
        self.environment.define(name, value)

    def _execute_if(self, stmt: IfStatement) -> Signal:
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def _execute_while(self, stmt: WhileStatement) -> Signal:
        while is_truthy(self.evaluate(stmt.condition)):
            signal = self.execute(stmt.body)
            if signal is BREAK:
                break
            if signal is not None:
                return signal
        return None

    # =========================================================================
    # Expressions
    # =========================================================================

    def evaluate(self, expr: Expression) -> Any:
        """Evaluate an expression to produce a value."""
        if isinstance(expr, Literal):
            return expr.value
        elif isinstance(expr, Grouping):
            return self.evaluate(expr.expression)
        elif isinstance(expr, UnaryOp):
            return self._eval_unary_op(expr)
        elif isinstance(expr, BinaryOp):
            return self._eval_binary_op(expr)
        elif isinstance(expr, ConditionalExpr):
            if is_truthy(self.evaluate(expr.condition)):
                return self.evaluate(expr.then_branch)
            return self.evaluate(expr.else_branch)
        elif isinstance(expr, Variable):
            return self.environment.get(expr.name)
        elif isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            self.environment.assign(expr.name, value)
            return value
        elif isinstance(expr, LogicalOp):
            return self._eval_logical_op(expr)
        elif isinstance(expr, Call):
            return self._eval_call(expr)
        else:
            raise RuntimeError(f"Unknown expression type: {type(expr).__name__}")

    def _eval_unary_op(self, op: UnaryOp) -> Any:
        """Evaluate a unary operation."""
        operand = self.evaluate(op.operand)

        if op.operator.type == TokenType.MINUS:
            _check_number_operand(op.operator, operand)
            return -operand
        elif op.operator.type == TokenType.BANG:
            return not is_truthy(operand)
        else:
            raise RuntimeError(f"Unknown unary operator: {op.operator.type}")

    def _eval_binary_op(self, op: BinaryOp) -> Any:
        """Evaluate a binary operation."""
        operator = op.operator
        kind = operator.type

        # Comma: evaluate and discard the left operand
        if kind == TokenType.COMMA:
            self.evaluate(op.left)
            return self.evaluate(op.right)

        left = self.evaluate(op.left)
        right = self.evaluate(op.right)

        # Arithmetic operators
        if kind == TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")
        elif kind == TokenType.MINUS:
            _check_number_operands(operator, left, right)
            return left - right
        elif kind == TokenType.STAR:
            _check_number_operands(operator, left, right)
            return left * right
        elif kind == TokenType.SLASH:
            _check_number_operands(operator, left, right)
            if right == 0.0:
                raise LoxRuntimeError(operator, "Division by zero.")
            return left / right

        # Comparison operators
        elif kind == TokenType.GREATER:
            _check_number_operands(operator, left, right)
            return left > right
        elif kind == TokenType.GREATER_EQUAL:
            _check_number_operands(operator, left, right)
            return left >= right
        elif kind == TokenType.LESS:
            _check_number_operands(operator, left, right)
            return left < right
        elif kind == TokenType.LESS_EQUAL:
            _check_number_operands(operator, left, right)
            return left <= right
        elif kind == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        elif kind == TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        else:
            raise RuntimeError(f"Unknown binary operator: {kind}")

    def _eval_logical_op(self, op: LogicalOp) -> Any:
        """Evaluate 'and' / 'or', returning the operand that decided the result."""
        left = self.evaluate(op.left)

        if op.operator.type == TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(op.right)

    def _eval_call(self, call: Call) -> Any:
        """Evaluate a function call."""
        callee = self.evaluate(call.callee)
        arguments = [self.evaluate(arg) for arg in call.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(call.paren, "Can only call functions.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                call.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}."
            )

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(call.paren, "Stack overflow.")

    def _write(self, text: str) -> None:
        print(text, file=self.out)


def _check_number_operand(operator: Token, operand: Any) -> None:
    if not isinstance(operand, float):
        raise LoxRuntimeError(operator, "Operand must be a number.")


def _check_number_operands(operator: Token, left: Any, right: Any) -> None:
    if not (isinstance(left, float) and isinstance(right, float)):
        raise LoxRuntimeError(operator, "Operands must be numbers.")


def _stack_overflow(node: AstNode) -> LoxRuntimeError:
    """Blame a stack overflow on the first token found breadth-first under node.

    The tree is walked with a queue because the tree that overflowed the
    stack is too deep to walk recursively.
    """
    pending = deque([node])
    while pending:
        current = pending.popleft()
        for value in vars(current).values():
            if isinstance(value, Token):
                return LoxRuntimeError(value, "Stack overflow.")
            if isinstance(value, AstNode):
                pending.append(value)
            elif isinstance(value, list):
                pending.extend(item for item in value if isinstance(item, AstNode))
    return LoxRuntimeError(Token(TokenType.EOF, "", None, 1), "Stack overflow.")
