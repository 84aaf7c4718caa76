"""
Recursive descent parser for loxpy.

Converts a token stream into an Abstract Syntax Tree (AST). One method per
grammar rule; each binary level parses the next-higher level and then loops
over its own operators, which makes those levels left-associative.
"""

from typing import Callable, Dict, List, Optional

from .tokens import Token, TokenType, STATEMENT_KEYWORDS
from .ast import (
    # Expressions
    Expression, Literal, Grouping, UnaryOp, BinaryOp, ConditionalExpr,
    Variable, Assign, LogicalOp, Call,
    # Statements
    Statement, ExpressionStatement, PrintStatement, VarDecl, Block,
    IfStatement, WhileStatement, BreakStatement, ReturnStatement, FunctionDef,
)
from .errors import (
    ParseError,
    DiagnosticCollector,
    syntax_error,
)


class Parser:
    """
    Recursive descent parser with panic-mode error recovery.

    Usage:
        parser = Parser(tokens)
        statements = parser.parse()
        if parser.diagnostics.has_errors:
            ...

    Expression precedence, lowest to highest:
        Lowest:  ,                 (comma, left-associative)
                 =                 (assignment, right-associative)
                 ?:                (conditional, right-associative)
                 or
                 and
                 == !=
                 < > <= >=
                 + -
                 * /
                 ! -               (unary)
        Highest: call()
    """

    MAX_ARGUMENTS = 255
    NESTING_MESSAGE = "Expression nesting too deep."

    EQUALITY_OPERATORS = (TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)
    COMPARISON_OPERATORS = (
        TokenType.GREATER, TokenType.GREATER_EQUAL,
        TokenType.LESS, TokenType.LESS_EQUAL,
    )
    TERM_OPERATORS = (TokenType.MINUS, TokenType.PLUS)
    FACTOR_OPERATORS = (TokenType.SLASH, TokenType.STAR)

    # Binary operators that trigger the missing-left-operand error production.
    # '-' is absent because it is also a valid unary operator.
    MISSING_OPERAND_OPERATORS = (
        TokenType.PLUS, TokenType.STAR, TokenType.SLASH,
    ) + EQUALITY_OPERATORS + COMPARISON_OPERATORS

    def __init__(self, tokens: List[Token], diagnostics: Optional[DiagnosticCollector] = None):
        tokens = list(tokens)
        if not tokens or tokens[-1].type != TokenType.EOF:
            line = tokens[-1].line if tokens else 1
            tokens.append(Token(TokenType.EOF, "", None, line))
        self.tokens = tokens
        self.pos = 0
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self._loop_depth = 0
        self._function_depth = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        return self.tokens[self.pos]

    def _previous(self) -> Token:
        """Get the most recently consumed token."""
        return self.tokens[self.pos - 1]

    def _is_at_end(self) -> bool:
        """Check if at end of tokens."""
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self._current().type == token_type

    def _check_any(self, *token_types: TokenType) -> bool:
        """Check if current token is any of given types."""
        return self._current().type in token_types

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _consume(self, token_type: TokenType, message: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        raise self._report(self._current(), message)

    def _report(self, token: Token, message: str) -> ParseError:
        """Record a syntax error at token and return it for the caller to raise (or not)."""
        error = syntax_error(token, message)
        self.diagnostics.add_error(error)
        return error

    def _synchronize(self) -> None:
        """Discard tokens until the start of the next statement."""
        self._advance()

        while not self._is_at_end():
            if self._previous().type == TokenType.SEMICOLON:
                return
            if self._current().type in STATEMENT_KEYWORDS:
                return
            self._advance()

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _expression(self) -> Expression:
        """expression → comma"""
        return self._comma()

    def _comma(self) -> Expression:
        """comma → assignment ( "," assignment )*"""
        expr = self._assignment()

        while self._check(TokenType.COMMA):
            op = self._advance()
            right = self._assignment()
            expr = BinaryOp(expr, op, right)

        return expr

    def _assignment(self) -> Expression:
        """assignment → IDENTIFIER "=" assignment | conditional"""
        expr = self._conditional()

        equals = self._match(TokenType.EQUAL)
        if equals is not None:
            value = self._assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            # Reported but not raised: the parser is not confused
            self._report(equals, "Invalid assignment target.")

        return expr

    def _conditional(self) -> Expression:
        """conditional → logic_or ( "?" expression ":" conditional )?

        The then-branch allows a full expression (comma included) as in C;
        recursing into conditional on the else side makes ?: right-associative.
        """
        expr = self._logic_or()

        if self._match(TokenType.QUESTION):
            then_branch = self._expression()
            self._consume(TokenType.COLON, "Expect ':' after then branch of conditional expression.")
            else_branch = self._conditional()
            expr = ConditionalExpr(expr, then_branch, else_branch)

        return expr

    def _logic_or(self) -> Expression:
        expr = self._logic_and()
        while self._check(TokenType.OR):
            op = self._advance()
            expr = LogicalOp(expr, op, self._logic_and())
        return expr

    def _logic_and(self) -> Expression:
        expr = self._equality()
        while self._check(TokenType.AND):
            op = self._advance()
            expr = LogicalOp(expr, op, self._equality())
        return expr

    def _binary_level(self, operand: Callable[[], Expression], operators) -> Expression:
        """Parse operand ( operator operand )* into a left-associative BinaryOp chain."""
        expr = operand()
        while self._check_any(*operators):
            op = self._advance()
            expr = BinaryOp(expr, op, operand())
        return expr

    def _equality(self) -> Expression:
        return self._binary_level(self._comparison, self.EQUALITY_OPERATORS)

    def _comparison(self) -> Expression:
        return self._binary_level(self._term, self.COMPARISON_OPERATORS)

    def _term(self) -> Expression:
        return self._binary_level(self._factor, self.TERM_OPERATORS)

    def _factor(self) -> Expression:
        return self._binary_level(self._unary, self.FACTOR_OPERATORS)

    def _unary(self) -> Expression:
        """unary → ( "!" | "-" ) unary | call"""
        op = self._match(TokenType.BANG, TokenType.MINUS)
        if op is not None:
            return UnaryOp(op, self._unary())
        return self._call()

    def _call(self) -> Expression:
        """call → primary ( "(" arguments? ")" )*"""
        expr = self._primary()
        while self._match(TokenType.LEFT_PAREN):
            expr = self._finish_call(expr)
        return expr

    def _finish_call(self, callee: Expression) -> Call:
        arguments: List[Expression] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= self.MAX_ARGUMENTS:
                    self._report(self._current(), f"Can't have more than {self.MAX_ARGUMENTS} arguments.")
                # Arguments bind tighter than the comma operator
                arguments.append(self._assignment())
                if not self._match(TokenType.COMMA):
                    break

        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, arguments)

    def _primary(self) -> Expression:
        """Parse primary expressions (literals, variables, groupings)."""
        if self._match(TokenType.FALSE):
            return Literal(False)
        if self._match(TokenType.TRUE):
            return Literal(True)
        if self._match(TokenType.NIL):
            return Literal(None)

        token = self._match(TokenType.NUMBER, TokenType.STRING)
        if token is not None:
            return Literal(token.literal)

        token = self._match(TokenType.IDENTIFIER)
        if token is not None:
            return Variable(token)

        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        op = self._match(*self.MISSING_OPERAND_OPERATORS)
        if op is not None:
            return self._missing_left_operand(op)

        raise self._report(self._current(), "Expect expression.")

    def _missing_left_operand(self, op: Token) -> Expression:
        """Error production for a binary operator with no left-hand operand.

        Reports the error, then parses and discards a right operand at the
        level the operator binds its operands, so the stray operand does not
        produce a second error.
        """
        self._report(op, "Missing left-hand operand.")

        operand_parsers: Dict[TokenType, Callable[[], Expression]] = {
            TokenType.STAR: self._unary,
            TokenType.SLASH: self._unary,
            TokenType.PLUS: self._factor,
            TokenType.GREATER: self._term,
            TokenType.GREATER_EQUAL: self._term,
            TokenType.LESS: self._term,
            TokenType.LESS_EQUAL: self._term,
            TokenType.EQUAL_EQUAL: self._comparison,
            TokenType.BANG_EQUAL: self._comparison,
        }
        operand_parsers[op.type]()

        return Literal(None)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _declaration(self) -> Optional[Statement]:
        """declaration → funDecl | varDecl | statement

        Statement boundary for error recovery: a ParseError raised anywhere
        below is caught here and the damaged statement is dropped. Input
        nested deeper than the Python stack allows is reported the same way.
        """
        try:
            if self._match(TokenType.FUN):
                return self._function("function")
            if self._match(TokenType.VAR):
                return self._var_declaration()
            return self._statement()
        except ParseError:
            self._synchronize()
            return None
        except RecursionError:
            self._report(self._current(), self.NESTING_MESSAGE)
            self._synchronize()
            return None

    def _statement(self) -> Statement:
        if self._match(TokenType.FOR):
            return self._for_statement()
        if self._match(TokenType.IF):
            return self._if_statement()
        if self._match(TokenType.PRINT):
            return self._print_statement()
        keyword = self._match(TokenType.RETURN)
        if keyword is not None:
            return self._return_statement(keyword)
        if self._match(TokenType.WHILE):
            return self._while_statement()
        keyword = self._match(TokenType.BREAK)
        if keyword is not None:
            return self._break_statement(keyword)
        if self._match(TokenType.LEFT_BRACE):
            return Block(self._block())
        return self._expression_statement()

    def _for_statement(self) -> Statement:
        """Parse a for loop and desugar it into a while loop."""
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._loop_body()

        if increment is not None:
            body = Block([body, ExpressionStatement(increment)])
        if condition is None:
            condition = Literal(True)
        loop: Statement = WhileStatement(condition, body)
        if initializer is not None:
            loop = Block([initializer, loop])

        return loop

    def _if_statement(self) -> IfStatement:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._statement()

        return IfStatement(condition, then_branch, else_branch)

    def _print_statement(self) -> PrintStatement:
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(value)

    def _return_statement(self, keyword: Token) -> ReturnStatement:
        if self._function_depth == 0:
            self._report(keyword, "Can't return from top-level code.")

        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatement(keyword, value)

    def _while_statement(self) -> WhileStatement:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return WhileStatement(condition, self._loop_body())

    def _loop_body(self) -> Statement:
        self._loop_depth += 1
        try:
            return self._statement()
        finally:
            self._loop_depth -= 1

    def _break_statement(self, keyword: Token) -> BreakStatement:
        if self._loop_depth == 0:
            self._report(keyword, "Must be inside a loop to use 'break'.")
        self._consume(TokenType.SEMICOLON, "Expect ';' after 'break'.")
        return BreakStatement(keyword)

    def _block(self) -> List[Statement]:
        """Parse declarations up to the closing brace (opening brace already consumed)."""
        statements = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _var_declaration(self) -> VarDecl:
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarDecl(name, initializer)

    def _expression_statement(self) -> ExpressionStatement:
        expr = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatement(expr)

    def _function(self, kind: str) -> FunctionDef:
        """Parse a function declaration ('fun' already consumed)."""
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params: List[Token] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= self.MAX_ARGUMENTS:
                    self._report(self._current(), f"Can't have more than {self.MAX_ARGUMENTS} parameters.")
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")

        # A loop around the declaration does not make 'break' valid in the body
        enclosing_loops = self._loop_depth
        self._loop_depth = 0
        self._function_depth += 1
        try:
            body = self._block()
        finally:
            self._function_depth -= 1
            self._loop_depth = enclosing_loops

        return FunctionDef(name, params, body)

    # =========================================================================
    # Entry Points
    # =========================================================================

    def parse(self) -> List[Statement]:
        """Parse a whole program, collecting every syntax error.

        Damaged statements are dropped; check self.diagnostics before
        executing the result.
        """
        statements = []
        while not self._is_at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_expression(self) -> Optional[Expression]:
        """Parse the whole token stream as a single expression.

        Returns None if any syntax error was reported, including errors that
        were recovered locally by an error production.
        """
        errors_before = self.diagnostics.error_count
        try:
            expr = self._expression()
            if not self._is_at_end():
                raise self._report(self._current(), "Expect end of expression.")
        except ParseError:
            return None
        except RecursionError:
            self._report(self._current(), self.NESTING_MESSAGE)
            return None

        if self.diagnostics.error_count > errors_before:
            return None
        return expr


def parse(tokens: List[Token], diagnostics: Optional[DiagnosticCollector] = None) -> List[Statement]:
    """
    Convenience function to parse tokens into a list of statements.

    Args:
        tokens: List of tokens from the lexer
        diagnostics: Optional collector receiving syntax errors

    Returns:
        The statements that parsed cleanly
    """
    parser = Parser(tokens, diagnostics)
    return parser.parse()


def parse_expression(tokens: List[Token],
                     diagnostics: Optional[DiagnosticCollector] = None) -> Optional[Expression]:
    """Convenience function to parse tokens as one expression; None on failure."""
    parser = Parser(tokens, diagnostics)
    return parser.parse_expression()
