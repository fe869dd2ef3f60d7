from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .errors import ParseError
from .lexer import CALLABLE_KINDS, Token, TokenKind
from .values import INT32_MAX, INT32_MIN


# AST Nodes


@dataclass
class Spawn:
	x: int
	y: int
	line: int
	column: int


@dataclass
class Assignment:
	name: str
	expr: "Expression"
	line: int
	column: int


@dataclass
class Label:
	name: str
	line: int
	column: int


@dataclass
class Goto:
	target_label: str
	condition: "Expression"
	line: int
	column: int


@dataclass
class FunctionCall:
	name: str
	args: List["Expression"]
	line: int
	column: int


# Expressions


@dataclass
class Literal:
	value: Union[int, bool, str]
	line: int
	column: int


@dataclass
class Variable:
	name: str
	line: int
	column: int


@dataclass
class BinaryExpr:
	left: "Expression"
	op: str
	right: "Expression"
	line: int
	column: int


@dataclass
class UnaryExpr:
	op: str
	operand: "Expression"
	line: int
	column: int


Expression = Union[Literal, Variable, BinaryExpr, UnaryExpr, FunctionCall]
Statement = Union[Spawn, Assignment, Label, Goto, FunctionCall]


@dataclass
class Program:
	statements: List[Statement]
	line: int = 1
	column: int = 1


COMPARISON_KINDS = (
	TokenKind.EQUAL,
	TokenKind.LESS,
	TokenKind.GREATER,
	TokenKind.LESS_EQUAL,
	TokenKind.GREATER_EQUAL,
)


class Parser:
	def __init__(self, tokens: Sequence[Token]) -> None:
		self.tokens = list(tokens)
		if not self.tokens or self.tokens[-1].kind is not TokenKind.EOF:
			last = self.tokens[-1] if self.tokens else None
			line = last.line if last else 1
			self.tokens.append(Token("", TokenKind.EOF, line, 1))
		self.pos = 0

	def current(self) -> Token:
		return self.tokens[min(self.pos, len(self.tokens) - 1)]

	def peek(self, offset: int = 1) -> Token:
		return self.tokens[min(self.pos + offset, len(self.tokens) - 1)]

	def at_end(self) -> bool:
		return self.current().kind is TokenKind.EOF

	def advance(self) -> Token:
		cur = self.current()
		if not self.at_end():
			self.pos += 1
		return cur

	def check(self, kind: TokenKind) -> bool:
		return self.current().kind is kind

	def match(self, *kinds: TokenKind) -> Optional[Token]:
		if self.current().kind in kinds:
			return self.advance()
		return None

	def expect(self, kind: TokenKind, message: str) -> Token:
		if self.check(kind):
			return self.advance()
		cur = self.current()
		found = "end of input" if cur.kind is TokenKind.EOF else repr(cur.lexeme)
		raise ParseError(f"{message}, found {found}", cur.line, cur.column)

	def skip_newlines(self) -> None:
		while self.check(TokenKind.NEWLINE):
			self.advance()

	def parse_program(self) -> Program:
		self.skip_newlines()
		if self.at_end():
			cur = self.current()
			raise ParseError("The program is empty", cur.line, cur.column)

		statements: List[Statement] = []
		while not self.at_end():
			statements.append(self.parse_statement())
			if not self.at_end():
				self.expect(TokenKind.NEWLINE, "Expected end of line after statement")
			self.skip_newlines()

		first = statements[0]
		return Program(statements, first.line, first.column)

	def parse_statement(self) -> Statement:
		cur = self.current()
		if cur.kind is TokenKind.SPAWN:
			return self.parse_spawn()
		if cur.kind in CALLABLE_KINDS:
			return self.parse_call()
		if cur.kind is TokenKind.GOTO:
			return self.parse_goto()
		if cur.kind is TokenKind.IDENTIFIER:
			nxt = self.peek().kind
			if nxt is TokenKind.ASSIGN:
				return self.parse_assignment()
			if nxt in (TokenKind.NEWLINE, TokenKind.LEFT_BRACKET, TokenKind.EOF):
				return self.parse_label()
			raise ParseError(
				"Expected '<-' for an assignment or end of line for a label", cur.line, cur.column
			)
		raise ParseError(f"Invalid instruction at start of line: {cur.lexeme!r}", cur.line, cur.column)

	def parse_spawn(self) -> Spawn:
		tok = self.expect(TokenKind.SPAWN, "Expected 'Spawn'")
		self.expect(TokenKind.LEFT_PAREN, "Expected '(' after 'Spawn'")
		x = self.parse_signed_int("X coordinate")
		self.expect(TokenKind.COMMA, "Expected ',' between the coordinates")
		y = self.parse_signed_int("Y coordinate")
		self.expect(TokenKind.RIGHT_PAREN, "Expected ')' after the coordinates")
		return Spawn(x, y, tok.line, tok.column)

	def parse_signed_int(self, what: str) -> int:
		negative = self.match(TokenKind.MINUS) is not None
		tok = self.expect(TokenKind.NUMBER, f"Expected an integer for the {what}")
		return self.to_int(tok, negative)

	def to_int(self, tok: Token, negative: bool = False) -> int:
		value = int(tok.lexeme)
		if negative:
			value = -value
		if not INT32_MIN <= value <= INT32_MAX:
			raise ParseError(f"Invalid number: {tok.lexeme}", tok.line, tok.column)
		return value

	def parse_assignment(self) -> Assignment:
		name_tok = self.expect(TokenKind.IDENTIFIER, "Expected a variable name")
		self.expect(TokenKind.ASSIGN, "Expected '<-' in assignment")
		expr = self.parse_expr()
		return Assignment(name_tok.lexeme, expr, name_tok.line, name_tok.column)

	def parse_label(self) -> Label:
		tok = self.expect(TokenKind.IDENTIFIER, "Expected a label name")
		if any(ch.isspace() for ch in tok.lexeme):
			raise ParseError("Labels cannot contain whitespace", tok.line, tok.column)
		return Label(tok.lexeme, tok.line, tok.column)

	def parse_goto(self) -> Goto:
		tok = self.expect(TokenKind.GOTO, "Expected 'GoTo'")
		self.expect(TokenKind.LEFT_BRACKET, "Expected '[' after 'GoTo'")
		label_tok = self.expect(TokenKind.IDENTIFIER, "Expected the target label name")
		self.expect(TokenKind.RIGHT_BRACKET, "Expected ']' after the label name")
		self.expect(TokenKind.LEFT_PAREN, "Expected '(' before the condition")
		condition = self.parse_expr()
		self.expect(TokenKind.RIGHT_PAREN, "Expected ')' after the condition")
		return Goto(label_tok.lexeme, condition, tok.line, tok.column)

	def parse_call(self) -> FunctionCall:
		name_tok = self.advance()
		self.expect(TokenKind.LEFT_PAREN, f"Expected '(' after '{name_tok.lexeme}'")
		args: List[Expression] = []
		if not self.check(TokenKind.RIGHT_PAREN):
			args.append(self.parse_expr())
			while self.match(TokenKind.COMMA):
				args.append(self.parse_expr())
		self.expect(TokenKind.RIGHT_PAREN, "Expected ')' to close the arguments")
		return FunctionCall(name_tok.lexeme, args, name_tok.line, name_tok.column)

	def parse_expr(self) -> Expression:
		return self.parse_or_expr()

	def parse_or_expr(self) -> Expression:
		left = self.parse_and_expr()
		while True:
			op = self.match(TokenKind.OR)
			if op is None:
				return left
			right = self.parse_and_expr()
			left = BinaryExpr(left, op.lexeme, right, op.line, op.column)

	def parse_and_expr(self) -> Expression:
		left = self.parse_compare_expr()
		while True:
			op = self.match(TokenKind.AND)
			if op is None:
				return left
			right = self.parse_compare_expr()
			left = BinaryExpr(left, op.lexeme, right, op.line, op.column)

	def parse_compare_expr(self) -> Expression:
		left = self.parse_add_expr()
		op = self.match(*COMPARISON_KINDS)
		if op is None:
			return left
		right = self.parse_add_expr()
		return BinaryExpr(left, op.lexeme, right, op.line, op.column)

	def parse_add_expr(self) -> Expression:
		left = self.parse_mul_expr()
		while True:
			op = self.match(TokenKind.PLUS, TokenKind.MINUS)
			if op is None:
				return left
			right = self.parse_mul_expr()
			left = BinaryExpr(left, op.lexeme, right, op.line, op.column)

	def parse_mul_expr(self) -> Expression:
		left = self.parse_power_expr()
		while True:
			op = self.match(TokenKind.TIMES, TokenKind.DIVIDE, TokenKind.MODULO)
			if op is None:
				return left
			right = self.parse_power_expr()
			left = BinaryExpr(left, op.lexeme, right, op.line, op.column)

	def parse_power_expr(self) -> Expression:
		base = self.parse_unary_expr()
		op = self.match(TokenKind.POWER)
		if op is None:
			return base
		# right associative: 2 ** 3 ** 2 == 2 ** 9
		exponent = self.parse_power_expr()
		return BinaryExpr(base, op.lexeme, exponent, op.line, op.column)

	def parse_unary_expr(self) -> Expression:
		op = self.match(TokenKind.MINUS, TokenKind.PLUS)
		if op is not None:
			operand = self.parse_unary_expr()
			return UnaryExpr(op.lexeme, operand, op.line, op.column)
		return self.parse_primary_expr()

	def parse_primary_expr(self) -> Expression:
		cur = self.current()
		if self.match(TokenKind.LEFT_PAREN):
			expr = self.parse_expr()
			self.expect(TokenKind.RIGHT_PAREN, "Expected ')' to close the expression")
			return expr
		if self.match(TokenKind.BOOLEAN):
			return Literal(cur.lexeme == "true", cur.line, cur.column)
		if self.match(TokenKind.NUMBER):
			return Literal(self.to_int(cur), cur.line, cur.column)
		if self.match(TokenKind.STRING):
			return Literal(cur.lexeme[1:-1], cur.line, cur.column)
		if cur.kind in CALLABLE_KINDS:
			return self.parse_call()
		if self.match(TokenKind.IDENTIFIER):
			return Variable(cur.lexeme, cur.line, cur.column)
		found = "end of input" if cur.kind is TokenKind.EOF else repr(cur.lexeme)
		raise ParseError(f"Unexpected {found} in expression", cur.line, cur.column)


def parse(tokens: Sequence[Token]) -> Program:
	return Parser(tokens).parse_program()
