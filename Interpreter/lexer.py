from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Tuple

from .errors import LexError


class TokenKind(Enum):
	# Instructions
	SPAWN = "Spawn"
	COLOR = "Color"
	SIZE = "Size"
	DRAW_LINE = "DrawLine"
	DRAW_CIRCLE = "DrawCircle"
	DRAW_RECTANGLE = "DrawRectangle"
	FILL = "Fill"
	SET_CURSOR = "SetCursor"
	GOTO = "GoTo"

	# Functions
	GET_ACTUAL_X = "GetActualX"
	GET_ACTUAL_Y = "GetActualY"
	GET_CANVAS_SIZE = "GetCanvasSize"
	GET_COLOR_COUNT = "GetColorCount"
	IS_BRUSH_COLOR = "IsBrushColor"
	IS_BRUSH_SIZE = "IsBrushSize"
	IS_CANVAS_COLOR = "IsCanvasColor"

	# Literals and names
	NUMBER = "Number"
	STRING = "String"
	BOOLEAN = "Boolean"
	IDENTIFIER = "Identifier"

	# Operators
	PLUS = "+"
	MINUS = "-"
	TIMES = "*"
	DIVIDE = "/"
	MODULO = "%"
	POWER = "**"
	ASSIGN = "<-"
	AND = "&&"
	OR = "||"
	EQUAL = "=="
	LESS = "<"
	GREATER = ">"
	LESS_EQUAL = "<="
	GREATER_EQUAL = ">="

	# Punctuation
	LEFT_PAREN = "("
	RIGHT_PAREN = ")"
	LEFT_BRACKET = "["
	RIGHT_BRACKET = "]"
	COMMA = ","
	NEWLINE = "NewLine"
	EOF = "EndOfFile"


INSTRUCTIONS: Dict[str, TokenKind] = {
	"Spawn": TokenKind.SPAWN,
	"Color": TokenKind.COLOR,
	"Size": TokenKind.SIZE,
	"DrawLine": TokenKind.DRAW_LINE,
	"DrawCircle": TokenKind.DRAW_CIRCLE,
	"DrawRectangle": TokenKind.DRAW_RECTANGLE,
	"Fill": TokenKind.FILL,
	"SetCursor": TokenKind.SET_CURSOR,
	"GoTo": TokenKind.GOTO,
}

FUNCTIONS: Dict[str, TokenKind] = {
	"GetActualX": TokenKind.GET_ACTUAL_X,
	"GetActualY": TokenKind.GET_ACTUAL_Y,
	"GetCanvasSize": TokenKind.GET_CANVAS_SIZE,
	"GetColorCount": TokenKind.GET_COLOR_COUNT,
	"IsBrushColor": TokenKind.IS_BRUSH_COLOR,
	"IsBrushSize": TokenKind.IS_BRUSH_SIZE,
	"IsCanvasColor": TokenKind.IS_CANVAS_COLOR,
}

LITERALS: Dict[str, TokenKind] = {
	"true": TokenKind.BOOLEAN,
	"false": TokenKind.BOOLEAN,
}

KEYWORDS: Dict[str, TokenKind] = {**INSTRUCTIONS, **FUNCTIONS, **LITERALS}

# Names callable with `name(...)`, GoTo and Spawn have their own grammar.
CALLABLE_KINDS = frozenset(
	kind for name, kind in {**INSTRUCTIONS, **FUNCTIONS}.items() if name not in ("GoTo", "Spawn")
)

OPERATORS: Dict[str, TokenKind] = {
	"**": TokenKind.POWER,
	"<-": TokenKind.ASSIGN,
	"<=": TokenKind.LESS_EQUAL,
	">=": TokenKind.GREATER_EQUAL,
	"==": TokenKind.EQUAL,
	"&&": TokenKind.AND,
	"||": TokenKind.OR,
	"+": TokenKind.PLUS,
	"-": TokenKind.MINUS,
	"*": TokenKind.TIMES,
	"/": TokenKind.DIVIDE,
	"%": TokenKind.MODULO,
	"<": TokenKind.LESS,
	">": TokenKind.GREATER,
}

PUNCTUATION: Dict[str, TokenKind] = {
	"(": TokenKind.LEFT_PAREN,
	")": TokenKind.RIGHT_PAREN,
	"[": TokenKind.LEFT_BRACKET,
	"]": TokenKind.RIGHT_BRACKET,
	",": TokenKind.COMMA,
}

# Order matters only for ties; the longest match always wins.
LEX_RULES: List[Tuple[str, Pattern[str]]] = [
	("WORD", re.compile(r"[A-Za-z_][A-Za-z0-9_]*")),
	("NUMBER", re.compile(r"[0-9]+")),
	("OPERATOR", re.compile(r"\*\*|<-|<=|>=|==|&&|\|\||[+\-*/%<>]")),
	("PUNCT", re.compile(r"[()\[\],]")),
	("SKIP", re.compile(r"[ \t\r]+")),
	("STRING", re.compile(r"\"[^\"\n]*\"")),
	("NEWLINE", re.compile(r"\n")),
]

DOUBLED_ONLY = {"=": "==", "&": "&&", "|": "||"}


@dataclass(frozen=True)
class Token:
	lexeme: str
	kind: TokenKind
	line: int
	column: int

	def __repr__(self) -> str:
		return f"Token({self.kind.name}, {self.lexeme!r}, {self.line}:{self.column})"


def levenshtein(s: str, t: str) -> int:
	n, m = len(s), len(t)
	d = [[0] * (m + 1) for _ in range(n + 1)]
	for i in range(n + 1):
		d[i][0] = i
	for j in range(m + 1):
		d[0][j] = j
	for i in range(1, n + 1):
		for j in range(1, m + 1):
			cost = 0 if s[i - 1] == t[j - 1] else 1
			d[i][j] = min(
				d[i - 1][j] + 1,
				d[i][j - 1] + 1,
				d[i - 1][j - 1] + cost,
			)
	return d[n][m]


def suggest_keyword(word: str, max_distance: int = 2) -> Optional[str]:
	best: Optional[str] = None
	best_distance = max_distance + 1
	for keyword in KEYWORDS:
		distance = levenshtein(word, keyword)
		if distance < best_distance:
			best, best_distance = keyword, distance
	return best


def lex_file(path: str | Path) -> List[Token]:
	return tokenize(Path(path).read_text(encoding="utf-8"))


def tokenize(source: str) -> List[Token]:
	tokens: List[Token] = []
	pos = 0
	line = 1
	col = 1

	while pos < len(source):
		ch = source[pos]

		best_rule = None
		best_text = ""
		for rule, pattern in LEX_RULES:
			m = pattern.match(source, pos)
			if m and len(m.group()) > len(best_text):
				best_rule, best_text = rule, m.group()

		if best_rule is None:
			if ch in DOUBLED_ONLY:
				raise LexError(
					f"Invalid use of '{ch}'. Did you mean '{DOUBLED_ONLY[ch]}'?", line, col
				)
			if ch == '"':
				raise LexError("Unterminated string literal", line, col)
			raise LexError(f"Unexpected character {ch!r}", line, col)

		end = pos + len(best_text)
		nxt = source[end] if end < len(source) else ""

		if best_rule == "NUMBER":
			if nxt.isalpha() or nxt == "_":
				raise LexError(f"An identifier cannot start with a digit: '{best_text}{nxt}'", line, col)
			tokens.append(Token(best_text, TokenKind.NUMBER, line, col))
		elif best_rule == "WORD":
			kind = KEYWORDS.get(best_text)
			if kind is None and nxt == "(":
				suggestion = suggest_keyword(best_text)
				if suggestion is not None:
					raise LexError(
						f"Expected a keyword but found '{best_text}'. Did you mean '{suggestion}'?", line, col
					)
				raise LexError(f"Unrecognized keyword: '{best_text}'", line, col)
			tokens.append(Token(best_text, kind or TokenKind.IDENTIFIER, line, col))
		elif best_rule == "OPERATOR":
			tokens.append(Token(best_text, OPERATORS[best_text], line, col))
		elif best_rule == "PUNCT":
			tokens.append(Token(best_text, PUNCTUATION[best_text], line, col))
		elif best_rule == "STRING":
			tokens.append(Token(best_text, TokenKind.STRING, line, col))
		elif best_rule == "NEWLINE":
			tokens.append(Token("\n", TokenKind.NEWLINE, line, col))

		# only NEWLINE spans a line break, strings stop at '\n'
		if best_rule == "NEWLINE":
			line += 1
			col = 1
		else:
			col += len(best_text)
		pos = end

	tokens.append(Token("", TokenKind.EOF, line, col))
	return tokens
