from __future__ import annotations

from typing import Dict, Union


class PixelWalleError(Exception):
	"""Base for every diagnostic the pipeline can produce.

	Each error carries the source position it refers to so drivers can
	report `{line, column, message}` records without parsing messages.
	"""

	kind = "error"

	def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
		super().__init__(message)
		self.message = message
		self.line = line
		self.column = column

	def __str__(self) -> str:
		return f"Line {self.line}, column {self.column}: {self.message}"

	def to_dict(self) -> Dict[str, Union[int, str]]:
		return {"line": self.line, "column": self.column, "message": self.message}


class LexError(PixelWalleError):
	kind = "lex"


class ParseError(PixelWalleError):
	kind = "parse"


class SemanticError(PixelWalleError):
	kind = "semantic"


class RuntimeErrorWithLine(PixelWalleError, RuntimeError):
	kind = "runtime"
