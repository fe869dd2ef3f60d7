from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import SemanticError
from .parser import (
	Assignment,
	BinaryExpr,
	Expression,
	FunctionCall,
	Goto,
	Label,
	Literal,
	Program,
	Spawn,
	UnaryExpr,
	Variable,
)
from .values import ValueType, type_of


INT = ValueType.INT
BOOL = ValueType.BOOL
STRING = ValueType.STRING
VOID = ValueType.VOID
ERROR = ValueType.ERROR


@dataclass(frozen=True)
class FunctionSignature:
	name: str
	params: Tuple[ValueType, ...]
	returns: ValueType = VOID

	@property
	def is_query(self) -> bool:
		return self.returns is not VOID


FUNCTION_SIGNATURES: Dict[str, FunctionSignature] = {
	sig.name: sig
	for sig in (
		FunctionSignature("Color", (STRING,)),
		FunctionSignature("Size", (INT,)),
		FunctionSignature("DrawLine", (INT, INT, INT)),
		FunctionSignature("DrawCircle", (INT, INT, INT)),
		FunctionSignature("DrawRectangle", (INT, INT, INT, INT, INT)),
		FunctionSignature("Fill", ()),
		FunctionSignature("SetCursor", (INT, INT)),
		FunctionSignature("GetActualX", (), INT),
		FunctionSignature("GetActualY", (), INT),
		FunctionSignature("GetCanvasSize", (), INT),
		FunctionSignature("GetColorCount", (STRING, INT, INT, INT, INT), INT),
		FunctionSignature("IsBrushColor", (STRING,), BOOL),
		FunctionSignature("IsBrushSize", (INT,), BOOL),
		FunctionSignature("IsCanvasColor", (STRING,), BOOL),
	)
}

ARITHMETIC_OPS = {"+", "-", "*", "/", "%", "**"}
COMPARISON_OPS = {"==", "<", ">", "<=", ">="}
LOGICAL_OPS = {"&&", "||"}


class SymbolTable:
	def __init__(self) -> None:
		self.types: Dict[str, ValueType] = {}

	def declare(self, name: str, vtype: ValueType) -> None:
		self.types[name] = vtype

	def get(self, name: str) -> Optional[ValueType]:
		return self.types.get(name)


class LabelTable:
	def __init__(self) -> None:
		self.indices: Dict[str, int] = {}

	def declare(self, name: str, index: int) -> bool:
		"""Returns False when the label was already declared."""
		if name in self.indices:
			return False
		self.indices[name] = index
		return True

	def is_declared(self, name: str) -> bool:
		return name in self.indices


class SemanticAnalyzer:
	"""Collects every independent defect of a parsed program.

	Expressions are validated and typed in the same walk. A defect yields
	the ERROR type, which the enclosing expression accepts silently so each
	root cause is reported once.
	"""

	def __init__(self) -> None:
		self.symbols = SymbolTable()
		self.labels = LabelTable()
		self.errors: List[SemanticError] = []

	def error(self, message: str, line: int, column: int) -> ValueType:
		self.errors.append(SemanticError(message, line, column))
		return ERROR

	def analyze(self, program: Program) -> List[SemanticError]:
		if not program.statements:
			self.error("The program is empty", 0, 0)
			return self.errors

		for index, stmt in enumerate(program.statements):
			if isinstance(stmt, Label) and not self.labels.declare(stmt.name, index):
				self.error(f"Label '{stmt.name}' is already defined", stmt.line, stmt.column)

		spawn_seen = False
		for index, stmt in enumerate(program.statements):
			if isinstance(stmt, Spawn):
				if spawn_seen:
					self.error("Only one 'Spawn' instruction is allowed", stmt.line, stmt.column)
				elif index != 0:
					self.error("'Spawn' must be the first instruction", stmt.line, stmt.column)
				spawn_seen = True
			elif isinstance(stmt, Assignment):
				vtype = self.infer(stmt.expr)
				self.symbols.declare(stmt.name, vtype)
			elif isinstance(stmt, Goto):
				if not self.labels.is_declared(stmt.target_label):
					self.error(f"Label '{stmt.target_label}' is not defined", stmt.line, stmt.column)
				cond = self.infer(stmt.condition)
				if cond not in (BOOL, ERROR):
					self.error(
						f"The 'GoTo' condition must be Bool, got {cond}",
						stmt.condition.line,
						stmt.condition.column,
					)
			elif isinstance(stmt, FunctionCall):
				self.check_call(stmt)
			elif isinstance(stmt, Label):
				pass
			else:
				raise TypeError(f"Unknown statement {type(stmt).__name__}")

		if not spawn_seen:
			self.error("Every program must start with 'Spawn'", 0, 0)
		return self.errors

	def check_call(self, call: FunctionCall) -> ValueType:
		sig = FUNCTION_SIGNATURES.get(call.name)
		if sig is None:
			for arg in call.args:
				self.infer(arg)
			return self.error(f"Function '{call.name}' is not recognized", call.line, call.column)

		if len(call.args) != len(sig.params):
			self.error(
				f"'{call.name}' expects {len(sig.params)} arguments but got {len(call.args)}",
				call.line,
				call.column,
			)

		for i, arg in enumerate(call.args):
			arg_type = self.infer(arg)
			if i >= len(sig.params) or arg_type is ERROR:
				continue
			expected = sig.params[i]
			if arg_type is not expected:
				self.error(
					f"Argument {i + 1} of '{call.name}' must be {expected}, got {arg_type}",
					arg.line,
					arg.column,
				)
		return sig.returns

	def infer(self, node: Expression) -> ValueType:
		if isinstance(node, Literal):
			return type_of(node.value)
		if isinstance(node, Variable):
			vtype = self.symbols.get(node.name)
			if vtype is None:
				return self.error(f"Variable '{node.name}' used before assignment", node.line, node.column)
			return vtype
		if isinstance(node, UnaryExpr):
			operand = self.infer(node.operand)
			if operand is ERROR:
				return ERROR
			if operand is not INT:
				return self.error(
					f"Unary '{node.op}' requires Int, got {operand}", node.line, node.column
				)
			return INT
		if isinstance(node, BinaryExpr):
			left = self.infer(node.left)
			right = self.infer(node.right)
			if left is ERROR or right is ERROR:
				return ERROR
			return self.infer_binary(node, left, right)
		if isinstance(node, FunctionCall):
			result = self.check_call(node)
			if result is VOID:
				return self.error(
					f"'{node.name}' does not return a value", node.line, node.column
				)
			return result
		raise TypeError(f"Unknown expression {type(node).__name__}")

	def infer_binary(self, node: BinaryExpr, left: ValueType, right: ValueType) -> ValueType:
		op = node.op
		if op in ARITHMETIC_OPS:
			if left is INT and right is INT:
				return INT
			return self.error(
				f"Operator '{op}' is invalid between {left} and {right}", node.line, node.column
			)
		if op in COMPARISON_OPS:
			if left is not right:
				return self.error(
					f"Cannot compare {left} with {right} using '{op}'", node.line, node.column
				)
			if op != "==" and left is not INT:
				return self.error(
					f"Operator '{op}' requires Int operands, got {left}", node.line, node.column
				)
			return BOOL
		if op in LOGICAL_OPS:
			if left is BOOL and right is BOOL:
				return BOOL
			return self.error(
				f"Logical operator '{op}' requires Bool operands, got {left} and {right}",
				node.line,
				node.column,
			)
		return self.error(f"Unknown operator '{op}'", node.line, node.column)


def analyze(program: Program) -> List[SemanticError]:
	return SemanticAnalyzer().analyze(program)
