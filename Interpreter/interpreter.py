from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from Engine.canvas import Canvas, CanvasError

from .errors import PixelWalleError, RuntimeErrorWithLine
from .lexer import lex_file, tokenize
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
	Statement,
	UnaryExpr,
	Variable,
	parse,
)
from .semantic import FUNCTION_SIGNATURES, analyze
from .state import ExecutionState
from .values import INT32_MOD, Value, ValueType, as_condition, as_int, as_str, type_of, wrap_int32


logger = logging.getLogger(__name__)

UNBOUNDED = -1


@dataclass
class ChunkResult:
	cursor_x: int
	cursor_y: int
	last_executed_line: int
	instruction_pointer: int
	next_line: int
	finished: bool

	def to_dict(self) -> Dict[str, Any]:
		return {
			"cursorX": self.cursor_x,
			"cursorY": self.cursor_y,
			"lastProcessedLine": self.last_executed_line,
			"nextLine": self.next_line,
			"finished": self.finished,
		}


class Interpreter:
	"""Walks a parsed program against an ExecutionState and a Canvas.

	Execution is chunked: each call to `execute` runs a window of the
	program starting at a source line and stops once `budget` statements
	ran or the window's last line was passed. State and canvas keep every
	change between calls.
	"""

	def __init__(self, state: ExecutionState, canvas: Canvas) -> None:
		self.state = state
		self.canvas = canvas
		if canvas.state is not state:
			canvas.bind(state)
		self.builtins: Dict[str, Callable[[List[Value], FunctionCall], Optional[Value]]] = {
			"Color": self._builtin_color,
			"Size": self._builtin_size,
			"DrawLine": self._builtin_draw_line,
			"DrawCircle": self._builtin_draw_circle,
			"DrawRectangle": self._builtin_draw_rectangle,
			"Fill": self._builtin_fill,
			"SetCursor": self._builtin_set_cursor,
			"GetActualX": self._builtin_get_actual_x,
			"GetActualY": self._builtin_get_actual_y,
			"GetCanvasSize": self._builtin_get_canvas_size,
			"GetColorCount": self._builtin_get_color_count,
			"IsBrushColor": self._builtin_is_brush_color,
			"IsBrushSize": self._builtin_is_brush_size,
			"IsCanvasColor": self._builtin_is_canvas_color,
		}

	def index_labels(self, program: Program) -> None:
		self.state.labels.clear()
		for index, stmt in enumerate(program.statements):
			if isinstance(stmt, Label):
				self.state.declare_label(stmt.name, index, stmt.line, stmt.column)

	def start_index(self, program: Program, start_line: int) -> int:
		if start_line <= 1:
			return 0
		for index, stmt in enumerate(program.statements):
			if stmt.line >= start_line:
				return index
		return len(program.statements)

	def execute(self, program: Program, start_line: int = 1, budget: int = UNBOUNDED) -> ChunkResult:
		statements = program.statements
		self.index_labels(program)
		pointer = self.start_index(program, start_line)
		bounded = budget != UNBOUNDED
		window_end = start_line + budget
		executed = 0
		logger.debug("chunk start line=%d budget=%d pointer=%d", start_line, budget, pointer)

		while pointer < len(statements) and (not bounded or executed < budget):
			stmt = statements[pointer]
			if bounded and stmt.line >= window_end:
				break

			target = self.execute_stmt(stmt)
			executed += 1
			self.state.last_executed_line = stmt.line

			if target is None:
				pointer += 1
				continue

			pointer = target
			target_line = statements[target].line
			logger.debug("jump from line %d to line %d", stmt.line, target_line)
			if bounded and (target_line < start_line or target_line >= window_end):
				break

		self.state.instruction_pointer = pointer
		finished = pointer >= len(statements)
		next_line = statements[pointer].line if not finished else self.state.last_executed_line + 1
		logger.debug("chunk end pointer=%d finished=%s", pointer, finished)
		return ChunkResult(
			self.state.cursor_x,
			self.state.cursor_y,
			self.state.last_executed_line,
			pointer,
			next_line,
			finished,
		)

	def execute_stmt(self, stmt: Statement) -> Optional[int]:
		"""Runs one statement; returns the jump target index for a taken GoTo."""
		try:
			if isinstance(stmt, Spawn):
				self.spawn(stmt)
				return None
			if isinstance(stmt, Assignment):
				value = self.eval_expr(stmt.expr)
				self.state.set_variable(stmt.name, value)
				return None
			if isinstance(stmt, FunctionCall):
				self.call_function(stmt)
				return None
			if isinstance(stmt, Goto):
				condition = self.eval_expr(stmt.condition)
				if not as_condition(condition, stmt.condition.line, stmt.condition.column):
					return None
				return self.state.get_label_index(stmt.target_label, stmt.line, stmt.column)
			if isinstance(stmt, Label):
				return None
		except CanvasError as exc:
			raise RuntimeErrorWithLine(str(exc), stmt.line, stmt.column) from exc
		raise RuntimeErrorWithLine(f"Unknown statement {type(stmt).__name__}", stmt.line, stmt.column)

	def spawn(self, stmt: Spawn) -> None:
		if self.state.spawned:
			raise RuntimeErrorWithLine("'Spawn' can only be executed once", stmt.line, stmt.column)
		self.canvas.setCursor(stmt.x, stmt.y)
		self.state.spawned = True

	def eval_expr(self, expr: Expression) -> Value:
		if isinstance(expr, Literal):
			return expr.value
		if isinstance(expr, Variable):
			return self.state.get_variable(expr.name, expr.line, expr.column)
		if isinstance(expr, UnaryExpr):
			value = as_int(self.eval_expr(expr.operand), f"Operand of unary '{expr.op}'", expr.line, expr.column)
			return wrap_int32(-value) if expr.op == "-" else value
		if isinstance(expr, BinaryExpr):
			left = self.eval_expr(expr.left)
			right = self.eval_expr(expr.right)
			return self.eval_binary(expr, left, right)
		if isinstance(expr, FunctionCall):
			sig = FUNCTION_SIGNATURES.get(expr.name)
			if sig is not None and not sig.is_query:
				raise RuntimeErrorWithLine(
					f"'{expr.name}' does not return a value", expr.line, expr.column
				)
			try:
				return self.call_function(expr)
			except CanvasError as exc:
				raise RuntimeErrorWithLine(str(exc), expr.line, expr.column) from exc
		raise RuntimeErrorWithLine(f"Unknown expression {type(expr).__name__}", expr.line, expr.column)

	def eval_binary(self, expr: BinaryExpr, left: Value, right: Value) -> Value:
		op = expr.op
		line, column = expr.line, expr.column
		if op in ("&&", "||"):
			if type_of(left) is not ValueType.BOOL or type_of(right) is not ValueType.BOOL:
				raise RuntimeErrorWithLine(
					f"Logical operator '{op}' requires Bool operands, got {type_of(left)} and {type_of(right)}",
					line,
					column,
				)
			return (left and right) if op == "&&" else (left or right)
		if op in ("==", "<", ">", "<=", ">="):
			if type_of(left) is not type_of(right):
				raise RuntimeErrorWithLine(
					f"Cannot compare {type_of(left)} with {type_of(right)} using '{op}'", line, column
				)
			if op == "==":
				return left == right
			if type_of(left) is not ValueType.INT:
				raise RuntimeErrorWithLine(f"Operator '{op}' requires Int operands", line, column)
			if op == "<":
				return left < right
			if op == ">":
				return left > right
			if op == "<=":
				return left <= right
			return left >= right

		a = as_int(left, f"Left operand of '{op}'", line, column)
		b = as_int(right, f"Right operand of '{op}'", line, column)
		if op == "+":
			return wrap_int32(a + b)
		if op == "-":
			return wrap_int32(a - b)
		if op == "*":
			return wrap_int32(a * b)
		if op == "/":
			if b == 0:
				raise RuntimeErrorWithLine("Division by zero", line, column)
			return wrap_int32(truncated_div(a, b))
		if op == "%":
			if b == 0:
				raise RuntimeErrorWithLine("Modulo by zero", line, column)
			return wrap_int32(a - b * truncated_div(a, b))
		if op == "**":
			return int_power(a, b, line, column)
		raise RuntimeErrorWithLine(f"Unknown binary operator {op}", line, column)

	def call_function(self, call: FunctionCall) -> Optional[Value]:
		builtin = self.builtins.get(call.name)
		sig = FUNCTION_SIGNATURES.get(call.name)
		if builtin is None or sig is None:
			raise RuntimeErrorWithLine(f"Unknown function {call.name}", call.line, call.column)
		if len(call.args) != len(sig.params):
			raise RuntimeErrorWithLine(
				f"'{call.name}' expects {len(sig.params)} arguments but got {len(call.args)}",
				call.line,
				call.column,
			)
		args = [self.eval_expr(arg) for arg in call.args]
		return builtin(args, call)

	def _ints(self, args: List[Value], call: FunctionCall) -> List[int]:
		return [
			as_int(value, f"Argument {i + 1} of '{call.name}'", call.line, call.column)
			for i, value in enumerate(args)
		]

	def _builtin_color(self, args: List[Value], call: FunctionCall) -> None:
		self.canvas.setColor(as_str(args[0], "Argument 1 of 'Color'", call.line, call.column))

	def _builtin_size(self, args: List[Value], call: FunctionCall) -> None:
		self.canvas.setSize(*self._ints(args, call))

	def _builtin_draw_line(self, args: List[Value], call: FunctionCall) -> None:
		self.canvas.drawLine(*self._ints(args, call))

	def _builtin_draw_circle(self, args: List[Value], call: FunctionCall) -> None:
		self.canvas.drawCircle(*self._ints(args, call))

	def _builtin_draw_rectangle(self, args: List[Value], call: FunctionCall) -> None:
		self.canvas.drawRectangle(*self._ints(args, call))

	def _builtin_fill(self, args: List[Value], call: FunctionCall) -> None:
		self.canvas.fill()

	def _builtin_set_cursor(self, args: List[Value], call: FunctionCall) -> None:
		self.canvas.setCursor(*self._ints(args, call))

	def _builtin_get_actual_x(self, args: List[Value], call: FunctionCall) -> int:
		return self.state.cursor_x

	def _builtin_get_actual_y(self, args: List[Value], call: FunctionCall) -> int:
		return self.state.cursor_y

	def _builtin_get_canvas_size(self, args: List[Value], call: FunctionCall) -> int:
		return self.canvas.getCanvasSize()

	def _builtin_get_color_count(self, args: List[Value], call: FunctionCall) -> int:
		color = as_str(args[0], "Argument 1 of 'GetColorCount'", call.line, call.column)
		return self.canvas.getColorCount(color, *self._ints(args[1:], call))

	def _builtin_is_brush_color(self, args: List[Value], call: FunctionCall) -> bool:
		return self.canvas.isBrushColor(as_str(args[0], "Argument 1 of 'IsBrushColor'", call.line, call.column))

	def _builtin_is_brush_size(self, args: List[Value], call: FunctionCall) -> bool:
		return self.canvas.isBrushSize(*self._ints(args, call))

	def _builtin_is_canvas_color(self, args: List[Value], call: FunctionCall) -> bool:
		return self.canvas.isCanvasColor(as_str(args[0], "Argument 1 of 'IsCanvasColor'", call.line, call.column))


def truncated_div(a: int, b: int) -> int:
	# integer division rounding toward zero, not toward negative infinity
	q = abs(a) // abs(b)
	return q if (a < 0) == (b < 0) else -q


def int_power(base: int, exponent: int, line: int, column: int) -> int:
	if exponent >= 0:
		# modular pow keeps intermediates within 32 bits, huge exponents stay cheap
		return wrap_int32(pow(base, exponent, INT32_MOD))
	if base == 0:
		raise RuntimeErrorWithLine("Division by zero", line, column)
	if base == 1:
		return 1
	if base == -1:
		return 1 if exponent % 2 == 0 else -1
	return 0


def execute(
	program: Program,
	state: ExecutionState,
	canvas: Canvas,
	start_line: int = 1,
	budget: int = UNBOUNDED,
) -> ChunkResult:
	return Interpreter(state, canvas).execute(program, start_line, budget)


def compile_source(source: str) -> Program:
	return parse(tokenize(source))


def check_source(source: str) -> List[PixelWalleError]:
	"""Diagnostics for a source text: one lex/parse error, or the semantic batch."""
	try:
		program = compile_source(source)
	except PixelWalleError as exc:
		return [exc]
	return list(analyze(program))


def run_source(
	source: str,
	state: ExecutionState,
	canvas: Canvas,
	start_line: int = 1,
	budget: int = UNBOUNDED,
) -> ChunkResult:
	return execute(compile_source(source), state, canvas, start_line, budget)


def run_file(
	path: str | Path,
	state: ExecutionState,
	canvas: Canvas,
	start_line: int = 1,
	budget: int = UNBOUNDED,
) -> ChunkResult:
	program = parse(lex_file(path))
	return execute(program, state, canvas, start_line, budget)
