from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .errors import RuntimeErrorWithLine
from .values import Value, type_of


@dataclass
class ExecutionState:
	"""Everything a program run remembers between chunked `execute` calls.

	Pixels live in the canvas; the canvas reads and moves the cursor kept
	here.
	"""

	variables: Dict[str, Value] = field(default_factory=dict)
	labels: Dict[str, int] = field(default_factory=dict)
	cursor_x: int = 0
	cursor_y: int = 0
	brush_color: str = "Black"
	brush_size: int = 1
	last_executed_line: int = 0
	spawned: bool = False
	instruction_pointer: int = 0

	def reset(self) -> None:
		self.variables.clear()
		self.labels.clear()
		self.cursor_x = 0
		self.cursor_y = 0
		self.brush_color = "Black"
		self.brush_size = 1
		self.last_executed_line = 0
		self.spawned = False
		self.instruction_pointer = 0

	def get_variable(self, name: str, line: int = 0, column: int = 0) -> Value:
		if name not in self.variables:
			raise RuntimeErrorWithLine(f"Variable '{name}' is not defined", line, column)
		return self.variables[name]

	def set_variable(self, name: str, value: Value) -> None:
		type_of(value)
		self.variables[name] = value

	def declare_label(self, name: str, index: int, line: int = 0, column: int = 0) -> None:
		if name in self.labels:
			raise RuntimeErrorWithLine(f"Label '{name}' is already declared", line, column)
		self.labels[name] = index

	def get_label_index(self, name: str, line: int = 0, column: int = 0) -> int:
		if name not in self.labels:
			raise RuntimeErrorWithLine(f"Label '{name}' not found", line, column)
		return self.labels[name]

	def to_dict(self) -> Dict[str, Any]:
		return {
			"variables": dict(self.variables),
			"cursorX": self.cursor_x,
			"cursorY": self.cursor_y,
			"brushColor": self.brush_color,
			"brushSize": self.brush_size,
			"lastExecutedLine": self.last_executed_line,
			"spawned": self.spawned,
			"instructionPointer": self.instruction_pointer,
		}

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "ExecutionState":
		state = cls(
			cursor_x=int(data.get("cursorX", 0)),
			cursor_y=int(data.get("cursorY", 0)),
			brush_color=str(data.get("brushColor", "Black")),
			brush_size=int(data.get("brushSize", 1)),
			last_executed_line=int(data.get("lastExecutedLine", 0)),
			spawned=bool(data.get("spawned", False)),
			instruction_pointer=int(data.get("instructionPointer", 0)),
		)
		for name, value in data.get("variables", {}).items():
			state.set_variable(name, value)
		return state
