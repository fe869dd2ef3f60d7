from __future__ import annotations

from enum import Enum
from typing import Union

from .errors import RuntimeErrorWithLine


Value = Union[int, bool, str]

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
INT32_MOD = 2 ** 32


class ValueType(Enum):
	INT = "Int"
	BOOL = "Bool"
	STRING = "String"
	VOID = "Void"
	ERROR = "Error"

	def __str__(self) -> str:
		return self.value


def type_of(value: Value) -> ValueType:
	# bool must be checked first, it is a subclass of int
	if isinstance(value, bool):
		return ValueType.BOOL
	if isinstance(value, int):
		return ValueType.INT
	if isinstance(value, str):
		return ValueType.STRING
	raise TypeError(f"Not a PixelWalle value: {value!r}")


def as_int(value: Value, what: str, line: int, column: int) -> int:
	if type_of(value) is not ValueType.INT:
		raise RuntimeErrorWithLine(f"{what} must be Int, got {type_of(value)}", line, column)
	return int(value)


def as_str(value: Value, what: str, line: int, column: int) -> str:
	if type_of(value) is not ValueType.STRING:
		raise RuntimeErrorWithLine(f"{what} must be String, got {type_of(value)}", line, column)
	return str(value)


def as_condition(value: Value, line: int, column: int) -> bool:
	"""GoTo accepts native booleans and integers (non-zero is true)."""
	vtype = type_of(value)
	if vtype is ValueType.BOOL:
		return bool(value)
	if vtype is ValueType.INT:
		return value != 0
	raise RuntimeErrorWithLine("GoTo condition must be Int or Bool, got String", line, column)


def wrap_int32(value: int) -> int:
	# Int arithmetic wraps around like a two's complement 32-bit integer
	return (value - INT32_MIN) % INT32_MOD + INT32_MIN
