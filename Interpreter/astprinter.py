from __future__ import annotations

from typing import List, Union

from .parser import (
	Assignment,
	BinaryExpr,
	FunctionCall,
	Goto,
	Label,
	Literal,
	Program,
	Spawn,
	UnaryExpr,
	Variable,
)


def format_ast(node: Union[Program, object], indent: int = 0) -> str:
	lines: List[str] = []
	_format(node, indent, lines)
	return "\n".join(lines)


def _format(node: object, indent: int, out: List[str]) -> None:
	pad = "  " * indent
	if isinstance(node, Program):
		out.append(f"{pad}Program:")
		for stmt in node.statements:
			_format(stmt, indent + 1, out)
		return
	if isinstance(node, Spawn):
		out.append(f"{pad}Spawn(x={node.x}, y={node.y})")
		return
	if isinstance(node, Assignment):
		out.append(f"{pad}Assign {node.name} <-")
		_format(node.expr, indent + 1, out)
		return
	if isinstance(node, FunctionCall):
		out.append(f"{pad}Call {node.name}(")
		for arg in node.args:
			_format(arg, indent + 1, out)
		out.append(f"{pad})")
		return
	if isinstance(node, Goto):
		out.append(f"{pad}GoTo [{node.target_label}] if:")
		_format(node.condition, indent + 1, out)
		return
	if isinstance(node, Label):
		out.append(f"{pad}Label: {node.name}")
		return
	if isinstance(node, Literal):
		value = node.value
		if isinstance(value, bool):
			text = "true" if value else "false"
		elif isinstance(value, str):
			text = f'"{value}"'
		else:
			text = str(value)
		out.append(f"{pad}Literal: {text}")
		return
	if isinstance(node, Variable):
		out.append(f"{pad}Variable: {node.name}")
		return
	if isinstance(node, BinaryExpr):
		out.append(f"{pad}Binary ({node.op})")
		_format(node.left, indent + 1, out)
		_format(node.right, indent + 1, out)
		return
	if isinstance(node, UnaryExpr):
		out.append(f"{pad}Unary ({node.op})")
		_format(node.operand, indent + 1, out)
		return
	raise TypeError(f"Unknown AST node {type(node).__name__}")
