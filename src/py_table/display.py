"""Display and repr logic for Slice and Table."""

from __future__ import annotations
from typing import List

from .cell import CellKind


# How many rows/columns to show at each end before inserting "..."
MAX_HEAD_ROWS = 5
MAX_HEAD_COLS = 5

_ELLIPSIS = "..."


def _needs_quoting(label: str) -> bool:
	"""A label needs quoting if it has leading/trailing whitespace or a separator."""
	if not label:
		return False
	return label != label.strip() or any(c in label for c in ',"\n\r')


def _column_kind(cells) -> str:
	"""number / text / empty / mixed, ignoring empty cells."""
	kinds = {c.kind for c in cells if c.kind is not CellKind.EMPTY}
	if not kinds:
		return CellKind.EMPTY.value
	if len(kinds) == 1:
		return kinds.pop().value
	return "mixed"


def _preview(items: list, limit: int) -> list:
	"""Symmetric head/tail preview with an ellipsis marker in between."""
	if len(items) > limit * 2:
		return list(items[:limit]) + [_ELLIPSIS] + list(items[-limit:])
	return list(items)


def _format_cells(cells, kind: str) -> List[str]:
	out = []
	for c in _preview(list(cells), MAX_HEAD_ROWS):
		if c is _ELLIPSIS:
			out.append(_ELLIPSIS)
		elif c.kind is CellKind.EMPTY:
			out.append("")
		elif c.kind is CellKind.TEXT and kind == "mixed":
			out.append(repr(c.value))
		else:
			out.append(str(c))
	return out


def _align(strings: List[str], width: int, kind: str) -> List[str]:
	# numbers right, everything else left
	if kind == CellKind.NUMBER.value:
		return [s.rjust(width) for s in strings]
	return [s.ljust(width) for s in strings]


def _repr_slice(s) -> str:
	"""Pretty repr for a Slice: one cell per line plus a footer."""
	kind = _column_kind(s)
	formatted = _format_cells(s, kind)
	width = max((len(x) for x in formatted), default=0)
	lines = _align(formatted, width, kind)
	lines.append("")
	lines.append(f"# {len(s)} cell slice <{kind}>")
	return "\n".join(lines)


def _repr_table(tbl) -> str:
	"""Pretty repr for a Table."""
	rows, cols = tbl.size()
	if cols == 0:
		return f"# {rows}×0 table"

	truncated = cols > MAX_HEAD_COLS * 2
	if truncated:
		col_indices = list(range(MAX_HEAD_COLS)) + list(range(cols - MAX_HEAD_COLS, cols))
	else:
		col_indices = list(range(cols))

	grid = tbl._rows
	kinds_all = [_column_kind(row[j] for row in grid) for j in range(cols)]
	headers = tbl.headers

	columns = []
	for j in col_indices:
		kind = kinds_all[j]
		body = _format_cells((row[j] for row in grid), kind)
		if headers is not None:
			label = headers[j]
			head = repr(label) if _needs_quoting(label) else label
		else:
			head = f"[{j}]"
		width = max([len(head)] + [len(x) for x in body])
		columns.append(_align([head] + body, width, kind))

	if truncated:
		height = len(columns[0])
		columns.insert(MAX_HEAD_COLS, [_ELLIPSIS] * height)

	lines = ["  ".join(col[r] for col in columns).rstrip() for r in range(len(columns[0]))]

	if truncated:
		kinds = ", ".join(kinds_all[:MAX_HEAD_COLS]) + ", ..., " + ", ".join(kinds_all[-MAX_HEAD_COLS:])
	else:
		kinds = ", ".join(kinds_all)
	lines.append("")
	lines.append(f"# {rows}×{cols} table <{kinds}>")
	return "\n".join(lines)
