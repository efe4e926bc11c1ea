"""
py-table: a small, zero-dependency table library with exact decimal arithmetic

Build a grid of cells, do row/column arithmetic and lookups, and export
to CSV or JSON, without pulling in a full dataframe engine.

Main classes:
    - Cell: typed scalar (empty, text, or decimal number)
    - Slice: owned row/column snapshot with elementwise arithmetic
    - Table: rectangular grid of cells with optional header labels
    - CellRef: short-lived handle for editing one table cell in place

Zero external dependencies - pure Python stdlib only.
"""

from .cell import Cell, CellKind, DIV0
from .slice import Slice
from .table import Table
from .cellref import CellRef
from .errors import (
	PyTableError,
	ParseError,
	TypeMismatchError,
	LengthMismatchError,
	WidthMismatchError,
	IndexOutOfBoundsError,
	StaleReferenceError,
	ColumnNotFoundError,
)


def read_csv(text, header=False):
	"""Parse CSV text into a Table."""
	return Table.from_csv(text, header=header)


def read_json(text, header=False):
	"""Parse a JSON array of arrays into a Table."""
	return Table.from_json(text, header=header)


__version__ = "0.1.0"
__all__ = [
	"Cell",
	"CellKind",
	"CellRef",
	"DIV0",
	"Slice",
	"Table",
	"read_csv",
	"read_json",
	"PyTableError",
	"ParseError",
	"TypeMismatchError",
	"LengthMismatchError",
	"WidthMismatchError",
	"IndexOutOfBoundsError",
	"StaleReferenceError",
	"ColumnNotFoundError",
]
