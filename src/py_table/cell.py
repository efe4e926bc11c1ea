"""
Cell: a single typed scalar stored in a Slice or Table.

A cell holds exactly one of:
	- EMPTY  : unset; formats as ""
	- TEXT   : a str, stored verbatim
	- NUMBER : a decimal.Decimal, never a binary float

Arithmetic policy
-----------------
	- Empty op Empty is Empty (an unset cell stays unset).
	- Otherwise an Empty operand stands in for the identity of the
	  operation: 0 for + and -, 1 for * and for the divisor of /.
	  An Empty dividend stays Empty.
	- Text takes part only if it reads as a number ("12", "-1,234.5");
	  any other text raises TypeMismatchError.
	- Dividing by zero yields the text cell DIV0.

Comparison is total: Empty < Number < Text. Cells of different kinds
are never equal. Plain values on the right are parsed first, so
``Cell(10) == "10.0"`` holds; a str against a text cell stays text.
"""

import operator
import os
import re
import sys
import warnings

from decimal import Context
from decimal import Decimal
from decimal import InvalidOperation
from decimal import MAX_EMAX
from decimal import MAX_PREC
from decimal import MIN_EMIN
from enum import Enum

from .errors import TypeMismatchError


DIV0 = "#DIV/0"

# (+/-)123,456.789 | 123456.789 | .5
NUMERIC_PATTERN = re.compile(r'[+-]?(?:(?:(?:\d{1,3}(?:,\d{3})*|\d+)(?:\.\d+)?)|(?:\.\d+))')

# add/sub/mul never round; division uses the default 28-digit context
_EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)

_SCALAR_TYPES = (str, int, float, Decimal, type(None))


class CellKind(Enum):
	EMPTY = "empty"
	NUMBER = "number"
	TEXT = "text"


_KIND_RANK = {
	CellKind.EMPTY: 0,
	CellKind.NUMBER: 1,
	CellKind.TEXT: 2,
}


def _user_stacklevel():
	"""Stacklevel of the first frame outside this package, for warnings.warn."""
	package_dir = os.path.dirname(os.path.abspath(__file__))
	frame = sys._getframe(1)
	level = 1
	while frame is not None and os.path.dirname(os.path.abspath(frame.f_code.co_filename)) == package_dir:
		frame = frame.f_back
		level += 1
	return level


def parse_decimal(token):
	"""Read a numeric token as a Decimal, or return None if it is not one."""
	if not NUMERIC_PATTERN.fullmatch(token):
		return None
	try:
		return Decimal(token.replace(',', ''))
	except InvalidOperation:
		return None


def _number_from(value):
	if isinstance(value, bool):
		raise TypeMismatchError(f"Cannot store bool {value!r} in a numeric cell", token=value)
	if isinstance(value, int):
		return Decimal(value)
	if isinstance(value, float):
		warnings.warn(
			f"Converting float {value!r} to Decimal via repr; pass a str or Decimal for exact values",
			stacklevel=_user_stacklevel(),
		)
		value = Decimal(repr(value))
	if isinstance(value, Decimal):
		if not value.is_finite():
			raise TypeMismatchError(f"Cannot store non-finite number {value!r} in a cell", token=value)
		return value
	raise TypeMismatchError(f"Unsupported cell value of type '{type(value).__name__}'", token=value)


def _format_number(value):
	# fixed-point, keeps the stored scale: Decimal('1.50') -> '1.50', Decimal('1E+3') -> '1000'
	return format(value, 'f')


class Cell:
	""" Typed scalar: empty, text or exact decimal number """
	__slots__ = ('_kind', '_value')
	__hash__ = None

	def __init__(self, value=None):
		"""
		Raw construction. Strings are kept as text even when they look
		numeric; use Cell.parse for the token conversion rule.
		"""
		if isinstance(value, Cell):
			self._kind = value._kind
			self._value = value._value
		elif value is None:
			self._kind = CellKind.EMPTY
			self._value = None
		elif isinstance(value, str):
			self._kind = CellKind.TEXT
			self._value = value
		else:
			self._value = _number_from(value)
			self._kind = CellKind.NUMBER

	@classmethod
	def parse(cls, token):
		"""
		Token conversion rule used by Slice, Table, CSV and JSON input.

		None and "" become Empty, numeric-looking strings become Number
		(thousands separators stripped), other strings stay Text. Any
		other value goes through the raw constructor.

		Examples
		--------
		>>> Cell.parse("12,345.67")
		Cell(Decimal('12345.67'))
		>>> Cell.parse("abc")
		Cell('abc')
		>>> Cell.parse("")
		Cell()
		"""
		if isinstance(token, Cell):
			return token.copy()
		if token is None or token == '':
			return cls()
		if isinstance(token, str):
			number = parse_decimal(token)
			if number is not None:
				return cls(number)
		return cls(token)

	def copy(self):
		return Cell(self)

	@property
	def kind(self):
		return self._kind

	@property
	def value(self):
		""" None, str or Decimal depending on kind """
		return self._value

	def is_empty(self):
		return self._kind is CellKind.EMPTY

	def is_text(self):
		return self._kind is CellKind.TEXT

	def is_number(self):
		return self._kind is CellKind.NUMBER

	def is_numeric(self):
		"""True for numbers and for text that can be coerced to one."""
		return self.to_decimal() is not None

	def is_divide_by_zero(self):
		return self._kind is CellKind.TEXT and self._value == DIV0

	def to_decimal(self):
		"""Decimal value (coercing numeric text), or None."""
		if self._kind is CellKind.NUMBER:
			return self._value
		if self._kind is CellKind.TEXT:
			return parse_decimal(self._value)
		return None

	def to_json_value(self):
		return self._value

	def __str__(self):
		if self._kind is CellKind.NUMBER:
			return _format_number(self._value)
		if self._kind is CellKind.TEXT:
			return self._value
		return ''

	def __repr__(self):
		if self._kind is CellKind.EMPTY:
			return 'Cell()'
		return f'Cell({self._value!r})'

	#-----------------------------------------------------
	# Arithmetic
	#-----------------------------------------------------

	def _operand(self, symbol):
		number = self.to_decimal()
		if number is None:
			raise TypeMismatchError(
				f"Unsupported operand for '{symbol}': text {self._value!r} is not numeric",
				token=self._value,
			)
		return number

	def _combine(self, other, op_func, identity, symbol):
		other = _as_cell(other)
		if self.is_empty() and other.is_empty():
			return Cell()
		left = identity if self.is_empty() else self._operand(symbol)
		right = identity if other.is_empty() else other._operand(symbol)
		return Cell(op_func(left, right))

	def add(self, other):
		return self._combine(other, _EXACT.add, Decimal(0), '+')

	def sub(self, other):
		return self._combine(other, _EXACT.subtract, Decimal(0), '-')

	def mul(self, other):
		return self._combine(other, _EXACT.multiply, Decimal(1), '*')

	def div(self, other):
		other = _as_cell(other)
		if self.is_empty():
			if not other.is_empty():
				# still reject a non-numeric divisor
				other._operand('/')
			return Cell()
		dividend = self._operand('/')
		divisor = Decimal(1) if other.is_empty() else other._operand('/')
		if divisor.is_zero():
			return Cell(DIV0)
		return Cell(dividend / divisor)

	def __add__(self, other):
		if not isinstance(other, (Cell,) + _SCALAR_TYPES):
			return NotImplemented
		return self.add(other)

	def __sub__(self, other):
		if not isinstance(other, (Cell,) + _SCALAR_TYPES):
			return NotImplemented
		return self.sub(other)

	def __mul__(self, other):
		if not isinstance(other, (Cell,) + _SCALAR_TYPES):
			return NotImplemented
		return self.mul(other)

	def __truediv__(self, other):
		if not isinstance(other, (Cell,) + _SCALAR_TYPES):
			return NotImplemented
		return self.div(other)

	def __radd__(self, other):
		if not isinstance(other, _SCALAR_TYPES):
			return NotImplemented
		return _as_cell(other).add(self)

	def __rsub__(self, other):
		if not isinstance(other, _SCALAR_TYPES):
			return NotImplemented
		return _as_cell(other).sub(self)

	def __rmul__(self, other):
		if not isinstance(other, _SCALAR_TYPES):
			return NotImplemented
		return _as_cell(other).mul(self)

	def __rtruediv__(self, other):
		if not isinstance(other, _SCALAR_TYPES):
			return NotImplemented
		return _as_cell(other).div(self)

	""" In-place operations - the cell is left untouched on error """
	def _assign(self, result):
		self._kind = result._kind
		self._value = result._value
		return self

	def replace_value(self, value):
		return self._assign(_as_cell(value))

	def add_value(self, value):
		return self._assign(self.add(value))

	def sub_value(self, value):
		return self._assign(self.sub(value))

	def mul_value(self, value):
		return self._assign(self.mul(value))

	def div_value(self, value):
		return self._assign(self.div(value))

	#-----------------------------------------------------
	# Comparison
	#-----------------------------------------------------

	def _comparable(self, other):
		# a str against a text cell is compared as text, never parsed
		if isinstance(other, str) and self._kind is CellKind.TEXT:
			return Cell(other)
		return _as_cell(other)

	def _sort_key(self):
		return (_KIND_RANK[self._kind], self._value if self._value is not None else '')

	def compare_value(self, other):
		"""
		-1, 0 or 1 for cells of the same kind, None across kinds.

		>>> Cell(10).compare_value("5")
		1
		>>> Cell(10).compare_value("abc") is None
		True
		"""
		other = self._comparable(other)
		if self._kind is not other._kind:
			return None
		if self._kind is CellKind.EMPTY:
			return 0
		return (self._value > other._value) - (self._value < other._value)

	def equal_value(self, other):
		return self.compare_value(other) == 0

	def _compare(self, other, op):
		if not isinstance(other, (Cell,) + _SCALAR_TYPES):
			return NotImplemented
		return op(self._sort_key(), self._comparable(other)._sort_key())

	def __eq__(self, other):
		if not isinstance(other, (Cell,) + _SCALAR_TYPES):
			return NotImplemented
		return self.equal_value(other)

	def __ne__(self, other):
		if not isinstance(other, (Cell,) + _SCALAR_TYPES):
			return NotImplemented
		return not self.equal_value(other)

	def __lt__(self, other):
		return self._compare(other, operator.lt)

	def __le__(self, other):
		return self._compare(other, operator.le)

	def __gt__(self, other):
		return self._compare(other, operator.gt)

	def __ge__(self, other):
		return self._compare(other, operator.ge)


def _as_cell(value):
	if isinstance(value, Cell):
		return value
	return Cell.parse(value)
