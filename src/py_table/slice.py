from .cell import Cell
from .errors import IndexOutOfBoundsError
from .errors import LengthMismatchError
from .errors import ParseError
from .errors import TypeMismatchError
from .formats import encode_json
from .formats import json_token
from .formats import loads_json


def _is_sequence(value):
	return hasattr(value, '__iter__') and not isinstance(value, (str, bytes, bytearray))


class Slice():
	""" Owned, ordered sequence of cells: a detached row or column """
	__slots__ = ('_underlying',)
	__hash__ = None

	def __init__(self, initial=()):
		"""
		Build a slice from tokens, values or cells.

		Every element goes through Cell.parse, so "12" becomes a number
		and "" becomes empty. Cells are copied, never shared.
		"""
		if not _is_sequence(initial):
			raise TypeMismatchError(
				f"Slice needs an iterable of values, not {type(initial).__name__}",
				token=initial,
			)
		self._underlying = [Cell.parse(x) for x in initial]

	@classmethod
	def from_tokens(cls, tokens):
		return cls(tokens)

	@classmethod
	def from_json(cls, text):
		"""
		Parse a JSON array into a Slice.

		>>> Slice.from_json('["a", 1, null]').tokens()
		['a', '1', '']
		"""
		data = loads_json(text)
		if not isinstance(data, list):
			raise ParseError(f"JSON root must be an array, not {type(data).__name__}")
		return cls(json_token(v) for v in data)

	@classmethod
	def _from_cells(cls, cells):
		# takes ownership of an already-built list of cells
		instance = cls.__new__(cls)
		instance._underlying = cells
		return instance

	def copy(self):
		return Slice._from_cells([c.copy() for c in self._underlying])

	def __iter__(self):
		""" iterate over the owned cells """
		return iter(self._underlying)

	def __len__(self):
		return len(self._underlying)

	def __repr__(self):
		from .display import _repr_slice
		return _repr_slice(self)

	def tokens(self):
		"""Formatted text of every cell."""
		return [str(c) for c in self._underlying]

	def to_json(self):
		return encode_json([c.to_json_value() for c in self._underlying])

	#-----------------------------------------------------
	# Indexing
	#-----------------------------------------------------

	def _check_index(self, index):
		n = len(self._underlying)
		if isinstance(index, bool) or not isinstance(index, int):
			raise TypeMismatchError(
				f"Slice indices must be integers or slices, not {type(index).__name__}",
				token=index,
			)
		i = index + n if index < 0 else index
		if not 0 <= i < n:
			raise IndexOutOfBoundsError(
				f"Index {index} out of range for slice of length {n}",
				index=index,
				length=n,
			)
		return i

	def __getitem__(self, key):
		""" Get item(s) from self:
			# Int: the cell itself (owned by this slice, mutable in place)
			# Slice: a new Slice holding copies of the selected cells
		"""
		if isinstance(key, slice):
			return Slice._from_cells([c.copy() for c in self._underlying[key]])
		return self._underlying[self._check_index(key)]

	def __setitem__(self, key, value):
		self._underlying[self._check_index(key)] = Cell.parse(value)

	def cell(self, index):
		"""Copy of the cell at index."""
		return self[index].copy()

	#-----------------------------------------------------
	# Comparison and search
	#-----------------------------------------------------

	def __eq__(self, other):
		if isinstance(other, Slice):
			pass
		elif _is_sequence(other):
			try:
				other = Slice(other)
			except TypeMismatchError:
				return False
		else:
			return NotImplemented
		if len(self) != len(other):
			return False
		return all(x == y for x, y in zip(self._underlying, other._underlying))

	def __ne__(self, other):
		result = self.__eq__(other)
		if result is NotImplemented:
			return result
		return not result

	def find(self, value):
		"""First index whose cell equals value, or None."""
		for i, cell in enumerate(self._underlying):
			if cell == value:
				return i
		return None

	def index(self, value):
		i = self.find(value)
		if i is None:
			raise ValueError(f"{value!r} is not in slice")
		return i

	def __contains__(self, value):
		return self.find(value) is not None

	""" Math operations """
	def _elementwise_operation(self, other, method_name, op_symbol, reverse=False):
		"""Apply a Cell method pairwise (Slice/sequence) or against a scalar."""
		if _is_sequence(other):
			if not isinstance(other, Slice):
				other = Slice(other)
			if len(self) != len(other):
				raise LengthMismatchError(
					f"Cannot apply '{op_symbol}' to slices of length {len(self)} and {len(other)}",
					expected=len(self),
					actual=len(other),
				)
			pairs = zip(self._underlying, other._underlying, strict=True)
		else:
			scalar = Cell.parse(other)
			pairs = ((x, scalar) for x in self._underlying)

		out = []
		for i, (x, y) in enumerate(pairs):
			if reverse:
				x, y = y, x
			try:
				out.append(getattr(x, method_name)(y))
			except TypeMismatchError as exc:
				raise TypeMismatchError(f"{exc} (at index {i})", token=exc.token, index=i) from exc
		return Slice._from_cells(out)

	def add(self, other):
		return self._elementwise_operation(other, 'add', '+')

	def sub(self, other):
		return self._elementwise_operation(other, 'sub', '-')

	def mul(self, other):
		return self._elementwise_operation(other, 'mul', '*')

	def div(self, other):
		return self._elementwise_operation(other, 'div', '/')

	def __add__(self, other):
		return self.add(other)

	def __sub__(self, other):
		return self.sub(other)

	def __mul__(self, other):
		return self.mul(other)

	def __truediv__(self, other):
		return self.div(other)

	def __radd__(self, other):
		return self._elementwise_operation(other, 'add', '+', reverse=True)

	def __rsub__(self, other):
		return self._elementwise_operation(other, 'sub', '-', reverse=True)

	def __rmul__(self, other):
		return self._elementwise_operation(other, 'mul', '*', reverse=True)

	def __rtruediv__(self, other):
		return self._elementwise_operation(other, 'div', '/', reverse=True)

	def _broadcast_in_place(self, value, method_name, op_symbol):
		# compute everything first so a failure writes nothing
		result = self._elementwise_operation(value, method_name, op_symbol)
		for cell, new in zip(self._underlying, result._underlying, strict=True):
			cell.replace_value(new)
		return self

	def add_value(self, value):
		return self._broadcast_in_place(value, 'add', '+')

	def sub_value(self, value):
		return self._broadcast_in_place(value, 'sub', '-')

	def mul_value(self, value):
		return self._broadcast_in_place(value, 'mul', '*')

	def div_value(self, value):
		return self._broadcast_in_place(value, 'div', '/')

	def sum(self):
		"""
		Fold the cells with Cell addition, starting from Empty.

		An all-empty (or zero-length) slice sums to Empty.
		"""
		total = Cell()
		for i, cell in enumerate(self._underlying):
			try:
				total = total.add(cell)
			except TypeMismatchError as exc:
				raise TypeMismatchError(f"{exc} (at index {i})", token=exc.token, index=i) from exc
		return total
