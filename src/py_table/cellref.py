# py_table/cellref.py

from .errors import StaleReferenceError


class CellRef:
	"""
	Short-lived handle on one cell of a Table.

	Key design points:
	- Stores (table, row, col) and the table's structural version, never
	  the Cell object itself
	- Any push/insert/remove of a row or column bumps the version; every
	  later use of the handle raises StaleReferenceError
	- Cell writes (set_cell, other handles) keep the handle valid
	"""
	__slots__ = ('_table', '_row', '_col', '_version')

	def __init__(self, table, row, col):
		self._table = table
		self._row = row
		self._col = col
		self._version = table._version

	def is_valid(self):
		return self._table._version == self._version

	def _resolve(self):
		if not self.is_valid():
			raise StaleReferenceError(
				f"Reference to cell ({self._row}, {self._col}) was invalidated "
				"by a structural change to its table.\n"
				"Call Table.cell() again to get a fresh reference."
			)
		return self._table._rows[self._row][self._col]

	@property
	def position(self):
		return (self._row, self._col)

	@property
	def value(self):
		return self._resolve().value

	def get(self):
		"""Copy of the referenced cell."""
		return self._resolve().copy()

	def set(self, value):
		self._resolve().replace_value(value)
		return self

	replace_value = set

	def add_value(self, value):
		self._resolve().add_value(value)
		return self

	def sub_value(self, value):
		self._resolve().sub_value(value)
		return self

	def mul_value(self, value):
		self._resolve().mul_value(value)
		return self

	def div_value(self, value):
		self._resolve().div_value(value)
		return self

	def __str__(self):
		return str(self._resolve())

	def __repr__(self):
		if not self.is_valid():
			return f"CellRef({self._row}, {self._col}: stale)"
		return f"CellRef({self._row}, {self._col}: {self._resolve()!r})"
