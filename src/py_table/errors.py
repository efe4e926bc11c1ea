class PyTableError(Exception):
	"""Base exception for py-table library."""
	pass


class ParseError(PyTableError, ValueError):
	"""Raised when CSV or JSON text cannot be turned into a Table or Slice."""
	def __init__(self, message, line=None, token=None):
		super().__init__(message)
		self.line = line
		self.token = token


class TypeMismatchError(PyTableError, TypeError):
	"""Raised when a cell cannot take part in arithmetic (non-numeric text)."""
	def __init__(self, message, token=None, index=None):
		super().__init__(message)
		self.token = token
		self.index = index


class LengthMismatchError(PyTableError, ValueError):
	"""Raised for elementwise operations between slices of different length."""
	def __init__(self, message, expected=None, actual=None):
		super().__init__(message)
		self.expected = expected
		self.actual = actual


class WidthMismatchError(PyTableError, ValueError):
	"""Raised when a row or column does not fit the table's shape."""
	def __init__(self, message, expected=None, actual=None):
		super().__init__(message)
		self.expected = expected
		self.actual = actual


class IndexOutOfBoundsError(PyTableError, IndexError):
	"""Raised for invalid indexing operations."""
	def __init__(self, message, index=None, length=None):
		super().__init__(message)
		self.index = index
		self.length = length


class StaleReferenceError(PyTableError, RuntimeError):
	"""Raised when a CellRef is used after its table changed shape."""
	pass


class ColumnNotFoundError(PyTableError, KeyError):
	"""Raised when a column label is missing."""
	pass
