import io
import warnings

from .cell import Cell
from .cell import _user_stacklevel
from .cellref import CellRef
from .errors import ColumnNotFoundError
from .errors import IndexOutOfBoundsError
from .errors import ParseError
from .errors import TypeMismatchError
from .errors import WidthMismatchError
from .formats import encode_json
from .formats import json_token
from .formats import loads_json
from .formats import read_csv_rows
from .formats import write_csv_rows
from .naming import build_label_map
from .naming import duplicate_labels
from .naming import _sanitize_label
from .slice import Slice


def _missing_col_error(key, context="Table"):
	return ColumnNotFoundError(f"Column {key!r} not found in {context}")


def _label(token):
	# header labels stay text; numbers are written the way cells would be
	if token is None:
		return ''
	if isinstance(token, str):
		return token
	return str(Cell.parse(token))


def _cells(values):
	if isinstance(values, (str, bytes, bytearray)) or not hasattr(values, '__iter__'):
		raise TypeMismatchError(
			f"Rows and columns must be iterables of values, not {type(values).__name__}",
			token=values,
		)
	return [Cell.parse(x) for x in values]


def _text(source):
	if isinstance(source, (bytes, bytearray)):
		try:
			return bytes(source).decode('utf-8')
		except UnicodeDecodeError as exc:
			raise ParseError(
				f"Input is not valid UTF-8: byte {exc.object[exc.start]:#04x} at offset {exc.start}",
				token=exc.object[exc.start:exc.end],
			) from exc
	return source


class Table():
	"""
	Rectangular grid of cells with optional column header labels.

	The table owns every cell. row() and column() hand out copies;
	cell() hands out a CellRef that dies at the next structural change.
	Every mutator either succeeds completely or raises and leaves the
	table exactly as it was.
	"""

	def __init__(self, rows=(), headers=None):
		built = []
		width = None
		for r, values in enumerate(rows):
			cells = _cells(values)
			if width is None:
				width = len(cells)
			elif len(cells) != width:
				raise WidthMismatchError(
					f"Row {r} has {len(cells)} cells, expected {width}",
					expected=width,
					actual=len(cells),
				)
			built.append(cells)

		if headers is not None:
			headers = [_label(h) for h in headers]
			if width is None:
				width = len(headers)
			elif len(headers) != width:
				raise WidthMismatchError(
					f"{len(headers)} header labels given for {width} columns",
					expected=width,
					actual=len(headers),
				)

		self._rows = built
		self._width = width or 0
		self._headers = None
		self._version = 0
		self._set_headers(headers)

	#-----------------------------------------------------
	# Construction from text
	#-----------------------------------------------------

	@classmethod
	def from_grid(cls, grid, header=False):
		"""Build from a grid of tokens; with header=True the first row labels the columns."""
		rows = [list(r) for r in grid]
		if header and rows:
			return cls(rows[1:], headers=rows[0])
		return cls(rows)

	@classmethod
	def _from_records(cls, records, header, unit):
		width = len(records[0][1]) if records else 0
		for where, tokens in records:
			if len(tokens) != width:
				raise ParseError(
					f"Ragged input: {unit} {where} has {len(tokens)} fields, expected {width}",
					line=where,
				)
		rows = [tokens for _, tokens in records]
		if header and rows:
			return cls(rows[1:], headers=rows[0])
		return cls(rows)

	@classmethod
	def from_json(cls, text, header=False):
		"""
		Parse a JSON array of arrays.

		Strings and numbers go through the cell token rule (numbers stay
		exact), null is empty, true/false become text. Anything that is
		not a rectangular array of arrays raises ParseError and no table
		is built.

		Examples
		--------
		>>> t = Table.from_json('[["a","b","c"],["1","2","3"]]')
		>>> t.size()
		(2, 3)
		"""
		data = loads_json(_text(text))
		if not isinstance(data, list):
			raise ParseError(f"JSON root must be an array of arrays, not {type(data).__name__}")
		records = []
		for i, row in enumerate(data):
			if not isinstance(row, list):
				raise ParseError(f"JSON row {i} must be an array, not {type(row).__name__}", line=i)
			records.append((i, [json_token(v) for v in row]))
		return cls._from_records(records, header, 'row')

	@classmethod
	def from_csv(cls, text, header=False):
		"""Parse CSV text (comma separated, double-quote escaping by doubling)."""
		return cls._from_records(read_csv_rows(_text(text)), header, 'line')

	@classmethod
	def try_from(cls, text, format='json', header=False):
		if format == 'json':
			return cls.from_json(text, header=header)
		if format == 'csv':
			return cls.from_csv(text, header=header)
		raise ValueError(f"Unknown table format {format!r}; expected 'json' or 'csv'")

	#-----------------------------------------------------
	# Shape and headers
	#-----------------------------------------------------

	@property
	def row_count(self):
		return len(self._rows)

	@property
	def column_count(self):
		return self._width

	def size(self):
		return (len(self._rows), self._width)

	def __len__(self):
		return len(self._rows)

	def _is_blank(self):
		return not self._rows and not self._width

	@property
	def headers(self):
		return tuple(self._headers) if self._headers is not None else None

	def _set_headers(self, labels):
		if labels is not None:
			dupes = duplicate_labels(labels)
			if dupes:
				warnings.warn(
					f"Duplicate column labels {dupes}; lookups by label resolve to the first match",
					stacklevel=_user_stacklevel(),
				)
		self._headers = labels
		self._column_map = build_label_map(labels if labels is not None else [None] * self._width)

	def set_headers(self, labels):
		"""Replace the header labels (None removes them)."""
		if labels is not None:
			labels = [_label(x) for x in labels]
			if self._is_blank():
				self._width = len(labels)
			elif len(labels) != self._width:
				raise WidthMismatchError(
					f"{len(labels)} header labels given for {self._width} columns",
					expected=self._width,
					actual=len(labels),
				)
		self._set_headers(labels)

	def column_index(self, key):
		"""
		Resolve a column key to an index, or None.

		Ints may be negative. Labels match exactly first, then by their
		sanitized form ('Unit Price' -> 'unit_price').
		"""
		if isinstance(key, bool):
			return None
		if isinstance(key, int):
			j = key + self._width if key < 0 else key
			return j if 0 <= j < self._width else None
		if isinstance(key, str):
			if self._headers is not None and key in self._headers:
				return self._headers.index(key)
			j = self._column_map.get(key.lower())
			if j is None:
				sanitized = _sanitize_label(key)
				j = self._column_map.get(sanitized) if sanitized else None
			return j
		return None

	def _row_index(self, i):
		if isinstance(i, bool) or not isinstance(i, int):
			return None
		i = i + len(self._rows) if i < 0 else i
		return i if 0 <= i < len(self._rows) else None

	def __getattr__(self, attr):
		"""Access columns by sanitized header label (t.unit_price)."""
		# guard against lookups before __init__ has set the map
		column_map = self.__dict__.get('_column_map')
		if column_map is None or attr.startswith('_'):
			raise AttributeError(f"{self.__class__.__name__!s} object has no attribute '{attr}'")
		j = column_map.get(attr.lower())
		if j is None:
			raise AttributeError(f"{self.__class__.__name__!s} object has no attribute '{attr}'")
		return self.column(j)

	def __dir__(self):
		return sorted(set(object.__dir__(self)) | set(self._column_map.keys()))

	#-----------------------------------------------------
	# Access
	#-----------------------------------------------------

	def row(self, i):
		"""Copy of row i as a Slice, or None if out of range."""
		r = self._row_index(i)
		if r is None:
			return None
		return Slice._from_cells([c.copy() for c in self._rows[r]])

	def column(self, key):
		"""Copy of a column (by index or header label) as a Slice, or None."""
		j = self.column_index(key)
		if j is None:
			return None
		return Slice._from_cells([row[j].copy() for row in self._rows])

	def _locate(self, row, col):
		r = self._row_index(row)
		c = self.column_index(col)
		if r is None or c is None:
			return None
		return r, c

	def _require(self, row, col):
		loc = self._locate(row, col)
		if loc is None:
			raise IndexOutOfBoundsError(
				f"Cell ({row!r}, {col!r}) is outside a {len(self._rows)}×{self._width} table",
				index=(row, col),
				length=self.size(),
			)
		return loc

	def get(self, row, col):
		"""Copy of one cell, or None if out of range."""
		loc = self._locate(row, col)
		if loc is None:
			return None
		r, c = loc
		return self._rows[r][c].copy()

	def cell(self, row, col):
		"""CellRef for in-place edits, or None if out of range."""
		loc = self._locate(row, col)
		if loc is None:
			return None
		return CellRef(self, *loc)

	mut_cell = cell

	def set_cell(self, row, col, value):
		r, c = self._require(row, col)
		self._rows[r][c] = Cell.parse(value)

	def __getitem__(self, key):
		""" Get item(s) from self:
			# (row, col): copy of that cell
			# Int: copy of that row
			# Str: copy of the column with that label
		"""
		if isinstance(key, tuple):
			if len(key) != 2:
				raise TypeMismatchError(f"Table indexing takes (row, col), got {len(key)} indices", token=key)
			r, c = self._require(*key)
			return self._rows[r][c].copy()
		if isinstance(key, str):
			col = self.column(key)
			if col is None:
				raise _missing_col_error(key)
			return col
		out = self.row(key)
		if out is None:
			raise IndexOutOfBoundsError(
				f"Row {key!r} out of range for table with {len(self._rows)} rows",
				index=key,
				length=len(self._rows),
			)
		return out

	def __setitem__(self, key, value):
		if not isinstance(key, tuple) or len(key) != 2:
			raise TypeMismatchError("Table assignment takes a (row, col) key", token=key)
		self.set_cell(key[0], key[1], value)

	def __iter__(self):
		"""Iterate over rows as Slice copies."""
		for i in range(len(self._rows)):
			yield self.row(i)

	#-----------------------------------------------------
	# Structural mutation
	#-----------------------------------------------------

	def _changed(self):
		self._version += 1

	def _check_row_width(self, cells):
		if self._is_blank():
			return
		if len(cells) != self._width:
			raise WidthMismatchError(
				f"Row has {len(cells)} cells, table has {self._width} columns",
				expected=self._width,
				actual=len(cells),
			)

	def _check_column_height(self, cells):
		if self._is_blank():
			return
		if len(cells) != len(self._rows):
			raise WidthMismatchError(
				f"Column has {len(cells)} cells, table has {len(self._rows)} rows",
				expected=len(self._rows),
				actual=len(cells),
			)

	def _insert_row_cells(self, i, cells):
		if self._is_blank():
			self._width = len(cells)
			self._set_headers(None)
		self._rows.insert(i, cells)
		self._changed()

	def _insert_column_cells(self, j, cells, label):
		if self._is_blank():
			rows = [[c] for c in cells]
		else:
			rows = [row[:j] + [c] + row[j:] for row, c in zip(self._rows, cells, strict=True)]
		if self._headers is not None:
			labels = self._headers[:j] + [_label(label)] + self._headers[j:]
		elif label is not None:
			labels = [''] * self._width
			labels.insert(j, _label(label))
		else:
			labels = None
		self._rows = rows
		self._width += 1
		self._set_headers(labels)
		self._changed()

	def push_row(self, values):
		"""
		Append a row. Its length must equal the column count, unless the
		table has no rows and no columns yet, in which case it sets it.
		"""
		cells = _cells(values)
		self._check_row_width(cells)
		self._insert_row_cells(len(self._rows), cells)

	def insert_row(self, i, values):
		"""Insert a row before index i (0 <= i <= row_count)."""
		cells = _cells(values)
		if isinstance(i, bool) or not isinstance(i, int) or not 0 <= i <= len(self._rows):
			raise IndexOutOfBoundsError(
				f"Row insert position {i!r} outside 0..{len(self._rows)}",
				index=i,
				length=len(self._rows),
			)
		self._check_row_width(cells)
		self._insert_row_cells(i, cells)

	def remove_row(self, i):
		"""Remove row i and return it as a Slice."""
		r = self._row_index(i)
		if r is None:
			raise IndexOutOfBoundsError(
				f"Row {i!r} out of range for table with {len(self._rows)} rows",
				index=i,
				length=len(self._rows),
			)
		removed = self._rows.pop(r)
		self._changed()
		return Slice._from_cells(removed)

	def push_column(self, values, label=None):
		"""
		Append a column. Its length must equal the row count, unless the
		table has no rows and no columns yet, in which case it sets it.
		"""
		cells = _cells(values)
		self._check_column_height(cells)
		self._insert_column_cells(self._width, cells, label)

	def insert_column(self, j, values, label=None):
		"""Insert a column before index j (0 <= j <= column_count)."""
		cells = _cells(values)
		if isinstance(j, bool) or not isinstance(j, int) or not 0 <= j <= self._width:
			raise IndexOutOfBoundsError(
				f"Column insert position {j!r} outside 0..{self._width}",
				index=j,
				length=self._width,
			)
		self._check_column_height(cells)
		self._insert_column_cells(j, cells, label)

	def remove_column(self, key):
		"""Remove a column (by index or label) and return it as a Slice."""
		j = self.column_index(key)
		if j is None:
			if isinstance(key, str):
				raise _missing_col_error(key)
			raise IndexOutOfBoundsError(
				f"Column {key!r} out of range for table with {self._width} columns",
				index=key,
				length=self._width,
			)
		removed = [row[j] for row in self._rows]
		self._rows = [row[:j] + row[j + 1:] for row in self._rows]
		self._width -= 1
		labels = None
		if self._headers is not None:
			labels = self._headers[:j] + self._headers[j + 1:]
		self._set_headers(labels)
		self._changed()
		return Slice._from_cells(removed)

	def copy(self):
		out = Table.__new__(Table)
		out._rows = [[c.copy() for c in row] for row in self._rows]
		out._width = self._width
		out._headers = list(self._headers) if self._headers is not None else None
		out._column_map = dict(self._column_map)
		out._version = 0
		return out

	def __lshift__(self, other):
		""" The << operator returns a copy with other's row(s) appended below """
		out = self.copy()
		if isinstance(other, Table):
			if not other._rows:
				return out
			if not out._is_blank() and other._width != out._width:
				raise WidthMismatchError(
					f"Cannot stack a {other._width}-column table under a {out._width}-column table",
					expected=out._width,
					actual=other._width,
				)
			for row in other:
				out.push_row(row)
			return out
		out.push_row(other)
		return out

	def __rshift__(self, other):
		""" The >> operator returns a copy with other's column(s) appended on the right """
		out = self.copy()
		if isinstance(other, Table):
			if not other._width:
				return out
			if not out._is_blank() and len(other) != len(out):
				raise WidthMismatchError(
					f"Cannot join a {len(other)}-row table beside a {len(out)}-row table",
					expected=len(out),
					actual=len(other),
				)
			labels = other._headers or [None] * other._width
			for j, label in enumerate(labels):
				out.push_column(other.column(j), label=label)
			return out
		out.push_column(other)
		return out

	#-----------------------------------------------------
	# Search
	#-----------------------------------------------------

	def find(self, value):
		"""First (row, col) holding value in row-major order, or None."""
		for r, row in enumerate(self._rows):
			for c, cell in enumerate(row):
				if cell == value:
					return (r, c)
		return None

	def find_all(self, value):
		return [(r, c) for r, row in enumerate(self._rows) for c, cell in enumerate(row) if cell == value]

	def __contains__(self, value):
		return self.find(value) is not None

	def __eq__(self, other):
		if not isinstance(other, Table):
			return NotImplemented
		if self.size() != other.size() or self.headers != other.headers:
			return False
		return all(
			x == y
			for row_a, row_b in zip(self._rows, other._rows)
			for x, y in zip(row_a, row_b)
		)

	def __ne__(self, other):
		result = self.__eq__(other)
		if result is NotImplemented:
			return result
		return not result

	__hash__ = None

	#-----------------------------------------------------
	# Serialization
	#-----------------------------------------------------

	def _text_rows(self):
		if self._headers is not None and self._width:
			yield list(self._headers)
		for row in self._rows:
			yield [str(c) for c in row]

	def write_csv(self, sink):
		"""
		Write CSV to a text sink (anything with write(str)).

		A table with rows but no columns has no CSV form (a blank line
		reads back as one empty field), so it raises WidthMismatchError
		and nothing is written.
		"""
		if self._rows and not self._width:
			raise WidthMismatchError(
				f"Cannot write a {len(self._rows)}×0 table as CSV",
				expected=1,
				actual=0,
			)
		write_csv_rows(self._text_rows(), sink)

	def to_csv(self):
		"""
		>>> Table.from_grid([['a', 'b'], ['1', 'x,y']]).to_csv()
		'a,b\\n1,"x,y"\\n'
		"""
		buffer = io.StringIO()
		self.write_csv(buffer)
		return buffer.getvalue()

	def _json_rows(self):
		rows = []
		if self._headers is not None and self._width:
			rows.append(list(self._headers))
		rows.extend([c.to_json_value() for c in row] for row in self._rows)
		return rows

	def to_json(self):
		"""Array of arrays: numbers as JSON numbers, text as strings, empty as null."""
		return encode_json(self._json_rows())

	def write_json(self, sink):
		sink.write(self.to_json())

	def __repr__(self):
		from .display import _repr_table
		return _repr_table(self)

