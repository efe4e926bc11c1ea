"""CSV and JSON text codecs shared by Slice and Table."""

from __future__ import annotations
import csv
import io
import json
from decimal import Decimal
from typing import Any, Iterable, List, Tuple

from .errors import ParseError


# A field is quoted iff it contains one of these; embedded quotes are doubled.
_QUOTE_TRIGGERS = (',', '"', '\n', '\r')


# ============================================================
# CSV
# ============================================================

def quote_field(text: str) -> str:
	"""Minimal RFC4180 quoting.

	>>> quote_field('plain')
	'plain'
	>>> quote_field('say "hi", bob')
	'"say ""hi"", bob"'
	"""
	if any(c in text for c in _QUOTE_TRIGGERS):
		return '"' + text.replace('"', '""') + '"'
	return text


def write_csv_rows(rows: Iterable[Iterable[str]], sink) -> None:
	"""Write rows of already-formatted fields, one '\\n'-terminated line each."""
	for fields in rows:
		sink.write(','.join(quote_field(f) for f in fields))
		sink.write('\n')


def read_csv_rows(text: str) -> List[Tuple[int, List[str]]]:
	"""
	Split CSV text into (line_number, fields) records.

	Quoted fields may span lines; the line number is the one on which
	the record ends. A blank line is one empty field.
	"""
	reader = csv.reader(io.StringIO(text, newline=''), strict=True)
	records = []
	try:
		for fields in reader:
			records.append((reader.line_num, fields if fields else ['']))
	except csv.Error as exc:
		raise ParseError(
			f"Malformed CSV at line {reader.line_num}: {exc}",
			line=reader.line_num,
		) from exc
	return records


# ============================================================
# JSON
# ============================================================

def _reject_constant(name):
	raise ParseError(f"Non-finite JSON number {name!r} is not allowed", token=name)


def loads_json(text: str) -> Any:
	"""Decode JSON keeping every number as an exact Decimal."""
	try:
		return json.loads(
			text,
			parse_float=Decimal,
			parse_int=Decimal,
			parse_constant=_reject_constant,
		)
	except json.JSONDecodeError as exc:
		raise ParseError(
			f"Malformed JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}",
			line=exc.lineno,
		) from exc
	except RecursionError as exc:
		raise ParseError("JSON input is nested too deeply to decode") from exc


class _Encoded(str):
	"""JSON text that is already encoded (punctuation and object keys)."""
	pass


def _encode_scalar(value: Any) -> str:
	if value is None:
		return 'null'
	if isinstance(value, bool):
		return 'true' if value else 'false'
	if isinstance(value, Decimal):
		return format(value, 'f')
	if isinstance(value, str):
		return json.dumps(value)
	raise TypeError(f"Cannot encode value of type '{type(value).__name__}' as JSON")


def encode_json(value: Any) -> str:
	"""
	Encode decoded-JSON-shaped data back to text.

	Decimals are written as plain JSON numbers with their exact digits,
	which json.dumps cannot do without going through float. Containers
	are walked with an explicit stack, so nesting depth is bounded only
	by what json.loads accepted.
	"""
	parts = []
	pending = [value]
	while pending:
		item = pending.pop()
		if isinstance(item, _Encoded):
			parts.append(item)
		elif isinstance(item, (list, tuple)):
			pending.append(_Encoded(']'))
			for i in range(len(item) - 1, -1, -1):
				pending.append(item[i])
				if i:
					pending.append(_Encoded(','))
			pending.append(_Encoded('['))
		elif isinstance(item, dict):
			entries = list(item.items())
			pending.append(_Encoded('}'))
			for i in range(len(entries) - 1, -1, -1):
				key, v = entries[i]
				pending.append(v)
				pending.append(_Encoded(json.dumps(str(key)) + ':'))
				if i:
					pending.append(_Encoded(','))
			pending.append(_Encoded('{'))
		else:
			parts.append(_encode_scalar(item))
	return ''.join(parts)


def json_token(value: Any) -> Any:
	"""Map one decoded JSON value to a cell token (str, Decimal or None)."""
	if isinstance(value, bool):
		return 'true' if value else 'false'
	if isinstance(value, (list, dict)):
		# nested containers are kept as their JSON text
		return encode_json(value)
	return value
