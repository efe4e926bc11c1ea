"""Header label sanitization and lookup."""

from __future__ import annotations
import re


def _sanitize_label(label) -> str | None:
	"""Reduce a header label to an attribute-friendly key.

	Rules:
	- Lowercase
	- Runs of characters outside [a-z0-9_] collapse to a single _
	- Leading/trailing underscores dropped
	- Prefix with 'c' if it starts with a digit ("2024" -> "c2024")
	- None if nothing is left
	"""
	key = re.sub(r'[^a-z0-9_]+', '_', str(label).lower()).strip('_')
	if not key:
		return None
	if key[0].isdigit():
		key = 'c' + key
	return key


def _uniquify(base: str, seen: set[str]) -> str:
	"""Second and later duplicates become base__2, base__3, ..."""
	if base not in seen:
		return base
	i = 2
	while f"{base}__{i}" in seen:
		i += 1
	return f"{base}__{i}"


def build_label_map(labels) -> dict[str, int]:
	"""
	Map sanitized keys to column indices.

	Unlabeled (or unsanitizable) columns get the system key col{idx}_,
	so every column is reachable as an attribute.
	"""
	label_map = {}
	seen = set()
	for idx, label in enumerate(labels):
		base = _sanitize_label(label) if label else None
		if base is None:
			label_map[f'col{idx}_'] = idx
			continue
		key = _uniquify(base, seen)
		seen.add(key)
		label_map[key] = idx
	return label_map


def duplicate_labels(labels) -> list[str]:
	seen = set()
	dupes = []
	for label in labels:
		if label and label in seen and label not in dupes:
			dupes.append(label)
		seen.add(label)
	return dupes
