"""
Append-only change log shared by the column normalizer and the cell editor.

The log has two sections:
- columns: original column name -> list of column-level entries (latest last)
- cell_updates: "<id>_<column>_<YYYYmmdd_HHMMSS>" -> cell-level entry

A ChangeLog is owned by the caller and passed explicitly to every function that
writes to it. Entries are never removed or rewritten.
"""

import json
import threading
from datetime import datetime

import pandas as pd


def _json_default(value):
    """Serialise timestamps, numpy scalars and other leftovers for json.dump."""
    if isinstance(value, (datetime, pd.Timestamp)):
        return value.isoformat()
    if hasattr(value, 'item'):
        return value.item()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


class ChangeLog:
    """Provenance record of column transformations and cell corrections."""

    def __init__(self, columns=None, cell_updates=None):
        self._lock = threading.Lock()
        self._columns = {name: list(entries) for name, entries in (columns or {}).items()}
        self._cell_updates = dict(cell_updates or {})

    @property
    def columns(self):
        # Copies, so callers can read but not rewrite history
        return {name: list(entries) for name, entries in self._columns.items()}

    @property
    def cell_updates(self):
        return dict(self._cell_updates)

    def __len__(self):
        return sum(len(entries) for entries in self._columns.values()) + len(self._cell_updates)

    def __repr__(self):
        return (f"ChangeLog(columns={len(self._columns)}, "
                f"cell_updates={len(self._cell_updates)})")

    def record_column(self, original_column, changes, timestamp=None):
        """Append a column-level entry keyed by the column's original name."""
        entry = {'changes': dict(changes), 'timestamp': timestamp or datetime.now()}
        with self._lock:
            self._columns.setdefault(original_column, []).append(entry)
        return entry

    def record_cell_update(self, sample_id, column, entry, timestamp=None):
        """
        Append a cell-level entry under a composite key.

        Returns the key used. Two updates of the same cell within one second get
        a numeric suffix instead of overwriting each other.
        """
        timestamp = timestamp or datetime.now()
        base_key = f"{sample_id}_{column}_{timestamp:%Y%m%d_%H%M%S}"
        entry = dict(entry, timestamp=timestamp)
        with self._lock:
            key = base_key
            suffix = 1
            while key in self._cell_updates:
                suffix += 1
                key = f"{base_key}_{suffix}"
            self._cell_updates[key] = entry
        return key

    def latest(self, original_column):
        """Most recent column-level entry for a column, or None."""
        entries = self._columns.get(original_column)
        return entries[-1] if entries else None

    def to_dict(self) -> dict:
        return {'columns': self.columns, 'cell_updates': self.cell_updates}

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        columns = {}
        for name, entries in data.get('columns', {}).items():
            # Single-entry logs written by older tooling store a dict, not a list
            columns[name] = entries if isinstance(entries, list) else [entries]
        return cls(columns=columns, cell_updates=data.get('cell_updates', {}))

    def to_json(self, path):
        with open(path, 'w', encoding='utf-8') as handle:
            json.dump(self.to_dict(), handle, indent=2, default=_json_default)

    @classmethod
    def from_json(cls, path):
        with open(path, 'r', encoding='utf-8') as handle:
            return cls.from_dict(json.load(handle))

    def to_frame(self) -> pd.DataFrame:
        """Flatten both sections into one table, oldest entry first."""
        rows = []
        for name, entries in self._columns.items():
            for entry in entries:
                changes = entry.get('changes', {})
                rows.append({
                    'section': 'columns',
                    'key': name,
                    'column': changes.get('new_name') or name,
                    'sample_id': None,
                    'old_value': None,
                    'new_value': changes.get('type'),
                    'reason': None,
                    'timestamp': entry.get('timestamp'),
                })
        for key, entry in self._cell_updates.items():
            rows.append({
                'section': 'cell_updates',
                'key': key,
                'column': entry.get('column'),
                'sample_id': entry.get('sample_id'),
                'old_value': entry.get('old_value'),
                'new_value': entry.get('new_value'),
                'reason': entry.get('reason'),
                'timestamp': entry.get('timestamp'),
            })
        columns = ['section', 'key', 'column', 'sample_id', 'old_value',
                   'new_value', 'reason', 'timestamp']
        frame = pd.DataFrame(rows, columns=columns)
        if not frame.empty:
            frame['timestamp'] = pd.to_datetime(frame['timestamp'], format='mixed')
            frame = frame.sort_values('timestamp', kind='stable').reset_index(drop=True)
        return frame
