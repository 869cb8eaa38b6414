"""
store.py - Read-only access to the host application's history tables.

ChangeStore is the protocol the statistics layer depends on. Two adapters
are provided: InMemoryChangeStore (plain row dicts, used by tests and
embedding applications) and SqliteChangeStore (the webtrees schema in a
SQLite database).
"""
from __future__ import annotations

from collections import defaultdict
import logging
from pathlib import Path
import sqlite3
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Union

from .facts import extract_record_title
from .filters import ChangeFilter
from .records import ChangeRecord, LogEntry, Message, RecordKey, UserInfo

logger = logging.getLogger(__name__)


class ChangeStore(Protocol):
    """Read-only view of the host schema used by the statistics layer."""

    def fetch_changes(self, change_filter: ChangeFilter) -> List[ChangeRecord]:
        """Change rows matching time, actor, tree and record filters (all statuses)."""
        ...

    def fetch_users(self) -> Dict[int, UserInfo]:
        ...

    def fetch_tree_names(self) -> Dict[int, str]:
        ...

    def fetch_log_entries(self, change_filter: ChangeFilter) -> List[LogEntry]:
        """Audit log rows matching the time filter only."""
        ...

    def fetch_messages(self, change_filter: ChangeFilter) -> List[Message]:
        """Message rows matching the time filter only."""
        ...

    def record_names(self, keys: Iterable[RecordKey]) -> Dict[RecordKey, str]:
        """Display names for (gedcom_id, xref) keys, in one batch."""
        ...


class InMemoryChangeStore:
    """
    ChangeStore over rows held in memory.

    Attributes:
        changes: Parsed change rows.
        users: Actor directory.
        trees: Tree names by gedcom_id.
        log_entries: Audit log rows.
        messages: Message rows.
        records: Current GEDCOM text per (gedcom_id, xref), for name lookups.
    """

    def __init__(
        self,
        changes: Optional[Iterable[ChangeRecord]] = None,
        users: Optional[Iterable[UserInfo]] = None,
        trees: Optional[Mapping[int, str]] = None,
        log_entries: Optional[Iterable[LogEntry]] = None,
        messages: Optional[Iterable[Message]] = None,
        records: Optional[Mapping[RecordKey, str]] = None,
    ) -> None:
        self.changes: List[ChangeRecord] = list(changes or [])
        self.users: Dict[int, UserInfo] = {u.user_id: u for u in users or []}
        self.trees: Dict[int, str] = dict(trees or {})
        self.log_entries: List[LogEntry] = list(log_entries or [])
        self.messages: List[Message] = list(messages or [])
        self.records: Dict[RecordKey, str] = dict(records or {})

    @classmethod
    def from_rows(
        cls,
        changes: Iterable[Mapping[str, Any]] = (),
        users: Iterable[Mapping[str, Any]] = (),
        trees: Optional[Mapping[int, str]] = None,
        log_entries: Iterable[Mapping[str, Any]] = (),
        messages: Iterable[Mapping[str, Any]] = (),
        records: Optional[Mapping[RecordKey, str]] = None,
    ) -> InMemoryChangeStore:
        """
        Build a store from plain row mappings.

        Raises:
            InvalidRecordStreamError: If any row is structurally invalid.
        """
        return cls(
            changes=[ChangeRecord.from_row(r) for r in changes],
            users=[UserInfo.from_row(r) for r in users],
            trees=trees,
            log_entries=[LogEntry.from_row(r) for r in log_entries],
            messages=[Message.from_row(r) for r in messages],
            records=records,
        )

    def fetch_changes(self, change_filter: ChangeFilter) -> List[ChangeRecord]:
        return change_filter.apply(self.changes)

    def fetch_users(self) -> Dict[int, UserInfo]:
        return dict(self.users)

    def fetch_tree_names(self) -> Dict[int, str]:
        return dict(self.trees)

    def fetch_log_entries(self, change_filter: ChangeFilter) -> List[LogEntry]:
        return [e for e in self.log_entries if change_filter.matches_time(e.log_time)]

    def fetch_messages(self, change_filter: ChangeFilter) -> List[Message]:
        return [m for m in self.messages if change_filter.matches_time(m.created)]

    def record_names(self, keys: Iterable[RecordKey]) -> Dict[RecordKey, str]:
        names = {}
        for key in keys:
            title = extract_record_title(self.records.get(key, ''))
            if title:
                names[key] = title
        return names


# Record tables of the webtrees schema: (table, id column, tree column, gedcom column)
RECORD_TABLES: Tuple[Tuple[str, str, str, str], ...] = (
    ('individuals', 'i_id', 'i_file', 'i_gedcom'),
    ('families', 'f_id', 'f_file', 'f_gedcom'),
    ('sources', 's_id', 's_file', 's_gedcom'),
    ('media', 'm_id', 'm_file', 'm_gedcom'),
    ('other', 'o_id', 'o_file', 'o_gedcom'),
)


class SqliteChangeStore:
    """
    ChangeStore over a SQLite copy of the webtrees database.

    Attributes:
        db_path (Path): Database file.
        table_prefix (str): Prefix of the webtrees tables (default 'wt_').
    """

    def __init__(self, db_path: Union[str, Path], table_prefix: str = 'wt_') -> None:
        self.db_path = Path(db_path)
        self.table_prefix = table_prefix

    def _table(self, name: str) -> str:
        return f"{self.table_prefix}{name}"

    def _query(self, sql: str, params: Iterable[Any] = ()) -> List[sqlite3.Row]:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            return conn.execute(sql, list(params)).fetchall()
        finally:
            conn.close()

    def fetch_changes(self, change_filter: ChangeFilter) -> List[ChangeRecord]:
        where, params = change_filter.where_clause(
            time_column='change_time',
            user_column='user_id',
            tree_column='gedcom_id',
            xref_column='xref',
        )
        rows = self._query(
            f"SELECT xref, gedcom_id, user_id, change_time, status, old_gedcom, new_gedcom "
            f"FROM {self._table('change')} WHERE {where} ORDER BY change_time, change_id",
            params,
        )
        return [ChangeRecord.from_row(dict(row)) for row in rows]

    def fetch_users(self) -> Dict[int, UserInfo]:
        rows = self._query(f"SELECT user_id, user_name, real_name, email FROM {self._table('user')}")
        users = {}
        for row in rows:
            user = UserInfo.from_row(dict(row))
            users[user.user_id] = user
        return users

    def fetch_tree_names(self) -> Dict[int, str]:
        rows = self._query(f"SELECT gedcom_id, gedcom_name FROM {self._table('gedcom')}")
        return {int(row['gedcom_id']): row['gedcom_name'] for row in rows}

    def fetch_log_entries(self, change_filter: ChangeFilter) -> List[LogEntry]:
        where, params = change_filter.where_clause(time_column='log_time')
        rows = self._query(
            f"SELECT log_type, log_time, log_message, user_id, ip_address "
            f"FROM {self._table('log')} WHERE log_type IN ('auth', 'search') AND {where} ORDER BY log_time",
            params,
        )
        return [LogEntry.from_row(dict(row)) for row in rows]

    def fetch_messages(self, change_filter: ChangeFilter) -> List[Message]:
        where, params = change_filter.where_clause(time_column='created')
        rows = self._query(
            f"SELECT created, user_id, sender FROM {self._table('message')} WHERE {where} ORDER BY created",
            params,
        )
        return [Message.from_row(dict(row)) for row in rows]

    def record_names(self, keys: Iterable[RecordKey]) -> Dict[RecordKey, str]:
        """Look up record names with one query per tree and record table."""
        by_tree: Dict[int, List[str]] = defaultdict(list)
        for gedcom_id, xref in keys:
            by_tree[gedcom_id].append(xref)

        names: Dict[RecordKey, str] = {}
        for gedcom_id, xrefs in by_tree.items():
            pending = set(xrefs)
            for table, id_col, tree_col, gedcom_col in RECORD_TABLES:
                if not pending:
                    break
                placeholders = ', '.join('?' for _ in pending)
                try:
                    rows = self._query(
                        f"SELECT {id_col} AS xref, {gedcom_col} AS gedcom FROM {self._table(table)} "
                        f"WHERE {tree_col} = ? AND {id_col} IN ({placeholders})",
                        [gedcom_id, *sorted(pending)],
                    )
                except sqlite3.OperationalError as e:
                    logger.warning(f"Skipping record table {table}: {e}")
                    continue
                for row in rows:
                    pending.discard(row['xref'])
                    title = extract_record_title(row['gedcom'] or '')
                    if title:
                        names[(gedcom_id, row['xref'])] = title
        return names
