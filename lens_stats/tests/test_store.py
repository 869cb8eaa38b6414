"""
Tests for store module.
"""
import sqlite3

import pytest

from lens_stats.errors import InvalidRecordStreamError
from lens_stats.filters import ChangeFilter
from lens_stats.records import ChangeDataset
from lens_stats.store import InMemoryChangeStore, SqliteChangeStore


CHANGE_ROWS = [
    {'xref': 'I1', 'gedcom_id': 1, 'user_id': 1, 'change_time': '2024-06-10 10:00:00',
     'status': 'accepted', 'old_gedcom': '', 'new_gedcom': '0 @I1@ INDI\n1 NAME John /Smith/'},
    {'xref': 'S1', 'gedcom_id': 1, 'user_id': 2, 'change_time': '2023-02-01 09:00:00',
     'status': 'accepted', 'old_gedcom': '', 'new_gedcom': '0 @S1@ SOUR\n1 TITL Census 1901'},
    {'xref': 'I2', 'gedcom_id': 2, 'user_id': 1, 'change_time': '2024-06-12 10:00:00',
     'status': 'pending', 'old_gedcom': '', 'new_gedcom': '0 @I2@ INDI\n1 NAME Mary /Jones/'},
]


@pytest.fixture
def memory_store():
    return InMemoryChangeStore.from_rows(
        changes=CHANGE_ROWS,
        users=[{'user_id': 1, 'user_name': 'alice'}, {'user_id': 2, 'user_name': 'bob'}],
        trees={1: 'Main', 2: 'Other'},
        log_entries=[
            {'log_type': 'auth', 'log_time': '2024-06-10 08:00:00', 'log_message': 'Login: alice', 'user_id': 1},
            {'log_type': 'search', 'log_time': '2022-01-01 08:00:00', 'log_message': 'Search: x'},
        ],
        messages=[{'created': '2024-06-11 08:00:00', 'user_id': 1, 'sender': 'bob@example.org'}],
        records={(1, 'I1'): CHANGE_ROWS[0]['new_gedcom'], (1, 'S1'): CHANGE_ROWS[1]['new_gedcom']},
    )


@pytest.fixture
def sqlite_store(tmp_path):
    db_path = tmp_path / 'webtrees.sqlite'
    conn = sqlite3.connect(str(db_path))
    conn.executescript("""
        CREATE TABLE wt_change (change_id INTEGER PRIMARY KEY, gedcom_id INTEGER, xref TEXT, user_id INTEGER,
                                change_time TEXT, status TEXT, old_gedcom TEXT, new_gedcom TEXT);
        CREATE TABLE wt_user (user_id INTEGER PRIMARY KEY, user_name TEXT, real_name TEXT, email TEXT);
        CREATE TABLE wt_gedcom (gedcom_id INTEGER PRIMARY KEY, gedcom_name TEXT);
        CREATE TABLE wt_log (log_id INTEGER PRIMARY KEY, log_time TEXT, log_type TEXT, log_message TEXT,
                             ip_address TEXT, user_id INTEGER, gedcom_id INTEGER);
        CREATE TABLE wt_message (message_id INTEGER PRIMARY KEY, sender TEXT, ip_address TEXT,
                                 user_id INTEGER, subject TEXT, body TEXT, created TEXT);
        CREATE TABLE wt_individuals (i_id TEXT, i_file INTEGER, i_gedcom TEXT);
        CREATE TABLE wt_sources (s_id TEXT, s_file INTEGER, s_gedcom TEXT);
    """)
    conn.executemany(
        "INSERT INTO wt_change (gedcom_id, xref, user_id, change_time, status, old_gedcom, new_gedcom) "
        "VALUES (:gedcom_id, :xref, :user_id, :change_time, :status, :old_gedcom, :new_gedcom)",
        CHANGE_ROWS,
    )
    conn.executemany("INSERT INTO wt_user VALUES (?, ?, ?, ?)",
                     [(1, 'alice', 'Alice Archer', 'alice@example.org'), (2, 'bob', '', 'bob@example.org')])
    conn.executemany("INSERT INTO wt_gedcom VALUES (?, ?)", [(1, 'Main'), (2, 'Other')])
    conn.executemany(
        "INSERT INTO wt_log (log_time, log_type, log_message, ip_address, user_id) VALUES (?, ?, ?, ?, ?)",
        [
            ('2024-06-10 08:00:00', 'auth', 'Login: alice', '127.0.0.1', 1),
            ('2024-06-10 08:30:00', 'edit', 'Edited I1', '127.0.0.1', 1),
            ('2024-06-11 08:00:00', 'search', 'Search: Smith', '127.0.0.1', None),
        ],
    )
    conn.execute("INSERT INTO wt_message (sender, user_id, created) VALUES (?, ?, ?)",
                 ('bob@example.org', 1, '2024-06-11 08:00:00'))
    conn.execute("INSERT INTO wt_individuals VALUES (?, ?, ?)", ('I1', 1, '0 @I1@ INDI\n1 NAME John /Smith/'))
    conn.execute("INSERT INTO wt_sources VALUES (?, ?, ?)", ('S1', 1, '0 @S1@ SOUR\n1 TITL Census 1901'))
    conn.commit()
    conn.close()
    return SqliteChangeStore(db_path)


class TestInMemoryChangeStore:
    """Tests for InMemoryChangeStore."""

    def test_fetch_changes_applies_filter(self, memory_store, now):
        changes = memory_store.fetch_changes(ChangeFilter(days=30, now=now))
        assert [c.xref for c in changes] == ['I1', 'I2']

    def test_fetch_log_entries_time_only(self, memory_store):
        entries = memory_store.fetch_log_entries(ChangeFilter(years=[2024], user_ids=[2]))
        assert [e.log_message for e in entries] == ['Login: alice']

    def test_record_names(self, memory_store):
        names = memory_store.record_names([(1, 'I1'), (1, 'S1'), (1, 'X9')])
        assert names == {(1, 'I1'): 'John Smith', (1, 'S1'): 'Census 1901'}

    def test_invalid_row(self):
        with pytest.raises(InvalidRecordStreamError):
            InMemoryChangeStore.from_rows(changes=[{'xref': 'I1'}])

    def test_dataset_from_store(self, memory_store):
        change_filter = ChangeFilter(years=[2024])
        dataset = ChangeDataset.from_store(memory_store, change_filter)
        assert len(dataset.changes) == 2
        assert dataset.users[2].user_name == 'bob'
        assert dataset.trees == {1: 'Main', 2: 'Other'}
        assert len(dataset.log_entries) == 1
        assert len(dataset.messages) == 1
        assert dataset.change_filter is change_filter
        assert dataset.resolve_names([(1, 'I1')]) == {(1, 'I1'): 'John Smith'}


class TestSqliteChangeStore:
    """Tests for SqliteChangeStore on a small webtrees-shaped database."""

    def test_fetch_changes(self, sqlite_store):
        changes = sqlite_store.fetch_changes(ChangeFilter())
        assert [c.xref for c in changes] == ['S1', 'I1', 'I2']
        assert changes[2].status == 'pending'

    def test_fetch_changes_filtered(self, sqlite_store):
        changes = sqlite_store.fetch_changes(ChangeFilter(years=[2024], user_ids=[1], tree_ids=[1]))
        assert [c.xref for c in changes] == ['I1']

    def test_fetch_changes_day_window(self, sqlite_store, now):
        changes = sqlite_store.fetch_changes(ChangeFilter(days=4, years=[2023], now=now))
        assert [c.xref for c in changes] == ['I2']

    def test_fetch_users_and_trees(self, sqlite_store):
        users = sqlite_store.fetch_users()
        assert users[1].display_name == 'Alice Archer'
        assert users[2].display_name == 'bob'
        assert sqlite_store.fetch_tree_names() == {1: 'Main', 2: 'Other'}

    def test_fetch_log_entries_only_auth_and_search(self, sqlite_store):
        entries = sqlite_store.fetch_log_entries(ChangeFilter())
        assert [e.log_type for e in entries] == ['auth', 'search']
        assert entries[1].user_id is None

    def test_fetch_messages(self, sqlite_store):
        messages = sqlite_store.fetch_messages(ChangeFilter(years=[2024]))
        assert len(messages) == 1
        assert messages[0].sender == 'bob@example.org'

    def test_record_names_skips_missing_tables(self, sqlite_store):
        names = sqlite_store.record_names([(1, 'I1'), (1, 'S1'), (1, 'N1')])
        assert names == {(1, 'I1'): 'John Smith', (1, 'S1'): 'Census 1901'}

    def test_custom_table_prefix(self, tmp_path):
        db_path = tmp_path / 'prefixed.sqlite'
        conn = sqlite3.connect(str(db_path))
        conn.execute("CREATE TABLE my_gedcom (gedcom_id INTEGER, gedcom_name TEXT)")
        conn.execute("INSERT INTO my_gedcom VALUES (7, 'Seven')")
        conn.commit()
        conn.close()
        assert SqliteChangeStore(db_path, table_prefix='my_').fetch_tree_names() == {7: 'Seven'}
