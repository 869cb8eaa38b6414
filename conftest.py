"""
Pytest fixtures shared by the lens_stats test suites.
"""
from __future__ import annotations

import pytest
from datetime import datetime
from typing import Optional

from lens_stats.records import ChangeDataset, ChangeRecord, LogEntry, Message, UserInfo


NOW = datetime(2024, 6, 15, 12, 0, 0)

JOHN_V1 = "0 @I1@ INDI\n1 NAME John /Smith/\n1 SEX M\n1 BIRT\n2 DATE 1 JAN 1900"
JOHN_V2 = (
    "0 @I1@ INDI\n1 NAME John /Smith/\n1 SEX M\n1 BIRT\n2 DATE 1 JAN 1900\n"
    "1 DEAT\n2 DATE 3 MAR 1970\n1 CHAN\n2 DATE 15 JUN 2024\n3 TIME 10:00:00"
)
MARY_V1 = "0 @I2@ INDI\n1 NAME Mary /Jones/\n1 SEX F"
FAMILY_V1 = "0 @F1@ FAM\n1 HUSB @I1@\n1 WIFE @I2@"


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for day-window filters."""
    return NOW


@pytest.fixture
def make_change():
    """Factory for ChangeRecord rows with sensible defaults."""
    def _create_change(xref: str = 'I1', when: str = '2024-06-10 10:00:00',
                       user_id: Optional[int] = 1, old: str = '', new: str = JOHN_V1,
                       status: str = 'accepted', gedcom_id: int = 1) -> ChangeRecord:
        return ChangeRecord.from_row({
            'xref': xref,
            'gedcom_id': gedcom_id,
            'user_id': user_id,
            'change_time': when,
            'status': status,
            'old_gedcom': old,
            'new_gedcom': new,
        })

    return _create_change


@pytest.fixture
def users():
    """Actor directory with two editors and one reader."""
    return {
        1: UserInfo(user_id=1, user_name='alice', real_name='Alice Archer', email='alice@example.org'),
        2: UserInfo(user_id=2, user_name='bob', real_name='Bob Baker', email='bob@example.org'),
        3: UserInfo(user_id=3, user_name='carol', real_name='', email='carol@example.org'),
    }


@pytest.fixture
def sample_changes(make_change):
    """Small edit history across two users and two trees."""
    return [
        make_change('I1', '2024-06-10 10:00:00', 1, '', JOHN_V1),
        make_change('I1', '2024-06-10 10:20:00', 1, JOHN_V1, JOHN_V2),
        make_change('I2', '2024-06-10 10:20:00', 1, '', MARY_V1),
        make_change('F1', '2024-06-11 21:00:00', 2, '', FAMILY_V1),
        make_change('I2', '2024-06-12 09:00:00', 2, MARY_V1, ''),
        make_change('I1', '2024-06-12 09:05:00', 2, JOHN_V2, JOHN_V1, status='rejected'),
        make_change('I3', '2024-05-01 08:00:00', 1, '', "0 @I3@ INDI\n1 NAME Old /Timer/", gedcom_id=2),
    ]


@pytest.fixture
def sample_log_entries():
    """Audit log rows: logins, failed logins and searches."""
    def entry(log_type, when, message, user_id=None, ip='10.0.0.1'):
        return LogEntry(log_type=log_type, log_time=datetime.strptime(when, '%Y-%m-%d %H:%M:%S'),
                        log_message=message, user_id=user_id, ip_address=ip)

    return [
        entry('auth', '2024-06-10 09:00:00', 'Login: alice/Alice Archer', 1),
        entry('auth', '2024-06-11 09:00:00', 'Login: bob/Bob Baker', 2),
        entry('auth', '2024-06-11 23:00:00', 'Login failed (incorrect password): mallory'),
        entry('auth', '2024-06-11 23:01:00', 'Login failed (incorrect password): mallory'),
        entry('auth', '2024-06-11 23:02:00', 'Login failed (incorrect password): mallory'),
        entry('auth', '2024-06-12 01:00:00', 'Failed login: eve from 10.0.0.9', ip='10.0.0.9'),
        entry('search', '2024-06-10 11:00:00', 'Search: Smith', 1),
        entry('search', '2024-06-11 11:00:00', 'Searched for: smith family', None),
        entry('search', '2024-06-12 11:00:00', 'Search: Smith', 2),
    ]


@pytest.fixture
def sample_messages():
    """Messages between users; user_id is the recipient."""
    return [
        Message(created=datetime(2024, 6, 10, 8, 0), user_id=1, sender='bob@example.org'),
        Message(created=datetime(2024, 6, 10, 9, 0), user_id=2, sender='alice@example.org'),
        Message(created=datetime(2024, 6, 11, 9, 0), user_id=1, sender='visitor@example.com'),
    ]


@pytest.fixture
def sample_dataset(sample_changes, users, sample_log_entries, sample_messages):
    """ChangeDataset over the sample history, with an in-memory name lookup."""
    names = {(1, 'I1'): 'John Smith', (1, 'I2'): 'Mary Jones', (2, 'I3'): 'Old Timer'}

    def resolver(keys):
        return {key: names[key] for key in keys if key in names}

    return ChangeDataset(
        changes=sample_changes,
        users=users,
        trees={1: 'Main tree', 2: 'Archive'},
        log_entries=sample_log_entries,
        messages=sample_messages,
        name_resolver=resolver,
    )
