"""
Unit tests for the audit log and messaging collectors.
"""
from dataclasses import replace
from datetime import datetime

import pytest

from lens_stats.filters import ChangeFilter
from lens_stats.records import ChangeDataset, LogEntry
from lens_stats.statistics.collectors.audit import AuditLogCollector, clean_search_term, extract_failed_login_user
from lens_stats.statistics.collectors.messages import MessagesCollector
from lens_stats.statistics.model import Stats


@pytest.mark.parametrize("message,expected", [
    ('Login failed (incorrect password): mallory', 'mallory'),
    ('Failed login: eve from 10.0.0.9', 'eve'),
    ('Login failed ->bob<-', 'bob'),
    ('Login failed for reason: trudy', 'trudy'),
    ('Login failed', 'Login failed'),
])
def test_extract_failed_login_user(message, expected):
    assert extract_failed_login_user(message) == expected


@pytest.mark.parametrize("message,expected", [
    ('Search: Smith', 'Smith'),
    ('search:   Smith  ', 'Smith'),
    ('Searched for: smith family', 'smith family'),
    ('Plain text', 'Plain text'),
    ('Search: ', ''),
])
def test_clean_search_term(message, expected):
    assert clean_search_term(message) == expected


def test_clean_search_term_truncates():
    term = clean_search_term('Search: ' + 'a' * 150)
    assert len(term) == 100
    assert term.endswith('...')


class TestAuditLogCollector:
    """Tests for AuditLogCollector."""
    
    def test_auth_summary(self, sample_dataset):
        stats = AuditLogCollector().collect(sample_dataset, Stats())
        
        assert stats.get_value('audit', 'auth_summary') == {
            '2024-06-10': {'logins': 1, 'failed': 0},
            '2024-06-11': {'logins': 1, 'failed': 3},
            '2024-06-12': {'logins': 0, 'failed': 1},
        }
    
    def test_searches(self, sample_dataset):
        stats = AuditLogCollector().collect(sample_dataset, Stats())
        
        assert stats.get_value('audit', 'search_timeline') == {'2024-06-10': 1, '2024-06-11': 1, '2024-06-12': 1}
        assert list(stats.get_value('audit', 'search_terms').items()) == [('Smith', 2), ('smith family', 1)]
    
    def test_failed_logins(self, sample_dataset):
        stats = AuditLogCollector().collect(sample_dataset, Stats())
        
        assert stats.get_value('audit', 'failed_logins') == [{
            'username': 'mallory',
            'ip_address': '10.0.0.1',
            'attempts': 3,
            'last_attempt': '2024-06-11 23:02:00',
        }]
    
    def test_failed_logins_threshold(self, sample_dataset):
        stats = AuditLogCollector(failed_login_min_attempts=1).collect(sample_dataset, Stats())
        
        assert [f['username'] for f in stats.get_value('audit', 'failed_logins')] == ['mallory', 'eve']
    
    def test_allow_list_keeps_anonymous_failures_and_searches(self, sample_dataset):
        dataset = replace(sample_dataset, change_filter=ChangeFilter(user_ids=[2]))
        stats = AuditLogCollector().collect(dataset, Stats())
        
        summary = stats.get_value('audit', 'auth_summary')
        assert sum(day['logins'] for day in summary.values()) == 1
        assert sum(day['failed'] for day in summary.values()) == 4
        assert stats.get_value('audit', 'search_terms') == {'smith family': 1, 'Smith': 1}
    
    def test_weekly_period(self, sample_dataset):
        stats = AuditLogCollector(auth_period='week').collect(sample_dataset, Stats())
        
        assert stats.get_value('audit', 'auth_summary') == {'2024-W24': {'logins': 2, 'failed': 4}}
    
    def test_other_log_types_ignored(self):
        entries = [LogEntry('edit', datetime(2024, 1, 1), 'Login: alice', 1)]
        stats = AuditLogCollector().collect(ChangeDataset(log_entries=entries), Stats())
        
        assert stats.get_value('audit', 'auth_summary') == {}


class TestMessagesCollector:
    """Tests for MessagesCollector."""
    
    def test_timeline(self, sample_dataset):
        stats = MessagesCollector().collect(sample_dataset, Stats())
        
        assert stats.get_value('messages', 'timeline') == {'labels': ['2024-06-10', '2024-06-11'], 'data': [2, 1]}
    
    def test_user_message_stats(self, sample_dataset):
        stats = MessagesCollector().collect(sample_dataset, Stats())
        
        assert stats.get_value('messages', 'user_message_stats') == {
            'labels': ['Alice Archer', 'Bob Baker', 'visitor@example.com'],
            'received': [2, 1, 0],
            'sent': [1, 1, 1],
        }
    
    def test_allow_list(self, sample_dataset):
        dataset = replace(sample_dataset, change_filter=ChangeFilter(user_ids=[1]))
        stats = MessagesCollector().collect(dataset, Stats())
        
        assert stats.get_value('messages', 'timeline') == {'labels': ['2024-06-10', '2024-06-11'], 'data': [1, 1]}
        assert stats.get_value('messages', 'user_message_stats') == {
            'labels': ['Alice Archer'],
            'received': [2],
            'sent': [1],
        }
    
    def test_user_limit(self, sample_dataset):
        stats = MessagesCollector(message_user_limit=1).collect(sample_dataset, Stats())
        
        assert stats.get_value('messages', 'user_message_stats')['labels'] == ['Alice Archer']
