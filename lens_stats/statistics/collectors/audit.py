"""
Security audit log statistics collector.

Summarizes the 'auth' and 'search' entries of the host application's log.
Successful logins honour the user allow-list strictly; failed logins and
searches also keep anonymous entries, which have no user id.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from lens_stats.labels import period_key
from lens_stats.records import ChangeDataset, LogEntry
from lens_stats.statistics.aggregate import ranked_counts
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)

LOGIN_PREFIX = 'Login:'
FAILED_LOGIN_PREFIXES = ('Login failed', 'Failed login')

SEARCH_PREFIX_RES = [re.compile(r'^Search:\s*', re.IGNORECASE), re.compile(r'^Searched for:\s*', re.IGNORECASE)]
MAX_SEARCH_TERM_LENGTH = 100

# Failed login message formats, newest first
FAILED_LOGIN_USER_RES = [
    re.compile(r'Login failed\s*\([^)]+\):\s*(.+)'),
    re.compile(r'Failed login:\s*(.+?)\s+from\s+'),
    re.compile(r'Login failed\s*->(.+?)<-'),
]


def is_login(entry: LogEntry) -> bool:
    return entry.log_type == 'auth' and entry.log_message.startswith(LOGIN_PREFIX)


def is_failed_login(entry: LogEntry) -> bool:
    return entry.log_type == 'auth' and entry.log_message.startswith(FAILED_LOGIN_PREFIXES)


def clean_search_term(message: str) -> str:
    """Strip the 'Search:' style prefixes of a search log message and shorten it."""
    term = message
    for prefix_re in SEARCH_PREFIX_RES:
        term = prefix_re.sub('', term)
    if len(term) > MAX_SEARCH_TERM_LENGTH:
        term = term[:MAX_SEARCH_TERM_LENGTH - 3] + '...'
    return term.strip()


def extract_failed_login_user(message: str) -> str:
    """Extract the attempted user name from a failed-login message."""
    for user_re in FAILED_LOGIN_USER_RES:
        m = user_re.search(message)
        if m:
            return m.group(1).strip()
    if ':' in message:
        return message.split(':', 1)[1].strip()
    return message.strip()


@register_collector
@dataclass
class AuditLogCollector(StatisticsCollector):
    """
    Collects authentication and search statistics from the audit log.
    
    Statistics collected:
        - Logins and failed logins per period
        - Searches per period
        - Most frequent search terms
        - Repeated failed logins per (user name, IP address)
    """
    collector_id: str = "audit"
    auth_period: str = "day"
    search_terms_limit: int = 20
    failed_login_min_attempts: int = 3
    failed_login_limit: int = 20
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect audit log statistics."""
        stats = Stats()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Analyzing audit log")
        
        change_filter = dataset.change_filter
        
        def allowed(entry: LogEntry, include_anonymous: bool) -> bool:
            if change_filter is None:
                return True
            return change_filter.matches_user(entry.user_id, include_anonymous=include_anonymous)
        
        logins = [e for e in dataset.log_entries if is_login(e) and allowed(e, False)]
        failed = [e for e in dataset.log_entries if is_failed_login(e) and allowed(e, True)]
        searches = [e for e in dataset.log_entries if e.log_type == 'search' and allowed(e, True)]
        
        stats.add_value('audit', 'auth_summary', self._auth_summary(logins, failed))
        
        search_timeline = Counter(period_key(e.log_time, self.auth_period) for e in searches)
        stats.add_value('audit', 'search_timeline', dict(sorted(search_timeline.items())))
        
        terms = Counter()
        for entry in searches:
            term = clean_search_term(entry.log_message)
            if term:
                terms[term] += 1
        stats.add_value('audit', 'search_terms', ranked_counts(terms, self.search_terms_limit))
        
        stats.add_value('audit', 'failed_logins', self._failed_login_list(failed))
        
        logger.info(f"Audit: {len(logins)} logins, {len(failed)} failed logins, {len(searches)} searches")
        
        return stats
    
    def _auth_summary(self, logins: List[LogEntry], failed: List[LogEntry]) -> Dict[str, Dict[str, int]]:
        """Logins and failed logins per period, in period order."""
        summary: Dict[str, Dict[str, int]] = defaultdict(lambda: {'logins': 0, 'failed': 0})
        for entry in logins:
            summary[period_key(entry.log_time, self.auth_period)]['logins'] += 1
        for entry in failed:
            summary[period_key(entry.log_time, self.auth_period)]['failed'] += 1
        return {key: summary[key] for key in sorted(summary)}
    
    def _failed_login_list(self, failed: List[LogEntry]) -> List[Dict[str, Any]]:
        """Group failed logins by (user name, IP) and keep the repeated ones."""
        grouped: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for entry in failed:
            username = extract_failed_login_user(entry.log_message)
            key = (username, entry.ip_address)
            item: Optional[Dict[str, Any]] = grouped.get(key)
            if item is None:
                item = grouped[key] = {
                    'username': username,
                    'ip_address': entry.ip_address,
                    'attempts': 0,
                    'last_attempt': entry.log_time,
                }
            item['attempts'] += 1
            if entry.log_time > item['last_attempt']:
                item['last_attempt'] = entry.log_time
        
        result = [item for item in grouped.values() if item['attempts'] >= self.failed_login_min_attempts]
        result.sort(key=lambda item: (-item['attempts'], item['username'], item['ip_address']))
        for item in result:
            item['last_attempt'] = item['last_attempt'].strftime('%Y-%m-%d %H:%M:%S')
        return result[:self.failed_login_limit]
