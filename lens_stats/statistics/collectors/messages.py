"""
Internal messaging statistics collector.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
import logging
from typing import Dict, List

from lens_stats.labels import period_key
from lens_stats.records import ChangeDataset
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class MessagesCollector(StatisticsCollector):
    """
    Collects statistics about messages between users.
    
    The user allow-list applies to recipients; a sender is matched to a
    user by e-mail address. Senders that are not users are kept only when
    no allow-list is active.
    
    Statistics collected:
        - Messages per period
        - Messages received and sent per user, busiest users first
    """
    collector_id: str = "messages"
    message_period: str = "day"
    message_user_limit: int = 15
    
    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect messaging statistics."""
        stats = Stats()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Analyzing messages")
        
        change_filter = dataset.change_filter
        allow_list = set(change_filter.user_ids) if change_filter is not None else set()
        
        received_messages = [m for m in dataset.messages if not allow_list or m.user_id in allow_list]
        timeline = Counter(period_key(m.created, self.message_period) for m in received_messages)
        stats.add_value('messages', 'timeline', {
            'labels': sorted(timeline),
            'data': [timeline[k] for k in sorted(timeline)],
        })
        
        users_by_email = {u.email: u for u in dataset.users.values() if u.email}
        user_stats: Dict[str, Dict[str, int]] = defaultdict(lambda: {'received': 0, 'sent': 0})
        
        for message in received_messages:
            user = dataset.users.get(message.user_id) if message.user_id is not None else None
            name = user.display_name if user else 'Unknown'
            user_stats[name]['received'] += 1
        
        for message in dataset.messages:
            user = users_by_email.get(message.sender)
            if user is not None:
                if allow_list and user.user_id not in allow_list:
                    continue
                name = user.display_name
            else:
                if allow_list:
                    continue
                name = message.sender
            user_stats[name]['sent'] += 1
        
        ordered = sorted(user_stats.items(), key=lambda item: (-(item[1]['received'] + item[1]['sent']), item[0]))
        ordered = ordered[:self.message_user_limit]
        
        labels: List[str] = [name for name, _ in ordered]
        stats.add_value('messages', 'user_message_stats', {
            'labels': labels,
            'received': [counts['received'] for _, counts in ordered],
            'sent': [counts['sent'] for _, counts in ordered],
        })
        
        logger.info(f"Messages: {len(received_messages)} messages, {len(user_stats)} correspondents")
        
        return stats
