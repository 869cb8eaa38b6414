"""
Data content statistics collector.

Looks inside each accepted change: which record types were touched, which
facts were edited, added or deleted, and which changes were the largest.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Tuple

from lens_stats.classifier import ClassifiedChange, classify_change
from lens_stats.facts import shorten_name
from lens_stats.labels import RECORD_TYPE_ORDER, order_index
from lens_stats.records import ChangeDataset, RecordKey
from lens_stats.statistics.aggregate import ranked_counts
from lens_stats.statistics.base import StatisticsCollector, register_collector
from lens_stats.statistics.model import Stats

logger = logging.getLogger(__name__)

INDIVIDUAL = 'Individual'
SHORT_LABEL_LENGTH = 50


@register_collector
@dataclass
class DataContentCollector(StatisticsCollector):
    """
    Collects statistics about the content of accepted changes.

    Deletions are skipped; creations count their facts as added.

    Statistics collected:
        - Changes per record type
        - Most edited individuals
        - Most edited, added and deleted facts
        - Most changed facts per individual
        - Largest changes by line-diff score
    """
    collector_id: str = "data_content"
    top_n: int = 15
    largest_changes_limit: int = 15

    def collect(self, dataset: ChangeDataset, existing_stats: Stats, collector_num: int = None, total_collectors: int = None) -> Stats:
        """Collect data content statistics."""
        stats = Stats()

        changes = [c for c in dataset.accepted_changes if not c.is_deletion]
        prefix = self._prefix(collector_num, total_collectors)
        self._report_step(info=f"{prefix}Analyzing changed data", target=len(changes), reset_counter=True, plus_step=0)

        record_types = Counter()
        individual_edits: Counter = Counter()
        edited_facts = Counter()
        added_facts = Counter()
        deleted_facts = Counter()
        facts_per_individual: Counter = Counter()
        largest: List[ClassifiedChange] = []

        for idx, change in enumerate(changes):
            if idx % 100 == 0:
                if self._stop_requested("Data content collection stopped"):
                    break
                self._report_step(plus_step=100)

            classified = classify_change(change)
            record_types[classified.record_type] += 1
            is_individual = classified.record_type == INDIVIDUAL
            if is_individual:
                individual_edits[change.record_key] += 1

            if change.is_modification:
                for fact in classified.facts.edited:
                    edited_facts[fact] += 1
                    if is_individual:
                        facts_per_individual[(change.gedcom_id, change.xref, fact)] += 1

            added_facts.update(classified.facts.added)
            deleted_facts.update(classified.facts.deleted)

            if classified.score > 0:
                largest.append(classified)

        ordered_types = sorted(record_types, key=lambda t: (order_index(RECORD_TYPE_ORDER, t), t))
        stats.add_value('data_content', 'record_type_stats', {t: record_types[t] for t in ordered_types})

        top_individuals = list(ranked_counts(individual_edits, self.top_n).items())
        top_fact_changes = list(ranked_counts(facts_per_individual, self.top_n).items())
        largest.sort(key=lambda c: (-c.score, c.record.change_time, c.record.xref))
        largest = largest[:self.largest_changes_limit]

        # One batched lookup for every record name shown below
        names = dataset.resolve_names(
            [key for key, _ in top_individuals]
            + [(g, x) for (g, x, _), _ in top_fact_changes]
            + [c.record.record_key for c in largest]
        )

        stats.add_value('data_content', 'most_edited_individuals', self._individual_labels(top_individuals, names))
        stats.add_value('data_content', 'most_edited_facts', ranked_counts(edited_facts, self.top_n))
        stats.add_value('data_content', 'most_added_facts', ranked_counts(added_facts, self.top_n))
        stats.add_value('data_content', 'most_deleted_facts', ranked_counts(deleted_facts, self.top_n))
        stats.add_value('data_content', 'most_changed_facts_per_individual', self._fact_labels(top_fact_changes, names))
        stats.add_value('data_content', 'largest_changes', self._largest_change_labels(largest, names, dataset))

        logger.info(f"Data content: {len(changes)} changes, {sum(edited_facts.values())} edited facts, "
                    f"{sum(added_facts.values())} added, {sum(deleted_facts.values())} deleted")

        return stats

    def _individual_labels(self, top: List[Tuple[RecordKey, int]], names: Dict[RecordKey, str]) -> Dict[str, int]:
        """Label individuals by name, falling back to their xref."""
        result: Dict[str, int] = {}
        for key, count in top:
            label = names.get(key, key[1])
            if label in result:
                label = f"{label} ({key[1]})"
            result[label] = count
        return result

    def _fact_labels(self, top: List[Tuple[Tuple[int, str, str], int]], names: Dict[RecordKey, str]) -> Dict[str, int]:
        """Label (individual, fact) pairs as 'Name (xref) - FACT'."""
        result: Dict[str, int] = {}
        for (gedcom_id, xref, fact), count in top:
            name = names.get((gedcom_id, xref), xref)
            result[f"{name} ({xref}) - {fact}"] = count
        return result

    def _largest_change_labels(self, largest: List[ClassifiedChange], names: Dict[RecordKey, str], dataset: ChangeDataset) -> Dict[str, Any]:
        """
        Label the largest changes as 'Name (xref) - YYYY-MM-DD HH:MM (editor)'.

        The editor is appended only while the label stays short. The first
        (largest) entry wins when two changes produce the same label.
        """
        result: Dict[str, int] = {}
        for classified in largest:
            change = classified.record
            when = change.change_time.strftime('%Y-%m-%d %H:%M')
            name = shorten_name(names.get(change.record_key, ''))
            label = f"{name} ({change.xref}) - {when}" if name else f"{change.xref} - {when}"
            if len(label) < SHORT_LABEL_LENGTH:
                label += f" ({dataset.user_display_name(change.user_id)})"
            result.setdefault(label, classified.score)
        return result
