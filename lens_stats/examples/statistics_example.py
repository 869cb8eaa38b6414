"""
Example: Using the Statistics convenience wrapper.

This example shows how to use the high-level Statistics class on a small
in-memory change history, and how to point it at a SQLite copy of a
webtrees database instead.
"""

import logging
import sys

from lens_stats.filters import ChangeFilter
from lens_stats.statistics import Statistics
from lens_stats.store import InMemoryChangeStore, SqliteChangeStore


JOHN_V1 = "0 @I1@ INDI\n1 NAME John /Doe/\n1 BIRT\n2 DATE 1 JAN 1900"
JOHN_V2 = "0 @I1@ INDI\n1 NAME John /Doe/\n1 BIRT\n2 DATE 1 JAN 1900\n2 PLAC London\n1 DEAT\n2 DATE 31 DEC 1975"
JANE_V1 = "0 @I2@ INDI\n1 NAME Jane /Smith/\n1 SEX F"


def build_store() -> InMemoryChangeStore:
    """Create a small change history."""
    changes = [
        {'xref': 'I1', 'gedcom_id': 1, 'user_id': 1, 'change_time': '2024-03-04 09:00:00', 'new_gedcom': JOHN_V1},
        {'xref': 'I2', 'gedcom_id': 1, 'user_id': 1, 'change_time': '2024-03-04 09:00:00', 'new_gedcom': JANE_V1},
        {'xref': 'I1', 'gedcom_id': 1, 'user_id': 2, 'change_time': '2024-03-05 20:15:00',
         'old_gedcom': JOHN_V1, 'new_gedcom': JOHN_V2},
        {'xref': 'I2', 'gedcom_id': 1, 'user_id': 2, 'change_time': '2024-03-06 08:00:00',
         'status': 'pending', 'old_gedcom': JANE_V1, 'new_gedcom': JANE_V1 + "\n1 BIRT"},
    ]
    users = [
        {'user_id': 1, 'user_name': 'alice', 'real_name': 'Alice Archer', 'email': 'alice@example.org'},
        {'user_id': 2, 'user_name': 'bob', 'real_name': 'Bob Baker', 'email': 'bob@example.org'},
    ]
    log_entries = [
        {'log_type': 'auth', 'log_time': '2024-03-04 08:55:00', 'log_message': 'Login: alice', 'user_id': 1},
        {'log_type': 'search', 'log_time': '2024-03-05 20:00:00', 'log_message': 'Search: Doe', 'user_id': 2},
    ]
    records = {(1, 'I1'): JOHN_V2, (1, 'I2'): JANE_V1}
    return InMemoryChangeStore.from_rows(changes=changes, users=users, trees={1: 'Family tree'},
                                         log_entries=log_entries, records=records)


def example_basic_usage():
    """Basic usage of Statistics wrapper."""
    stats = Statistics(store=build_store())
    
    print("=== Trees ===")
    print(f"Changes by tree: {stats.get_value('trees', 'changes_by_tree')}")
    print(f"Status counts: {stats.get_value('trees', 'status_counts')}")
    
    print("\n=== Content ===")
    print(f"Record types: {stats.get_value('data_content', 'record_type_stats')}")
    print(f"Most edited individuals: {stats.get_value('data_content', 'most_edited_individuals')}")
    print(f"Added facts: {stats.get_value('data_content', 'most_added_facts')}")
    for label, score in stats.get_value('data_content', 'largest_changes', {}).items():
        print(f"  {score:3d}  {label}")
    
    print("\n=== Commits and sessions ===")
    print(f"Commit sizes: {stats.get_value('commit_size', 'stats')}")
    print(f"Sessions: {stats.get_value('sessions', 'total_sessions')}")
    
    heatmap = stats.heatmap('hour', 'day_of_week')
    print(f"\nHeatmap hours: {heatmap['x_labels']}, days: {heatmap['y_labels']}")
    
    # Export to dictionary
    all_stats = stats.to_dict()
    print(f"\nTotal categories collected: {len(all_stats)}")


def example_with_filter():
    """Restrict the analysis to one user and a set of years."""
    stats = Statistics(
        store=build_store(),
        change_filter=ChangeFilter(years=[2024], user_ids=[2]),
        config_dict={'collectors': {'audit': False, 'messages': False}, 'options': {'top_n': 5}},
    )
    print(f"Bob's changes per user: {stats.get_value('editor_patterns', 'user_stats')}")


def example_with_sqlite(db_path: str):
    """Analyze the last 90 days of a SQLite copy of a webtrees database."""
    stats = Statistics(store=SqliteChangeStore(db_path), change_filter=ChangeFilter(days=90))
    print(f"Edit velocity: {stats.get_value('activity', 'edit_velocity')}")


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    example_basic_usage()
    example_with_filter()
    if len(sys.argv) > 1:
        example_with_sqlite(sys.argv[1])
