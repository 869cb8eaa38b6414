def test_imports():
    import lens_stats
    from lens_stats import (
        ChangeDataset,
        ChangeFilter,
        ChangeRecord,
        InMemoryChangeStore,
        SqliteChangeStore,
        Statistics,
        StatisticsPipeline,
        Stats,
        myers_diff,
    )
    from lens_stats.statistics import collectors, get_collector_registry

    assert lens_stats.__all__
    registry = get_collector_registry()
    for collector_id in ('trees', 'activity', 'data_content', 'data_quality', 'editor_patterns',
                         'commit_size', 'sessions', 'collaboration', 'heatmaps', 'audit', 'messages'):
        assert collector_id in registry
