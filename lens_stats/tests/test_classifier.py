"""
Tests for classifier module.
"""
import pytest

from lens_stats.classifier import classify_change, classify_record_type, diff_facts, score_change


@pytest.mark.parametrize("xref,gedcom,expected", [
    ('X1', "0 @X1@ INDI\n1 NAME A", 'Individual'),
    ('X1', "0 @X1@ FAM", 'Family'),
    ('X1', "0 @X1@ SOUR", 'Source'),
    ('X1', "0 @X1@ REPO", 'Repository'),
    ('X1', "0 @X1@ OBJE", 'Media object'),
    ('X1', "0 @X1@ NOTE text", 'Note'),
    ('X1', "0 @X1@ SNOTE text", 'Note'),
    ('X1', "0 @X1@ SUBM", 'Submitter'),
    ('X1', "0 @X1@ _LOC", 'Location'),
    ('X1', "0 @X1@ _TODO", 'Other'),
    ('I12', "", 'Individual'),
    ('F3', "garbage", 'Family'),
    ('M9', "", 'Media object'),
    ('Z1', "", 'Other'),
    ('', "", 'Other'),
])
def test_classify_record_type(xref, gedcom, expected):
    assert classify_record_type(xref, gedcom) == expected


def test_diff_facts_edited_added_deleted():
    old = "0 @I1@ INDI\n1 NAME A\n1 BIRT\n1 DEAT"
    new = "0 @I1@ INDI\n1 NAME A\n1 BIRT\n1 BURI"
    facts = diff_facts(old, new)
    assert sorted(facts.edited) == ['BIRT', 'NAME']
    assert facts.added == ['BURI']
    assert facts.deleted == ['DEAT']


def test_diff_facts_counts_repeated_occurrences():
    old = "0 @I1@ INDI\n1 RESI\n1 RESI\n1 OCCU"
    new = "0 @I1@ INDI\n1 RESI\n1 RESI\n1 RESI"
    facts = diff_facts(old, new)
    assert facts.edited == ['RESI', 'RESI']
    assert facts.added == ['RESI']
    assert facts.deleted == ['OCCU']


def test_diff_facts_ignores_bookkeeping_tags():
    old = "0 @I1@ INDI\n1 NAME A\n1 CHAN\n2 DATE 1 JAN 2020"
    new = "0 @I1@ INDI\n1 NAME A\n1 _UID ABC\n1 REFN 7\n1 OBJE @M1@"
    facts = diff_facts(old, new)
    assert facts.edited == ['NAME']
    assert facts.added == []
    assert facts.deleted == []


def test_diff_facts_creation():
    facts = diff_facts("", "0 @I1@ INDI\n1 NAME A\n1 SEX M")
    assert facts.edited == []
    assert sorted(facts.added) == ['NAME', 'SEX']


def test_score_change_counts_changed_lines():
    old = "0 @I1@ INDI\n1 NAME A\n1 SEX M"
    new = "0 @I1@ INDI\n1 NAME A\n1 SEX F\n1 BIRT"
    # one line replaced (delete + insert) and one inserted
    assert score_change(old, new) == 3


def test_score_change_ignores_change_block():
    old = "0 @I1@ INDI\n1 NAME A\n1 CHAN\n2 DATE 1 JAN 2020"
    new = "0 @I1@ INDI\n1 NAME A\n1 CHAN\n2 DATE 2 FEB 2024\n3 TIME 10:00:00"
    assert score_change(old, new) == 0


def test_score_change_creation_and_deletion():
    gedcom = "0 @I1@ INDI\n1 NAME A\n1 SEX M"
    assert score_change("", gedcom) == 3
    assert score_change(gedcom, "") == 3


def test_classify_change_modification(make_change):
    old = "0 @I1@ INDI\n1 NAME A\n1 BIRT\n2 DATE 1900\n1 CHAN\n2 DATE 1 JAN 2020"
    new = "0 @I1@ INDI\n1 NAME A\n1 BIRT\n2 DATE 1901\n1 DEAT\n1 CHAN\n2 DATE 1 JAN 2024"
    classified = classify_change(make_change('I1', old=old, new=new))

    assert classified.record_type == 'Individual'
    assert sorted(classified.facts.edited) == ['BIRT', 'NAME']
    assert classified.facts.added == ['DEAT']
    assert classified.facts.deleted == []
    # '2 DATE 1900' -> '2 DATE 1901' and the new '1 DEAT' line
    assert classified.score == 3


def test_classify_change_deletion_uses_old_text(make_change):
    classified = classify_change(make_change('X5', old="0 @X5@ SOUR\n1 TITL T", new=''))
    assert classified.record_type == 'Source'
    assert classified.facts.deleted == ['TITL']


def test_diff_facts_multiset_deltas():
    old = "0 @I1@ INDI\n1 BIRT\n1 BIRT\n1 NAME A"
    new = "0 @I1@ INDI\n1 BIRT\n1 NAME A\n1 NAME B\n1 DEAT"
    facts = diff_facts(old, new)
    assert sorted(facts.edited) == ['BIRT', 'NAME']
    assert sorted(facts.added) == ['DEAT', 'NAME']
    assert facts.deleted == ['BIRT']
