import pytest

from bibmerge.dedup.similarity import (
    can_reach_threshold,
    edit_distance,
    normalized_similarity,
    title_similarity,
)


def test_edit_distance_classic_examples():
    assert edit_distance("kitten", "sitting") == 3
    assert edit_distance("flaw", "lawn") == 2
    assert edit_distance("", "abc") == 3
    assert edit_distance("same", "same") == 0


def test_identical_after_normalization():
    assert title_similarity(
        "Heart Disease in Elderly Patients", "heart disease in elderly patients."
    ) == 1.0


def test_reflexive():
    for title in ["Heart Disease", "a", "Diabetes Management"]:
        assert title_similarity(title, title) == 1.0


def test_empty_strings():
    assert title_similarity("", "") == 1.0
    assert title_similarity("", "nonempty") == 0.0
    assert title_similarity("nonempty", "") == 0.0


def test_titles_that_normalize_to_empty():
    assert title_similarity("!!!", "???") == 1.0
    assert title_similarity("!!!", "abc") == 0.0


def test_single_typo():
    # "diabetes management" (19) vs "diabetes managment" (18): distância 1
    assert title_similarity("Diabetes Management", "Diabetes Managment") == pytest.approx(1 - 1 / 19)


def test_plural():
    assert title_similarity("Heart Disease", "Heart Diseases") == pytest.approx(1 - 1 / 14)


def test_unrelated_titles_score_low():
    assert title_similarity("Heart Disease", "Diabetes") < 0.5


@pytest.mark.parametrize(
    "a, b",
    [
        ("Heart Disease", "Diabetes"),
        ("Diabetes Management", "Diabetes Managment"),
        ("", "abc"),
        ("Short", "A much longer title about something else"),
    ],
)
def test_symmetric(a, b):
    assert title_similarity(a, b) == title_similarity(b, a)


def test_result_in_unit_interval():
    for a, b in [("abc", "xyz"), ("a", "abcdefghij"), ("abcd", "abce")]:
        assert 0.0 <= normalized_similarity(a, b) <= 1.0


def test_completely_different_same_length():
    assert normalized_similarity("abc", "xyz") == 0.0


def test_can_reach_threshold():
    assert can_reach_threshold(19, 18, 0.85)
    assert not can_reach_threshold(10, 20, 0.85)
    assert can_reach_threshold(0, 0, 0.85)
    assert can_reach_threshold(10, 20, 0.5)


def test_can_reach_threshold_never_rejects_a_match():
    pairs = [("diabetes management", "diabetes managment"), ("heart disease", "heart diseases")]
    for a, b in pairs:
        sim = normalized_similarity(a, b)
        assert can_reach_threshold(len(a), len(b), sim)
