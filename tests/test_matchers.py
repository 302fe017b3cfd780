import pytest

from bibmerge.dedup.matchers import (
    match_by_doi,
    match_by_pmid,
    match_by_similarity,
    match_exact,
)


def _titled(record_factory, *titles):
    return [record_factory(source_id=f"R{i}", title=t) for i, t in enumerate(titles)]


# --- Identificadores exatos ---

def test_doi_match_is_case_insensitive(record_factory):
    records = [
        record_factory("pubmed", "A", doi="10.1/X", title="First title"),
        record_factory("cochrane", "B", title="No doi here"),
        record_factory("semantic_scholar", "C", doi="10.1/x", title="Another title"),
    ]
    assert match_by_doi(records) == [[0, 2]]


def test_doi_singletons_are_not_groups(record_factory):
    records = [
        record_factory(source_id="A", doi="10.1/a"),
        record_factory(source_id="B", doi="10.1/b"),
    ]
    assert match_by_doi(records) == []


def test_blank_doi_is_ignored(record_factory):
    records = [
        record_factory(source_id="A", doi="   "),
        record_factory(source_id="B", doi=""),
        record_factory(source_id="C"),
    ]
    assert match_by_doi(records) == []


def test_doi_resolver_prefix(record_factory):
    records = [
        record_factory(source_id="A", doi="https://doi.org/10.1/abc"),
        record_factory(source_id="B", doi="10.1/ABC"),
    ]
    assert match_by_doi(records) == [[0, 1]]
    assert match_by_doi(records, strip_prefixes=False) == []


def test_pmid_match_trims(record_factory):
    records = [
        record_factory(source_id="A", pmid=" 123"),
        record_factory(source_id="B", pmid="456"),
        record_factory(source_id="C", pmid="123 "),
    ]
    assert match_by_pmid(records) == [[0, 2]]


def test_groups_follow_first_appearance(record_factory):
    records = [
        record_factory(source_id="A", doi="10.1/a"),
        record_factory(source_id="B", doi="10.1/b"),
        record_factory(source_id="C", doi="10.1/a"),
        record_factory(source_id="D", doi="10.1/b"),
        record_factory(source_id="E", doi="10.1/a"),
    ]
    assert match_by_doi(records) == [[0, 2, 4], [1, 3]]


def test_exact_match_never_returns_singletons(record_factory):
    records = [record_factory(source_id=str(i), pmid=str(i % 3 if i < 4 else i)) for i in range(8)]
    groups = match_exact(records, lambda r: r.pmid or "")
    assert groups
    assert all(len(g) >= 2 for g in groups)


def test_exact_match_with_identical_records(record_factory):
    twin = dict(source="pubmed", source_id="X", doi="10.1/same", title="Same")
    records = [record_factory(**twin), record_factory(**twin)]
    assert match_by_doi(records) == [[0, 1]]


# --- Similaridade de título ---

def test_similarity_typo_and_singleton(record_factory):
    records = _titled(record_factory, "Diabetes Management", "Diabetes Managment", "Heart Failure")
    assert match_by_similarity(records) == [[0, 1], [2]]


def test_similarity_punctuation_and_case(record_factory):
    records = _titled(
        record_factory, "Heart Disease in Elderly Patients", "heart disease in elderly patients."
    )
    assert match_by_similarity(records) == [[0, 1]]


def test_similarity_covers_every_record_once(record_factory):
    records = _titled(
        record_factory,
        "Diabetes Management",
        "Heart Failure",
        "Diabetes Managment",
        "",
        "Heart failure.",
        "Asthma in children",
    )
    for clustering in ("greedy", "union_find"):
        groups = match_by_similarity(records, clustering=clustering)
        flat = sorted(i for g in groups for i in g)
        assert flat == list(range(len(records)))


def test_similarity_threshold_is_inclusive(record_factory):
    records = _titled(record_factory, "abcd", "abcd")
    assert match_by_similarity(records, threshold=1.0) == [[0, 1]]


def test_higher_threshold_splits_typo(record_factory):
    records = _titled(record_factory, "Diabetes Management", "Diabetes Managment")
    assert match_by_similarity(records, threshold=0.99) == [[0], [1]]


def test_untitled_records_stay_single(record_factory):
    records = _titled(record_factory, "", "Some title", "", "?!")
    assert match_by_similarity(records) == [[0], [1], [2], [3]]


def test_empty_input():
    assert match_by_similarity([]) == []


# Cadeia A~B, B~C, mas A e C abaixo do limiar (0.8, 0.8 e 0.6 com limiar 0.75)
CHAIN = ("abcdefghij", "abcdefghXY", "abcdefZWXY")


def test_greedy_is_anchor_based(record_factory):
    records = _titled(record_factory, *CHAIN)
    assert match_by_similarity(records, threshold=0.75, clustering="greedy") == [[0, 1], [2]]


def test_greedy_depends_on_input_order(record_factory):
    a, b, c = CHAIN
    records = _titled(record_factory, b, a, c)
    assert match_by_similarity(records, threshold=0.75, clustering="greedy") == [[0, 1, 2]]


def test_union_find_is_transitive(record_factory):
    records = _titled(record_factory, *CHAIN)
    assert match_by_similarity(records, threshold=0.75, clustering="union_find") == [[0, 1, 2]]


def test_union_find_is_order_independent(record_factory):
    a, b, c = CHAIN
    records = _titled(record_factory, c, "Unrelated", a, b)
    groups = match_by_similarity(records, threshold=0.75, clustering="union_find")
    assert groups == [[0, 2, 3], [1]]


def test_strategies_agree_without_chains(record_factory):
    records = _titled(record_factory, "Diabetes Management", "Heart Failure", "Diabetes Managment")
    assert match_by_similarity(records, clustering="greedy") == match_by_similarity(
        records, clustering="union_find"
    )


@pytest.mark.parametrize("threshold", [-0.1, 1.5])
def test_invalid_threshold(record_factory, threshold):
    with pytest.raises(ValueError):
        match_by_similarity(_titled(record_factory, "a"), threshold=threshold)


def test_invalid_clustering(record_factory):
    with pytest.raises(ValueError, match="kmeans"):
        match_by_similarity(_titled(record_factory, "a"), clustering="kmeans")
