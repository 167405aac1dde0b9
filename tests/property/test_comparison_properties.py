"""
Property-based tests for the comparison engine.

Tests properties related to:
- Self-comparison always passes
- Matched and unmatched fingerprints partition each side
- Source/target symmetry
- Row order independence
- Sample mismatch bound
- Disjoint duplicate-free sides share nothing
"""

from hypothesis import given, settings, strategies as st

from src.reconciliation.compare import compare_result_sets
from src.reconciliation.compare.engine import MAX_SAMPLE_MISMATCHES
from src.reconciliation.compare.fingerprint import fingerprint
from src.reconciliation.models import ComparisonStatus, MismatchType
from src.utils.db_connector import ResultSet

COLUMNS = ["id", "name", "amount"]

cell = st.one_of(
    st.none(),
    st.integers(min_value=-1000, max_value=1000),
    st.text(alphabet="abcxyz ", max_size=5),
    st.booleans(),
)

row = st.fixed_dictionaries({column: cell for column in COLUMNS})
rows = st.lists(row, max_size=30)


def as_result_set(data):
    return ResultSet.from_rows(list(COLUMNS), data)


def distinct(data):
    return {fingerprint(r, COLUMNS) for r in data}


@given(rows)
def test_self_comparison_passes(data):
    """Comparing a result set with itself finds nothing missing."""
    summary, samples, columns = compare_result_sets(as_result_set(data), as_result_set(data))

    assert summary.comparison_status == ComparisonStatus.PASSED
    assert summary.matched_rows == len(distinct(data))
    assert summary.source_only_rows == summary.target_only_rows == 0
    assert samples == []
    assert columns == COLUMNS


@given(rows, rows)
def test_fingerprints_partition_each_side(source, target):
    """Every distinct fingerprint is either matched or unique to its side."""
    summary, _, _ = compare_result_sets(as_result_set(source), as_result_set(target))

    assert summary.matched_rows == len(distinct(source) & distinct(target))
    assert summary.matched_rows + summary.source_only_rows == len(distinct(source))
    assert summary.matched_rows + summary.target_only_rows == len(distinct(target))
    assert summary.mismatched_rows == summary.source_only_rows
    assert summary.source_row_count == len(source)
    assert summary.target_row_count == len(target)


@given(rows, rows)
def test_swapping_sides_swaps_counts(source, target):
    forward, _, _ = compare_result_sets(as_result_set(source), as_result_set(target))
    backward, _, _ = compare_result_sets(as_result_set(target), as_result_set(source))

    assert forward.matched_rows == backward.matched_rows
    assert forward.source_only_rows == backward.target_only_rows
    assert forward.target_only_rows == backward.source_only_rows
    assert forward.comparison_status == backward.comparison_status


@given(rows, rows, st.randoms(use_true_random=False))
def test_row_order_does_not_change_summary(source, target, rnd):
    shuffled_source = list(source)
    shuffled_target = list(target)
    rnd.shuffle(shuffled_source)
    rnd.shuffle(shuffled_target)

    original, _, _ = compare_result_sets(as_result_set(source), as_result_set(target))
    shuffled, _, _ = compare_result_sets(
        as_result_set(shuffled_source), as_result_set(shuffled_target)
    )

    assert original == shuffled


@settings(max_examples=50)
@given(st.lists(row, min_size=0, max_size=60), st.lists(row, min_size=0, max_size=60))
def test_samples_bounded_and_source_first(source, target):
    """At most ten samples; source-only samples precede target-only ones."""
    summary, samples, _ = compare_result_sets(as_result_set(source), as_result_set(target))

    assert len(samples) <= MAX_SAMPLE_MISMATCHES
    assert len(samples) == min(
        MAX_SAMPLE_MISMATCHES, summary.source_only_rows + summary.target_only_rows
    )

    types = [s.type for s in samples]
    if MismatchType.TARGET_ONLY in types:
        first_target = types.index(MismatchType.TARGET_ONLY)
        assert all(t == MismatchType.TARGET_ONLY for t in types[first_target:])


@given(rows, st.lists(st.sampled_from(COLUMNS), min_size=1, unique=True))
def test_key_columns_narrow_matching(data, keys):
    """Matching on a subset of columns never finds fewer matches."""
    full, _, _ = compare_result_sets(as_result_set(data), as_result_set(data[::-1]))
    narrowed, _, columns = compare_result_sets(
        as_result_set(data), as_result_set(data[::-1]), key_columns=keys
    )

    assert columns == keys
    assert narrowed.comparison_status == ComparisonStatus.PASSED
    assert narrowed.matched_rows <= full.matched_rows


def keyed_rows(ids):
    keyed_row = st.fixed_dictionaries({
        "id": ids,
        "name": cell,
        "amount": cell,
    })
    return st.lists(keyed_row, max_size=30, unique_by=lambda r: r["id"])


@given(
    keyed_rows(st.integers(min_value=0, max_value=1000)),
    keyed_rows(st.integers(min_value=-1000, max_value=-1)),
)
def test_disjoint_sides_match_nothing(source, target):
    """Duplicate-free sides with no row in common: every row is unmatched."""
    summary, _, _ = compare_result_sets(as_result_set(source), as_result_set(target))

    assert summary.matched_rows == 0
    assert summary.mismatched_rows == summary.source_row_count == len(source)
    assert summary.target_only_rows == summary.target_row_count == len(target)
    expected = ComparisonStatus.PASSED if not source and not target else ComparisonStatus.FAILED
    assert summary.comparison_status == expected
