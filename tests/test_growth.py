import pytest

from complexity_estimator.domain.models.growth import (
    CANONICAL_ORDER,
    GrowthClass,
    GrowthLattice,
)


def test_canonical_order_is_ranked():
    assert len(CANONICAL_ORDER) == 9
    assert [cls.rank for cls in CANONICAL_ORDER] == list(range(9))
    assert GrowthClass.UNKNOWN.rank == -1
    assert GrowthClass.LINEAR < GrowthClass.LINEARITHMIC < GrowthClass.QUADRATIC
    assert max(GrowthClass.SQRT, GrowthClass.LOGARITHMIC) is GrowthClass.SQRT


def test_max_absorbs_unknown():
    assert GrowthLattice.max(GrowthClass.UNKNOWN, GrowthClass.LINEAR) is GrowthClass.LINEAR
    assert GrowthLattice.max() is GrowthClass.CONSTANT
    assert GrowthLattice.max(GrowthClass.UNKNOWN) is GrowthClass.UNKNOWN
    assert GrowthLattice.min(GrowthClass.CUBIC, GrowthClass.LOGARITHMIC) is GrowthClass.LOGARITHMIC


def test_multiply_has_constant_identity():
    for cls in CANONICAL_ORDER:
        assert GrowthLattice.multiply(GrowthClass.CONSTANT, cls) is cls
        assert GrowthLattice.multiply(cls, GrowthClass.CONSTANT) is cls


def test_multiply_nesting():
    assert GrowthLattice.multiply(GrowthClass.LINEAR, GrowthClass.LINEAR) is GrowthClass.QUADRATIC
    assert (
        GrowthLattice.multiply(GrowthClass.LINEAR, GrowthClass.LOGARITHMIC)
        is GrowthClass.LINEARITHMIC
    )
    assert GrowthLattice.multiply(GrowthClass.QUADRATIC, GrowthClass.QUADRATIC) is GrowthClass.CUBIC
    assert GrowthLattice.exceeds_cap(GrowthClass.QUADRATIC, GrowthClass.QUADRATIC)
    assert not GrowthLattice.exceeds_cap(GrowthClass.LINEAR, GrowthClass.QUADRATIC)


def test_steps_rejects_unknown():
    assert GrowthLattice.steps(GrowthClass.LINEAR, GrowthClass.EXPONENTIAL) == 4
    with pytest.raises(ValueError):
        GrowthLattice.steps(GrowthClass.UNKNOWN, GrowthClass.LINEAR)


def test_polynomial_degree_is_capped():
    assert GrowthLattice.from_polynomial_degree(0) is GrowthClass.CONSTANT
    assert GrowthLattice.from_polynomial_degree(1) is GrowthClass.LINEAR
    assert GrowthLattice.from_polynomial_degree(2) is GrowthClass.QUADRATIC
    assert GrowthLattice.from_polynomial_degree(5) is GrowthClass.CUBIC


def test_growth_values():
    assert GrowthLattice.growth_value(GrowthClass.CONSTANT, 1000) == 1.0
    assert GrowthLattice.growth_value(GrowthClass.LOGARITHMIC, 1024) == pytest.approx(10.0)
    assert GrowthLattice.growth_value(GrowthClass.QUADRATIC, 12) == pytest.approx(144.0)
    assert GrowthLattice.growth_value(GrowthClass.EXPONENTIAL, 10) == pytest.approx(1024.0)
    assert GrowthLattice.growth_value(GrowthClass.FACTORIAL, 5) == pytest.approx(120.0)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("O(n)", GrowthClass.LINEAR),
        ("O(n^2)", GrowthClass.QUADRATIC),
        ("n²", GrowthClass.QUADRATIC),
        ("quadratic", GrowthClass.QUADRATIC),
        ("O(V + E)", GrowthClass.LINEAR),
        ("O(n log n) average, O(n²) worst", GrowthClass.LINEARITHMIC),
        ("O(2^n)", GrowthClass.EXPONENTIAL),
        ("Θ(log n)", GrowthClass.LOGARITHMIC),
        ("O(3n + 5)", GrowthClass.LINEAR),
        ("O(n^2 + n)", GrowthClass.QUADRATIC),
        ("Between O(n) and O(2^n)", GrowthClass.UNKNOWN),
        ("", GrowthClass.UNKNOWN),
        (None, GrowthClass.UNKNOWN),
        ("fast", GrowthClass.UNKNOWN),
        ("pretty fast", GrowthClass.UNKNOWN),
        ("depends on the input", GrowthClass.UNKNOWN),
    ],
)
def test_parse_label(label, expected):
    assert GrowthLattice.parse_label(label) is expected


def test_parse_label_passes_members_through():
    assert GrowthLattice.parse_label(GrowthClass.CUBIC) is GrowthClass.CUBIC
