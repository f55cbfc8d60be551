import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from wsqcodec.tree import build_w_tree
from wsqcodec.wavelet import (
    get_lets,
    join_lets,
    wsq_decompose,
    wsq_reconstruct,
)

HIFILT = [
    0.06453888262869706,
    -0.04068941760916406,
    -0.41809227322161724,
    0.7884856164055829,
    -0.41809227322161724,
    -0.04068941760916406,
    0.06453888262869706,
]

LOFILT = [
    0.03782845550726404,
    -0.02384946501955685,
    -0.11062440441843718,
    0.37740285561283066,
    0.85269867900889385,
    0.37740285561283066,
    -0.11062440441843718,
    -0.02384946501955685,
    0.03782845550726404,
]


def _halves(n):
    if n % 2:
        return (n + 1) // 2, (n + 1) // 2 - 1
    return n // 2, n // 2


def _row(n, seed=0):
    return np.random.default_rng(seed).uniform(-128, 128, n).astype(np.float32)


@pytest.mark.parametrize("n", [8, 9, 16, 17, 31, 40])
@pytest.mark.parametrize("inv", [False, True])
def test_one_dimensional_round_trip(n, inv):
    row = _row(n)
    coefs = get_lets(row, 1, n, n, 1, HIFILT, LOFILT, inv)
    back = join_lets(coefs, 1, n, n, 1, HIFILT, LOFILT, inv)
    np.testing.assert_allclose(back, row, atol=1e-3)


@settings(max_examples=25, deadline=None)
@given(st.integers(min_value=8, max_value=70), st.integers(0, 1000))
def test_round_trip_any_length(n, seed):
    row = _row(n, seed)
    coefs = get_lets(row, 1, n, n, 1, HIFILT, LOFILT, False)
    back = join_lets(coefs, 1, n, n, 1, HIFILT, LOFILT, False)
    np.testing.assert_allclose(back, row, atol=1e-3)


@pytest.mark.parametrize("n", [12, 13])
def test_inverted_layout_swaps_halves(n):
    row = _row(n, 3)
    plain = get_lets(row, 1, n, n, 1, HIFILT, LOFILT, False)
    swapped = get_lets(row, 1, n, n, 1, HIFILT, LOFILT, True)
    llen, hlen = _halves(n)
    np.testing.assert_array_equal(swapped[:hlen], plain[llen:])
    np.testing.assert_array_equal(swapped[hlen:], plain[:llen])


@pytest.mark.parametrize("n", [10, 11])
def test_constant_signal_has_no_detail(n):
    value = 7.0
    row = np.full(n, value, dtype=np.float32)
    coefs = get_lets(row, 1, n, n, 1, HIFILT, LOFILT, False)
    llen, _ = _halves(n)
    np.testing.assert_allclose(coefs[llen:], 0.0, atol=1e-4)
    np.testing.assert_allclose(coefs[:llen], value * sum(LOFILT), rtol=1e-5)


def test_rows_are_filtered_independently():
    width, rows = 14, 3
    data = np.random.default_rng(5).uniform(-50, 50, width * rows).astype(np.float32)
    together = get_lets(data, rows, width, width, 1, HIFILT, LOFILT, False)
    for r in range(rows):
        single = get_lets(data[r * width:(r + 1) * width], 1, width, width, 1,
                          HIFILT, LOFILT, False)
        np.testing.assert_array_equal(together[r * width:(r + 1) * width], single)


def test_columns_match_transposed_rows():
    width, height = 9, 12
    img = np.random.default_rng(9).uniform(-50, 50, (height, width)).astype(np.float32)
    by_cols = get_lets(img, width, height, 1, width, HIFILT, LOFILT, False)
    by_rows = get_lets(img.T.copy(), width, height, height, 1, HIFILT, LOFILT, False)
    np.testing.assert_array_equal(
        by_cols.reshape(height, width), by_rows.reshape(width, height).T
    )


@pytest.mark.parametrize("width,height", [(128, 128), (101, 97)])
def test_image_round_trip(width, height):
    img = np.random.default_rng(1).uniform(-128, 128, width * height).astype(np.float32)
    w_tree = build_w_tree(width, height)
    subbands = wsq_decompose(img, width, height, w_tree, HIFILT, LOFILT)
    back = wsq_reconstruct(subbands, width, height, w_tree, HIFILT, LOFILT)
    assert back.shape == (width * height,)
    np.testing.assert_allclose(back, img, atol=2e-2)


def test_decompose_leaves_input_untouched():
    width = height = 96
    img = np.random.default_rng(2).uniform(-128, 128, (height, width)).astype(np.float32)
    original = img.copy()
    w_tree = build_w_tree(width, height)
    subbands = wsq_decompose(img, width, height, w_tree, HIFILT, LOFILT)
    np.testing.assert_array_equal(img, original)
    assert not np.allclose(subbands, original.ravel())


def test_decompose_rejects_wrong_size():
    w_tree = build_w_tree(96, 96)
    with pytest.raises(ValueError):
        wsq_decompose(np.zeros(95 * 96), 96, 96, w_tree, HIFILT, LOFILT)


def test_reconstruct_rejects_missing_filters():
    w_tree = build_w_tree(96, 96)
    with pytest.raises(ValueError):
        wsq_reconstruct(np.zeros(96 * 96), 96, 96, w_tree, [], LOFILT)


def test_signal_too_short_for_filter():
    with pytest.raises(ValueError):
        get_lets(np.ones(3), 1, 3, 3, 1, HIFILT, LOFILT, False)


def test_synthesis_signal_too_short_for_filter():
    with pytest.raises(ValueError):
        join_lets(np.ones(2), 1, 2, 2, 1, HIFILT, LOFILT, False)


def test_region_outside_buffer():
    with pytest.raises(ValueError):
        get_lets(np.ones(10), 2, 10, 10, 1, HIFILT, LOFILT, False)