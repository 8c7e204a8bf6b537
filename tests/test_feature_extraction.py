import math

import numpy as np
import pytest

from posetrack.features.extraction import FeatureExtractor, extract_pairwise_distances, feature_length

UNIT_SQUARE = [(0, 0), (1, 0), (0, 1), (1, 1)]


def test_unit_square_canonical_order():
    f = extract_pairwise_distances(UNIT_SQUARE)
    # (0,1) (0,2) (0,3) (1,2) (1,3) (2,3)
    np.testing.assert_allclose(f, [1, 1, math.sqrt(2), math.sqrt(2), 1, 1])


def test_feature_length_for_68_landmarks():
    assert feature_length(68) == 2278
    assert FeatureExtractor(68).feature_length == 2278

    rng = np.random.default_rng(0)
    f = FeatureExtractor(68).extract(rng.uniform(0, 640, size=(68, 2)))
    assert f.shape == (2278,)
    assert f.dtype == np.float64


def test_permuting_points_permutes_features():
    pts = np.array([(0, 0), (3, 0), (0, 4), (2, 7)], dtype=float)
    ex = FeatureExtractor(4)
    f = ex.extract(pts)

    perm = [2, 0, 3, 1]
    g = ex.extract(pts[perm])

    for i, j in ex.canonical_pairs():
        a, b = perm[i], perm[j]
        assert g[ex.pair_index(i, j)] == pytest.approx(f[ex.pair_index(a, b)])


def test_wrong_landmark_count_raises():
    with pytest.raises(ValueError):
        FeatureExtractor(68).extract(np.zeros((67, 2)))
    with pytest.raises(ValueError):
        extract_pairwise_distances(np.zeros((4, 3)))
    with pytest.raises(ValueError):
        extract_pairwise_distances([(1.0, 2.0)])


def test_pair_index_matches_canonical_pairs():
    ex = FeatureExtractor(5)
    pairs = ex.canonical_pairs()
    assert len(pairs) == ex.feature_length
    for k, (i, j) in enumerate(pairs):
        assert ex.pair_index(i, j) == k
        assert ex.pair_index(j, i) == k

    with pytest.raises(ValueError):
        ex.pair_index(2, 2)
    with pytest.raises(ValueError):
        ex.pair_index(0, 5)


def test_input_is_not_mutated():
    pts = np.array(UNIT_SQUARE, dtype=float)
    before = pts.copy()
    extract_pairwise_distances(pts)
    np.testing.assert_array_equal(pts, before)
