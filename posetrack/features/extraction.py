"""
Pairwise-distance features.

The regression model and the scaler were fit on features laid out in one fixed
order: every unordered landmark pair (i, j) with i < j, i as the outer loop
and j as the inner loop, both ascending. For 68 points that is 2278 values.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

log = logging.getLogger(__name__)


def feature_length(num_points: int) -> int:
    n = int(num_points)
    return n * (n - 1) // 2


def extract_pairwise_distances(points: Sequence[Sequence[float]], expected_count: Optional[int] = None) -> np.ndarray:
    """
    Euclidean distance for each canonical landmark pair.

    Args:
        points: (N, 2) array-like of landmark coordinates.
        expected_count: if given, N must match it exactly.

    Returns:
        float64 array of length N*(N-1)/2.
    """
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"Expected (N, 2) landmarks, got shape {pts.shape}")

    n = pts.shape[0]
    if expected_count is not None and n != int(expected_count):
        raise ValueError(f"Expected {int(expected_count)} landmarks, got {n}")
    if n < 2:
        raise ValueError(f"Need at least 2 landmarks, got {n}")

    # np.triu_indices walks rows first, so i is outer and j is inner
    i_idx, j_idx = np.triu_indices(n, k=1)
    diff = pts[i_idx] - pts[j_idx]
    return np.hypot(diff[:, 0], diff[:, 1])


class FeatureExtractor:
    """Landmark set -> pairwise-distance feature vector for a fixed detector layout."""

    def __init__(self, num_landmarks: int = 68):
        if int(num_landmarks) < 2:
            raise ValueError("num_landmarks must be >= 2")
        self.num_landmarks = int(num_landmarks)
        self.feature_length = feature_length(self.num_landmarks)
        log.info("FeatureExtractor ready (landmarks=%d, features=%d)", self.num_landmarks, self.feature_length)

    def extract(self, points: Sequence[Sequence[float]]) -> np.ndarray:
        return extract_pairwise_distances(points, expected_count=self.num_landmarks)

    def pair_index(self, i: int, j: int) -> int:
        """Position of pair (i, j) in the feature vector; order of i and j does not matter."""
        i, j = (int(i), int(j)) if i < j else (int(j), int(i))
        n = self.num_landmarks
        if i == j or i < 0 or j >= n:
            raise ValueError(f"Invalid landmark pair ({i}, {j}) for n={n}")
        # rows before i contribute (n-1) + (n-2) + ... + (n-i) entries
        return i * (2 * n - i - 1) // 2 + (j - i - 1)

    def canonical_pairs(self) -> List[Tuple[int, int]]:
        i_idx, j_idx = np.triu_indices(self.num_landmarks, k=1)
        return list(zip(i_idx.tolist(), j_idx.tolist()))
