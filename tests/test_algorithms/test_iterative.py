"""
Tests for online clustering by pairwise association.
"""

import numpy as np

from ocr_cluster.algorithms.iterative import IterativeClustering, Operation


def test_associate_operations():
    ic = IterativeClustering()
    assert ic.associate(1, 2) is Operation.CREATE
    assert ic.associate(2, 3) is Operation.ADD
    assert ic.associate(4, 5) is Operation.CREATE
    assert len(ic) == 2

    assert ic.associate(3, 4) is Operation.MERGE
    assert ic.get_clusters() == [{1, 2, 3, 4, 5}]

    assert ic.associate(1, 5) is Operation.NONE
    assert ic.associate(5, 1) is Operation.NONE
    assert ic.associate(6, 1) is Operation.ADD
    assert ic.clusters == [{1, 2, 3, 4, 5, 6}]


def test_merge_keeps_first_cluster_position():
    """A bridged later cluster is folded into the earlier one."""
    ic = IterativeClustering()
    ic.associate("a", "b")
    ic.associate("x", "y")
    ic.associate("c", "d")
    assert ic.associate("d", "a") is Operation.MERGE
    assert ic.clusters == [{"a", "b", "c", "d"}, {"x", "y"}]


def test_self_association():
    ic = IterativeClustering()
    assert ic.associate(1, 1) is Operation.CREATE
    assert ic.clusters == [{1}]
    assert ic.associate(1, 1) is Operation.NONE


def test_clusters_stay_disjoint():
    """After any sequence, clusters are disjoint and every pair is grouped."""
    rng = np.random.default_rng(3)
    pairs = [tuple(int(v) for v in rng.integers(0, 40, size=2)) for _ in range(35)]
    ic = IterativeClustering()
    for v1, v2 in pairs:
        ic.associate(v1, v2)

    seen = set()
    for cluster in ic.clusters:
        assert not (seen & cluster)
        seen |= cluster
    for v1, v2 in pairs:
        assert any(v1 in c and v2 in c for c in ic.clusters)
    assert seen == {v for pair in pairs for v in pair}


def test_str():
    ic = IterativeClustering()
    assert str(ic) == ""
    ic.associate(2, 1)
    ic.associate(3, 4)
    assert str(ic) == "{ 1 2 } { 3 4 } "
