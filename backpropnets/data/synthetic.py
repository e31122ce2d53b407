"""Small in-memory datasets."""

from __future__ import annotations

from typing import List

import numpy as np

from ..core.types import Float, Sample
from .registry import DatasetSpec, register_dataset

XOR_INPUTS = ((0.0, 0.0), (0.0, 1.0), (1.0, 0.0), (1.0, 1.0))


def xor_samples() -> List[Sample]:
    """The four XOR cases with two-class one-hot targets (index 1 means "true")."""

    samples = []
    for a, b in XOR_INPUTS:
        label = int(a) ^ int(b)
        expected = np.zeros(2, dtype=Float)
        expected[label] = 1.0
        samples.append(Sample.from_values((a, b), expected))
    return samples


@register_dataset("xor")
def build_xor(**_: object) -> DatasetSpec:
    samples = xor_samples()
    return DatasetSpec(
        name="xor",
        train=samples,
        test=list(samples),
        d_in=2,
        d_out=2,
        provenance={"type": "synthetic", "name": "xor"},
    )


def make_blobs(
    n_per_class: int,
    centers: np.ndarray,
    spread: float,
    rng: np.random.Generator,
) -> List[Sample]:
    num_classes = centers.shape[0]
    eye = np.eye(num_classes, dtype=Float)
    samples: List[Sample] = []
    for label, center in enumerate(centers):
        points = center + spread * rng.standard_normal((n_per_class, centers.shape[1]))
        samples.extend(Sample.from_values(point, eye[label]) for point in points)
    return samples


@register_dataset("blobs")
def build_blobs(
    n_train_per_class: int = 20,
    n_test_per_class: int = 10,
    num_classes: int = 3,
    dim: int = 2,
    spread: float = 0.4,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    """Gaussian clusters, one per class, with centres drawn from ``seed``."""

    rng = np.random.default_rng(seed)
    centers = rng.uniform(-2.0, 2.0, size=(num_classes, dim))
    train = make_blobs(n_train_per_class, centers, spread, rng)
    test = make_blobs(n_test_per_class, centers, spread, rng)
    return DatasetSpec(
        name="blobs",
        train=train,
        test=test,
        d_in=dim,
        d_out=num_classes,
        provenance={
            "type": "synthetic",
            "name": "blobs",
            "seed": seed,
            "n_train_per_class": n_train_per_class,
            "n_test_per_class": n_test_per_class,
            "n_train": len(train),
            "n_test": len(test),
            "spread": spread,
        },
    )


__all__ = ["xor_samples", "make_blobs", "build_xor", "build_blobs"]
