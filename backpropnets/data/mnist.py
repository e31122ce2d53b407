"""MNIST samples read from the IDX files distributed by the dataset authors."""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import BinaryIO, List

import numpy as np

from ..core.types import Float, Sample
from .registry import DatasetSpec, register_dataset

log = logging.getLogger(__name__)

IMAGE_MAGIC = 0x00000803
LABEL_MAGIC = 0x00000801
IMAGE_SIZE = 28
NUM_CLASSES = 10

TRAIN_FILES = ("train-images-idx3-ubyte", "train-labels-idx1-ubyte")
TEST_FILES = ("t10k-images-idx3-ubyte", "t10k-labels-idx1-ubyte")


class IdxFormatError(ValueError):
    """An IDX file does not have the expected header or length."""


def _read_u32(handle: BinaryIO) -> int:
    raw = handle.read(4)
    if len(raw) != 4:
        raise IdxFormatError("Unexpected end of file while reading header")
    return struct.unpack(">I", raw)[0]


def parse_images(handle: BinaryIO) -> np.ndarray:
    """Return an ``(n, 784)`` array of pixels scaled to ``[0, 1]``."""

    magic = _read_u32(handle)
    if magic != IMAGE_MAGIC:
        raise IdxFormatError(f"Bad image magic number {magic:#010x}")
    count = _read_u32(handle)
    rows, cols = _read_u32(handle), _read_u32(handle)
    if (rows, cols) != (IMAGE_SIZE, IMAGE_SIZE):
        raise IdxFormatError(f"Expected {IMAGE_SIZE}x{IMAGE_SIZE} images, got {rows}x{cols}")
    size = rows * cols
    raw = handle.read(count * size)
    if len(raw) != count * size:
        raise IdxFormatError(f"Image file truncated: expected {count} images")
    pixels = np.frombuffer(raw, dtype=np.uint8).reshape(count, size)
    return pixels.astype(Float) / 255.0


def parse_labels(handle: BinaryIO, expected_count: int | None = None) -> np.ndarray:
    magic = _read_u32(handle)
    if magic != LABEL_MAGIC:
        raise IdxFormatError(f"Bad label magic number {magic:#010x}")
    count = _read_u32(handle)
    if expected_count is not None and count != expected_count:
        raise IdxFormatError(f"Label count {count} does not match image count {expected_count}")
    raw = handle.read(count)
    if len(raw) != count:
        raise IdxFormatError(f"Label file truncated: expected {count} labels")
    labels = np.frombuffer(raw, dtype=np.uint8).astype(np.int64)
    if labels.size and labels.max() >= NUM_CLASSES:
        raise IdxFormatError(f"Label {labels.max()} out of range")
    return labels


def to_samples(images: np.ndarray, labels: np.ndarray) -> List[Sample]:
    eye = np.eye(NUM_CLASSES, dtype=Float)
    return [Sample(inputs=image, expected=eye[label]) for image, label in zip(images, labels)]


def parse_files(images_path: str | Path, labels_path: str | Path) -> List[Sample]:
    with Path(images_path).open("rb") as handle:
        images = parse_images(handle)
    with Path(labels_path).open("rb") as handle:
        labels = parse_labels(handle, expected_count=images.shape[0])
    return to_samples(images, labels)


def _offline_samples(count: int, seed: int) -> List[Sample]:
    """Deterministic MNIST-shaped noise used when the IDX files are unavailable."""

    rng = np.random.default_rng(seed)
    images = rng.integers(0, 256, size=(count, IMAGE_SIZE * IMAGE_SIZE)).astype(Float) / 255.0
    labels = rng.integers(0, NUM_CLASSES, size=count)
    return to_samples(images, labels)


@register_dataset("mnist")
def build_mnist(
    data_dir: str | Path = "mnist",
    max_train: int | None = None,
    max_test: int | None = None,
    offline_fallback: bool = True,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    root = Path(data_dir)
    train_paths = [root / name for name in TRAIN_FILES]
    test_paths = [root / name for name in TEST_FILES]
    if all(path.exists() for path in train_paths + test_paths):
        train = parse_files(*train_paths)
        test = parse_files(*test_paths)
        provenance: dict = {"mode": "files", "data_dir": str(root)}
    elif offline_fallback:
        log.warning("MNIST files not found under %s; using synthetic offline samples", root)
        train = _offline_samples(max_train or 256, seed)
        test = _offline_samples(max_test or 64, seed + 1)
        provenance = {"mode": "offline", "source": "synthetic", "seed": seed}
    else:
        missing = [str(path) for path in train_paths + test_paths if not path.exists()]
        raise FileNotFoundError(f"MNIST files missing: {', '.join(missing)}")

    if max_train is not None:
        train = train[:max_train]
    if max_test is not None:
        test = test[:max_test]
    provenance.update({"max_train": max_train, "max_test": max_test})
    return DatasetSpec(
        name="mnist",
        train=train,
        test=test,
        d_in=IMAGE_SIZE * IMAGE_SIZE,
        d_out=NUM_CLASSES,
        provenance=provenance,
    )


__all__ = ["parse_images", "parse_labels", "parse_files", "build_mnist", "IdxFormatError"]
