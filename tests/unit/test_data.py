import struct

import numpy as np
import pytest

from backpropnets.data import available_datasets, get_dataset
from backpropnets.data.mnist import IdxFormatError, parse_files
from backpropnets.data.synthetic import xor_samples


def _write_idx(tmp_path, labels, image_magic=0x803, label_count=None):
    images_path = tmp_path / "images"
    labels_path = tmp_path / "labels"
    count = len(labels)
    pixels = np.zeros((count, 784), dtype=np.uint8)
    pixels[:, 0] = 255
    pixels[:, 1] = 51
    images_path.write_bytes(struct.pack(">IIII", image_magic, count, 28, 28) + pixels.tobytes())
    label_count = count if label_count is None else label_count
    labels_path.write_bytes(struct.pack(">II", 0x801, label_count) + bytes(labels))
    return images_path, labels_path


def test_parse_files_scales_pixels_and_one_hot_encodes(tmp_path):
    samples = parse_files(*_write_idx(tmp_path, [3, 7]))
    assert len(samples) == 2
    first = samples[0]
    assert first.inputs.shape == (784,)
    assert first.inputs.dtype == np.float32
    assert first.inputs[0] == pytest.approx(1.0)
    assert first.inputs[1] == pytest.approx(0.2)
    assert np.argmax(first.expected) == 3
    assert first.expected.sum() == 1.0
    assert np.argmax(samples[1].expected) == 7


def test_parse_files_rejects_bad_headers(tmp_path):
    with pytest.raises(IdxFormatError):
        parse_files(*_write_idx(tmp_path, [1], image_magic=0x801))
    with pytest.raises(IdxFormatError):
        parse_files(*_write_idx(tmp_path, [1, 2], label_count=3))


def test_mnist_offline_fallback(tmp_path):
    spec = get_dataset("mnist", data_dir=tmp_path / "missing", max_train=12, max_test=4)
    assert spec.provenance["mode"] == "offline"
    assert len(spec.train) == 12 and len(spec.test) == 4
    assert spec.d_in == 784 and spec.d_out == 10
    with pytest.raises(FileNotFoundError):
        get_dataset("mnist", data_dir=tmp_path / "missing", offline_fallback=False)


def test_mnist_reads_files_from_directory(tmp_path):
    for prefix, labels in (("train", [1, 2, 3]), ("t10k", [4])):
        images, label_file = _write_idx(tmp_path, labels)
        images.rename(tmp_path / f"{prefix}-images-idx3-ubyte")
        label_file.rename(tmp_path / f"{prefix}-labels-idx1-ubyte")
    spec = get_dataset("mnist", data_dir=tmp_path)
    assert spec.provenance["mode"] == "files"
    assert len(spec.train) == 3 and len(spec.test) == 1


def test_xor_samples():
    samples = xor_samples()
    labels = [int(np.argmax(sample.expected)) for sample in samples]
    assert labels == [0, 1, 1, 0]


def test_registry_lists_and_rejects_unknown():
    assert {"xor", "blobs", "mnist"} <= set(available_datasets())
    with pytest.raises(KeyError):
        get_dataset("nope")
    spec = get_dataset("blobs", n_train_per_class=5, n_test_per_class=2, num_classes=4, dim=3)
    assert len(spec.train) == 20 and len(spec.test) == 8
    assert spec.d_in == 3 and spec.d_out == 4


def test_blobs_provenance_records_totals():
    spec = get_dataset("blobs", n_train_per_class=6, n_test_per_class=3, num_classes=3)
    assert spec.provenance["n_train_per_class"] == 6
    assert spec.provenance["n_train"] == len(spec.train) == 18
    assert spec.provenance["n_test"] == len(spec.test) == 9
