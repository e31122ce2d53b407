"""Dataset registry handing (inputs, one-hot expected) samples to the trainer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, MutableMapping

from ..core.types import Sample


@dataclass(frozen=True)
class DatasetSpec:
    """A materialised dataset ready for :func:`backpropnets.training.trainer.train`.

    Attributes
    ----------
    d_in:
        Width of every input vector.
    d_out:
        Width of every one-hot expected vector.
    provenance:
        Free-form metadata describing where the samples came from; copied
        verbatim into run manifests.
    """

    name: str
    train: List[Sample]
    test: List[Sample] | None
    d_in: int
    d_out: int
    provenance: Dict[str, Any] = field(default_factory=dict)


DatasetFactory = Callable[..., DatasetSpec]

_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory, directly or as a decorator."""

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(name: str, /, **options: Any) -> DatasetSpec:
    """Build the dataset registered as ``name``."""

    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}")
    spec = _REGISTRY[name](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if not spec.train:
        raise ValueError(f"Dataset {spec.name!r} has an empty training split")
    for split, samples in (("train", spec.train), ("test", spec.test or [])):
        for sample in samples:
            if sample.inputs.shape != (spec.d_in,):
                raise ValueError(
                    f"{spec.name}/{split}: input of shape {sample.inputs.shape}, expected ({spec.d_in},)"
                )
            if sample.expected.shape != (spec.d_out,):
                raise ValueError(
                    f"{spec.name}/{split}: expected vector of shape {sample.expected.shape}, "
                    f"expected ({spec.d_out},)"
                )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
