"""Layer descriptors and the runtime layer variants.

The set of layer kinds is closed: :class:`LayerKind` enumerates them and
:func:`build_layer` maps each kind to exactly one runtime class.  Every
runtime layer implements the same contract:

``forward(inputs) -> output``
    Compute the layer output and cache both the pre-activation ``last_z``
    and the post-activation ``last_output`` for the backward pass of the
    same sample.

``backward(previous_output, signal, weights, change) -> (error, weights)``
    Consume the downstream error and weights (for the output layer, the
    expected vector) and return this layer's error and weights for the
    layer upstream, adding this sample's gradient into ``change``.

``update(change, learning_rate, batch_size, regularisation)``
    Apply a mini-batch's accumulated change to the parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Tuple, Union

import numpy as np

from . import linalg
from .activations import Activation
from .change import Change
from .costs import Cost, Regularisation
from .errors import ShapeError, TopologyError
from .initialisation import InitType
from .types import Array, Float


class LayerKind(str, Enum):
    INPUT = "input"
    FEEDFORWARD = "feedforward"
    OUTPUT = "output"


@dataclass(frozen=True)
class LayerDescriptor:
    """Immutable description of one layer in a network topology."""

    kind: LayerKind
    width: int
    activation: Activation | None = None
    cost: Cost | None = None
    init: InitType | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", LayerKind(self.kind))
        if int(self.width) <= 0:
            raise TopologyError(f"{self.kind.value} layer width must be positive, got {self.width}")
        object.__setattr__(self, "width", int(self.width))
        if self.kind is LayerKind.INPUT:
            return
        if self.activation is None or self.init is None:
            raise TopologyError(f"{self.kind.value} layer needs an activation and an init scheme")
        object.__setattr__(self, "activation", Activation(self.activation))
        object.__setattr__(self, "init", InitType(self.init))
        if self.kind is LayerKind.OUTPUT:
            if self.cost is None:
                raise TopologyError("output layer needs a cost function")
            object.__setattr__(self, "cost", Cost(self.cost))

    @property
    def output_width(self) -> int:
        return self.width

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "LayerDescriptor":
        try:
            kind = LayerKind(str(config["kind"]).lower())
            width = int(config["width"])
        except KeyError as exc:
            raise KeyError(f"Layer config is missing {exc.args[0]!r}: {dict(config)}") from exc
        return cls(
            kind=kind,
            width=width,
            activation=config.get("activation"),
            cost=config.get("cost"),
            init=config.get("init"),
        )

    def to_config(self) -> dict:
        config: dict = {"kind": self.kind.value, "width": self.width}
        for name in ("activation", "cost", "init"):
            value = getattr(self, name)
            if value is not None:
                config[name] = value.value
        return config


def input_layer(width: int) -> LayerDescriptor:
    return LayerDescriptor(LayerKind.INPUT, width)


def feedforward(activation: Activation | str, init: InitType | str, width: int) -> LayerDescriptor:
    return LayerDescriptor(LayerKind.FEEDFORWARD, width, activation=activation, init=init)


def output(
    activation: Activation | str,
    cost: Cost | str,
    init: InitType | str,
    width: int,
) -> LayerDescriptor:
    return LayerDescriptor(LayerKind.OUTPUT, width, activation=activation, cost=cost, init=init)


def _as_vector(values: Array, width: int, dtype, what: str) -> Array:
    vector = np.asarray(values, dtype=dtype)
    if vector.shape != (width,):
        raise ShapeError(f"{what} expects a vector of length {width}, got shape {vector.shape}")
    return vector


@dataclass
class InputLayer:
    """Identity layer that only checks the input width."""

    kind: ClassVar[LayerKind] = LayerKind.INPUT

    width: int
    dtype: Any = Float
    last_output: Array | None = field(default=None, repr=False)

    @property
    def last_z(self) -> Array | None:
        return self.last_output

    def forward(self, inputs: Array) -> Array:
        self.last_output = _as_vector(inputs, self.width, self.dtype, "input layer")
        return self.last_output

    def backward(
        self,
        previous_output: Array | None,
        signal: Array,
        weights: Array | None,
        change: Change | None = None,
    ) -> Tuple[Array, Array | None]:
        return signal, weights

    def new_change(self) -> None:
        return None

    def update(
        self,
        change: Change | None,
        learning_rate: float,
        batch_size: int,
        regularisation: Regularisation | None = None,
    ) -> None:
        return None

    def parameter_count(self) -> int:
        return 0


@dataclass
class _DenseLayer:
    """Fully connected layer state shared by the feed-forward and output variants."""

    input_width: int
    width: int
    activation: Activation
    weights: Array = field(repr=False)
    biases: Array = field(repr=False)
    last_z: Array | None = field(default=None, repr=False)
    last_output: Array | None = field(default=None, repr=False)

    @property
    def dtype(self):
        return self.weights.dtype

    def forward(self, inputs: Array) -> Array:
        x = _as_vector(inputs, self.input_width, self.dtype, f"{self.kind.value} layer")
        z = self.biases.copy()
        linalg.matrix_vec_multiply_add(self.weights, x, z)
        self.last_z = z
        self.last_output = self.activation.apply(z)
        return self.last_output

    def new_change(self) -> Change:
        return Change.zeros(self.width, self.input_width, dtype=self.dtype)

    def update(
        self,
        change: Change | None,
        learning_rate: float,
        batch_size: int,
        regularisation: Regularisation | None = None,
    ) -> None:
        if change is None:
            return
        regularisation = regularisation or Regularisation.none()
        regularisation.apply(self.weights, change.weights, learning_rate, batch_size)
        linalg.plus_equals_matrix_multiplied(self.biases, -learning_rate / batch_size, change.biases)

    def parameter_count(self) -> int:
        return int(self.weights.size + self.biases.size)

    def _require_forward(self) -> Tuple[Array, Array]:
        if self.last_z is None or self.last_output is None:
            raise RuntimeError(f"{self.kind.value} layer backward called before forward")
        return self.last_z, self.last_output

    def _accumulate(self, change: Change | None, errors: Array, previous_output: Array) -> None:
        if change is None:
            raise ValueError(f"{self.kind.value} layer backward needs a Change accumulator")
        previous_output = _as_vector(
            previous_output, self.input_width, self.dtype, f"{self.kind.value} layer backward"
        )
        change.accumulate(errors, previous_output)


@dataclass
class FeedForwardLayer(_DenseLayer):
    """Hidden layer: ``output = activation(W @ x + b)``."""

    kind: ClassVar[LayerKind] = LayerKind.FEEDFORWARD

    def backward(
        self,
        previous_output: Array,
        signal: Array,
        weights: Array | None,
        change: Change | None = None,
    ) -> Tuple[Array, Array]:
        z, _ = self._require_forward()
        if weights is None:
            raise ValueError("feedforward layer backward needs the downstream weights")
        if weights.ndim != 2 or weights.shape[1] != self.width:
            raise ShapeError(
                f"downstream weights of shape {weights.shape} do not connect to width {self.width}"
            )
        propagated = linalg.transpose_matrix_multiply_vec(weights, np.asarray(signal, dtype=self.dtype))
        errors = linalg.hadamard_product(propagated, self.activation.derivative(z)).astype(
            self.dtype, copy=False
        )
        self._accumulate(change, errors, previous_output)
        return errors, self.weights


@dataclass
class OutputLayer(_DenseLayer):
    """Final layer whose error comes from its cost function."""

    kind: ClassVar[LayerKind] = LayerKind.OUTPUT

    cost: Cost = Cost.QUADRATIC

    def backward(
        self,
        previous_output: Array,
        signal: Array,
        weights: Array | None = None,
        change: Change | None = None,
    ) -> Tuple[Array, Array]:
        """``signal`` is the expected output vector; ``weights`` is unused."""

        z, out = self._require_forward()
        expected = _as_vector(signal, self.width, self.dtype, "output layer expected")
        errors = np.asarray(self.cost.c_dz(self.activation, out, expected, z), dtype=self.dtype)
        self._accumulate(change, errors, previous_output)
        return errors, self.weights

    def cost_value(self, expected: Array) -> float:
        _, out = self._require_forward()
        return self.cost.evaluate(out, expected)


Layer = Union[InputLayer, FeedForwardLayer, OutputLayer]


def build_layer(
    descriptor: LayerDescriptor,
    input_width: int | None,
    rng: np.random.Generator,
    dtype=Float,
) -> Layer:
    """Instantiate the runtime layer for ``descriptor``."""

    kind = descriptor.kind
    if kind is LayerKind.INPUT:
        return InputLayer(width=descriptor.width, dtype=dtype)
    if input_width is None or input_width <= 0:
        raise TopologyError(f"{kind.value} layer needs a positive input width, got {input_width}")
    weights = descriptor.init.generate_weights(  # type: ignore[union-attr]
        rng, input_width, descriptor.width, dtype=dtype
    )
    biases = np.zeros(descriptor.width, dtype=dtype)
    if kind is LayerKind.FEEDFORWARD:
        return FeedForwardLayer(
            input_width=input_width,
            width=descriptor.width,
            activation=descriptor.activation,  # type: ignore[arg-type]
            weights=weights,
            biases=biases,
        )
    if kind is LayerKind.OUTPUT:
        return OutputLayer(
            input_width=input_width,
            width=descriptor.width,
            activation=descriptor.activation,  # type: ignore[arg-type]
            weights=weights,
            biases=biases,
            cost=descriptor.cost,  # type: ignore[arg-type]
        )
    raise TopologyError(f"Unknown layer kind: {kind}")  # pragma: no cover - guardrail


__all__ = [
    "LayerKind",
    "LayerDescriptor",
    "input_layer",
    "feedforward",
    "output",
    "InputLayer",
    "FeedForwardLayer",
    "OutputLayer",
    "Layer",
    "build_layer",
]
