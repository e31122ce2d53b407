"""Network orchestration: topology construction, forward and backward passes."""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

import numpy as np

from .change import Change
from .costs import Regularisation
from .errors import ShapeError, TopologyError
from .layers import Layer, LayerDescriptor, LayerKind, OutputLayer, build_layer
from .types import Array, Float, Sample

log = logging.getLogger(__name__)

Changes = List[Optional[Change]]


def _validate_descriptors(descriptors: Sequence[LayerDescriptor]) -> None:
    if not descriptors:
        raise TopologyError("Can't create an empty network")
    if descriptors[0].kind is not LayerKind.INPUT:
        raise TopologyError("The first layer of a network must be an input layer")
    if descriptors[-1].kind is not LayerKind.OUTPUT:
        raise TopologyError("The last layer of a network must be an output layer")
    for position, descriptor in enumerate(descriptors[1:-1], start=1):
        if descriptor.kind is LayerKind.INPUT:
            raise TopologyError(f"Input layer at position {position} is in the middle of the network")
        if descriptor.kind is LayerKind.OUTPUT:
            raise TopologyError(f"Output layer at position {position} is in the middle of the network")


class Network:
    """An ordered, fixed-topology sequence of layers trained by backpropagation."""

    def __init__(self, layers: Sequence[Layer], descriptors: Sequence[LayerDescriptor] | None = None):
        layers = list(layers)
        if not layers:
            raise TopologyError("Can't create an empty network")
        if layers[0].kind is not LayerKind.INPUT:
            raise TopologyError("The first layer of a network must be an input layer")
        if layers[-1].kind is not LayerKind.OUTPUT:
            raise TopologyError("The last layer of a network must be an output layer")
        for idx in range(1, len(layers)):
            layer = layers[idx]
            if idx < len(layers) - 1 and layer.kind is not LayerKind.FEEDFORWARD:
                raise TopologyError(f"{layer.kind.value} layer at position {idx} is in the middle of the network")
            if layer.input_width != layers[idx - 1].width:  # type: ignore[union-attr]
                raise TopologyError(
                    f"Layer {idx} expects {layer.input_width} inputs "  # type: ignore[union-attr]
                    f"but layer {idx - 1} produces {layers[idx - 1].width}"
                )
        self._layers: List[Layer] = layers
        self.descriptors = tuple(descriptors) if descriptors is not None else None

    @classmethod
    def build(
        cls,
        descriptors: Sequence[LayerDescriptor],
        rng: np.random.Generator | None = None,
        dtype=Float,
    ) -> "Network":
        """Instantiate a network, drawing initial weights from ``rng``."""

        descriptors = list(descriptors)
        _validate_descriptors(descriptors)
        rng = rng if rng is not None else np.random.default_rng()
        layers: List[Layer] = []
        previous: LayerDescriptor | None = None
        for descriptor in descriptors:
            input_width = previous.output_width if previous is not None else None
            layers.append(build_layer(descriptor, input_width, rng, dtype=dtype))
            previous = descriptor
        network = cls(layers, descriptors)
        log.debug(
            "Built network %s with %d parameters",
            [layer.width for layer in layers],
            network.parameter_count(),
        )
        return network

    # ------------------------------------------------------------------
    # Introspection

    @property
    def layers(self) -> Sequence[Layer]:
        return tuple(self._layers)

    @property
    def output_layer(self) -> OutputLayer:
        return self._layers[-1]  # type: ignore[return-value]

    @property
    def input_width(self) -> int:
        return self._layers[0].width

    @property
    def output_width(self) -> int:
        return self._layers[-1].width

    @property
    def widths(self) -> List[int]:
        return [layer.width for layer in self._layers]

    def parameter_count(self) -> int:
        return int(sum(layer.parameter_count() for layer in self._layers))

    # ------------------------------------------------------------------
    # Passes

    def forward(self, inputs: Array) -> Array:
        """Run every layer in order, refreshing each layer's forward cache."""

        output = inputs
        for layer in self._layers:
            output = layer.forward(output)
        return output

    def new_changes(self) -> Changes:
        """Return a zeroed accumulator per layer (``None`` for layers without parameters)."""

        return [layer.new_change() for layer in self._layers]

    def backpropagate(self, inputs: Array, expected: Array, changes: Changes) -> Array:
        """Add the gradient of one sample into ``changes`` and return the network output."""

        if len(changes) != len(self._layers):
            raise ValueError(f"Expected {len(self._layers)} changes, got {len(changes)}")
        result = self.forward(inputs)
        expected = np.asarray(expected, dtype=result.dtype)
        if expected.shape != result.shape:
            raise ShapeError(f"Expected output of shape {expected.shape} does not match {result.shape}")

        last = len(self._layers) - 1
        outputs = [layer.last_output for layer in self._layers]
        error, weights = self._layers[last].backward(outputs[last - 1], expected, None, changes[last])
        for idx in range(last - 1, -1, -1):
            previous_output = outputs[idx - 1] if idx > 0 else None
            error, weights = self._layers[idx].backward(previous_output, error, weights, changes[idx])
        return result

    def apply_changes(
        self,
        changes: Changes,
        learning_rate: float,
        batch_size: int,
        regularisation: Regularisation | None = None,
    ) -> None:
        """Apply one mini-batch of accumulated changes to every layer."""

        if len(changes) != len(self._layers):
            raise ValueError(f"Expected {len(self._layers)} changes, got {len(changes)}")
        for layer, change in zip(self._layers, changes):
            layer.update(change, learning_rate, batch_size, regularisation)

    def cost(self, samples: Sequence[Sample]) -> float:
        """Return the output layer's cost summed over ``samples``."""

        total = 0.0
        output_layer = self.output_layer
        for sample in samples:
            self.forward(sample.inputs)
            total += output_layer.cost_value(sample.expected)
        return total

    # ------------------------------------------------------------------
    # Checkpointing

    def state_dict(self) -> Mapping[str, Array]:
        state = {}
        for idx, layer in enumerate(self._layers):
            if layer.kind is LayerKind.INPUT:
                continue
            state[f"W{idx}"] = layer.weights.copy()  # type: ignore[union-attr]
            state[f"b{idx}"] = layer.biases.copy()  # type: ignore[union-attr]
        return state

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        for idx, layer in enumerate(self._layers):
            if layer.kind is LayerKind.INPUT:
                continue
            for prefix, current in (("W", layer.weights), ("b", layer.biases)):  # type: ignore[union-attr]
                key = f"{prefix}{idx}"
                if key not in state:
                    raise KeyError(f"Missing parameter {key} in state dict")
                value = np.asarray(state[key], dtype=current.dtype)
                if value.shape != current.shape:
                    raise ShapeError(f"Parameter {key} has shape {value.shape}, expected {current.shape}")
                current[...] = value


def build(
    descriptors: Sequence[LayerDescriptor],
    rng: np.random.Generator | None = None,
    dtype=Float,
) -> Network:
    return Network.build(descriptors, rng=rng, dtype=dtype)


def forward(network: Network, inputs: Array) -> Array:
    return network.forward(inputs)


__all__ = ["Network", "build", "forward"]
