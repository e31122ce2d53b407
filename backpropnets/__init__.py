"""BackpropNets public API."""

from .core import activations, costs, initialisation, layers, linalg, types  # noqa: F401
from .core.activations import Activation
from .core.costs import Cost, Regularisation
from .core.errors import ShapeError, TopologyError, UnsupportedOperationError
from .core.initialisation import InitType
from .core.layers import LayerDescriptor, feedforward, input_layer, output
from .core.network import Network, build, forward
from .core.types import Sample, TrainingHistory
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import SGDTrainer, train

__all__ = [
    "Activation",
    "Cost",
    "InitType",
    "LayerDescriptor",
    "Network",
    "Regularisation",
    "SGDTrainer",
    "Sample",
    "ShapeError",
    "TopologyError",
    "TrainingHistory",
    "UnsupportedOperationError",
    "build",
    "feedforward",
    "forward",
    "input_layer",
    "load_preset",
    "output",
    "presets",
    "run_pipeline",
    "train",
]
