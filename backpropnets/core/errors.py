"""Exception types raised by the network core."""

from __future__ import annotations


class BackpropNetsError(Exception):
    """Base class for errors raised by BackpropNets."""


class TopologyError(BackpropNetsError, ValueError):
    """The layer sequence handed to :func:`build` is not a valid network."""


class ShapeError(BackpropNetsError, ValueError):
    """A vector or matrix does not have the length the operation requires."""


class UnsupportedOperationError(BackpropNetsError, NotImplementedError):
    """An activation/cost evaluation that has no implementation was requested."""


__all__ = [
    "BackpropNetsError",
    "TopologyError",
    "ShapeError",
    "UnsupportedOperationError",
]
