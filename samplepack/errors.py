"""Exceptions raised by the sample-pack codec.

Everything derives from ``ValueError`` so callers that already treat a bad
file as a ``ValueError`` keep working.
"""

from __future__ import annotations


class SamplePackError(ValueError):
    """Base class for codec failures."""


class FieldRangeError(SamplePackError):
    """A value does not fit the bit width of the field it is written to."""


class BufferUnderflowError(FieldRangeError):
    """A read needs more bytes than remain in the buffer."""


class CapacityExceededError(SamplePackError):
    """The loop-data segment would reach the 0xFFFF absent-loop sentinel."""


class LayoutError(SamplePackError):
    """A pack or page does not have the fixed page/slot shape."""
