"""Validation of slice stacks against the slice extension rules."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from threemf.slices.model import (
    ATTR_POLYGON,
    ATTR_SLICE,
    ATTR_SLICE_PATH,
    ATTR_SLICE_REF,
    ATTR_SLICE_REF_ID,
    ATTR_Z_TOP,
    SliceStack,
)
from threemf.xmldecode import DecodeError, ErrorList, MissingFieldError

__all__ = [
    "SliceValidationError",
    "SLICES_AND_REFS",
    "SLICE_REF_SAME_PART",
    "SLICE_REF_REF",
    "NON_SLICE_STACK",
    "SLICE_SMALL_TOP_Z",
    "SLICE_NO_MONOTONIC",
    "SLICE_INSUFFICIENT_VERTICES",
    "SLICE_INSUFFICIENT_POLYGONS",
    "SLICE_INSUFFICIENT_SEGMENTS",
    "MISSING_RESOURCE",
    "valid_transform",
    "is_slice_stack_closed",
    "validate_slices",
    "validate_refs",
    "validate_slice_stack",
    "check_all_closed",
]

SLICES_AND_REFS = (
    "may either contain slices or refs, but they MUST NOT contain both element types"
)
SLICE_REF_SAME_PART = (
    "the path of the referenced slice stack MUST be different than the path "
    "of the original slice stack"
)
SLICE_REF_REF = "a referenced slice stack MUST NOT contain any further sliceref elements"
NON_SLICE_STACK = "slicestackid MUST reference a slice stack resource"
SLICE_SMALL_TOP_Z = "slice ztop is smaller than stack zbottom"
SLICE_NO_MONOTONIC = (
    "the first ztop in the next slicestack MUST be greater than the last ztop "
    "in the previous slicestack"
)
SLICE_INSUFFICIENT_VERTICES = "slice MUST contain at least 2 vertices"
SLICE_INSUFFICIENT_POLYGONS = "slice MUST contain at least 1 polygon"
SLICE_INSUFFICIENT_SEGMENTS = "slice polygon MUST contain at least 1 segment"
MISSING_RESOURCE = "resource not found"

_FLOAT32_MAX = 3.4028234663852886e38

FindAsset = Callable[[str, int], Optional[object]]


class SliceValidationError(ValueError):
    """A slice stack breaks a rule of the slice extension."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SliceValidationError):
            return NotImplemented
        return self.message == other.message

    def __hash__(self) -> int:
        return hash((SliceValidationError, self.message))


def _at(cause: BaseException, *xpath) -> DecodeError:
    return DecodeError(cause, xpath)


def valid_transform(matrix: Sequence[float]) -> bool:
    """Return whether a 4x4 row-major ``matrix`` keeps slices planar."""
    return (
        matrix[2] == 0
        and matrix[6] == 0
        and matrix[8] == 0
        and matrix[9] == 0
        and matrix[10] == 1
    )


def is_slice_stack_closed(stack: SliceStack) -> bool:
    """Return whether every non-empty polygon ends where it starts."""
    return all(
        not polygon.segments or polygon.start_v == polygon.segments[-1].v2
        for slice_ in stack.slices
        for polygon in slice_.polygons
    )


def validate_slices(stack: SliceStack) -> List[DecodeError]:
    """Return the problems found in the slices of ``stack``."""
    errors: List[DecodeError] = []
    last_top_z = -_FLOAT32_MAX
    for j, slice_ in enumerate(stack.slices):
        where = (ATTR_SLICE, j)
        if slice_.top_z == 0:
            errors.append(_at(MissingFieldError(ATTR_Z_TOP), where))
        elif slice_.top_z < stack.bottom_z:
            errors.append(_at(SliceValidationError(SLICE_SMALL_TOP_Z), where))
        if slice_.top_z <= last_top_z:
            errors.append(_at(SliceValidationError(SLICE_NO_MONOTONIC), where))
        last_top_z = slice_.top_z
        if not slice_.polygons and not slice_.vertices:
            continue
        if len(slice_.vertices) < 2:
            errors.append(
                _at(SliceValidationError(SLICE_INSUFFICIENT_VERTICES), where)
            )
        if not slice_.polygons:
            errors.append(
                _at(SliceValidationError(SLICE_INSUFFICIENT_POLYGONS), where)
            )
        errors.extend(
            _at(
                SliceValidationError(SLICE_INSUFFICIENT_SEGMENTS),
                where,
                (ATTR_POLYGON, k),
            )
            for k, polygon in enumerate(slice_.polygons)
            if not polygon.segments
        )
    return errors


def validate_refs(
    stack: SliceStack, path: str, find_asset: FindAsset
) -> List[DecodeError]:
    """Return the problems found in the references of ``stack``.

    ``path`` is the model part holding ``stack``; ``find_asset(path, id)``
    returns the resource with that ID in that part, or ``None``.
    """
    errors: List[DecodeError] = []
    last_top_z = -_FLOAT32_MAX
    for i, ref in enumerate(stack.refs):
        where = (ATTR_SLICE_REF, i)
        valid = True
        if not ref.path:
            valid = False
            errors.append(_at(MissingFieldError(ATTR_SLICE_PATH), where))
        elif ref.path == path:
            valid = False
            errors.append(_at(SliceValidationError(SLICE_REF_SAME_PART), where))
        if ref.slice_stack_id == 0:
            valid = False
            errors.append(_at(MissingFieldError(ATTR_SLICE_REF_ID), where))
        if not valid:
            continue
        target = find_asset(ref.path, ref.slice_stack_id)
        if target is None:
            errors.append(_at(SliceValidationError(MISSING_RESOURCE), where))
        elif not isinstance(target, SliceStack):
            errors.append(_at(SliceValidationError(NON_SLICE_STACK), where))
        else:
            if target.refs:
                errors.append(_at(SliceValidationError(SLICE_REF_REF), where))
            if target.slices:
                if target.slices[0].top_z <= last_top_z:
                    errors.append(
                        _at(SliceValidationError(SLICE_NO_MONOTONIC), where)
                    )
                last_top_z = target.slices[-1].top_z
    return errors


def validate_slice_stack(
    stack: SliceStack, path: str, find_asset: FindAsset
) -> None:
    """Raise :class:`ErrorList` with every problem found in ``stack``."""
    errors: List[DecodeError] = []
    if bool(stack.slices) == bool(stack.refs):
        errors.append(_at(SliceValidationError(SLICES_AND_REFS)))
    errors.extend(validate_refs(stack, path, find_asset))
    errors.extend(validate_slices(stack))
    if errors:
        raise ErrorList(errors)


def check_all_closed(stack: SliceStack, find_asset: FindAsset) -> bool:
    """Return whether ``stack`` and the stacks it references are all closed."""
    if not is_slice_stack_closed(stack):
        return False
    for ref in stack.refs:
        target = find_asset(ref.path, ref.slice_stack_id)
        if isinstance(target, SliceStack) and not is_slice_stack_closed(target):
            return False
    return True