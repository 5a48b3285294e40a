"""Decoding of slice stacks and slice object attributes from XML."""

from __future__ import annotations

import math
import re
from typing import List, Optional, Sequence, Tuple, Union

from threemf.slices.model import (
    ATTR_ID,
    ATTR_MESH_RES,
    ATTR_P1,
    ATTR_P2,
    ATTR_PID,
    ATTR_POLYGON,
    ATTR_SEGMENT,
    ATTR_SLICE,
    ATTR_SLICE_PATH,
    ATTR_SLICE_REF,
    ATTR_SLICE_REF_ID,
    ATTR_SLICE_STACK,
    ATTR_START_V,
    ATTR_V2,
    ATTR_VERTEX,
    ATTR_VERTICES,
    ATTR_X,
    ATTR_Y,
    ATTR_Z_BOTTOM,
    ATTR_Z_TOP,
    NAMESPACE,
    ObjectAttr,
    Polygon,
    Segment,
    Slice,
    SliceRef,
    SliceStack,
    parse_mesh_resolution,
)
from threemf.xmldecode import (
    ElementDecoder,
    ErrorList,
    ParseAttrError,
    XMLAttr,
    XMLName,
    decode,
)

__all__ = [
    "SliceStackDecoder",
    "parse_object_attr",
    "decode_slice_stack",
]

_UINT = re.compile(r"[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_UINT32_MAX = 0xFFFFFFFF
_FLOAT32_MAX = 3.4028234663852886e38


def _parse_uint32(text: str) -> int:
    if not _UINT.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value > _UINT32_MAX:
        raise ValueError(f"unsigned integer out of range: {text!r}")
    return value


def _parse_float32(text: str) -> float:
    if not _FLOAT.fullmatch(text):
        raise ValueError(f"invalid number: {text!r}")
    value = float(text)
    if math.isfinite(value) and abs(value) > _FLOAT32_MAX:
        raise ValueError(f"number out of range: {text!r}")
    return value


def _uint_or_zero(
    attr: XMLAttr, required: bool, errors: List[BaseException]
) -> int:
    try:
        return _parse_uint32(attr.value)
    except ValueError:
        errors.append(ParseAttrError(attr.name.local, required))
        return 0


def _float_or_zero(
    attr: XMLAttr, required: bool, errors: List[BaseException]
) -> float:
    try:
        return _parse_float32(attr.value)
    except ValueError:
        errors.append(ParseAttrError(attr.name.local, required))
        return 0.0


def _raise_collected(errors: List[BaseException]) -> None:
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ErrorList(errors)


def parse_object_attr(attrs: Sequence[XMLAttr]) -> ObjectAttr:
    """Build the slice attributes of an object from its attributes.

    Only attributes in the slice namespace are considered. Invalid values
    raise :class:`ParseAttrError`, or :class:`ErrorList` when several are bad.
    """
    result = ObjectAttr()
    errors: List[BaseException] = []
    for attr in attrs:
        if attr.name.space != NAMESPACE:
            continue
        if attr.name.local == ATTR_SLICE_REF_ID:
            try:
                result.slice_stack_id = _parse_uint32(attr.value)
            except ValueError:
                errors.append(ParseAttrError(attr.name.local, True))
        elif attr.name.local == ATTR_MESH_RES:
            try:
                result.mesh_resolution = parse_mesh_resolution(attr.value)
            except ValueError:
                errors.append(ParseAttrError(attr.name.local, False))
    _raise_collected(errors)
    return result


class _SegmentDecoder(ElementDecoder):
    def __init__(self, polygon: Polygon) -> None:
        self.polygon = polygon

    def start(self, attrs: List[XMLAttr]) -> None:
        segment = Segment()
        has_p1 = has_p2 = False
        errors: List[BaseException] = []
        for attr in attrs:
            local = attr.name.local
            value = _uint_or_zero(attr, local == ATTR_V2, errors)
            if local == ATTR_V2:
                segment.v2 = value
            elif local == ATTR_PID:
                segment.pid = value
            elif local == ATTR_P1:
                segment.p1 = value
                has_p1 = True
            elif local == ATTR_P2:
                segment.p2 = value
                has_p2 = True
        if has_p1 and not has_p2:
            segment.p2 = segment.p1
        self.polygon.segments.append(segment)
        _raise_collected(errors)


class _PolygonDecoder(ElementDecoder):
    def __init__(self, slice_: Slice) -> None:
        self.slice = slice_
        self.polygon = Polygon()

    def start(self, attrs: List[XMLAttr]) -> None:
        self.slice.polygons.append(self.polygon)
        errors: List[BaseException] = []
        for attr in attrs:
            if attr.name.local == ATTR_START_V:
                self.polygon.start_v = _uint_or_zero(attr, True, errors)
                break
        _raise_collected(errors)

    def child(self, name: XMLName) -> Optional[Tuple[int, ElementDecoder]]:
        if name.space == NAMESPACE and name.local == ATTR_SEGMENT:
            return len(self.polygon.segments), _SegmentDecoder(self.polygon)
        return None


class _VertexDecoder(ElementDecoder):
    def __init__(self, slice_: Slice) -> None:
        self.slice = slice_

    def start(self, attrs: List[XMLAttr]) -> None:
        x = y = 0.0
        errors: List[BaseException] = []
        for attr in attrs:
            value = _float_or_zero(attr, True, errors)
            if attr.name.local == ATTR_X:
                x = value
            elif attr.name.local == ATTR_Y:
                y = value
        self.slice.vertices.append((x, y))
        _raise_collected(errors)


class _VerticesDecoder(ElementDecoder):
    def __init__(self, slice_: Slice) -> None:
        self.slice = slice_

    def child(self, name: XMLName) -> Optional[Tuple[int, ElementDecoder]]:
        if name.space == NAMESPACE and name.local == ATTR_VERTEX:
            return len(self.slice.vertices), _VertexDecoder(self.slice)
        return None


class _SliceDecoder(ElementDecoder):
    def __init__(self, stack: SliceStack) -> None:
        self.stack = stack
        self.slice = Slice()

    def start(self, attrs: List[XMLAttr]) -> None:
        errors: List[BaseException] = []
        for attr in attrs:
            if attr.name.local == ATTR_Z_TOP:
                self.slice.top_z = _float_or_zero(attr, True, errors)
                break
        _raise_collected(errors)

    def child(self, name: XMLName) -> Optional[Tuple[int, ElementDecoder]]:
        if name.space != NAMESPACE:
            return None
        if name.local == ATTR_VERTICES:
            return -1, _VerticesDecoder(self.slice)
        if name.local == ATTR_POLYGON:
            return len(self.slice.polygons), _PolygonDecoder(self.slice)
        return None

    def end(self) -> None:
        self.stack.slices.append(self.slice)


class _SliceRefDecoder(ElementDecoder):
    def __init__(self, stack: SliceStack) -> None:
        self.stack = stack

    def start(self, attrs: List[XMLAttr]) -> None:
        ref = SliceRef()
        errors: List[BaseException] = []
        for attr in attrs:
            if attr.name.local == ATTR_SLICE_REF_ID:
                ref.slice_stack_id = _uint_or_zero(attr, True, errors)
            elif attr.name.local == ATTR_SLICE_PATH:
                ref.path = attr.value
        self.stack.refs.append(ref)
        _raise_collected(errors)


class SliceStackDecoder(ElementDecoder):
    """Decoder of a ``slicestack`` element into a :class:`SliceStack`."""

    def __init__(self) -> None:
        self.resource = SliceStack()

    def element(self) -> SliceStack:
        """Return the slice stack being decoded."""
        return self.resource

    def child(self, name: XMLName) -> Optional[Tuple[int, ElementDecoder]]:
        if name.space != NAMESPACE:
            return None
        if name.local == ATTR_SLICE:
            return len(self.resource.slices), _SliceDecoder(self.resource)
        if name.local == ATTR_SLICE_REF:
            return len(self.resource.refs), _SliceRefDecoder(self.resource)
        return None

    def start(self, attrs: List[XMLAttr]) -> None:
        errors: List[BaseException] = []
        for attr in attrs:
            if attr.name.local == ATTR_ID:
                self.resource.id = _uint_or_zero(attr, True, errors)
            elif attr.name.local == ATTR_Z_BOTTOM:
                self.resource.bottom_z = _float_or_zero(attr, False, errors)
        _raise_collected(errors)

    def end(self) -> None:
        """Nothing remains to be done at the end of the element."""


class _DocumentDecoder(ElementDecoder):
    def __init__(self) -> None:
        self.stack_decoder: Optional[SliceStackDecoder] = None

    def child(self, name: XMLName) -> Optional[Tuple[int, ElementDecoder]]:
        if (
            self.stack_decoder is None
            and name.space == NAMESPACE
            and name.local == ATTR_SLICE_STACK
        ):
            self.stack_decoder = SliceStackDecoder()
            return 0, self.stack_decoder
        return None


def decode_slice_stack(data: Union[bytes, str], strict: bool = True) -> SliceStack:
    """Decode the first ``slicestack`` element of an XML document.

    Attribute problems raise :class:`~threemf.xmldecode.DecodeError`, or an
    :class:`~threemf.xmldecode.ErrorList` when not strict and several occur.
    A document without a slice stack raises ValueError.
    """
    document = _DocumentDecoder()
    decode(data, document, strict)
    if document.stack_decoder is None:
        raise ValueError("document has no slicestack element")
    return document.stack_decoder.element()