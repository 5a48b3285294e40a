"""Encoding of slice stacks and slice object attributes to XML."""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import List

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
    Slice,
    SliceStack,
)
from threemf.xmldecode import XMLAttr, XMLName

__all__ = ["marshal_object_attr", "marshal_slice_stack", "to_xml"]

ET.register_namespace("s", NAMESPACE)


def _tag(local: str) -> str:
    return f"{{{NAMESPACE}}}{local}"


def _format_float(value: float, precision: int) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if precision >= 0:
        return f"{value:.{precision}f}"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def marshal_object_attr(attr: ObjectAttr) -> List[XMLAttr]:
    """Return the namespaced attributes that encode ``attr``."""
    return [
        XMLAttr(XMLName(NAMESPACE, ATTR_SLICE_REF_ID), str(attr.slice_stack_id)),
        XMLAttr(XMLName(NAMESPACE, ATTR_MESH_RES), attr.mesh_resolution.label),
    ]


def _marshal_vertices(parent: ET.Element, slice_: Slice, precision: int) -> None:
    vertices = ET.SubElement(parent, _tag(ATTR_VERTICES))
    for x, y in slice_.vertices:
        ET.SubElement(
            vertices,
            _tag(ATTR_VERTEX),
            {
                ATTR_X: _format_float(x, precision),
                ATTR_Y: _format_float(y, precision),
            },
        )


def _marshal_polygon(parent: ET.Element, polygon: Polygon) -> None:
    element = ET.SubElement(
        parent, _tag(ATTR_POLYGON), {ATTR_START_V: str(polygon.start_v)}
    )
    for segment in polygon.segments:
        attrs = {ATTR_V2: str(segment.v2)}
        if segment.pid != 0:
            attrs[ATTR_PID] = str(segment.pid)
            attrs[ATTR_P1] = str(segment.p1)
            if segment.p1 != segment.p2:
                attrs[ATTR_P2] = str(segment.p2)
        ET.SubElement(element, _tag(ATTR_SEGMENT), attrs)


def _marshal_slice(parent: ET.Element, slice_: Slice, precision: int) -> None:
    element = ET.SubElement(
        parent, _tag(ATTR_SLICE), {ATTR_Z_TOP: _format_float(slice_.top_z, precision)}
    )
    _marshal_vertices(element, slice_, precision)
    for polygon in slice_.polygons:
        _marshal_polygon(element, polygon)


def marshal_slice_stack(stack: SliceStack, precision: int = -1) -> ET.Element:
    """Return the ``slicestack`` element for ``stack``.

    Floats are written with ``precision`` decimals, or in the shortest form
    that reads back to the same value when ``precision`` is negative.
    """
    element = ET.Element(_tag(ATTR_SLICE_STACK), {ATTR_ID: str(stack.id)})
    if stack.bottom_z != 0:
        element.set(ATTR_Z_BOTTOM, _format_float(stack.bottom_z, precision))
    for slice_ in stack.slices:
        _marshal_slice(element, slice_, precision)
    for ref in stack.refs:
        ET.SubElement(
            element,
            _tag(ATTR_SLICE_REF),
            {ATTR_SLICE_REF_ID: str(ref.slice_stack_id), ATTR_SLICE_PATH: ref.path},
        )
    return element


def to_xml(stack: SliceStack, precision: int = -1) -> str:
    """Serialize ``stack`` as a standalone XML fragment."""
    return ET.tostring(marshal_slice_stack(stack, precision), encoding="unicode")