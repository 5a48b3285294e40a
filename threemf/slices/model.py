"""Data model of the slice extension: slice stacks, slices and polygons."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

from threemf.xmldecode import XMLName

__all__ = [
    "NAMESPACE",
    "Segment",
    "Polygon",
    "Slice",
    "MeshResolution",
    "SliceRef",
    "SliceStack",
    "ObjectAttr",
    "parse_mesh_resolution",
]

NAMESPACE = "http://schemas.microsoft.com/3dmanufacturing/slice/2015/07"

ATTR_SLICE_STACK = "slicestack"
ATTR_ID = "id"
ATTR_Z_BOTTOM = "zbottom"
ATTR_SLICE = "slice"
ATTR_SLICE_REF = "sliceref"
ATTR_Z_TOP = "ztop"
ATTR_VERTICES = "vertices"
ATTR_VERTEX = "vertex"
ATTR_POLYGON = "polygon"
ATTR_X = "x"
ATTR_Y = "y"
ATTR_SEGMENT = "segment"
ATTR_V2 = "v2"
ATTR_START_V = "startv"
ATTR_SLICE_REF_ID = "slicestackid"
ATTR_SLICE_PATH = "slicepath"
ATTR_MESH_RES = "meshresolution"
ATTR_PID = "pid"
ATTR_P1 = "p1"
ATTR_P2 = "p2"

Point2D = Tuple[float, float]


@dataclass
class Segment:
    """A polygon edge running from the previous vertex to vertex ``v2``."""

    v2: int = 0
    pid: int = 0
    p1: int = 0
    p2: int = 0


@dataclass
class Polygon:
    """A 2D contour made of one or more segments starting at ``start_v``."""

    start_v: int = 0
    segments: List[Segment] = field(default_factory=list)


@dataclass
class Slice:
    """One slice of a stack: its top height, vertices and polygons."""

    top_z: float = 0.0
    vertices: List[Point2D] = field(default_factory=list)
    polygons: List[Polygon] = field(default_factory=list)


class MeshResolution(IntEnum):
    """Resolution of the mesh of an object that references slices."""

    FULL = 0
    LOW = 1

    @property
    def label(self) -> str:
        """The textual form used in 3MF documents."""
        return _RESOLUTION_LABELS[self]

    def __str__(self) -> str:
        return self.label


_RESOLUTION_LABELS = {MeshResolution.FULL: "fullres", MeshResolution.LOW: "lowres"}
_RESOLUTIONS_BY_LABEL = {label: res for res, label in _RESOLUTION_LABELS.items()}


def parse_mesh_resolution(s: str) -> MeshResolution:
    """Return the resolution named ``s``; raise ValueError if it is unknown."""
    try:
        return _RESOLUTIONS_BY_LABEL[s]
    except KeyError:
        raise ValueError(f"unknown mesh resolution: {s!r}") from None


@dataclass
class SliceRef:
    """A reference to a slice stack stored in another model part."""

    slice_stack_id: int = 0
    path: str = ""


@dataclass
class SliceStack:
    """A slice stack resource holding either slices or references."""

    id: int = 0
    bottom_z: float = 0.0
    slices: List[Slice] = field(default_factory=list)
    refs: List[SliceRef] = field(default_factory=list)

    def identify(self) -> int:
        """Return the resource ID."""
        return self.id

    def xml_name(self) -> XMLName:
        """Return the XML name of the resource element."""
        return XMLName(NAMESPACE, ATTR_SLICE_STACK)


@dataclass
class ObjectAttr:
    """Slice attributes attached to an object."""

    slice_stack_id: int = 0
    mesh_resolution: MeshResolution = MeshResolution.FULL

    def namespace(self) -> str:
        """Return the namespace these attributes belong to."""
        return NAMESPACE