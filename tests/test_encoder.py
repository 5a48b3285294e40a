from threemf.slices.decoder import decode_slice_stack
from threemf.slices.encoder import marshal_object_attr, marshal_slice_stack, to_xml
from threemf.slices.model import (
    NAMESPACE,
    MeshResolution,
    ObjectAttr,
    Polygon,
    Segment,
    Slice,
    SliceRef,
    SliceStack,
)
from threemf.xmldecode import XMLAttr, XMLName

SQUARE = [(1.01, 1.02), (9.03, 1.04), (9.05, 9.06), (1.07, 9.08)]


def _tag(local):
    return f"{{{NAMESPACE}}}{local}"


def _slices_stack():
    return SliceStack(
        id=3,
        bottom_z=1.0,
        slices=[
            Slice(
                top_z=0.0,
                vertices=list(SQUARE),
                polygons=[
                    Polygon(
                        start_v=0,
                        segments=[
                            Segment(v2=1, pid=10),
                            Segment(v2=2, pid=10, p2=1),
                            Segment(v2=3),
                            Segment(v2=0),
                        ],
                    )
                ],
            ),
            Slice(
                top_z=0.1,
                vertices=list(SQUARE),
                polygons=[
                    Polygon(
                        start_v=1,
                        segments=[
                            Segment(v2=2),
                            Segment(v2=1),
                            Segment(v2=3),
                            Segment(v2=0),
                        ],
                    )
                ],
            ),
        ],
    )


def test_round_trip_slices():
    stack = _slices_stack()
    assert decode_slice_stack(to_xml(stack)) == stack


def test_round_trip_refs():
    stack = SliceStack(
        id=7, bottom_z=1.1, refs=[SliceRef(slice_stack_id=10, path="/2D/2dmodel.model")]
    )
    assert decode_slice_stack(to_xml(stack)) == stack


def test_marshal_object_attr():
    attrs = marshal_object_attr(
        ObjectAttr(slice_stack_id=3, mesh_resolution=MeshResolution.LOW)
    )
    assert attrs == [
        XMLAttr(XMLName(NAMESPACE, "slicestackid"), "3"),
        XMLAttr(XMLName(NAMESPACE, "meshresolution"), "lowres"),
    ]


def test_zero_bottom_is_omitted():
    element = marshal_slice_stack(
        SliceStack(id=7, refs=[SliceRef(slice_stack_id=10, path="/a.model")])
    )
    assert element.tag == _tag("slicestack")
    assert dict(element.attrib) == {"id": "7"}
    [ref] = list(element)
    assert ref.tag == _tag("sliceref")
    assert dict(ref.attrib) == {"slicestackid": "10", "slicepath": "/a.model"}


def test_segment_attributes():
    element = marshal_slice_stack(_slices_stack())
    polygon = element.find(_tag("slice")).find(_tag("polygon"))
    segments = [dict(seg.attrib) for seg in polygon.findall(_tag("segment"))]
    assert segments == [
        {"v2": "1", "pid": "10", "p1": "0"},
        {"v2": "2", "pid": "10", "p1": "0", "p2": "1"},
        {"v2": "3"},
        {"v2": "0"},
    ]
    assert polygon.get("startv") == "0"


def test_children_order_and_shortest_floats():
    element = marshal_slice_stack(_slices_stack())
    assert element.get("zbottom") == "1"
    slices = element.findall(_tag("slice"))
    assert [s.get("ztop") for s in slices] == ["0", "0.1"]
    assert [child.tag for child in slices[0]] == [_tag("vertices"), _tag("polygon")]
    vertex = slices[0].find(_tag("vertices")).find(_tag("vertex"))
    assert dict(vertex.attrib) == {"x": "1.01", "y": "1.02"}


def test_fixed_precision():
    element = marshal_slice_stack(_slices_stack(), precision=3)
    assert element.get("zbottom") == "1.000"
    first = element.find(_tag("slice"))
    assert first.get("ztop") == "0.000"
    vertex = first.find(_tag("vertices")).find(_tag("vertex"))
    assert vertex.get("x") == "1.010"


def test_to_xml_uses_slice_prefix():
    text = to_xml(SliceStack(id=2))
    assert text.startswith("<s:slicestack")
    assert f'xmlns:s="{NAMESPACE}"' in text