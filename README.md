# threemf

Building blocks for reading, writing and checking 3MF model data, with no
dependencies outside the Python standard library.

## Modules

- `threemf.xmldecode` is an event-driven XML decoder. A tree of
  `ElementDecoder` objects receives the elements via `start(attrs)`,
  `child(name)` and `end()`; `decode(data, root, strict)` drives it.
  Problems are raised as `DecodeError` (which carries the XPath of the
  element), wrapping `ParseAttrError` or `MissingFieldError`. When not
  strict and several problems occur, they are raised together as an
  `ErrorList`. Names and attributes are `XMLName` and `XMLAttr`.
- `threemf.slices.model` holds the slice extension data model:
  `SliceStack`, `Slice`, `Polygon`, `Segment`, `SliceRef`, `ObjectAttr`,
  `MeshResolution` and `parse_mesh_resolution`.
- `threemf.slices.decoder` decodes slice stacks (`SliceStackDecoder`,
  `decode_slice_stack`) and the slice attributes of an object
  (`parse_object_attr`).
- `threemf.slices.encoder` writes slice stacks as XML
  (`marshal_slice_stack`, `to_xml`) and object attributes as a list of
  `XMLAttr` (`marshal_object_attr`).
- `threemf.slices.validate` applies the slice extension rules:
  `validate_slices`, `validate_refs`, `validate_slice_stack`,
  `is_slice_stack_closed`, `check_all_closed` and `valid_transform`.
- `threemf.coherency` checks that a triangle mesh is manifold and
  consistently oriented (`validate_mesh_coherency`, `MeshError`).
- `threemf.uuids` generates random version 4 UUIDs (`new`), validates UUID
  strings (`validate`, `InvalidUUIDError`) and lets the random source be
  replaced (`set_rand`).

## Installation

```
pip install .
```

## Examples

Decode a slice stack and write it back out:

```python
from threemf.slices.decoder import decode_slice_stack
from threemf.slices.encoder import to_xml

xml = b'''<s:slicestack xmlns:s="http://schemas.microsoft.com/3dmanufacturing/slice/2015/07"
                        id="3" zbottom="1">
  <s:slice ztop="2">
    <s:vertices><s:vertex x="0" y="0"/><s:vertex x="1" y="0"/></s:vertices>
    <s:polygon startv="0"><s:segment v2="1"/><s:segment v2="0"/></s:polygon>
  </s:slice>
</s:slicestack>'''

stack = decode_slice_stack(xml, strict=True)
print(stack.identify(), len(stack.slices))
print(to_xml(stack, precision=3))
```

With a negative `precision` (the default) floats are written in their
shortest exact form.

Validate a slice stack. `validate_slices` and `validate_refs` return a list
of `DecodeError`; `validate_slice_stack` raises an `ErrorList` holding every
problem. References are resolved through a callable
`find_asset(path, id)` that returns the resource or `None`:

```python
from threemf.slices.validate import (
    is_slice_stack_closed,
    validate_slice_stack,
    validate_slices,
)

print(validate_slices(stack))          # [] when the slices are fine
validate_slice_stack(stack, "/3D/3dmodel.model", lambda path, id: None)
print(is_slice_stack_closed(stack))
```

Check mesh coherency:

```python
from threemf.coherency import validate_mesh_coherency

triangles = [(0, 1, 2), (0, 3, 1), (0, 2, 3), (1, 3, 2)]
validate_mesh_coherency(4, triangles)  # raises MeshError when not coherent
```

Work with UUIDs:

```python
from threemf import uuids

value = uuids.new()
uuids.validate(value)                  # raises InvalidUUIDError if malformed
```

## What the package does not do

It does not open 3MF package files (the zip container and its
relationships), has no data model for a whole 3MF model (objects, build
items, materials, metadata) and so no model-wide validation, and provides
no command-line tool. Slice validation works on single slice stacks, with
other resources supplied through the `find_asset` callable.

## Running the tests

```
pip install .[test]
pytest
```