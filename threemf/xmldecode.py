"""Event-driven XML decoding into a stack of element decoders."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import (
    Callable,
    ClassVar,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)
from xml.parsers import expat

__all__ = [
    "XMLName",
    "XMLAttr",
    "ElementDecoder",
    "DecodeError",
    "ParseAttrError",
    "MissingFieldError",
    "ErrorList",
    "decode",
]

_WRAPPER = "threemf.document"
_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")
_ENCODING = re.compile(r"""encoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")


@dataclass(frozen=True)
class XMLName:
    """A namespace-qualified XML name."""

    space: str = ""
    local: str = ""


@dataclass
class XMLAttr:
    """An attribute of an XML element."""

    name: XMLName
    value: str


class ParseAttrError(ValueError):
    """An attribute value could not be parsed."""

    def __init__(self, name: str, required: bool) -> None:
        kind = "required" if required else "optional"
        super().__init__(f"{kind} attribute {name!r} has an invalid value")
        self.name = name
        self.required = required

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseAttrError):
            return NotImplemented
        return (self.name, self.required) == (other.name, other.required)

    def __hash__(self) -> int:
        return hash((ParseAttrError, self.name, self.required))


class MissingFieldError(ValueError):
    """A required field is missing."""

    def __init__(self, name: str) -> None:
        super().__init__(f"required field {name!r} is missing")
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MissingFieldError):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash((MissingFieldError, self.name))


class DecodeError(Exception):
    """An error located by an element path inside a model file."""

    def __init__(
        self,
        cause: BaseException,
        xpath: Sequence[Tuple[str, int]] = (),
        path: str = "",
    ) -> None:
        super().__init__(cause)
        self.cause = cause
        self.xpath: Tuple[Tuple[str, int], ...] = tuple(xpath)
        self.path = path

    def wrap(self, name: str, index: int = -1) -> "DecodeError":
        """Return a copy located one element further out."""
        return DecodeError(self.cause, ((name, index),) + self.xpath, self.path)

    def __str__(self) -> str:
        prefix = f"Path: {self.path} " if self.path else ""
        location = "".join(
            f"/{name}[{index}]" if index >= 0 else f"/{name}"
            for name, index in self.xpath
        )
        if location:
            return f"{prefix}XPath: {location}: {self.cause}"
        return f"{prefix}{self.cause}"


class ErrorList(Exception):
    """Several errors reported together."""

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self.errors: List[BaseException] = list(errors)
        super().__init__(self.errors)

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        return f"{len(self.errors)} errors occurred: " + "; ".join(
            str(err) for err in self.errors
        )


class ElementDecoder:
    """Base for decoders of one XML element.

    By default a decoder keeps the attributes it was started with in
    ``attrs``, hands nested elements to the factories listed in ``children``
    (numbering each kind of child from zero) and sets ``ended`` once the
    element closes. Subclasses override these steps as they need.

    Subclasses may also define ``char_data(text)`` to receive text content,
    or ``append_token(token)`` to receive raw tokens of nested content, where
    a token is ``("start", XMLName, [XMLAttr])``, ``("end", XMLName)`` or
    ``("chardata", str)``.
    """

    children: ClassVar[Mapping[XMLName, Callable[[], "ElementDecoder"]]] = {}

    def start(self, attrs: List[XMLAttr]) -> None:
        """Handle the element's attributes; raise to report problems."""
        self.attrs = list(attrs)

    def child(self, name: XMLName) -> Optional[Tuple[int, "ElementDecoder"]]:
        """Return ``(index, decoder)`` for a nested element, or ``None``."""
        factory = self.children.get(name)
        if factory is None:
            return None
        counts: Dict[XMLName, int] = self.__dict__.setdefault("_child_counts", {})
        index = counts.get(name, 0)
        counts[name] = index + 1
        return index, factory()

    def end(self) -> None:
        """Handle the end of the element."""
        self.ended = True


class _StopDecoding(Exception):
    pass


class _DecodeState:
    def __init__(self, root: ElementDecoder, strict: bool) -> None:
        self.strict = strict
        self.current: ElementDecoder = root
        self.current_name: Optional[XMLName] = None
        self.stack: List[Tuple[ElementDecoder, XMLName, int]] = []
        self.errors: List[DecodeError] = []
        self.depth = 0

    @staticmethod
    def _name(raw: str) -> XMLName:
        space, sep, local = raw.rpartition(" ")
        return XMLName(space, local) if sep else XMLName("", raw)

    def _locate(self, cause: BaseException) -> DecodeError:
        xpath = tuple((name.local, index) for _, name, index in self.stack)
        if isinstance(cause, DecodeError):
            return DecodeError(cause.cause, xpath + cause.xpath, cause.path)
        return DecodeError(cause, xpath)

    def on_start(self, raw_name: str, raw_attrs: List[str]) -> None:
        self.depth += 1
        if self.depth == 1:
            return
        name = self._name(raw_name)
        attrs = [
            XMLAttr(self._name(key), value)
            for key, value in zip(raw_attrs[::2], raw_attrs[1::2])
        ]
        found = self.current.child(name)
        if found is not None and found[1] is not None:
            index, decoder = found
            self.stack.append((decoder, name, index))
            self.current = decoder
            self.current_name = name
            causes: List[BaseException]
            try:
                decoder.start(attrs)
            except ErrorList as exc:
                causes = list(exc)
            except (ParseAttrError, MissingFieldError, DecodeError) as exc:
                causes = [exc]
            else:
                causes = []
            self.errors.extend(self._locate(cause) for cause in causes)
            if self.strict and self.errors:
                raise _StopDecoding
        else:
            append = getattr(self.current, "append_token", None)
            if append is not None:
                append(("start", name, attrs))

    def on_end(self, raw_name: str) -> None:
        self.depth -= 1
        if self.depth == 0:
            return
        name = self._name(raw_name)
        if self.current_name == name:
            self.current.end()
            self.stack.pop()
            if self.stack:
                self.current, self.current_name, _ = self.stack[-1]
        else:
            append = getattr(self.current, "append_token", None)
            if append is not None:
                append(("end", name))

    def on_chars(self, text: str) -> None:
        if self.depth <= 1:
            return
        handler = getattr(self.current, "char_data", None)
        if handler is not None:
            handler(text)
            return
        append = getattr(self.current, "append_token", None)
        if append is not None:
            append(("chardata", text))


def _prepare(data: Union[bytes, str]) -> str:
    if isinstance(data, (bytes, bytearray)):
        head = bytes(data[:200]).decode("latin-1")
        declaration = _DECLARATION.match(head.lstrip("\ufeff\xef\xbb\xbf"))
        encoding = "utf-8"
        if declaration:
            found = _ENCODING.search(declaration.group(0))
            if found:
                encoding = found.group(1)
        if encoding.lower().replace("_", "-") in ("utf-8", "utf8"):
            encoding = "utf-8-sig"
        text = bytes(data).decode(encoding)
    else:
        text = data
    text = text.lstrip("\ufeff")
    return _DECLARATION.sub("", text, count=1)


def decode(
    data: Union[bytes, str], root: ElementDecoder, strict: bool = True
) -> None:
    """Feed the XML in ``data`` to ``root`` and the decoders it hands out.

    Problems reported by decoders are raised as :class:`DecodeError`; in
    strict mode decoding stops at the first one, otherwise all are collected
    and raised as an :class:`ErrorList` when there is more than one.
    Malformed XML raises :class:`DecodeError` wrapping the parser error.
    """
    state = _DecodeState(root, strict)
    parser = expat.ParserCreate(namespace_separator=" ")
    parser.ordered_attributes = True
    parser.buffer_text = True
    parser.StartElementHandler = state.on_start
    parser.EndElementHandler = state.on_end
    parser.CharacterDataHandler = state.on_chars
    document = f"<{_WRAPPER}>{_prepare(data)}</{_WRAPPER}>"
    try:
        parser.Parse(document, True)
    except _StopDecoding:
        pass
    except expat.ExpatError as exc:
        raise DecodeError(exc) from exc
    if state.errors:
        if strict or len(state.errors) == 1:
            raise state.errors[0]
        raise ErrorList(state.errors)