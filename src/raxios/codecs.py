"""Body serialization for JSON, XML and URL-encoded payloads.

Typed values (pydantic models, dataclasses, ``TypedDict``s, mappings and
scalars) are reduced to plain data with a pydantic ``TypeAdapter`` before
encoding, and decoded payloads are validated back into the requested target
type the same way.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import json
import re
import types
import typing
from functools import lru_cache
from typing import Any, Mapping, Union
from urllib.parse import parse_qsl, urlencode
from xml.etree import ElementTree

from pydantic import BaseModel, TypeAdapter, ValidationError

from .content_type import ContentType
from .exceptions import CodecError, EmptyBodyError, UnsupportedShapeError

NoneType = type(None)

_XML_TAG = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*")
_SEQUENCE_ORIGINS = {list, tuple, set, frozenset, collections.abc.Sequence, collections.abc.Set}


@lru_cache(maxsize=256)
def _cached_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _adapter(target: Any) -> TypeAdapter[Any]:
    try:
        return _cached_adapter(target)
    except TypeError:
        # unhashable annotations (e.g. Annotated metadata) skip the cache
        return TypeAdapter(target)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


def _accepts_none(target: Any) -> bool:
    if target is Any:
        return True
    origin = typing.get_origin(target)
    if origin is Union or origin is types.UnionType:
        return NoneType in typing.get_args(target)
    return False


def _to_plain(value: Any) -> Any:
    try:
        return _adapter(type(value)).dump_python(value, mode="json", by_alias=True)
    except (TypeError, ValueError) as exc:
        raise CodecError(f"Unable to serialize {type(value).__name__}: {exc}", cause=exc) from exc


def format_scalar(value: Any) -> str:
    """Render a scalar the way form and XML bodies spell it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def serialize(value: Any, content_type: ContentType | str = ContentType.JSON) -> bytes:
    """Encode ``value`` as a request body in the given format."""
    content_type = ContentType.coerce(content_type)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if content_type is ContentType.JSON:
        try:
            return _adapter(type(value)).dump_json(value, by_alias=True)
        except (TypeError, ValueError) as exc:
            raise CodecError(f"Unable to serialize {type(value).__name__} as JSON: {exc}", cause=exc) from exc
    if content_type is ContentType.URL_ENCODED:
        return _encode_urlencoded(value)
    return _encode_xml(value)


def deserialize(
    data: bytes,
    content_type: ContentType | str = ContentType.JSON,
    target: Any = Any,
    *,
    strict: bool = False,
) -> Any:
    """Decode ``data`` and validate it into ``target``.

    ``target=None`` means no body is expected: the payload is not parsed and
    ``None`` is returned. An empty payload yields ``None`` for targets that
    admit it and raises ``EmptyBodyError`` otherwise. An empty mapping
    written as URL-encoded is an empty payload too, so it only reads back
    into an optional target. Empty XML elements read back as empty
    mappings for record-shaped targets. With ``strict`` set,
    unknown top-level fields of a model, dataclass or ``TypedDict`` target
    are rejected.
    """
    if target is None or target is NoneType:
        return None
    if target is bytes:
        return bytes(data)
    if not data or not data.strip():
        if _accepts_none(target):
            return None
        raise EmptyBodyError(f"Expected a {_type_name(target)} body but the payload was empty")

    content_type = ContentType.coerce(content_type)
    if content_type is ContentType.JSON:
        payload = _decode_json(data)
    elif content_type is ContentType.URL_ENCODED:
        payload = _decode_urlencoded(data)
    else:
        payload = _wrap_sequence_fields(_decode_xml(data), target)

    if strict:
        _reject_unknown_fields(payload, target)
    try:
        return _adapter(target).validate_python(payload)
    except ValidationError as exc:
        raise CodecError(f"Body does not match {_type_name(target)}: {exc}", cause=exc) from exc


def _decode_json(data: bytes) -> Any:
    try:
        return json.loads(data)
    except ValueError as exc:
        raise CodecError(f"Malformed JSON body: {exc}", cause=exc) from exc


def _encode_urlencoded(value: Any) -> bytes:
    plain = _to_plain(value)
    if not isinstance(plain, Mapping):
        raise UnsupportedShapeError(
            f"URL-encoded bodies must be flat key-value mappings, got {type(value).__name__}"
        )
    pairs: list[tuple[str, str]] = []
    for key, item in plain.items():
        if item is None:
            continue
        if isinstance(item, (Mapping, list)):
            raise UnsupportedShapeError(f"Field {key!r} is nested; URL-encoded bodies must be flat")
        pairs.append((str(key), format_scalar(item)))
    return urlencode(pairs).encode("ascii")


def _decode_urlencoded(data: bytes) -> dict[str, str]:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CodecError(f"Malformed URL-encoded body: {exc}", cause=exc) from exc
    return dict(parse_qsl(text.strip(), keep_blank_values=True))


def _xml_tag(key: Any) -> str:
    tag = str(key)
    if not _XML_TAG.fullmatch(tag):
        raise UnsupportedShapeError(f"{tag!r} is not a valid XML element name")
    return tag


def _append_xml(parent: ElementTree.Element, tag: str, item: Any) -> None:
    if isinstance(item, list):
        raise UnsupportedShapeError(f"Nested sequences cannot be expressed as XML ({tag!r})")
    child = ElementTree.SubElement(parent, tag)
    if isinstance(item, Mapping):
        _fill_xml(child, item)
    elif item is not None:
        child.text = format_scalar(item)


def _fill_xml(parent: ElementTree.Element, fields: Mapping[str, Any]) -> None:
    for key, item in fields.items():
        if item is None:
            continue
        tag = _xml_tag(key)
        if isinstance(item, list):
            for element in item:
                _append_xml(parent, tag, element)
        else:
            _append_xml(parent, tag, item)


def _encode_xml(value: Any) -> bytes:
    plain = _to_plain(value)
    root_tag = "root" if isinstance(value, Mapping) else _xml_tag(type(value).__name__)
    root = ElementTree.Element(root_tag)
    if isinstance(plain, Mapping):
        _fill_xml(root, plain)
    elif isinstance(plain, list):
        raise UnsupportedShapeError("A top-level sequence cannot be expressed as an XML document")
    elif plain is not None:
        root.text = format_scalar(plain)
    return ElementTree.tostring(root, encoding="unicode").encode("utf-8")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_to_data(element: ElementTree.Element) -> Any:
    children = list(element)
    if not children and not element.attrib:
        return element.text or ""
    data: dict[str, Any] = {_local_name(k): v for k, v in element.attrib.items()}
    for child in children:
        tag = _local_name(child.tag)
        value = _element_to_data(child)
        if tag not in data:
            data[tag] = value
        elif isinstance(data[tag], list):
            data[tag].append(value)
        else:
            data[tag] = [data[tag], value]
    return data


def _decode_xml(data: bytes) -> Any:
    try:
        root = ElementTree.fromstring(data)
    except ElementTree.ParseError as exc:
        raise CodecError(f"Malformed XML body: {exc}", cause=exc) from exc
    return _element_to_data(root)


def _strip_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not NoneType]
        if len(args) == 1:
            return args[0]
    return annotation


def _field_annotations(target: Any) -> dict[str, Any] | None:
    """Map payload keys to field annotations for model and dataclass targets."""
    if isinstance(target, type) and issubclass(target, BaseModel):
        return {info.alias or name: info.annotation for name, info in target.model_fields.items()}
    if isinstance(target, type) and dataclasses.is_dataclass(target):
        try:
            return typing.get_type_hints(target)
        except (NameError, TypeError):
            return None
    return None


def _expects_mapping(target: Any) -> bool:
    if _field_annotations(target) is not None or typing.is_typeddict(target):
        return True
    origin = typing.get_origin(target) or target
    return origin in (dict, Mapping, collections.abc.Mapping, collections.abc.MutableMapping)


def _wrap_sequence_fields(payload: Any, target: Any) -> Any:
    """Shape decoded XML for ``target``.

    Single children of list-typed fields become one-item lists, and empty
    elements standing for records become empty mappings.
    """
    target = _strip_optional(target)
    if payload == "" and _expects_mapping(target):
        return {}
    origin = typing.get_origin(target)
    if origin in _SEQUENCE_ORIGINS:
        args = typing.get_args(target)
        items = payload if isinstance(payload, list) else [payload]
        return [_wrap_sequence_fields(item, args[0]) for item in items] if args else items

    annotations = _field_annotations(target)
    if annotations is None or not isinstance(payload, dict):
        return payload
    for key, annotation in annotations.items():
        if key not in payload:
            continue
        inner = _strip_optional(annotation)
        if inner in _SEQUENCE_ORIGINS or typing.get_origin(inner) in _SEQUENCE_ORIGINS:
            if not isinstance(payload[key], list):
                payload[key] = [payload[key]]
        payload[key] = _wrap_sequence_fields(payload[key], inner)
    return payload


def _known_fields(target: Any) -> set[str] | None:
    if isinstance(target, type) and issubclass(target, BaseModel):
        names: set[str] = set()
        for name, info in target.model_fields.items():
            names.add(name)
            if info.alias:
                names.add(info.alias)
            if isinstance(info.validation_alias, str):
                names.add(info.validation_alias)
        return names
    if isinstance(target, type) and dataclasses.is_dataclass(target):
        return {field.name for field in dataclasses.fields(target)}
    if typing.is_typeddict(target):
        return set(target.__required_keys__) | set(target.__optional_keys__)
    return None


def _reject_unknown_fields(payload: Any, target: Any) -> None:
    known = _known_fields(_strip_optional(target))
    if known is None or not isinstance(payload, Mapping):
        return
    unknown = sorted(str(key) for key in payload if key not in known)
    if unknown:
        raise CodecError(f"Unknown field(s) for {_type_name(target)}: {', '.join(unknown)}")
