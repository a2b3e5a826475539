"""XML-to-dict and dict-to-XML conversion for gateway request/response bodies.

The gateway speaks a typed XML dialect: element names are dash-separated,
scalar types are carried in a ``type`` attribute, and nulls in ``nil="true"``::

    <customer>
      <first-name>Dan</first-name>
      <created-at type="datetime">2015-01-01T12:00:00Z</created-at>
      <addresses type="array"><address>...</address></addresses>
      <company nil="true"/>
    </customer>

decode() turns this into ``{"customer": {"first_name": "Dan", ...}}`` with
typed Python values; encode() is its inverse for request parameters.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from braintree_gateway.exceptions import ResponseDecodeError

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


# ---------------------------------------------------------------------------
# XML text → Python dict  (response parsing)
# ---------------------------------------------------------------------------


def decode(xml_text: str | bytes) -> dict[str, Any]:
    """Convert a gateway XML document into a dict.

    Args:
        xml_text: Raw response body. Blank bodies decode to an empty dict.

    Returns:
        Dict with the root element name as the single top-level key.

    Raises:
        ResponseDecodeError: If *xml_text* is not well-formed XML or a typed
            value cannot be converted.
    """
    if isinstance(xml_text, str):
        if not xml_text.strip():
            return {}
        xml_text = xml_text.encode("utf-8")
    elif not xml_text.strip():
        return {}

    try:
        root = ET.fromstring(xml_text)
        return {_key(root.tag): _element_to_value(root)}
    except ET.ParseError as e:
        raise ResponseDecodeError(f"Response body is not well-formed XML: {e}") from e
    except (ValueError, ArithmeticError) as e:
        # Decimal raises InvalidOperation, an ArithmeticError
        raise ResponseDecodeError(f"Response body has an invalid typed value: {e}") from e


def _strip_ns(tag: str) -> str:
    """Remove namespace URI prefix: ``{http://...}Name`` → ``Name``."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _key(tag: str) -> str:
    """``merchant-account`` → ``merchant_account``."""
    return _strip_ns(tag).replace("-", "_")


def _element_to_value(element: ET.Element) -> Any:
    """Recursively convert one element to a typed Python value.

    Conversion rules:
    - ``nil="true"`` → None.
    - ``type="array"`` → list of child values (child tag names are dropped).
    - ``type`` of integer/boolean/decimal/datetime/date → typed scalar;
      empty text → None (False for booleans, where ``"1"`` is true).
    - Child elements → dict keyed by tag; repeated tags become lists.
    - Other attributes → ``@attr_name`` keys, text beside them → ``#text``.
    - Empty untyped elements → empty string.
    """
    if element.get("nil") == "true":
        return None

    value_type = element.get("type")
    if value_type == "array":
        return [_element_to_value(child) for child in element]

    if len(element) == 0 and value_type is not None:
        return _convert_scalar((element.text or "").strip(), value_type)

    result: dict[str, Any] = {}

    for attr_name, attr_value in element.attrib.items():
        if attr_name in ("type", "nil") or attr_name.startswith(("xmlns", "{")):
            continue
        result[f"@{attr_name}"] = attr_value

    children_by_tag: dict[str, list[Any]] = {}
    for child in element:
        children_by_tag.setdefault(_key(child.tag), []).append(_element_to_value(child))

    for tag, values in children_by_tag.items():
        result[tag] = values if len(values) > 1 else values[0]

    text = (element.text or "").strip()
    if result:
        if text:
            result["#text"] = text
        return result
    return text


def _convert_scalar(text: str, value_type: str) -> Any:
    """Convert typed leaf text; empty text is None, or False for booleans."""
    if value_type == "boolean":
        if text.lstrip("-").isdigit():
            return int(text) != 0
        return text == "true"
    if not text:
        return None if value_type in _TYPED_SCALARS else text
    if value_type == "integer":
        return int(text)
    if value_type == "decimal":
        return Decimal(text)
    if value_type == "datetime":
        return datetime.fromisoformat(text)
    if value_type == "date":
        return date.fromisoformat(text)
    return text


_TYPED_SCALARS = frozenset({"integer", "decimal", "datetime", "date"})


# ---------------------------------------------------------------------------
# Python dict → XML text  (request serialization)
# ---------------------------------------------------------------------------


def encode(data: dict[str, Any]) -> str:
    """Convert request parameters into a gateway XML document.

    The dict must have exactly one top-level key, which becomes the root
    element name. Underscores in keys become dashes. Nested dicts become
    child elements, lists become ``type="array"`` elements holding ``item``
    children, ``None`` becomes ``nil="true"``, and bool/int/Decimal/datetime/
    date values carry their ``type`` attribute.

    Raises:
        ValueError: If *data* does not have exactly one top-level key.
    """
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError(
            f"encode expects a dict with exactly one top-level key "
            f"(the root element), got {type(data).__name__} with "
            f"{len(data) if isinstance(data, dict) else 'N/A'} keys"
        )

    root_tag = next(iter(data))
    root_element = _value_to_element(root_tag, data[root_tag])
    return XML_DECLARATION + ET.tostring(root_element, encoding="unicode")


def _tag(key: Any) -> str:
    return str(key).replace("_", "-")


def _value_to_element(key: Any, value: Any) -> ET.Element:
    element = ET.Element(_tag(key))

    if value is None:
        element.set("nil", "true")
    elif isinstance(value, dict):
        for child_key, child_value in value.items():
            element.append(_value_to_element(child_key, child_value))
    elif isinstance(value, (list, tuple)):
        element.set("type", "array")
        for item in value:
            element.append(_value_to_element("item", item))
    elif isinstance(value, bool):
        # bool before int: bool is an int subclass
        element.set("type", "boolean")
        element.text = "true" if value else "false"
    elif isinstance(value, int):
        element.set("type", "integer")
        element.text = str(value)
    elif isinstance(value, Decimal):
        element.set("type", "decimal")
        element.text = str(value)
    elif isinstance(value, datetime):
        element.set("type", "datetime")
        element.text = _format_datetime(value)
    elif isinstance(value, date):
        element.set("type", "date")
        element.text = value.isoformat()
    else:
        element.text = str(value)

    return element


def _format_datetime(value: datetime) -> str:
    """Render as UTC ``YYYY-MM-DDTHH:MM:SSZ``; naive values are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")
