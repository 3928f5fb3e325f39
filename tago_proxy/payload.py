"""Decoding of TAGO payloads.

TAGO answers in JSON or XML depending on the ``_type`` parameter, and falls
back to an XML ``OpenAPI_ServiceResponse`` envelope for key and quota errors
regardless of the requested format. Both encodings are turned into the same
nested structure before the ``response.body.items.item`` path is read.
"""
import json
import logging
import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from .errors import ParseError, UpstreamError

logger = logging.getLogger(__name__)

SUCCESS_CODES = {"00", "0"}


def element_to_data(element: ET.Element) -> Any:
    """
    Convert an XML element into plain Python data.

    Elements with children become dicts, repeated sibling tags become lists
    and leaf elements become their stripped text.
    """
    children = list(element)
    if not children:
        return (element.text or "").strip()

    data: Dict[str, Any] = {}
    for child in children:
        value = element_to_data(child)
        if child.tag in data:
            existing = data[child.tag]
            if isinstance(existing, list):
                existing.append(value)
            else:
                data[child.tag] = [existing, value]
        else:
            data[child.tag] = value
    return data


def parse_xml(text: str) -> Dict[str, Any]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ParseError(detail=str(e))
    return {root.tag: element_to_data(root)}


def parse_json(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ParseError(detail=str(e))
    if not isinstance(data, dict):
        raise ParseError(detail="Expected a JSON object")
    return data


def decode_payload(text: str) -> Dict[str, Any]:
    """Decode a TAGO body, sniffing XML versus JSON from its first character."""
    stripped = (text or "").lstrip()
    if not stripped:
        raise ParseError(detail="Empty response body")
    if stripped.startswith("<"):
        return parse_xml(stripped)
    return parse_json(stripped)


def check_result(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Raise UpstreamError for TAGO error envelopes and return the ``response`` node.

    Args:
        data: Decoded payload

    Returns:
        The ``response`` mapping
    """
    envelope = data.get("OpenAPI_ServiceResponse")
    if isinstance(envelope, dict):
        header = envelope.get("cmmMsgHeader") or {}
        message = header.get("returnAuthMsg") or header.get("errMsg") or "TAGO service error"
        raise UpstreamError(
            "TAGO API error",
            detail=f"{message} (reasonCode={header.get('returnReasonCode')})",
        )

    response = data.get("response")
    if not isinstance(response, dict):
        raise ParseError(detail="Missing response node")

    header = response.get("header")
    if isinstance(header, dict) and header.get("resultCode") is not None:
        code = str(header.get("resultCode"))
        if code not in SUCCESS_CODES:
            raise UpstreamError(
                "TAGO API error",
                detail=f"{header.get('resultMsg')} (resultCode={code})",
            )
    return response


class ItemsKind(Enum):
    EMPTY = "empty"
    SINGLE = "single"
    MANY = "many"


class ItemsShape(NamedTuple):
    """The ``item`` node as found in the payload, before normalization."""
    kind: ItemsKind
    items: List[Dict[str, Any]]

    @classmethod
    def from_node(cls, node: Any) -> "ItemsShape":
        if not node:
            return cls(ItemsKind.EMPTY, [])
        if isinstance(node, list):
            return cls(ItemsKind.MANY, [_require_mapping(item) for item in node])
        return cls(ItemsKind.SINGLE, [_require_mapping(node)])


def _require_mapping(item: Any) -> Dict[str, Any]:
    if not isinstance(item, dict):
        raise ParseError(detail=f"Unexpected item value: {item!r}")
    return item


def extract_items(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return ``response.body.items.item`` as a list, empty when absent."""
    response = check_result(data)

    body = response.get("body")
    items: Optional[Any] = body.get("items") if isinstance(body, dict) else None
    # TAGO sends "items": "" when nothing matches
    node = items.get("item") if isinstance(items, dict) else None

    shape = ItemsShape.from_node(node)
    logger.debug(f"TAGO items node: {shape.kind.value} ({len(shape.items)} items)")
    return shape.items
