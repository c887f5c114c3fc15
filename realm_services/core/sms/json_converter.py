"""SMS attribute ⇔ JSON conversion.

Configuration attributes are stored as sets of strings; the JSON side is
typed from the schema's attribute definitions.
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Set

from ..exceptions import BadRequestError
from .config_tree import Attributes, AttributeSchema, ServiceSchema

IGNORED_KEYS = {"name", "_id", "_rev"}


class SmsJsonConverter:
    """Bidirectional converter bound to one schema node."""

    def __init__(self, schema: ServiceSchema):
        self.schema = schema

    def to_json(self, attrs: Attributes) -> Dict[str, Any]:
        """Convert stored attributes to a JSON object.

        Multi-valued attributes become sorted lists, single-valued ones a
        scalar (None when unset).
        """
        result: Dict[str, Any] = {}
        for key in sorted(attrs):
            definition = self.schema.attribute(key) or AttributeSchema(key, multi_valued=len(attrs[key]) > 1)
            values = sorted(attrs[key])
            if definition.multi_valued:
                result[key] = [_typed(definition, value) for value in values]
            else:
                result[key] = _typed(definition, values[0]) if values else None
        return result

    def from_json(self, content: Optional[Dict[str, Any]]) -> Attributes:
        """Convert a JSON object to stored attributes.

        Raises:
            BadRequestError: Unknown attribute or several values for a
                single-valued attribute
        """
        attrs: Attributes = {}
        for key, value in (content or {}).items():
            if key in IGNORED_KEYS:
                continue
            definition = self.schema.attribute(key)
            if definition is None:
                raise BadRequestError(f"Invalid attribute specified: {key}")
            values = _as_strings(value)
            if not definition.multi_valued and len(values) > 1:
                raise BadRequestError(f"Attribute {key} accepts a single value")
            attrs[key] = values
        return attrs


def _typed(definition: AttributeSchema, value: str) -> Any:
    if definition.type == "boolean":
        return value.lower() == "true"
    if definition.type == "number":
        try:
            return int(value)
        except ValueError:
            return float(value)
    return value


def _as_strings(value: Any) -> Set[str]:
    if value is None:
        return set()
    if isinstance(value, (list, tuple, set)):
        return {_as_string(item) for item in value if item is not None}
    return {_as_string(value)}


def _as_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
