"""Item marshalling and expression helpers for DynamoDB."""

from decimal import Decimal
from typing import Any, Mapping

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def serialize_item(item: Any) -> Any:
    """Prepare a plain item for DynamoDB.

    ``None`` values are dropped from mappings and floats become Decimals,
    recursively, since DynamoDB rejects both.

    Args:
        item: A plain Python item (usually a dict)

    Returns:
        A copy that the boto3 TypeSerializer accepts
    """
    if isinstance(item, Mapping):
        return {k: serialize_item(v) for k, v in item.items() if v is not None}
    if isinstance(item, (list, tuple)):
        return [serialize_item(v) for v in item if v is not None]
    if isinstance(item, float):
        return Decimal(str(item))
    return item


def marshal_item(item: Mapping[str, Any]) -> dict[str, dict]:
    """Convert a plain item into DynamoDB attribute-value format."""
    return {k: _serializer.serialize(v) for k, v in serialize_item(item).items()}


def unmarshal_item(item: Mapping[str, dict]) -> dict[str, Any]:
    """Convert a DynamoDB attribute-value item into plain Python values."""
    return {k: _deserializer.deserialize(v) for k, v in item.items()}


def marshal_values(values: Mapping[str, Any] | None) -> dict[str, dict] | None:
    """Marshal an ExpressionAttributeValues mapping, None stays None."""
    if not values:
        return None
    return {k: _serializer.serialize(serialize_item(v)) for k, v in values.items()}


def build_update_expression(attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Build a SET update expression for the given attributes.

    Attribute names and values are always placeholdered
    (``#key0 = :value0``) so reserved words are safe.

    Args:
        attributes: Attribute name -> new value

    Returns:
        Dict with UpdateExpression, ExpressionAttributeNames and
        ExpressionAttributeValues (values still plain, not marshalled)

    Raises:
        ValueError: If no attributes are given
    """
    if not attributes:
        raise ValueError("At least one attribute is required for an update")

    names = {}
    values = {}
    assignments = []
    for index, (name, value) in enumerate(attributes.items()):
        names[f"#key{index}"] = name
        values[f":value{index}"] = value
        assignments.append(f"#key{index} = :value{index}")

    return {
        "UpdateExpression": "SET " + ", ".join(assignments),
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
    }


def was_successful(response: Mapping[str, Any] | None) -> bool:
    """Check whether an AWS response reports a 2xx HTTP status."""
    if not response:
        return False
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return status is not None and 200 <= status < 300


def chunked(values: list, size: int) -> list[list]:
    """Split a list into consecutive chunks of at most ``size`` elements."""
    return [values[i:i + size] for i in range(0, len(values), size)]
