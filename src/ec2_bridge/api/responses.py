"""Conversion of DescribeInstances XML payloads into flat records."""

from typing import Any, Optional
from xml.parsers.expat import ExpatError

import xmltodict

from ..constants import INSTANCES_SET, ITEM, NEXT_TOKEN, RESERVATION_SET, RESPONSE_ROOT
from ..exceptions import MalformedResponseError
from ..filtering import FlatRecord


def as_list(value: Any) -> list[Any]:
    """Normalize an optional XML element into a list."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def flatten(node: Any, prefix: str = "") -> FlatRecord:
    """Flatten a nested element into dotted keys with scalar string values.

    ``{"instanceState": {"name": "running"}}`` becomes
    ``{"instanceState.name": "running"}``; repeated elements get a numeric
    segment (``tagSet.item.0.key``). XML attributes are dropped, except that
    an element carrying both attributes and text keeps its text.
    """
    flat: FlatRecord = {}
    if isinstance(node, dict):
        if "#text" in node:
            flat[prefix] = node["#text"]
            return flat
        for key, value in node.items():
            if key.startswith("@"):
                continue
            flat.update(flatten(value, f"{prefix}.{key}" if prefix else key))
    elif isinstance(node, list):
        for index, value in enumerate(node):
            flat.update(flatten(value, f"{prefix}.{index}" if prefix else str(index)))
    elif prefix:
        flat[prefix] = "" if node is None else str(node)
    return flat


def parse_document(body: str) -> dict[str, Any]:
    """Parse the raw XML body of a DescribeInstances call.

    Raises:
        MalformedResponseError: If the body is not XML or lacks the response wrapper
    """
    try:
        document = xmltodict.parse(body, force_list=(ITEM,))
    except (ExpatError, TypeError, ValueError) as e:
        raise MalformedResponseError(f"Unable to parse the Amazon EC2 response: {e}") from e

    response = document.get(RESPONSE_ROOT) if isinstance(document, dict) else None
    if not isinstance(response, dict) or RESERVATION_SET not in response:
        raise MalformedResponseError(
            f"Amazon EC2 response is missing {RESPONSE_ROOT}.{RESERVATION_SET}",
            details={"root": next(iter(document), None) if isinstance(document, dict) else None},
        )
    return response


def next_token(response: dict[str, Any]) -> Optional[str]:
    token = response.get(NEXT_TOKEN)
    return token if isinstance(token, str) and token else None


def extract_records(response: dict[str, Any]) -> list[FlatRecord]:
    """Turn the reservations of a parsed response into flat instance records.

    Each instance becomes one record. A reservation whose ``instancesSet``
    is present but empty yields a single empty record, so it is still
    counted by wildcard queries but dropped by any field term.

    Raises:
        MalformedResponseError: If a reservation lacks ``instancesSet`` or an
            instance entry is not an element
    """
    reservation_set = response.get(RESERVATION_SET)
    if reservation_set is None:
        return []
    if not isinstance(reservation_set, dict):
        raise MalformedResponseError(f"Unexpected {RESERVATION_SET} content in Amazon EC2 response")

    records: list[FlatRecord] = []
    for reservation in as_list(reservation_set.get(ITEM)):
        if not isinstance(reservation, dict):
            raise MalformedResponseError("Unexpected reservation entry in Amazon EC2 response")

        if INSTANCES_SET not in reservation:
            raise MalformedResponseError(
                f"Reservation in Amazon EC2 response has no {INSTANCES_SET}",
                details={"reservationId": reservation.get("reservationId")},
            )
        instances_set = reservation[INSTANCES_SET]
        if instances_set is None:
            records.append({})
            continue
        if not isinstance(instances_set, dict) or ITEM not in instances_set:
            raise MalformedResponseError(f"Unexpected {INSTANCES_SET} content in Amazon EC2 response")

        for instance in as_list(instances_set[ITEM]):
            if not isinstance(instance, dict):
                raise MalformedResponseError("Unexpected instance entry in Amazon EC2 response")
            records.append(flatten(instance))
    return records


def parse_describe_instances(body: str) -> list[FlatRecord]:
    """Parse a DescribeInstances XML body into flat instance records."""
    return extract_records(parse_document(body))
