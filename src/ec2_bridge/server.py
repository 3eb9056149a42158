#!/usr/bin/env python3
"""MCP Server for Amazon EC2 instance inventory using FastMCP.

This server exposes the bridge's count, retrieve and search operations as
tools. Credentials and endpoint settings come from the environment (or a
.env file); see ``BridgeConfig.from_env``.
"""

import json
import logging
from typing import Annotated, Any, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP

from .adapter import EC2Bridge
from .config import BridgeConfig
from .exceptions import ParseError
from .utils.decorators import format_success_response, handle_bridge_errors

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

mcp: FastMCP = FastMCP(
    "ec2-bridge",
    instructions="Count, retrieve and search Amazon EC2 instances with qualification queries such as "
    '"instanceId"="i-0123456789abcdef0" or "*" for all instances.',
)

# Bridge built on first use so a missing property is reported by the tool call
_bridge: Optional[EC2Bridge] = None


def get_bridge() -> EC2Bridge:
    """Return the process-wide bridge, building it from the environment once."""
    global _bridge
    if _bridge is None:
        _bridge = EC2Bridge(BridgeConfig.from_env(), log=logger)
    return _bridge


def reset_bridge() -> None:
    global _bridge
    _bridge = None


def _load_json_object(value: str, argument: str) -> dict[str, Any]:
    if not value:
        return {}
    try:
        loaded = json.loads(value)
    except json.JSONDecodeError as e:
        raise ParseError(f"{argument} must be valid JSON: {e.msg}") from e
    if not isinstance(loaded, dict):
        raise ParseError(f"{argument} must be a JSON object")
    return loaded


def _split_fields(fields: str) -> Optional[list[str]]:
    names = [name.strip() for name in fields.split(",") if name.strip()] if fields else []
    return names or None


@handle_bridge_errors
def count_instances(
    query: Annotated[str, 'Qualification, e.g. \'"instanceState.name"="running"\' or \'"*"\' for all'],
    parameters: Annotated[str, 'JSON object of placeholder values, e.g. \'{"Instance Id": "i-1"}\''] = "{}",
    structure: Annotated[str, "Structure to query"] = "Instances",
) -> str:
    """Count the EC2 instances matching a qualification."""
    bindings = _load_json_object(parameters, "parameters")
    total = get_bridge().count(structure, query, bindings)
    return format_success_response({"count": total}, metadata={"structure": structure})


@handle_bridge_errors
def retrieve_instance(
    query: Annotated[str, "Qualification expected to match exactly one instance"],
    parameters: Annotated[str, "JSON object of placeholder values"] = "{}",
    fields: Annotated[str, "Comma-separated fields to return (empty for all)"] = "",
    structure: Annotated[str, "Structure to query"] = "Instances",
) -> str:
    """Retrieve a single EC2 instance. Fails if more than one instance matches.

    Returns ``"record": null`` when nothing matches.
    """
    bindings = _load_json_object(parameters, "parameters")
    record = get_bridge().retrieve(structure, query, bindings, _split_fields(fields))
    return format_success_response({"record": record}, metadata={"structure": structure})


@handle_bridge_errors
def search_instances(
    query: Annotated[str, "Qualification to filter instances with"],
    parameters: Annotated[str, "JSON object of placeholder values"] = "{}",
    fields: Annotated[str, "Comma-separated fields to return (empty for all)"] = "",
    metadata: Annotated[str, "JSON object of pagination metadata, echoed back unchanged"] = "{}",
    structure: Annotated[str, "Structure to query"] = "Instances",
) -> str:
    """Search EC2 instances matching a qualification."""
    bindings = _load_json_object(parameters, "parameters")
    pagination = _load_json_object(metadata, "metadata")
    result = get_bridge().search(structure, query, bindings, _split_fields(fields), pagination)
    return format_success_response(result.to_dict(), metadata={"structure": structure, "count": len(result.records)})


for _tool in (count_instances, retrieve_instance, search_instances):
    mcp.tool()(_tool)


def main() -> None:
    """Entry point for the MCP server."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    mcp.run()


if __name__ == "__main__":
    main()
