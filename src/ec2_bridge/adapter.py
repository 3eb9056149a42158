"""Bridge adapter exposing count, retrieve and search over EC2 instances."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from . import __version__
from .api.ec2 import EC2Client
from .config import BridgeConfig
from .constants import ADAPTER_NAME
from .exceptions import ParseError
from .filtering import FilterEngine, FlatRecord, QualificationParser
from .utils.validators import validate_fields, validate_structure

logger = logging.getLogger(__name__)


@dataclass
class RecordList:
    """Result of a search: matching records plus the caller's metadata."""

    fields: Optional[list[str]]
    records: list[FlatRecord]
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"fields": self.fields, "records": self.records, "metadata": self.metadata}


class BridgeAdapter(ABC):
    """Capability interface of a bridge."""

    @abstractmethod
    def count(self, structure: str, query: Optional[str], parameters: Optional[Mapping[str, str]] = None) -> int:
        pass

    @abstractmethod
    def retrieve(
        self,
        structure: str,
        query: Optional[str],
        parameters: Optional[Mapping[str, str]] = None,
        fields: Optional[list[str]] = None,
    ) -> Optional[FlatRecord]:
        pass

    @abstractmethod
    def search(
        self,
        structure: str,
        query: Optional[str],
        parameters: Optional[Mapping[str, str]] = None,
        fields: Optional[list[str]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> RecordList:
        pass


class EC2Bridge(BridgeAdapter):
    """Bridge to Amazon EC2 DescribeInstances.

    All three operations share :meth:`_execute`: the qualification is
    resolved and tokenized first, so a bad query never reaches the network,
    then the instance list is fetched and filtered.
    """

    name = ADAPTER_NAME
    version = __version__

    def __init__(
        self,
        config: BridgeConfig,
        client: Optional[EC2Client] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.client = client or EC2Client(config)
        self.log = log or logger
        self.parser = QualificationParser()
        self.engine = FilterEngine()

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any], log: Optional[logging.Logger] = None) -> "EC2Bridge":
        return cls(BridgeConfig.from_properties(properties), log=log)

    def _execute(
        self, structure: str, query: Optional[str], parameters: Optional[Mapping[str, str]]
    ) -> list[FlatRecord]:
        if not validate_structure(structure):
            raise ParseError(f"Unsupported structure: {structure}", details={"structure": structure})

        resolved = self.parser.parse(query, parameters)
        terms = self.engine.extract_terms(resolved)

        records = self.client.describe_instances()
        matches = self.engine.apply(terms, records)
        self.log.debug(f"  Matched {len(matches)} of {len(records)} records")
        return matches

    def count(self, structure: str, query: Optional[str], parameters: Optional[Mapping[str, str]] = None) -> int:
        self.log.debug("Counting the Amazon EC2 records")
        self.log.debug(f"  Structure: {structure}")
        self.log.debug(f"  Query: {query}")

        return len(self._execute(structure, query, parameters))

    def retrieve(
        self,
        structure: str,
        query: Optional[str],
        parameters: Optional[Mapping[str, str]] = None,
        fields: Optional[list[str]] = None,
    ) -> Optional[FlatRecord]:
        """Return the single matching record projected onto ``fields``.

        ``fields=None`` returns every field of the record.

        Returns:
            The record, or None when nothing matched

        Raises:
            AmbiguousResultError: If more than one record matched
        """
        self.log.debug("Retrieving the Amazon EC2 record")
        self.log.debug(f"  Structure: {structure}")
        self.log.debug(f"  Query: {query}")
        self.log.debug(f"  Fields: {fields}")

        if not validate_fields(fields):
            raise ParseError("Fields must be a list of field names", details={"fields": fields})
        return self.engine.select_single(self._execute(structure, query, parameters), fields)

    def search(
        self,
        structure: str,
        query: Optional[str],
        parameters: Optional[Mapping[str, str]] = None,
        fields: Optional[list[str]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> RecordList:
        """Return every matching record; ``metadata`` is echoed back unchanged."""
        self.log.debug("Searching the Amazon EC2 records")
        self.log.debug(f"  Structure: {structure}")
        self.log.debug(f"  Query: {query}")
        self.log.debug(f"  Fields: {fields}")

        if not validate_fields(fields):
            raise ParseError("Fields must be a list of field names", details={"fields": fields})
        matches = self._execute(structure, query, parameters)
        records = [self.engine.project(record, fields) for record in matches]
        return RecordList(fields=fields, records=records, metadata=dict(metadata or {}))
