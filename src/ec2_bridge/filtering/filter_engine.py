"""
Filter engine for applying resolved qualifications to flattened records.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..constants import WILDCARD
from ..exceptions import AmbiguousResultError, ParseError

FlatRecord = dict[str, Any]

# A double-quoted token; backslash escapes may appear inside it
TOKEN_PATTERN = re.compile(r"\"(?:\\.|[^\"\\])*\"")
# Only the two escapes QualificationParser.encode_parameter writes
ESCAPE_PATTERN = re.compile(r"\\([\\\"])")


@dataclass(frozen=True)
class FilterTerm:
    """One equality constraint. A field of ``*`` matches every record."""

    field: str
    value: Optional[str] = None

    @property
    def is_wildcard(self) -> bool:
        return self.field == WILDCARD


def _unquote(token: str) -> str:
    return ESCAPE_PATTERN.sub(r"\1", token[1:-1])


def remove_indices(records: list[FlatRecord], indices: Iterable[int]) -> None:
    """Delete the given positions from ``records`` in place.

    Positions are removed from the highest to the lowest so that a deletion
    never shifts a position that is still waiting to be removed.
    """
    for index in sorted(set(indices), reverse=True):
        del records[index]


class FilterEngine:
    """Extracts filter terms and reduces record collections with them."""

    def extract_terms(self, resolved: str) -> list[FilterTerm]:
        """Read quoted tokens pairwise into filter terms.

        Args:
            resolved: Qualification with every placeholder already substituted

        Returns:
            Terms in the order they appear

        Raises:
            ParseError: If a field token has no value token after it
        """
        tokens = [_unquote(match.group()) for match in TOKEN_PATTERN.finditer(resolved or "")]

        terms: list[FilterTerm] = []
        position = 0
        while position < len(tokens):
            field = tokens[position]
            if field == WILDCARD:
                terms.append(FilterTerm(field=WILDCARD))
                position += 1
                continue
            if position + 1 >= len(tokens):
                raise ParseError(
                    f"Unable to parse qualification, field '{field}' has no value",
                    details={"qualification": resolved},
                )
            terms.append(FilterTerm(field=field, value=tokens[position + 1]))
            position += 2
        return terms

    def apply(self, terms: Iterable[FilterTerm], records: Iterable[FlatRecord]) -> list[FlatRecord]:
        """Keep the records that satisfy every non-wildcard term.

        Comparison is exact and case sensitive. A record without the field is
        treated as not matching. The input collection is left untouched.
        """
        remaining = list(records)
        for term in terms:
            if term.is_wildcard:
                continue
            mismatched = [
                index
                for index, record in enumerate(remaining)
                if not isinstance(record, dict) or record.get(term.field) != term.value
            ]
            remove_indices(remaining, mismatched)
        return remaining

    def project(self, record: FlatRecord, fields: Optional[list[str]] = None) -> FlatRecord:
        """Restrict a record to ``fields``; fields it lacks come back as None."""
        if fields is None:
            return dict(record)
        return {field: record.get(field) for field in fields}

    def select_single(self, records: list[FlatRecord], fields: Optional[list[str]] = None) -> Optional[FlatRecord]:
        """Return the only record left after filtering.

        Returns:
            The projected record, or None when nothing matched

        Raises:
            AmbiguousResultError: If more than one record matched
        """
        if len(records) > 1:
            raise AmbiguousResultError(
                "Multiple results matched an expected single match query",
                match_count=len(records),
            )
        if not records:
            return None
        return self.project(records[0], fields)
