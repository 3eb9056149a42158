"""EC2 API client for DescribeInstances-style queries."""

import logging

from ..constants import NEXT_TOKEN_PARAM
from ..exceptions import MalformedResponseError
from ..filtering import FlatRecord
from .base import SignedQueryClient
from .responses import extract_records, next_token, parse_document

logger = logging.getLogger(__name__)

# Upper bound on nextToken pages followed for one logical query
MAX_PAGES = 100


class EC2Client(SignedQueryClient):
    """Client for Amazon EC2 instance inventory."""

    def get_action(self) -> str:
        """Return the configured action, normally DescribeInstances."""
        return self.config.action

    def describe_instances(self) -> list[FlatRecord]:
        """Fetch every instance visible to the configured credentials.

        Follows ``nextToken`` until EC2 stops returning one, so callers see
        the complete reservation list.

        Returns:
            One flat record per instance

        Raises:
            TransportError: If a page cannot be fetched
            MalformedResponseError: If a page does not have the expected shape or
                pagination does not end within MAX_PAGES pages
        """
        records: list[FlatRecord] = []
        params: dict[str, str] = {}

        for page in range(1, MAX_PAGES + 1):
            response = parse_document(self.execute_signed_query(params))
            page_records = extract_records(response)
            records.extend(page_records)

            token = next_token(response)
            logger.debug(f"{self.get_action()} page {page}: {len(page_records)} records, more={bool(token)}")
            if not token:
                break
            params = {NEXT_TOKEN_PARAM: token}
        else:
            logger.error(f"{self.get_action()} still returned a nextToken after {MAX_PAGES} pages")
            raise MalformedResponseError(
                f"Amazon EC2 kept paginating after {MAX_PAGES} pages",
                details={"pages": MAX_PAGES, "records": len(records)},
            )

        return records
