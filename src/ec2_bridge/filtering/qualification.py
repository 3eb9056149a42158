"""
Qualification parser: resolves parameter placeholders in a query expression.
"""

import re
from collections.abc import Mapping
from typing import Optional

from ..exceptions import ParseError

# <%=parameter["Instance Id"]%>, whitespace allowed inside the delimiters
PLACEHOLDER_PATTERN = re.compile(r"<%=\s*parameter\[\s*\"(?P<name>(?:\\.|[^\"\\])*)\"\s*\]\s*%>")


class QualificationParser:
    """Substitutes bound parameter values into a qualification expression.

    The parser knows nothing about terms or quoting rules beyond making sure
    a substituted value cannot terminate the quoted token it lands in.
    """

    def parse(self, expression: Optional[str], bindings: Optional[Mapping[str, str]] = None) -> str:
        """Resolve every placeholder in ``expression`` in a single pass.

        Substituted text is never scanned again, so a bound value that itself
        looks like a placeholder is inserted literally.

        Args:
            expression: Qualification expression, possibly with placeholders
            bindings: Parameter name to value mapping

        Returns:
            The resolved expression

        Raises:
            ParseError: If a placeholder names a parameter missing from ``bindings``
        """
        if not expression:
            return ""
        bindings = bindings or {}

        def substitute(match: re.Match) -> str:
            name = match.group("name")
            if name not in bindings:
                raise ParseError(
                    f"Unable to parse qualification, the '{name}' parameter was referenced but not provided",
                    details={"parameter": name},
                )
            return self.encode_parameter(name, bindings[name])

        return PLACEHOLDER_PATTERN.sub(substitute, expression)

    def encode_parameter(self, name: str, value: Optional[str]) -> str:
        """Escape a bound value so it stays inside its quoted token."""
        if value is None:
            return ""
        return str(value).replace("\\", "\\\\").replace('"', '\\"')
