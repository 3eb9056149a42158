"""
EC2 Bridge Filtering Module

Resolves qualification expressions and reduces DescribeInstances records
to the ones that match.

Key Components:
- QualificationParser: parameter placeholder substitution
- FilterEngine: term extraction, matching, projection
- FilterTerm: one field="value" constraint

Usage:
    from ec2_bridge.filtering import FilterEngine, QualificationParser

    resolved = QualificationParser().parse('"instanceId"="<%=parameter["Id"]%>"', {"Id": "i-1"})
    engine = FilterEngine()
    matches = engine.apply(engine.extract_terms(resolved), records)
"""

from .filter_engine import FilterEngine, FilterTerm, FlatRecord, remove_indices
from .qualification import QualificationParser

__all__ = [
    "FilterEngine",
    "FilterTerm",
    "FlatRecord",
    "QualificationParser",
    "remove_indices",
]
