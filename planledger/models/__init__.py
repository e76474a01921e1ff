"""
Consolidated models package.

Importing this package registers every table on Base.metadata, which
migrations and test fixtures rely on.

IMPORTANT: Explicit imports only - no wildcards to prevent circular imports.
"""

# Reference data
from planledger.catalog.models import AccountType, AccountItem, Service

# Scenarios
from planledger.scenarios.models import Scenario

# Planning tree
from planledger.nodes.types import NodeType
from planledger.nodes.models import PlanNode

# Entries and history
from planledger.entries.models import EntryCategory, ChangeType, PlEntry, PlEntryHistory


__all__ = [
    # Catalog
    "AccountType",
    "AccountItem",
    "Service",
    # Scenarios
    "Scenario",
    # Nodes
    "NodeType",
    "PlanNode",
    # Entries
    "EntryCategory",
    "ChangeType",
    "PlEntry",
    "PlEntryHistory",
]
