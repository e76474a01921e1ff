"""
Plan node types and the structural rules between them.

Container types (initiative, project, sub_project) organise children and
never hold entries. Entity types (job, adjustment_buffer) hold entries
directly, must be bound to a service, and sit at the leaves.

    initiative -> project
    project    -> sub_project | job | adjustment_buffer
    sub_project-> sub_project | job | adjustment_buffer
"""
import enum
from typing import Dict, FrozenSet, Union


class NodeType(str, enum.Enum):
    """Kind of node in the planning tree."""
    INITIATIVE = "initiative"
    PROJECT = "project"
    SUB_PROJECT = "sub_project"
    JOB = "job"
    ADJUSTMENT_BUFFER = "adjustment_buffer"


_LEAF_CHILDREN = frozenset({NodeType.SUB_PROJECT, NodeType.JOB, NodeType.ADJUSTMENT_BUFFER})

# parent type -> child types it may hold
ALLOWED_CHILDREN: Dict[NodeType, FrozenSet[NodeType]] = {
    NodeType.INITIATIVE: frozenset({NodeType.PROJECT}),
    NodeType.PROJECT: _LEAF_CHILDREN,
    NodeType.SUB_PROJECT: _LEAF_CHILDREN,
    NodeType.JOB: frozenset(),
    NodeType.ADJUSTMENT_BUFFER: frozenset(),
}

ROOT_TYPES = frozenset({NodeType.INITIATIVE})
ENTITY_TYPES = frozenset({NodeType.JOB, NodeType.ADJUSTMENT_BUFFER})


def can_be_child_of(child_type: Union[NodeType, str], parent_type: Union[NodeType, str]) -> bool:
    """Whether a node of ``child_type`` may be placed under ``parent_type``."""
    return NodeType(child_type) in ALLOWED_CHILDREN[NodeType(parent_type)]


def can_be_root(node_type: Union[NodeType, str]) -> bool:
    """Only initiatives may sit at the top of a tree."""
    return NodeType(node_type) in ROOT_TYPES


def is_entity(node_type: Union[NodeType, str]) -> bool:
    """Entity nodes hold entries and require a service_id."""
    return NodeType(node_type) in ENTITY_TYPES
