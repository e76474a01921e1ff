"""
Tests for the node type table: which types may nest under which, which may
be roots and which hold entries.
"""
import itertools

import pytest

from planledger.nodes.types import (
    ALLOWED_CHILDREN,
    NodeType,
    can_be_child_of,
    can_be_root,
    is_entity,
)

ALLOWED_PAIRS = {
    (NodeType.PROJECT, NodeType.INITIATIVE),
    (NodeType.SUB_PROJECT, NodeType.PROJECT),
    (NodeType.JOB, NodeType.PROJECT),
    (NodeType.ADJUSTMENT_BUFFER, NodeType.PROJECT),
    (NodeType.SUB_PROJECT, NodeType.SUB_PROJECT),
    (NodeType.JOB, NodeType.SUB_PROJECT),
    (NodeType.ADJUSTMENT_BUFFER, NodeType.SUB_PROJECT),
}


class TestCanBeChildOf:

    @pytest.mark.parametrize("child,parent", list(itertools.product(NodeType, NodeType)))
    def test_matches_table(self, child, parent):
        assert can_be_child_of(child, parent) == ((child, parent) in ALLOWED_PAIRS)

    def test_accepts_plain_strings(self):
        assert can_be_child_of("job", "sub_project")
        assert not can_be_child_of("initiative", "project")

    def test_entities_have_no_children(self):
        assert ALLOWED_CHILDREN[NodeType.JOB] == frozenset()
        assert ALLOWED_CHILDREN[NodeType.ADJUSTMENT_BUFFER] == frozenset()

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            can_be_child_of("department", "project")


class TestRootAndEntity:

    def test_only_initiative_is_root(self):
        assert [t for t in NodeType if can_be_root(t)] == [NodeType.INITIATIVE]

    def test_entity_types(self):
        assert {t for t in NodeType if is_entity(t)} == {NodeType.JOB, NodeType.ADJUSTMENT_BUFFER}

    def test_containers_are_not_entities(self):
        for node_type in ("initiative", "project", "sub_project"):
            assert not is_entity(node_type)
