"""Planning tree nodes and their structural rules."""
