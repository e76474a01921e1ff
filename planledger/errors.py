"""
Error taxonomy for the planning ledger.

Every domain failure is raised as a subclass of PlanLedgerError carrying a
stable ``kind`` string. The core never maps these to transport codes; the
presentation layer (planledger.main) does that from ``kind``.
"""


class PlanLedgerError(Exception):
    """Base class for all planning ledger failures."""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(PlanLedgerError):
    """A referenced scenario, node or entry does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ReadOnlyScenarioError(PlanLedgerError):
    """A write was attempted against a scenario that is not open for edits."""

    kind = "read_only_scenario"

    def __init__(self, scenario_id: str, reason: str = "scenario is not current"):
        self.scenario_id = scenario_id
        super().__init__(f"Read-only: {reason} ({scenario_id})")


class InvalidHierarchyError(PlanLedgerError):
    """Node type cannot sit at this place in the tree."""

    kind = "invalid_hierarchy"


class InvalidServiceBindingError(PlanLedgerError):
    """service_id presence does not match the entity/container type."""

    kind = "invalid_service_binding"


class CrossScenarioParentError(PlanLedgerError):
    """Parent node belongs to a different scenario than the child."""

    kind = "cross_scenario_parent"


class NonEmptyNodeError(PlanLedgerError):
    """Node still has children or entries attached."""

    kind = "non_empty_node"


class ValidationError(PlanLedgerError):
    """Field-level constraint violated at domain-construction time."""

    kind = "validation_error"


class StorageError(PlanLedgerError):
    """
    The persistence layer failed.

    The original driver exception is kept as ``__cause__``.
    """

    kind = "storage_error"
    retryable = False


class ConflictError(StorageError):
    """
    A storage constraint rejected the write.

    Typically two writers raced on the same entry cell or on the current
    scenario flag. Re-reading and retrying the operation is safe.
    """

    kind = "conflict"
    retryable = True
