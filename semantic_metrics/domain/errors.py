"""Domain errors."""


class DomainError(Exception):
    """Base domain error."""


class ConfigurationError(DomainError):
    """Invalid semantic model or query configuration."""


class UnknownReferenceError(ConfigurationError):
    """A metric, dimension, fact table or transform name is not registered."""


class CyclicDependencyError(ConfigurationError):
    """Metric dependency graph contains a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        """Initialize with the metric names forming the cycle."""
        self.cycle = list(cycle)
        super().__init__(f"Cyclic metric dependency: {' -> '.join(self.cycle)}")


class InvalidFilterError(ConfigurationError):
    """Filter value does not have a supported shape."""


class EvaluationError(DomainError):
    """Metric evaluation produced an unusable value."""
