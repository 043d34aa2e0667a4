class PatternEvoError(Exception):
    """Base for all patternevo exceptions."""

    pass


# High-level families
class ValidationError(PatternEvoError):
    """Data validation failures."""

    pass


class EvolutionError(PatternEvoError):
    """Evolution process failures."""

    pass


# Validation subtypes
class InvalidConfigurationError(ValidationError):
    """Raised when an evolution configuration or strategy cannot run."""

    pass


# Evolution subtypes
class EvolutionInProgressError(EvolutionError):
    """Raised when evolve() is called while a run is already active."""

    pass


class PopulationInitializationError(EvolutionError):
    """Raised when the initial population cannot be filled."""

    pass


class MutationError(EvolutionError):
    """Mutation failures."""

    pass
