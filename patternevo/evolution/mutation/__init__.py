from patternevo.evolution.mutation.base import Mutation, MutationOperator, MutationType
from patternevo.evolution.mutation.operators import (
    GuidedMutation,
    HybridMutation,
    RandomMutation,
    build_mutation_operator,
)

__all__ = [
    "GuidedMutation",
    "HybridMutation",
    "Mutation",
    "MutationOperator",
    "MutationType",
    "RandomMutation",
    "build_mutation_operator",
]
