"""
Shared Domain Kernel

Contains exceptions and helpers shared across all bounded contexts.
"""

from tunez.domain.shared.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    EntityNotFoundError,
    InvalidOperationError,
    PersistenceError,
    PlayerNotConnectedError,
    PlayerStartError,
    QueueError,
)

__all__ = [
    "DomainError",
    "EntityNotFoundError",
    "BusinessRuleViolationError",
    "InvalidOperationError",
    "QueueError",
    "PlayerStartError",
    "PlayerNotConnectedError",
    "PersistenceError",
]
