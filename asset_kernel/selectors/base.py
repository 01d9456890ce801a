"""
Module: asset_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(), delete(),
      commit() or flush().
    - DTO return convention: selectors return frozen dataclasses, never ORM rows.
    - Scope filtering: every list takes an AccessScope and applies its team
      filter, so a team-scoped result is always a subset of the
      full-visibility result.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from asset_kernel.db.base import Base
from asset_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """Abstract base class for all selectors."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
