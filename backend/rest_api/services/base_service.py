"""
Base Service Class for domain services.

Provides the plumbing every domain service shares: the session, lookups
that raise NotFoundError, read-only field rejection and change detection
for partial updates.

Architecture:
    Router (thin) → Service (business logic, authorization) → Model

Usage:
    from rest_api.services.base_service import BaseService

    class AreaService(BaseService[Area]):
        def __init__(self, db: Session):
            super().__init__(db, Area, entity_name="Area")
"""

from __future__ import annotations

import uuid
from typing import Any, Generic, Iterable, Mapping, Type, TypeVar

from sqlalchemy.orm import Session

from rest_api.models import Base
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import NotFoundError, ReadOnlyFieldError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseService(Generic[ModelT]):
    """
    Common infrastructure for domain services.

    Subclasses implement specific business logic; every write they perform
    goes through the permission layer before it is flushed.
    """

    def __init__(self, db: Session, model: Type[ModelT], entity_name: str):
        self._db = db
        self._model = model
        self._entity_name = entity_name

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    @property
    def entity_name(self) -> str:
        return self._entity_name

    def find(self, entity_id: uuid.UUID | None) -> ModelT | None:
        """Load by primary key, None when missing."""
        if entity_id is None:
            return None
        return self._db.get(self._model, entity_id)

    def get_or_404(self, entity_id: uuid.UUID, field: str | None = None) -> ModelT:
        """
        Load by primary key.

        Raises:
            NotFoundError: If no row has this ID.
        """
        entity = self.find(entity_id)
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id, field=field)
        return entity

    def reject_read_only(self, data: Mapping[str, Any], fields: Iterable[str]) -> None:
        """Raise ReadOnlyFieldError if ``data`` names any of ``fields``."""
        for field in sorted(set(fields).intersection(data)):
            raise ReadOnlyFieldError(field, entity=self._entity_name)

    @staticmethod
    def changed_fields(entity: Any, data: Mapping[str, Any]) -> set[str]:
        """Fields in ``data`` whose value differs from the entity's."""
        return {key for key, value in data.items() if getattr(entity, key) != value}

    @staticmethod
    def apply(entity: Any, data: Mapping[str, Any]) -> None:
        for key, value in data.items():
            setattr(entity, key, value)

    def commit(self) -> None:
        safe_commit(self._db)
