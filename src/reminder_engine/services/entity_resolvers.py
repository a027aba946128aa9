"""
Entity Resolvers

Due-time lookup for rules that do not embed their due time.
Each source application registers one resolver under its app tag;
the filler asks the registry and never branches on the app itself.
"""
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from ..storage.base import BaseStorage

logger = logging.getLogger("reminders.services.entity_resolvers")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


@dataclass
class ResolvedEntity:
    """Title and due time of an application entity"""
    title: str
    due_at: datetime


class EntityResolver(ABC):
    """Resolves an entity id of one application"""

    @abstractmethod
    async def resolve(self, entity_id: str) -> Optional[ResolvedEntity]:
        """
        Look up an entity.

        Returns None when the entity does not apply (deleted, no due time,
        wrong lifecycle state). Lookup failures raise.
        """
        ...


class TableEntityResolver(EntityResolver):
    """Reads title and due_at of live rows from an application table"""

    def __init__(
        self,
        storage: BaseStorage,
        table: str,
        title_column: str = "title",
        due_column: str = "due_at",
    ):
        for name in (table, title_column, due_column):
            if not _IDENTIFIER_RE.match(name):
                raise ValueError(f"Invalid SQL identifier: {name}")
        self.storage = storage
        self.query = (
            f"SELECT {title_column} AS title, {due_column} AS due_at "
            f"FROM {table} WHERE id::text = $1"
        )

    async def resolve(self, entity_id: str) -> Optional[ResolvedEntity]:
        row = await self.storage.fetchrow(self.query, entity_id)
        if not row or row["due_at"] is None:
            return None
        return ResolvedEntity(title=row["title"] or "", due_at=row["due_at"])


class EntityResolverRegistry:
    """
    Registry of resolvers keyed by application tag.

    Usage:
        registry = EntityResolverRegistry()
        registry.register("tasks", TableEntityResolver(storage, "tasks"))
        entity = await registry.resolve("tasks", "42")
    """

    def __init__(self):
        self._resolvers: Dict[str, EntityResolver] = {}

    def register(self, app: str, resolver: EntityResolver):
        """Register a resolver for an application tag"""
        self._resolvers[app] = resolver
        logger.info(f"Registered entity resolver: {app}")

    def get(self, app: str) -> Optional[EntityResolver]:
        return self._resolvers.get(app)

    async def resolve(self, app: str, entity_id: str) -> Optional[ResolvedEntity]:
        """Resolve an entity; unknown apps resolve to None"""
        resolver = self._resolvers.get(app)
        if resolver is None:
            logger.debug(f"No entity resolver for app '{app}'")
            return None
        return await resolver.resolve(entity_id)

    @property
    def available_apps(self) -> List[str]:
        return list(self._resolvers.keys())

    def __len__(self) -> int:
        return len(self._resolvers)
