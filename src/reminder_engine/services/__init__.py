"""
Reminder Engine Services

Business logic: queue filling, dispatching, user actions, scheduling.
"""
from .engine_service import EngineService
from .entity_resolvers import EntityResolver, EntityResolverRegistry, ResolvedEntity, TableEntityResolver
from .filler_service import FillerService
from .dispatcher_service import DispatcherService
from .actions import ActionService, ActionResult
from .scheduler_service import SchedulerService

__all__ = [
    'EngineService',
    'EntityResolver',
    'EntityResolverRegistry',
    'ResolvedEntity',
    'TableEntityResolver',
    'FillerService',
    'DispatcherService',
    'ActionService',
    'ActionResult',
    'SchedulerService',
]
