"""
Services package for bbox-overlay.
Session state, logging, configuration and event plumbing live here;
the pure ingestion and matching logic lives in bbox_overlay.core.
"""

from .interfaces import IAnnotationSession, IConfigService, IEventBus, ILogger, Events
from .logging_service import LoggingService, LogLevel, NullLogger, MemoryLogger
from .config_service import ConfigService, AppConfig, LoggingConfig
from .event_bus import EventBus, EventData
from .annotation_session import AnnotationSession, IngestionResult
from .container import ServiceContainer, ServiceContainerBuilder, configure_services

__all__ = [
    # Interfaces
    'IAnnotationSession', 'IConfigService', 'IEventBus', 'ILogger', 'Events',

    # Implementations
    'AnnotationSession', 'ConfigService', 'EventBus', 'LoggingService',

    # Value types
    'AppConfig', 'LoggingConfig', 'EventData', 'IngestionResult',

    # Logging utilities
    'LogLevel', 'NullLogger', 'MemoryLogger',

    # Dependency injection
    'ServiceContainer', 'ServiceContainerBuilder', 'configure_services',
]
