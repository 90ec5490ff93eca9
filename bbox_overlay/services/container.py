"""
Dependency injection container for bbox-overlay.
Builds services from their constructor type hints.
"""

from __future__ import annotations

from typing import (
    Any,
    Callable,
    Dict,
    Optional,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)
from pathlib import Path
import inspect
import sys
from dataclasses import dataclass

from .interfaces import IAnnotationSession, IConfigService, IEventBus, ILogger
from .annotation_session import AnnotationSession
from .config_service import ConfigService
from .event_bus import EventBus
from .logging_service import LoggingService, LogLevel, NullLogger

T = TypeVar("T")


@dataclass
class ServiceRegistration:
    """Registration information for a service."""

    service_type: Type
    implementation: Optional[Type]
    singleton: bool = True
    factory: Optional[Callable] = None


class ServiceContainer:
    """Dependency injection container."""

    def __init__(self):
        self._registrations: Dict[str, ServiceRegistration] = {}
        self._instances: Dict[str, Any] = {}
        self._building: set[str] = set()

    # ------------------------------------------------------------------
    # Registration helpers
    # ------------------------------------------------------------------
    def register_singleton(self, service_type: Type[T], implementation: Type[T]) -> "ServiceContainer":
        key = self._get_service_key(service_type)
        self._registrations[key] = ServiceRegistration(service_type, implementation, singleton=True)
        return self

    def register_factory(self, service_type: Type[T], factory: Callable[..., T],
                         singleton: bool = True) -> "ServiceContainer":
        key = self._get_service_key(service_type)
        self._registrations[key] = ServiceRegistration(service_type, None, singleton, factory)
        return self

    def register_instance(self, service_type: Type[T], instance: T) -> "ServiceContainer":
        self._instances[self._get_service_key(service_type)] = instance
        return self

    # ------------------------------------------------------------------
    # Resolution API
    # ------------------------------------------------------------------
    def get(self, service_type: Type[T]) -> T:
        key = self._get_service_key(service_type)

        if key in self._instances:
            return self._instances[key]

        if key not in self._registrations:
            raise ValueError(f"Service {service_type.__name__} is not registered")

        if key in self._building:
            raise ValueError(f"Circular dependency detected for service {service_type.__name__}")

        registration = self._registrations[key]
        try:
            self._building.add(key)
            target = registration.factory or registration.implementation
            instance = self._build(target)
            if registration.singleton:
                self._instances[key] = instance
            return instance
        finally:
            self._building.discard(key)

    def _build(self, target: Callable) -> Any:
        init = target.__init__ if inspect.isclass(target) else target
        module = sys.modules.get(target.__module__)
        globalns = vars(module) if module else {}
        try:
            type_hints = get_type_hints(init, globalns=globalns)
        except (NameError, TypeError):
            type_hints = {}

        kwargs: Dict[str, Any] = {}
        for param_name, param in inspect.signature(init).parameters.items():
            if param_name == "self":
                continue
            dependency_type = self._resolve_annotation(type_hints.get(param_name, param.annotation))
            if dependency_type is None or not self.is_registered(dependency_type):
                if param.default is inspect.Parameter.empty:
                    raise ValueError(
                        f"Cannot resolve dependency {param_name!r} for {getattr(target, '__name__', target)}"
                    )
                continue
            kwargs[param_name] = self.get(dependency_type)
        return target(**kwargs)

    def _resolve_annotation(self, annotation: Any) -> Optional[Type]:
        """Reduce Optional[X] to X; anything else must be a plain class."""
        if annotation is inspect.Parameter.empty or annotation is None or annotation is Any:
            return None

        origin = get_origin(annotation)
        if origin is None:
            return annotation if isinstance(annotation, type) else None

        if origin is Union:
            resolved = [
                self._resolve_annotation(arg)
                for arg in get_args(annotation)
                if arg is not type(None)  # noqa: E721
            ]
            resolved = [arg for arg in resolved if arg is not None]
            if len(resolved) == 1:
                return resolved[0]
        return None

    # ------------------------------------------------------------------
    # Registry helpers
    # ------------------------------------------------------------------
    def _get_service_key(self, service_type: Type) -> str:
        if not hasattr(service_type, "__module__") or not hasattr(service_type, "__name__"):
            raise TypeError(f"Service key expects a type, got {service_type!r}")
        return f"{service_type.__module__}.{service_type.__name__}"

    def is_registered(self, service_type: Type) -> bool:
        try:
            key = self._get_service_key(service_type)
        except TypeError:
            return False
        return key in self._registrations or key in self._instances



class ServiceContainerBuilder:
    """Builder for configuring the service container."""

    def __init__(self):
        self._container = ServiceContainer()
        self._log_file: Optional[Path] = None
        self._console_level: Optional[LogLevel] = None
        self._config_file: Optional[Path] = None

    def configure_logging(self, log_file: Optional[Path] = None,
                          console_level: Optional[LogLevel] = None) -> "ServiceContainerBuilder":
        self._log_file = log_file
        self._console_level = console_level
        return self

    def configure_config(self, config_file: Optional[Path] = None) -> "ServiceContainerBuilder":
        self._config_file = config_file
        return self

    def add_instance(self, service_type: Type[T], instance: T) -> "ServiceContainerBuilder":
        self._container.register_instance(service_type, instance)
        return self

    def build(self) -> ServiceContainer:
        container = self._container
        config_file = self._config_file
        log_file = self._log_file
        console_override = self._console_level

        if not container.is_registered(ILogger):
            def logger_factory() -> ILogger:
                config = ConfigService(NullLogger(), config_file).config
                console = console_override or config.logging.console_level
                return LoggingService("bbox_overlay", log_file, console, config.logging.file_level)
            container.register_factory(ILogger, logger_factory)

        if not container.is_registered(IConfigService):
            def config_factory(logger: ILogger) -> IConfigService:
                return ConfigService(logger, config_file)
            container.register_factory(IConfigService, config_factory)

        if not container.is_registered(IEventBus):
            container.register_singleton(IEventBus, EventBus)
        if not container.is_registered(IAnnotationSession):
            container.register_singleton(IAnnotationSession, AnnotationSession)
        return container


def configure_services(log_file: Optional[Path] = None, config_file: Optional[Path] = None,
                       console_level: Optional[LogLevel] = None) -> ServiceContainer:
    return (
        ServiceContainerBuilder()
        .configure_logging(log_file, console_level)
        .configure_config(config_file)
        .build()
    )
