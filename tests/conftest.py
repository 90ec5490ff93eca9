from __future__ import annotations

import pytest

from bbox_overlay.core.registry import ImageSource
from bbox_overlay.services import AnnotationSession, ConfigService, EventBus, MemoryLogger


@pytest.fixture
def logger() -> MemoryLogger:
    return MemoryLogger()


@pytest.fixture
def config_service(logger) -> ConfigService:
    return ConfigService(logger)


@pytest.fixture
def event_bus(logger) -> EventBus:
    return EventBus(logger)


@pytest.fixture
def session(logger, config_service, event_bus) -> AnnotationSession:
    return AnnotationSession(logger, config_service, event_bus)


@pytest.fixture
def sources():
    def build(*names: str):
        return [ImageSource(name=n, byte_size=100 * (i + 1)) for i, n in enumerate(names)]
    return build
