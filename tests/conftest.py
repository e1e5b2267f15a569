# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import os

import pytest

from fastresource.audit import ActionEventLogger, MemoryEventLogSink
from fastresource.bus import Bus
from fastresource.config import BaseSettings
from fastresource.context import ResourceContext
from fastresource.dependencies import register_service, reset_services
from fastresource.orm import Registry, enable_sqlite_transactions
from fastresource.resources import ResourceRegistry

from tests.app import (
    DATABASE_PATH,
    AuthorResource,
    CommentResource,
    Post,
    PostResource,
    Tag,
    TagResource,
    VideoResource,
    registry,
)


@pytest.fixture(autouse=True)
def services():
    reset_services()
    settings = BaseSettings(log_level="DEBUG", fallback_locale="en")
    register_service(settings, BaseSettings)

    resources = ResourceRegistry()

    for resource_class in (AuthorResource, TagResource, PostResource, CommentResource, VideoResource):
        resources.register(resource_class)

    register_service(resources)

    yield settings

    reset_services()


@pytest.fixture
async def db():
    register_service(registry, Registry)

    async with registry:
        enable_sqlite_transactions(registry.database)
        await registry.create_all()

        try:
            yield registry
        finally:
            await registry.drop_all()

    if os.path.exists(DATABASE_PATH):
        os.remove(DATABASE_PATH)


@pytest.fixture
def sink() -> MemoryEventLogSink:
    return MemoryEventLogSink()


@pytest.fixture
def bus() -> Bus:
    bus = Bus()
    register_service(bus)

    return bus


@pytest.fixture
def event_logger(sink, bus) -> ActionEventLogger:
    return ActionEventLogger(sink=sink, bus=bus)


@pytest.fixture
def context_factory():
    def factory(input=None, user=None, locale=None) -> ResourceContext:
        return ResourceContext(input=input, user=user, locale=locale)

    return factory


@pytest.fixture
async def tags(db) -> list[Tag]:
    return [await Tag.query.create(name=f"tag-{index}") for index in range(1, 8)]


@pytest.fixture
async def post(db) -> Post:
    return await Post.query.create(title="Hello", body="First post")
