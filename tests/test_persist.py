# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging

import pytest

from fastresource.audit import ActionEventLogger, EventLogSink
from fastresource.context import ResourceContext
from fastresource.exceptions import (
    AttachmentLimitExceeded,
    AuthorizationError,
    InvalidStateTransition,
    PersistenceFailure,
    ValidationError,
)
from fastresource.persist import (
    CreateOperation,
    OperationKind,
    PersistState,
    UpdateOperation,
    can_transition,
    check_transition,
    operation_for,
)
from fastresource.schemas import PersistStatus

from tests.app import LockedPostResource, Post, PostResource, PostTag, pivot_tag_ids


class BrokenSink(EventLogSink):
    async def record(self, entry) -> None:
        raise RuntimeError("disk full")


class RecordingPostResource(PostResource):
    calls: list[str] = []

    async def before_create(self, context, entity):
        self.calls.append(f"before_create:{getattr(entity, 'id', None)}")

    async def after_create(self, context, entity):
        self.calls.append(f"after_create:{getattr(entity, 'id', None)}")


async def test_create_persists_fields_and_relations(db, tags, event_logger, sink):
    context = ResourceContext(input={"title": "Hi", "body": "Text", "tags": [tags[0].id, str(tags[1].id)]})
    operation = CreateOperation(PostResource(), event_logger=event_logger)

    result = await operation.handle(context)

    assert result.status == PersistStatus.COMPLETED
    assert result.status_code == 201
    assert result.successful
    assert operation.state == PersistState.COMPLETED

    post = await Post.query.get(id=result.entity.id)

    assert (post.title, post.body) == ("Hi", "Text")
    assert await pivot_tag_ids(post) == [tags[0].id, tags[1].id]
    assert result.data["title"] == "Hi"
    assert [item["key"] for item in result.data["tags"]] == [tags[0].id, tags[1].id]

    assert len(sink.entries) == 1
    assert sink.entries[0].name == "create"
    assert sink.entries[0].resource == "posts"
    assert sink.entries[0].model_id == post.id
    assert sink.entries[0].changes["title"] == "Hi"


async def test_create_runs_resource_hooks_around_save(db, event_logger):
    RecordingPostResource.calls = []

    await CreateOperation(RecordingPostResource(), event_logger=event_logger).execute(
        ResourceContext(input={"title": "Hooks"})
    )

    post = await Post.query.get(title="Hooks")

    assert RecordingPostResource.calls == ["before_create:None", f"after_create:{post.id}"]


async def test_create_with_pivot_objects(db, tags, event_logger):
    context = ResourceContext(input={"title": "Hi", "tags": [{"id": tags[0].id, "pivot": {"role": "main"}}]})

    post = await CreateOperation(PostResource(), event_logger=event_logger).execute(context)

    row = await PostTag.query.get(post_id=post.id)

    assert (row.tag_id, row.role) == (tags[0].id, "main")


async def test_validation_failure_never_opens_the_transaction(db, event_logger, sink):
    operation = CreateOperation(PostResource(), event_logger=event_logger)

    result = await operation.handle(ResourceContext(input={"body": "No title"}))

    assert result.status == PersistStatus.VALIDATION_FAILED
    assert result.status_code == 422
    assert result.errors == {"title": ["The title field is required."]}
    assert operation.state == PersistState.FAILED
    assert await Post.query.count() == 0
    assert sink.entries == []


async def test_validation_rejects_unknown_related_ids(db, tags, event_logger):
    with pytest.raises(ValidationError) as exc_info:
        await CreateOperation(PostResource(), event_logger=event_logger).execute(
            ResourceContext(input={"title": "Hi", "tags": [tags[0].id, 999]})
        )

    assert "tags" in exc_info.value.errors


async def test_forbidden_create(db, event_logger):
    operation = CreateOperation(LockedPostResource(), event_logger=event_logger)

    result = await operation.handle(ResourceContext(input={"title": "Nope"}))

    assert result.status == PersistStatus.FORBIDDEN
    assert result.status_code == 403
    assert result.message == "This action is unauthorized."
    assert operation.state == PersistState.FAILED
    assert await Post.query.count() == 0

    with pytest.raises(AuthorizationError):
        await CreateOperation(LockedPostResource(), event_logger=event_logger).execute(ResourceContext())


async def test_attachment_limit_rolls_back_the_whole_create(db, tags, event_logger, sink):
    operation = CreateOperation(PostResource(), event_logger=event_logger)
    context = ResourceContext(input={"title": "Hi", "tags": [tag.id for tag in tags[:4]]})

    with pytest.raises(AttachmentLimitExceeded) as exc_info:
        await operation.execute(context)

    assert exc_info.value.to_dict() == {"current": 0, "limit": 3, "attempting": 4}
    assert operation.state == PersistState.FAILED
    assert await Post.query.count() == 0
    assert await PostTag.query.count() == 0
    assert sink.entries == []


async def test_attachment_limit_result(db, tags, event_logger):
    result = await CreateOperation(PostResource(), event_logger=event_logger).handle(
        ResourceContext(input={"title": "Hi", "tags": [tag.id for tag in tags[:4]]})
    )

    assert result.status == PersistStatus.LIMIT_EXCEEDED
    assert result.status_code == 422
    assert result.data == {"current": 0, "limit": 3, "attempting": 4}


async def test_storage_failure_rolls_back_and_hides_the_cause(db, tags, bus, caplog):
    operation = CreateOperation(PostResource(), event_logger=ActionEventLogger(sink=BrokenSink(), bus=bus))
    context = ResourceContext(input={"title": "Hi", "tags": [tags[0].id]})

    with caplog.at_level(logging.ERROR, logger="fastresource.persist"):
        with pytest.raises(PersistenceFailure) as exc_info:
            await operation.execute(context)

    failure = exc_info.value

    assert failure.correlation_id == operation.correlation_id
    assert failure.correlation_id in failure.message
    assert "disk full" not in failure.message
    assert isinstance(failure.__cause__, RuntimeError)
    assert failure.correlation_id in caplog.text
    assert await Post.query.count() == 0
    assert await PostTag.query.count() == 0


async def test_storage_failure_result(db, bus):
    result = await CreateOperation(
        PostResource(),
        event_logger=ActionEventLogger(sink=BrokenSink(), bus=bus),
    ).handle(ResourceContext(input={"title": "Hi"}))

    assert result.status == PersistStatus.FAILED
    assert result.status_code == 500
    assert result.correlation_id is not None


async def test_update_changes_only_submitted_fields(db, post, tags, event_logger, sink):
    await PostTag.query.create(post_id=post.id, tag_id=tags[0].id)

    result = await UpdateOperation(PostResource(), event_logger=event_logger).handle(
        ResourceContext(input={"title": "Updated"}, user=None),
        id=post.id,
    )

    assert result.status == PersistStatus.COMPLETED
    assert result.status_code == 200

    stored = await Post.query.get(id=post.id)

    assert (stored.title, stored.body) == ("Updated", "First post")
    assert await pivot_tag_ids(stored) == [tags[0].id]

    entry = sink.entries[0]

    assert entry.name == "update"
    assert entry.original == {"title": "Hello"}
    assert entry.changes == {"title": "Updated"}


async def test_update_syncs_submitted_relation(db, post, tags, event_logger):
    await PostTag.query.create(post_id=post.id, tag_id=tags[0].id)

    await UpdateOperation(PostResource(), event_logger=event_logger).execute(
        ResourceContext(input={"tags": [tags[1].id, tags[2].id]}),
        id=post.id,
    )

    assert await pivot_tag_ids(post) == [tags[1].id, tags[2].id]


async def test_update_without_required_field_keeps_stored_value(db, post, tags, event_logger):
    await UpdateOperation(PostResource(), event_logger=event_logger).execute(
        ResourceContext(input={"tags": [tags[0].id, {"id": tags[1].id, "pivot": {"role": "editor"}}]}),
        id=post.id,
    )

    stored = await Post.query.get(id=post.id)
    editor = await PostTag.query.get(post_id=post.id, tag_id=tags[1].id)

    assert stored.title == "Hello"
    assert await pivot_tag_ids(stored) == [tags[0].id, tags[1].id]
    assert editor.role == "editor"


async def test_update_still_checks_submitted_required_field(db, post, event_logger):
    result = await UpdateOperation(PostResource(), event_logger=event_logger).handle(
        ResourceContext(input={"title": ""}),
        id=post.id,
    )

    assert result.status == PersistStatus.VALIDATION_FAILED
    assert result.errors == {"title": ["The title field is required."]}
    assert (await Post.query.get(id=post.id)).title == "Hello"


async def test_create_still_requires_required_field(db, event_logger):
    result = await CreateOperation(PostResource(), event_logger=event_logger).handle(ResourceContext(input={"body": "x"}))

    assert result.status == PersistStatus.VALIDATION_FAILED
    assert result.errors == {"title": ["The title field is required."]}


async def test_each_request_gets_its_own_batch(db, event_logger, sink):
    first = CreateOperation(PostResource(), event_logger=event_logger)
    second = CreateOperation(PostResource(), event_logger=event_logger)

    await first.execute(ResourceContext(input={"title": "One"}))
    await second.execute(ResourceContext(input={"title": "Two"}))

    assert first.batch_id != second.batch_id
    assert [entry.batch_id for entry in sink.entries] == [first.batch_id, second.batch_id]


async def test_operations_of_one_request_share_a_batch(db, post, event_logger, sink):
    context = ResourceContext(input={"title": "Shared"})
    create = CreateOperation(PostResource(), event_logger=event_logger)
    update = UpdateOperation(PostResource(), event_logger=event_logger)

    await create.execute(context)
    context.validated = None
    await update.execute(context, id=post.id)

    assert create.batch_id == update.batch_id
    assert {entry.batch_id for entry in sink.entries} == {create.batch_id}


async def test_update_of_missing_entity(db, event_logger):
    operation = UpdateOperation(PostResource(), event_logger=event_logger)

    result = await operation.handle(ResourceContext(input={"title": "x"}), id=404)

    assert result.status == PersistStatus.NOT_FOUND
    assert result.status_code == 404
    assert operation.state == PersistState.FAILED


async def test_operation_runs_once(db, event_logger):
    operation = CreateOperation(PostResource(), event_logger=event_logger)
    await operation.execute(ResourceContext(input={"title": "Once"}))

    with pytest.raises(InvalidStateTransition):
        await operation.execute(ResourceContext(input={"title": "Twice"}))

    assert await Post.query.count() == 1


def test_state_machine_transitions():
    assert can_transition(PersistState.INITIALIZED, PersistState.AUTHORIZED)
    assert can_transition(PersistState.SAVED, PersistState.SYNCED)
    assert can_transition(PersistState.FILLED, PersistState.FAILED)
    assert not can_transition(PersistState.INITIALIZED, PersistState.SAVED)
    assert not can_transition(PersistState.COMPLETED, PersistState.FAILED)
    assert not can_transition(PersistState.FAILED, PersistState.AUTHORIZED)

    with pytest.raises(InvalidStateTransition):
        check_transition(PersistState.VALIDATED, PersistState.LOGGED)


def test_operation_for_kind():
    assert isinstance(operation_for(OperationKind.CREATE, PostResource()), CreateOperation)
    assert isinstance(operation_for(OperationKind.UPDATE, PostResource()), UpdateOperation)
