# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import pytest

from fastresource.attachments import (
    AttachmentServiceRegistry,
    BelongsToManyAttachmentService,
    HasManyAttachmentService,
    MorphManyAttachmentService,
    MorphToManyAttachmentService,
    filter_pivot_data,
    handle_attachment,
    is_keyed_by_id,
    pivot_data_by_id,
)
from fastresource.bus import RelationSynced
from fastresource.context import ResourceContext
from fastresource.dependencies import get_service
from fastresource.exceptions import AttachmentLimitExceeded, UnsupportedOperation
from fastresource.fields import BelongsTo, BelongsToMany

from tests.app import (
    Comment,
    LockedPostResource,
    Post,
    PostResource,
    PostTag,
    Tag,
    TagResource,
    Taggable,
    Video,
    VideoResource,
    pivot_tag_ids,
)


def service_for(resource, key, parent):
    context = ResourceContext()
    field = resource.get_field(key, context)

    return get_service(AttachmentServiceRegistry).for_field(field, parent, context)


def test_pivot_data_is_filtered_to_declared_columns():
    assert filter_pivot_data({"role": "editor", "is_admin": True}, ["role"]) == {"role": "editor"}
    assert filter_pivot_data(None, ["role"]) == {}


@pytest.mark.parametrize(
    "pivot_data, expected",
    [
        ({5: {"role": "editor"}}, True),
        ({"5": {"role": "editor"}, "6": {}}, True),
        ({"role": "editor"}, False),
        ({5: "editor"}, False),
        ({5: {"role": "editor"}, "role": {}}, False),
        ({}, False),
        (None, False),
    ],
)
def test_keyed_by_id_detection(pivot_data, expected):
    assert is_keyed_by_id(pivot_data, ["role"]) is expected


def test_pivot_data_by_id():
    assert pivot_data_by_id([5, 6], {"5": {"role": "editor", "x": 1}}, ["role"]) == {5: {"role": "editor"}, 6: {}}
    assert pivot_data_by_id([5, 6], {"role": "viewer", "x": 1}, ["role"]) == {
        5: {"role": "viewer"},
        6: {"role": "viewer"},
    }


def test_registry_dispatches_on_relation_kind():
    registry = get_service(AttachmentServiceRegistry)
    post = Post(id=1)

    assert isinstance(service_for(PostResource(), "tags", post), BelongsToManyAttachmentService)
    assert isinstance(service_for(PostResource(), "comments", post), HasManyAttachmentService)
    assert isinstance(service_for(PostResource(), "labels", post), MorphToManyAttachmentService)
    assert isinstance(service_for(VideoResource(), "comments", Video(id=1)), MorphManyAttachmentService)

    with pytest.raises(UnsupportedOperation):
        registry.for_field(BelongsTo("Post", "post", model=Post), Comment(), None)


async def test_attach_is_idempotent(db, post, tags):
    service = service_for(PostResource(), "tags", post)

    first = await service.attach([tags[0].id, tags[1].id])
    second = await service.attach([tags[0].id, tags[1].id])

    assert first.attached == [tags[0].id, tags[1].id]
    assert first.already_attached == 0
    assert second.attached == []
    assert second.already_attached == 2
    assert await pivot_tag_ids(post) == [tags[0].id, tags[1].id]


async def test_attach_reports_missing_ids(db, post, tags):
    result = await service_for(PostResource(), "tags", post).attach([tags[0].id, 999])

    assert result.attached == [tags[0].id]
    assert result.not_found == [999]


async def test_attach_limit_leaves_membership_untouched(db, post, tags):
    service = service_for(PostResource(), "tags", post)
    await service.attach([tags[0].id, tags[1].id])

    with pytest.raises(AttachmentLimitExceeded) as exc_info:
        await service.attach([tags[2].id, tags[3].id])

    assert exc_info.value.to_dict() == {"current": 2, "limit": 3, "attempting": 2}
    assert await pivot_tag_ids(post) == [tags[0].id, tags[1].id]


async def test_attach_limit_envelope(db, post, tags):
    service = service_for(PostResource(), "tags", post)

    envelope = await service.handle("attach", ids=[tag.id for tag in tags[:4]])

    assert not envelope.success
    assert envelope.data == {"current": 0, "limit": 3, "attempting": 4}
    assert await pivot_tag_ids(post) == []


async def test_attach_at_full_limit_reports_already_attached(db, post, tags):
    service = service_for(PostResource(), "tags", post)
    ids = [tag.id for tag in tags[:3]]
    await service.attach(ids)

    result = await service.attach(ids)

    assert result.attached == []
    assert result.already_attached == 3
    assert await pivot_tag_ids(post) == ids


async def test_attach_limit_counts_new_ids_only(db, post, tags):
    service = service_for(PostResource(), "tags", post)
    await service.attach([tags[0].id, tags[1].id])

    result = await service.attach([tags[0].id, tags[2].id])

    assert result.attached == [tags[2].id]
    assert result.already_attached == 1

    with pytest.raises(AttachmentLimitExceeded) as exc_info:
        await service.attach([tags[0].id, tags[3].id])

    assert exc_info.value.to_dict() == {"current": 3, "limit": 3, "attempting": 1}
    assert await pivot_tag_ids(post) == [tags[0].id, tags[1].id, tags[2].id]


async def test_attach_writes_declared_pivot_columns_only(db, post, tags):
    service = service_for(PostResource(), "tags", post)

    await service.attach([tags[0].id], {"role": "editor", "is_admin": True})

    row = await PostTag.query.get(post_id=post.id, tag_id=tags[0].id)

    assert row.role == "editor"
    assert "is_admin" not in row.model_dump()


async def test_attach_with_pivot_keyed_by_id(db, post, tags):
    service = service_for(PostResource(), "tags", post)

    await service.attach([tags[0].id, tags[1].id], {tags[0].id: {"role": "owner"}})

    rows = {row.tag_id: row.role for row in await PostTag.query.filter(post_id=post.id).all()}

    assert rows == {tags[0].id: "owner", tags[1].id: None}


async def test_detach_removes_pivot_rows_only(db, post, tags):
    service = service_for(PostResource(), "tags", post)
    await service.attach([tags[0].id, tags[1].id])

    result = await service.detach([tags[0].id, tags[5].id])

    assert result.detached == 1
    assert await pivot_tag_ids(post) == [tags[1].id]
    assert await Tag.query.count() == len(tags)


async def test_sync_computes_change_set(db, post, tags, bus):
    tag_5, tag_6, tag_7 = tags[4], tags[5], tags[6]
    await PostTag.query.create(post_id=post.id, tag_id=tag_6.id)
    await PostTag.query.create(post_id=post.id, tag_id=tag_7.id)
    events = []
    bus.register(RelationSynced, events.append)

    changes = await service_for(PostResource(), "tags", post).sync(
        [tag_5.id, tag_6.id],
        {tag_5.id: {"role": "editor"}},
    )

    assert changes.attached == [tag_5.id]
    assert changes.detached == [tag_7.id]
    assert changes.updated == []
    assert await pivot_tag_ids(post) == [tag_5.id, tag_6.id]
    assert (await PostTag.query.get(post_id=post.id, tag_id=tag_5.id)).role == "editor"
    assert len(events) == 1
    assert events[0].change_set == changes


async def test_sync_reports_changed_pivot_data_as_updated(db, post, tags):
    await PostTag.query.create(post_id=post.id, tag_id=tags[0].id, role="viewer")
    await PostTag.query.create(post_id=post.id, tag_id=tags[1].id, role="editor")

    changes = await service_for(PostResource(), "tags", post).sync(
        [tags[0].id, tags[1].id],
        {tags[0].id: {"role": "editor"}, tags[1].id: {"role": "editor"}},
    )

    assert changes.updated == [tags[0].id]
    assert changes.attached == []
    assert changes.detached == []


async def test_sync_without_detaching_keeps_current_members(db, post, tags):
    await PostTag.query.create(post_id=post.id, tag_id=tags[0].id)

    changes = await service_for(PostResource(), "tags", post).sync([tags[1].id], detaching=False)

    assert changes.detached == []
    assert await pivot_tag_ids(post) == [tags[0].id, tags[1].id]


async def test_sync_limit_uses_requested_size_only(db, post, tags):
    service = service_for(PostResource(), "tags", post)
    await service.attach([tags[0].id, tags[1].id, tags[2].id])

    changes = await service.sync([tags[3].id, tags[4].id, tags[5].id])

    assert sorted(changes.detached) == [tags[0].id, tags[1].id, tags[2].id]

    with pytest.raises(AttachmentLimitExceeded) as exc_info:
        await service.sync([tag.id for tag in tags[:4]])

    assert exc_info.value.attempting == 4
    assert await pivot_tag_ids(post) == [tags[3].id, tags[4].id, tags[5].id]


async def test_sync_is_not_supported_by_foreign_key_relations(db, post):
    service = service_for(PostResource(), "comments", post)

    with pytest.raises(UnsupportedOperation):
        await service.sync([1])

    envelope = await service.handle("sync", ids=[1])

    assert not envelope.success
    assert envelope.message == "The sync operation is not supported for has_many relations."


async def test_list_attachable_excludes_attached_and_searches(db, post, tags):
    service = service_for(PostResource(), "tags", post)
    await service.attach([tags[0].id])

    page = await service.list_attachable(per_page=2)

    assert [item.id for item in page.items] == [tags[1].id, tags[2].id]
    assert page.items[0].label == "tag-2"
    assert page.meta.model_dump() == {
        "current_page": 1,
        "last_page": 3,
        "per_page": 2,
        "total": 6,
        "attached_count": 1,
        "attachable_limit": 3,
    }

    searched = await service.list_attachable(search="TAG-7")

    assert [item.id for item in searched.items] == [tags[6].id]


async def test_list_attachable_caps_page_size(db, post, tags, services):
    services.attachment_max_per_page = 4
    page = await service_for(PostResource(), "tags", post).list_attachable(per_page=50)

    assert page.meta.per_page == 4
    assert len(page.items) == 4


def test_searchable_attributes_resolution():
    post = Post(id=1)
    by_resource = service_for(PostResource(), "tags", post)
    by_field = get_service(AttachmentServiceRegistry).for_field(
        BelongsToMany("Tags", "tags", resource=TagResource, pivot_model=PostTag, attachable_search_fields=["slug"]),
        post,
    )
    by_fallback = get_service(AttachmentServiceRegistry).for_field(
        BelongsToMany("Tags", "tags", model=Tag, pivot_model=PostTag),
        post,
    )

    assert by_resource.get_searchable_attributes() == ["name"]
    assert by_field.get_searchable_attributes() == ["slug"]
    assert by_fallback.get_searchable_attributes()[:2] == ["name", "title"]


async def test_has_many_attach_and_detach_move_the_foreign_key(db, post):
    other = await Post.query.create(title="Other")
    free = await Comment.query.create(body="Free")
    owned_elsewhere = await Comment.query.create(body="Elsewhere", post_id=other.id)
    service = service_for(PostResource(), "comments", post)

    page = await service.list_attachable()

    assert sorted(item.id for item in page.items) == sorted([free.id, owned_elsewhere.id])

    result = await service.attach([free.id, owned_elsewhere.id])

    assert sorted(result.attached) == sorted([free.id, owned_elsewhere.id])
    assert await Comment.query.filter(post_id=post.id).count() == 2

    detached = await service.detach([free.id])

    assert detached.detached == 1
    assert (await Comment.query.get(id=free.id)).post_id is None
    assert await Comment.query.count() == 2


async def test_morph_many_attach_writes_type_and_id(db):
    video = await Video.query.create(title="Clip")
    comment = await Comment.query.create(body="Nice")
    service = service_for(VideoResource(), "comments", video)

    result = await service.attach([comment.id])
    stored = await Comment.query.get(id=comment.id)

    assert result.attached == [comment.id]
    assert (stored.commentable_type, stored.commentable_id) == ("video", video.id)

    await service.detach([comment.id])
    stored = await Comment.query.get(id=comment.id)

    assert (stored.commentable_type, stored.commentable_id) == (None, None)


async def test_morph_to_many_sync_uses_morph_columns(db, post, tags):
    video = await Video.query.create(title="Clip")
    await Taggable.query.create(taggable_type="video", taggable_id=video.id, tag_id=tags[0].id)
    service = service_for(PostResource(), "labels", post)

    changes = await service.sync([tags[0].id, tags[1].id])

    assert changes.attached == [tags[0].id, tags[1].id]

    rows = await Taggable.query.filter(taggable_type="post", taggable_id=post.id).all()

    assert sorted(row.tag_id for row in rows) == [tags[0].id, tags[1].id]
    assert await Taggable.query.filter(taggable_type="video").count() == 1


async def test_handle_attachment_checks_parent_and_authorization(db, post, tags):
    context = ResourceContext()

    envelope = await handle_attachment(PostResource(), post.id, "tags", "attach", context, ids=[tags[0].id])

    assert envelope.success
    assert envelope.message == "Items attached successfully"
    assert envelope.data["attached"] == [tags[0].id]

    missing = await handle_attachment(PostResource(), 404, "tags", "attach", context, ids=[tags[0].id])
    forbidden = await handle_attachment(LockedPostResource(), post.id, "tags", "attach", context, ids=[1])
    unknown_field = await handle_attachment(PostResource(), post.id, "title", "attach", context, ids=[1])
    empty = await handle_attachment(PostResource(), post.id, "tags", "attach", context, ids=[])

    assert (missing.success, missing.message) == (False, "Post not found")
    assert (forbidden.success, forbidden.message) == (False, "This action is unauthorized.")
    assert (unknown_field.success, unknown_field.message) == (False, "Field not found")
    assert (empty.success, empty.message) == (False, "No items to attach")


async def test_handle_attachment_lists_attachable(db, post, tags):
    envelope = await handle_attachment(PostResource(), post.id, "tags", "attachable", ResourceContext(), per_page=3)

    assert envelope.success
    assert len(envelope.data["items"]) == 3
    assert envelope.data["meta"]["total"] == len(tags)
