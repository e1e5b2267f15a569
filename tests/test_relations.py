# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging

from fastresource.context import ResourceContext
from fastresource.fields import (
    BelongsTo,
    BelongsToMany,
    Exists,
    FieldContext,
    HasMany,
    MorphTo,
    RelationKind,
    TypeRule,
    ValueType,
)
from fastresource.fields.relations import MorphMap, resolve_relation_metadata
from fastresource.dependencies import get_service

from tests.app import (
    Author,
    AuthorResource,
    Comment,
    CommentResource,
    Post,
    PostResource,
    PostTag,
    Tag,
    TagResource,
    Video,
    VideoResource,
)


async def test_belongs_to_resolves_key_and_resource_label(db):
    author = await Author.query.create(name="Ada")
    post = await Post.query.create(title="Hello", author_id=author.id)
    field = BelongsTo("Author", "author", resource=AuthorResource)

    assert field.key == "author_id"
    assert await field.resolve(None, post) == {"key": author.id, "label": "Ada"}


async def test_belongs_to_label_falls_back_to_title(db):
    post = await Post.query.create(title="Fallback title")
    comment = await Comment.query.create(body="Nice", post_id=post.id)
    field = BelongsTo("Post", "post", model=Post)

    assert await field.resolve(None, comment) == {"key": post.id, "label": "Fallback title"}


async def test_belongs_to_label_prefers_display_callback_then_attribute(db):
    author = await Author.query.create(name="Ada", email="ada@example.com")
    post = await Post.query.create(title="Hello", author_id=author.id)

    by_callback = BelongsTo("Author", "author", resource=AuthorResource, display_callback=lambda a: f"#{a.id}")
    by_attribute = BelongsTo("Author", "author", resource=AuthorResource, display_attribute="email")

    assert (await by_callback.resolve(None, post))["label"] == f"#{author.id}"
    assert (await by_attribute.resolve(None, post))["label"] == "ada@example.com"


async def test_belongs_to_without_related_entity_resolves_none(db):
    post = await Post.query.create(title="Orphan", author_id=404)

    assert await BelongsTo("Author", "author", resource=AuthorResource).resolve(None, post) is None


async def test_belongs_to_fill_normalizes_identifier():
    post = Post()
    await BelongsTo("Author", "author", resource=AuthorResource).fill(ResourceContext(input={"author_id": "7"}), post)

    assert post.author_id == 7


def test_belongs_to_rules_check_existence():
    rules = BelongsTo("Author", "author", resource=AuthorResource).get_validation_rules()

    assert Exists(Author) in rules


async def test_unresolvable_relation_degrades_to_empty(db, caplog):
    post = await Post.query.create(title="Hello")
    field = BelongsToMany("Tags", "tags", resource=TagResource)

    with caplog.at_level(logging.WARNING, logger="fastresource.fields"):
        assert await field.resolve(None, post) == []

    assert "cannot be resolved" in caplog.text


async def test_relation_metadata_is_cached_per_context(db):
    context = ResourceContext()
    field = BelongsToMany("Tags", "tags", resource=TagResource, pivot_model=PostTag, pivot_columns=["role", "unknown"])

    metadata = resolve_relation_metadata(field, Post, context)

    assert metadata.kind == RelationKind.BELONGS_TO_MANY
    assert metadata.pivot_parent_key == "post_id"
    assert metadata.pivot_related_key == "tag_id"
    assert metadata.pivot_columns == ("role",)
    assert resolve_relation_metadata(field, Post, context) is metadata


async def test_belongs_to_many_resolves_bounded_list_with_pivot(db, tags):
    post = await Post.query.create(title="Hello")

    for tag in tags[:4]:
        await PostTag.query.create(post_id=post.id, tag_id=tag.id, role=f"role-{tag.id}")

    field = BelongsToMany(
        "Tags",
        "tags",
        resource=TagResource,
        pivot_model=PostTag,
        pivot_columns=["role"],
        order_by="name",
        order_direction="desc",
        limit=2,
    )

    assert await field.resolve(None, post) == [
        {"key": tags[3].id, "label": "tag-4", "pivot": {"role": f"role-{tags[3].id}"}},
        {"key": tags[2].id, "label": "tag-3", "pivot": {"role": f"role-{tags[2].id}"}},
    ]


async def test_belongs_to_many_of_new_entity_is_empty(db):
    field = BelongsToMany("Tags", "tags", resource=TagResource, pivot_model=PostTag)

    assert await field.resolve(None, Post()) == []


def test_belongs_to_many_rules():
    rules = BelongsToMany("Tags", "tags", resource=TagResource, pivot_model=PostTag).get_validation_rules()

    assert TypeRule(ValueType.ARRAY) in rules
    assert Exists(Tag) in rules


async def test_has_many_resolves_related_index_fields(db):
    post = await Post.query.create(title="Hello")
    comment = await Comment.query.create(body="First!", post_id=post.id)
    await Comment.query.create(body="Elsewhere")

    field = HasMany("Comments", "comments", resource=CommentResource)

    assert not field.is_visible_for(FieldContext.CREATE)
    assert await field.resolve(None, post) == [
        {
            "key": comment.id,
            "label": comment.id,
            "fields": {"id": comment.id, "body": "First!"},
        }
    ]


async def test_morph_many_resolves_by_type_and_id(db):
    video = await Video.query.create(title="Clip")
    post = await Post.query.create(title="Hello")
    comment = await Comment.query.create(body="On video", commentable_type="video", commentable_id=video.id)
    await Comment.query.create(body="On post", commentable_type="post", commentable_id=post.id)

    field = PostResource().get_field("comments")
    video_field = VideoResource().get_field("comments")

    assert await field.resolve(None, post) == []
    assert [item["key"] for item in await video_field.resolve(None, video)] == [comment.id]


async def test_morph_to_resolves_type_and_label(db):
    post = await Post.query.create(title="Commented")
    comment = await Comment.query.create(body="Hi", commentable_type="post", commentable_id=post.id)
    field = CommentResource().get_field("commentable")

    assert await field.resolve(None, comment) == {
        "type": "post",
        "type_label": "Post",
        "key": post.id,
        "label": "Commented",
    }


async def test_morph_to_uses_morph_map_for_unlisted_aliases(db):
    video = await Video.query.create(title="Clip")
    comment = await Comment.query.create(commentable_type="clip", commentable_id=video.id)
    get_service(MorphMap).register("clip", Video)
    field = MorphTo("Commentable", "commentable")

    assert await field.resolve(None, comment) == {
        "type": "clip",
        "type_label": "Video",
        "key": video.id,
        "label": "Clip",
    }


async def test_morph_to_fill_accepts_alias_and_resource_key():
    field = MorphTo("Commentable", "commentable", types={"post": PostResource})
    comment = Comment()

    await field.fill(ResourceContext(input={"commentable_type": "post", "commentable_id": "3"}), comment)
    assert (comment.commentable_type, comment.commentable_id) == ("post", 3)

    await field.fill(ResourceContext(input={"commentable_type": "posts", "commentable_id": 4}), comment)
    assert (comment.commentable_type, comment.commentable_id) == ("post", 4)


async def test_morph_to_fill_unknown_type_clears_both_columns(caplog):
    field = MorphTo("Commentable", "commentable", types={"post": PostResource})
    comment = Comment(commentable_type="post", commentable_id=1)

    with caplog.at_level(logging.WARNING, logger="fastresource.fields"):
        await field.fill(ResourceContext(input={"commentable_type": "planet", "commentable_id": 3}), comment)

    assert comment.commentable_type is None
    assert comment.commentable_id is None
    assert "could not resolve type: planet" in caplog.text


async def test_morph_to_fill_incomplete_pair_clears_both_columns():
    field = MorphTo("Commentable", "commentable", types={"post": PostResource})
    comment = Comment(commentable_type="post", commentable_id=1)

    await field.fill(ResourceContext(input={"commentable_type": "post", "commentable_id": None}), comment)

    assert (comment.commentable_type, comment.commentable_id) == (None, None)


def test_morph_to_rules_cover_both_columns():
    rules = MorphTo("Commentable", "commentable", required=True).get_rules_map()

    assert set(rules) == {"commentable_type", "commentable_id"}
    assert TypeRule(ValueType.STRING) in rules["commentable_type"]
