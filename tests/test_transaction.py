# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import pytest

from sqlalchemy import event

from fastresource.orm import atomic, enable_sqlite_transactions, in_transaction, transaction
from fastresource.orm.transaction import _begin_sqlite_transaction

from tests.app import Post, PostTag


async def test_atomic_commits_the_block(db):
    async with atomic():
        assert in_transaction()
        post = await Post.query.create(title="Kept")
        await PostTag.query.create(post_id=post.id, tag_id=1)

    assert not in_transaction()
    assert await Post.query.count() == 1
    assert await PostTag.query.count() == 1


async def test_atomic_rolls_back_saved_models(db):
    with pytest.raises(RuntimeError):
        async with atomic():
            await Post(title="Dropped").save()
            raise RuntimeError("boom")

    assert await Post.query.count() == 0


async def test_nested_block_error_rolls_back_the_outer_writes(db):
    with pytest.raises(RuntimeError):
        async with atomic():
            post = await Post.query.create(title="Outer")

            async with atomic():
                await PostTag.query.create(post_id=post.id, tag_id=1)
                raise RuntimeError("boom")

    assert await Post.query.count() == 0
    assert await PostTag.query.count() == 0


async def test_transaction_decorator_rolls_back(db):
    @transaction
    async def create_then_fail():
        await Post.query.create(title="Dropped")
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await create_then_fail()

    assert await Post.query.count() == 0


async def test_writes_after_a_rollback_are_stored(db):
    with pytest.raises(RuntimeError):
        async with atomic():
            await Post.query.create(title="Dropped")
            raise RuntimeError("boom")

    await Post.query.create(title="Kept")

    assert [post.title for post in await Post.query.all()] == ["Kept"]


async def test_sqlite_begin_listener_is_registered_once(db):
    enable_sqlite_transactions(db.database)
    enable_sqlite_transactions(db.database)

    assert event.contains(db.database.engine.sync_engine, "begin", _begin_sqlite_transaction)
