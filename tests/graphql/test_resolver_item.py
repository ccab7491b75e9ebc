"""
Unit tests for item resolvers
"""

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from brytashop.auth.errors import AuthenticationError
from brytashop.dbmodels import Items
from brytashop.graphql.mutations.root import ItemCreateInput, ItemUpdateInput
from brytashop.graphql.resolvers.item import (
    create_item,
    delete_item,
    resolve_item,
    resolve_items_connection,
    update_item,
)
from brytashop.graphql.types.item import ItemWhereInput, ItemWhereUniqueInput


@pytest.fixture
def sample_item():
    item = MagicMock(spec=Items)
    item.id = uuid.uuid4()
    item.title = "Denim jacket"
    item.description = "Barely worn"
    item.price = 2500
    item.image = "jacket.jpg"
    item.large_image = "jacket-large.jpg"
    item.user_id = uuid.uuid4()
    item.created_at = datetime.now(UTC)
    item.updated_at = datetime.now(UTC)
    return item


def _session_returning(mock_session, value):
    mock_db = AsyncMock()
    mock_db.add = MagicMock()
    mock_session.return_value.__aenter__.return_value = mock_db
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = value
    mock_result.scalar_one.return_value = value
    mock_db.execute.return_value = mock_result
    return mock_db


class TestCreateItem:
    @pytest.mark.asyncio
    async def test_requires_login(self, mock_info, anonymous_auth_context):
        data = ItemCreateInput(title="Hat", description="Red", price=1000)

        with patch(
            "brytashop.graphql.resolvers.item.get_auth_context_from_info",
            return_value=anonymous_auth_context,
        ):
            with pytest.raises(AuthenticationError, match="You must be logged in to do that!"):
                await create_item(mock_info, data)

    @pytest.mark.asyncio
    async def test_owner_is_current_user(self, mock_info, auth_context):
        data = ItemCreateInput(title="Hat", description="Red", price=1000, large_image="hat.jpg")

        with patch(
            "brytashop.graphql.resolvers.item.get_auth_context_from_info",
            return_value=auth_context,
        ):
            with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
                mock_db = _session_returning(mock_session, None)

                result = await create_item(mock_info, data)

        added = mock_db.add.call_args.args[0]
        assert isinstance(added, Items)
        assert added.user_id == auth_context.user_id
        assert added.large_image == "hat.jpg"
        assert result.title == "Hat"
        assert result.price == 1000
        mock_db.commit.assert_awaited_once()


class TestUpdateItem:
    @pytest.mark.asyncio
    async def test_owner_can_update(self, mock_info, auth_context, sample_item):
        sample_item.user_id = auth_context.user_id

        with patch(
            "brytashop.graphql.resolvers.item.get_auth_context_from_info",
            return_value=auth_context,
        ):
            with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
                _session_returning(mock_session, sample_item)

                result = await update_item(
                    mock_info, sample_item.id, ItemUpdateInput(price=3000)
                )

        assert sample_item.price == 3000
        assert sample_item.title == "Denim jacket"
        assert result.price == 3000

    @pytest.mark.asyncio
    async def test_non_owner_without_permission_denied(self, mock_info, auth_context, sample_item):
        with patch(
            "brytashop.graphql.resolvers.item.get_auth_context_from_info",
            return_value=auth_context,
        ):
            with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
                mock_db = _session_returning(mock_session, sample_item)

                with pytest.raises(RuntimeError, match="You don't have permission to do that"):
                    await update_item(mock_info, sample_item.id, ItemUpdateInput(price=1))

        assert sample_item.price == 2500
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_itemupdate_permission_allows_update(self, mock_info, auth_context, sample_item):
        auth_context.permissions = ["USER", "ITEMUPDATE"]

        with patch(
            "brytashop.graphql.resolvers.item.get_auth_context_from_info",
            return_value=auth_context,
        ):
            with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
                _session_returning(mock_session, sample_item)

                result = await update_item(
                    mock_info, sample_item.id, ItemUpdateInput(title="Vintage jacket")
                )

        assert result.title == "Vintage jacket"

    @pytest.mark.asyncio
    async def test_missing_item(self, mock_info, auth_context):
        with patch(
            "brytashop.graphql.resolvers.item.get_auth_context_from_info",
            return_value=auth_context,
        ):
            with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
                _session_returning(mock_session, None)

                with pytest.raises(RuntimeError, match="No item found"):
                    await update_item(mock_info, uuid.uuid4(), ItemUpdateInput(price=1))


class TestDeleteItem:
    @pytest.mark.asyncio
    async def test_itemupdate_is_not_enough_to_delete(self, mock_info, auth_context, sample_item):
        auth_context.permissions = ["ITEMUPDATE"]

        with patch(
            "brytashop.graphql.resolvers.item.get_auth_context_from_info",
            return_value=auth_context,
        ):
            with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
                mock_db = _session_returning(mock_session, sample_item)

                with pytest.raises(RuntimeError, match="You don't have permission to do that"):
                    await delete_item(mock_info, sample_item.id)

        mock_db.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_can_delete(self, mock_info, admin_context, sample_item):
        with patch(
            "brytashop.graphql.resolvers.item.get_auth_context_from_info",
            return_value=admin_context,
        ):
            with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
                mock_db = _session_returning(mock_session, sample_item)

                result = await delete_item(mock_info, sample_item.id)

        mock_db.delete.assert_awaited_once_with(sample_item)
        assert result.id == sample_item.id
        assert result.title == "Denim jacket"


class TestItemQueries:
    @pytest.mark.asyncio
    async def test_item_not_found_returns_none(self, mock_info):
        with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
            _session_returning(mock_session, None)

            assert await resolve_item(mock_info, ItemWhereUniqueInput(id=uuid.uuid4())) is None

    @pytest.mark.asyncio
    async def test_items_connection_count(self, mock_info):
        with patch("brytashop.graphql.resolvers.item.get_async_session") as mock_session:
            _session_returning(mock_session, 7)

            result = await resolve_items_connection(
                mock_info, ItemWhereInput(title_contains="jacket")
            )

        assert result.aggregate.count == 7
