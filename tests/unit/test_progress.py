"""
Unit tests for ProgressChannel and ScaledProgress.
"""
import asyncio

import pytest
from unittest.mock import MagicMock

from shopify_import.schemas.shopify_import import ImportProgress
from shopify_import.utils.progress import ProgressChannel, ScaledProgress


pytestmark = pytest.mark.unit


class TestProgressChannel:

    def test_callbacks_receive_events(self):
        channel = ProgressChannel(buffered=False)
        received = []
        channel.subscribe(received.append)

        event = ImportProgress(stage="fetching_products", page=1, fetched=250, last_batch=250)
        channel.publish(event)

        assert received == [event]

    def test_publish_after_close_is_dropped(self):
        channel = ProgressChannel(buffered=False)
        received = []
        channel.subscribe(received.append)

        channel.close()
        channel.publish(ImportProgress(stage="importing_products"))

        assert received == []
        assert channel.closed is True

    def test_unbuffered_channel_cannot_be_iterated(self):
        with pytest.raises(TypeError):
            ProgressChannel(buffered=False).__aiter__()

    def test_default_channel_keeps_no_backlog(self):
        channel = ProgressChannel()
        channel.subscribe(lambda event: None)

        for page in range(1, 4):
            channel.publish(ImportProgress(stage="fetching_products", page=page))

        with pytest.raises(TypeError):
            channel.__aiter__()

    def test_failing_subscriber_does_not_reach_publisher(self, caplog):
        channel = ProgressChannel()
        received = []

        def _backend_down(event):
            raise RuntimeError("result backend down")

        channel.subscribe(_backend_down)
        channel.subscribe(received.append)

        event = ImportProgress(stage="importing_products", current=1, total=1)
        channel.publish(event)

        assert received == [event]
        assert "result backend down" in caplog.text

    @pytest.mark.asyncio
    async def test_async_iteration_until_close(self):
        channel = ProgressChannel(buffered=True)

        async def produce():
            for current in (1, 2, 3):
                channel.publish(ImportProgress(stage="importing_collections", current=current, total=3))
                await asyncio.sleep(0)
            channel.close()

        producer = asyncio.create_task(produce())
        seen = [event.current async for event in channel]
        await producer

        assert seen == [1, 2, 3]


class TestScaledProgress:

    def test_maps_track_progress_into_window(self):
        parent = MagicMock()
        scaled = ScaledProgress(parent, start=50, span=50)

        scaled.publish(ImportProgress(stage="importing_products", current=1, total=4, item="A"))

        event = parent.publish.call_args.args[0]
        assert event.overall_progress == 62
        assert event.item == "A"
        assert event.stage == "importing_products"

    def test_fetch_events_sit_at_window_start(self):
        parent = MagicMock()

        ScaledProgress(parent, start=50, span=50).publish(
            ImportProgress(stage="fetching_products", page=1, fetched=250, last_batch=250)
        )

        assert parent.publish.call_args.args[0].overall_progress == 50

    def test_clamped_to_100(self):
        parent = MagicMock()

        ScaledProgress(parent, start=90, span=50).publish(
            ImportProgress(stage="importing_products", current=5, total=5)
        )

        assert parent.publish.call_args.args[0].overall_progress == 100
