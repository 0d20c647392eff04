"""Tests for the DynamoDB and HTTP operations."""

import asyncio
import math
import threading
import time

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from querybench.core.models import ERROR_KEY, BenchmarkConfig
from querybench.core.runner import BenchmarkRunner
from querybench.operations.dynamodb import DynamoDBRangeQuery, build_range_query
from querybench.operations.http import HttpOperation


class FakeDynamoDBClient:
    """Records query calls and returns a fixed item count."""

    def __init__(self, count: int = 7, error: Exception = None):
        self.count = count
        self.error = error
        self.calls = []
        self.threads = set()

    def query(self, **kwargs):
        self.calls.append(kwargs)
        self.threads.add(threading.current_thread().name)
        if self.error is not None:
            raise self.error
        return {"Count": self.count, "Items": [], "ScannedCount": self.count}


class BlockingDynamoDBClient:
    """Holds every query until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def query(self, **kwargs):
        self.started.set()
        self.release.wait(10)
        return {"Count": 0}


def make_query(client, max_workers=2) -> DynamoDBRangeQuery:
    return DynamoDBRangeQuery(
        table="events",
        partition_key="pk",
        sort_key="sk",
        partition_value="customer#42",
        sort_start="2024-01-01",
        sort_end="2024-01-31",
        max_workers=max_workers,
        client=client,
    )


class TestBuildRangeQuery:

    def test_request_shape(self):
        request = build_range_query("events", "pk", "sk", "customer#42", "a", "z")
        assert request == {
            "TableName": "events",
            "KeyConditionExpression": "#pk = :pk AND #sk BETWEEN :start AND :end",
            "ExpressionAttributeNames": {"#pk": "pk", "#sk": "sk"},
            "ExpressionAttributeValues": {
                ":pk": {"S": "customer#42"},
                ":start": {"S": "a"},
                ":end": {"S": "z"},
            },
        }

    def test_key_names_are_not_part_of_placeholders(self):
        request = build_range_query("events", "customer-id", "event.time", "c1", "a", "z")
        assert request["KeyConditionExpression"] == "#pk = :pk AND #sk BETWEEN :start AND :end"
        assert request["ExpressionAttributeNames"] == {"#pk": "customer-id", "#sk": "event.time"}


class TestDynamoDBRangeQuery:

    @pytest.mark.asyncio
    async def test_returns_item_count(self):
        client = FakeDynamoDBClient(count=7)
        async with make_query(client) as query:
            assert await query() == 7
            assert await query() == 7

        assert len(client.calls) == 2
        assert client.calls[0] == query.request
        assert all(name.startswith("dynamodb-query") for name in client.threads)

    @pytest.mark.asyncio
    async def test_must_be_entered(self):
        query = make_query(FakeDynamoDBClient())
        with pytest.raises(RuntimeError):
            await query()

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        client = FakeDynamoDBClient(error=ConnectionError("throttled"))
        async with make_query(client) as query:
            with pytest.raises(ConnectionError):
                await query()

    @pytest.mark.asyncio
    async def test_closed_after_exit(self):
        async with make_query(FakeDynamoDBClient()) as query:
            await query()
        with pytest.raises(RuntimeError):
            await query()

    @pytest.mark.asyncio
    async def test_aborted_exit_does_not_wait_for_running_queries(self):
        client = BlockingDynamoDBClient()
        query = make_query(client)
        await query.__aenter__()
        task = asyncio.create_task(query())
        loop = asyncio.get_running_loop()
        assert await loop.run_in_executor(None, client.started.wait, 5)
        task.cancel()

        started = time.perf_counter()
        try:
            await query.__aexit__(asyncio.CancelledError, asyncio.CancelledError(), None)
            elapsed = time.perf_counter() - started
        finally:
            client.release.set()

        assert elapsed < 1.0
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_benchmark_histogram_groups_by_count(self):
        client = FakeDynamoDBClient(count=3)
        config = BenchmarkConfig(rate=math.inf, concurrency=2, warmup_count=2, measured_count=10)
        async with make_query(client, max_workers=2) as query:
            result = await BenchmarkRunner(config, query).run()

        assert len(client.calls) == 12
        assert result.measured.histogram == {3: 10}


async def handle_ok(request):
    return web.Response(text="ok")


async def handle_unavailable(request):
    return web.Response(status=503, text="unavailable")


def make_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/ok", handle_ok)
    app.router.add_post("/ok", handle_ok)
    app.router.add_get("/unavailable", handle_unavailable)
    return app


class TestHttpOperation:

    @pytest.mark.asyncio
    async def test_returns_status(self):
        async with test_utils.TestServer(make_app()) as server:
            async with HttpOperation(str(server.make_url("/ok"))) as operation:
                assert await operation() == 200

    @pytest.mark.asyncio
    async def test_method_is_used(self):
        async with test_utils.TestServer(make_app()) as server:
            async with HttpOperation(str(server.make_url("/ok")), method="post") as operation:
                assert operation.method == "POST"
                assert await operation() == 200

    @pytest.mark.asyncio
    async def test_error_status_fails(self):
        async with test_utils.TestServer(make_app()) as server:
            async with HttpOperation(str(server.make_url("/unavailable"))) as operation:
                with pytest.raises(aiohttp.ClientResponseError):
                    await operation()

    @pytest.mark.asyncio
    async def test_error_status_counted_when_accepted(self):
        async with test_utils.TestServer(make_app()) as server:
            url = str(server.make_url("/unavailable"))
            async with HttpOperation(url, fail_on_status=False) as operation:
                assert await operation() == 503

    @pytest.mark.asyncio
    async def test_must_be_entered(self):
        with pytest.raises(RuntimeError):
            await HttpOperation("http://localhost/")()

    @pytest.mark.asyncio
    async def test_benchmark_against_server(self):
        config = BenchmarkConfig(rate=math.inf, concurrency=4, warmup_count=2, measured_count=20)
        async with test_utils.TestServer(make_app()) as server:
            async with HttpOperation(str(server.make_url("/ok")), connection_limit=4) as operation:
                ok_result = await BenchmarkRunner(config, operation).run()
            async with HttpOperation(str(server.make_url("/unavailable"))) as operation:
                failing_result = await BenchmarkRunner(config, operation).run()

        assert ok_result.measured.histogram == {200: 20}
        assert failing_result.measured.histogram == {ERROR_KEY: 20}
        assert len(failing_result.measured.sorted_durations) == 20
