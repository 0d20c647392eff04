"""DynamoDB range query operation."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)


def build_range_query(
    table: str,
    partition_key: str,
    sort_key: str,
    partition_value: str,
    sort_start: str,
    sort_end: str,
) -> Dict[str, Any]:
    """
    Build the keyword arguments of a Query selecting a sort key range in one partition.

    Returns:
        kwargs for DynamoDB.Client.query
    """
    return {
        "TableName": table,
        # Fixed placeholders, so key names may contain any character
        "KeyConditionExpression": "#pk = :pk AND #sk BETWEEN :start AND :end",
        "ExpressionAttributeNames": {"#pk": partition_key, "#sk": sort_key},
        "ExpressionAttributeValues": {
            ":pk": {"S": partition_value},
            ":start": {"S": sort_start},
            ":end": {"S": sort_end},
        },
    }


class DynamoDBRangeQuery:
    """
    Range query against one DynamoDB partition.

    Use as an async context manager; the entered object is the operation.
    boto3 is blocking, so each call runs on a thread pool sized to the
    benchmark's concurrency. The outcome of a call is the returned item count.
    """

    def __init__(
        self,
        table: str,
        partition_key: str,
        sort_key: str,
        partition_value: str,
        sort_start: str,
        sort_end: str,
        region: str = "us-west-2",
        max_workers: int = 1,
        client: Optional[Any] = None,
    ):
        """
        Initialize the query.

        Args:
            table: DynamoDB table name
            partition_key: Partition key attribute name
            sort_key: Sort key attribute name
            partition_value: Partition key value
            sort_start: Sort key range start (inclusive)
            sort_end: Sort key range end (inclusive)
            region: AWS region
            max_workers: Threads (and pooled connections) available to calls
            client: Pre-built DynamoDB client; one is created on enter if omitted
        """
        self.table = table
        self.region = region
        self.max_workers = max(max_workers, 1)
        self._request = build_range_query(
            table, partition_key, sort_key, partition_value, sort_start, sort_end
        )
        self._client = client
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def request(self) -> Dict[str, Any]:
        return self._request

    async def __aenter__(self) -> "DynamoDBRangeQuery":
        if self._client is None:
            self._client = boto3.client(
                "dynamodb",
                region_name=self.region,
                config=Config(max_pool_connections=self.max_workers),
            )
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="dynamodb-query"
        )
        logger.info("Querying table %s in %s", self.table, self.region)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        executor, self._executor = self._executor, None
        if executor is None:
            return
        if exc_type is not None:
            # Abandon queries still running on an aborted run
            executor.shutdown(wait=False, cancel_futures=True)
            return
        # Waiting for the workers must not block the event loop
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, executor.shutdown)

    async def __call__(self) -> int:
        if self._executor is None:
            raise RuntimeError("DynamoDBRangeQuery must be entered before it is called")
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(self._executor, self._query)
        count = response.get("Count", 0)
        logger.debug("Query returned %d items", count)
        return count

    def _query(self) -> Dict[str, Any]:
        return self._client.query(**self._request)
