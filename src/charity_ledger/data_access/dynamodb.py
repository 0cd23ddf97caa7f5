import logging
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError
from typing import Any, TypeVar
from pydantic import BaseModel

from charity_ledger.data_access.store import OrderedRecordStore, Versioned

logger = logging.getLogger(__name__)

COLLECTION_PREFIX = "COLLECTION#"
RECORD_PREFIX = "RECORD#"

M = TypeVar("M", bound=BaseModel)

def is_condition_failure(error: ClientError) -> bool:
    return error.response['Error']['Code'] == 'ConditionalCheckFailedException'

class DynamoRecordStore(OrderedRecordStore[M]):
    """
    Ordered store over a single DynamoDB table shared by all collections.

    Each collection is one partition (PK) and each record one sort key (SK),
    so a partition query returns the records in ascending key order. The
    record itself is kept as a JSON document in the `body` attribute and its
    write counter in `version`. `insert_new` and `replace` are conditional
    puts, which DynamoDB evaluates atomically per item, so they hold across
    every process sharing the table.
    """

    def __init__(self, table, collection: str, model: type[M]):
        self.table = table
        self.collection = collection
        self.model = model
        self.partition_key = f"{COLLECTION_PREFIX}{collection}"

    def _item_key(self, key: str) -> dict:
        return {
            "PK": self.partition_key,
            "SK": f"{RECORD_PREFIX}{key}"
        }

    def _encode(self, key: str, value: M, version: int) -> dict:
        return {
            **self._item_key(key),
            "key": key,
            "body": value.model_dump_json(),
            "version": version,
        }

    def _decode(self, item: dict | None) -> M | None:
        if not item:
            return None
        return self.model.model_validate_json(item["body"])

    def _get_item(self, key: str) -> dict | None:
        response = self.table.get_item(Key=self._item_key(key), ConsistentRead=True)
        return response.get("Item")

    def get(self, key: str) -> M | None:
        return self._decode(self._get_item(key))

    def get_versioned(self, key: str) -> Versioned | None:
        item = self._get_item(key)
        if not item:
            return None
        return Versioned(self._decode(item), int(item.get("version", 0)))

    def insert(self, key: str, value: M) -> M | None:
        try:
            response = self.table.update_item(
                Key=self._item_key(key),
                UpdateExpression="SET #key = :key, #body = :body, #version = if_not_exists(#version, :start) + :inc",
                ExpressionAttributeNames={
                    "#key": "key",
                    "#body": "body",
                    "#version": "version"
                },
                ExpressionAttributeValues={
                    ":key": key,
                    ":body": value.model_dump_json(),
                    ":start": 0,
                    ":inc": 1
                },
                ReturnValues="ALL_OLD"
            )
        except ClientError as e:
            logger.error(f"Error writing {self.collection} record {key}: {e}")
            raise
        return self._decode(response.get("Attributes"))

    def insert_new(self, key: str, value: M) -> bool:
        try:
            self.table.put_item(
                Item=self._encode(key, value, version=1),
                ConditionExpression="attribute_not_exists(PK)"
            )
            return True
        except ClientError as e:
            if is_condition_failure(e):
                logger.info(f"{self.collection} record {key} already exists")
                return False
            logger.error(f"Error creating {self.collection} record {key}: {e}")
            raise

    def replace(self, key: str, value: M, expected_version: int) -> bool:
        try:
            self.table.put_item(
                Item=self._encode(key, value, version=expected_version + 1),
                ConditionExpression="#version = :expected",
                ExpressionAttributeNames={"#version": "version"},
                ExpressionAttributeValues={":expected": expected_version}
            )
            return True
        except ClientError as e:
            if is_condition_failure(e):
                logger.info(f"{self.collection} record {key} moved past version {expected_version}")
                return False
            logger.error(f"Error replacing {self.collection} record {key}: {e}")
            raise

    def remove(self, key: str) -> M | None:
        try:
            response = self.table.delete_item(Key=self._item_key(key), ReturnValues="ALL_OLD")
        except ClientError as e:
            logger.error(f"Error deleting {self.collection} record {key}: {e}")
            raise
        return self._decode(response.get("Attributes"))

    def _query_pages(self, **kwargs: Any):
        query_args = {
            "KeyConditionExpression": Key("PK").eq(self.partition_key) &
                                      Key("SK").begins_with(RECORD_PREFIX),
            "ConsistentRead": True,
            **kwargs,
        }
        while True:
            response = self.table.query(**query_args)
            yield response
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            query_args["ExclusiveStartKey"] = last_key

    def values(self) -> list[M]:
        records = []
        for page in self._query_pages(ScanIndexForward=True):
            records.extend(self._decode(item) for item in page.get("Items", []))
        return records

    def size(self) -> int:
        return sum(page.get("Count", 0) for page in self._query_pages(Select="COUNT"))
