"""Shapes of the S3 event notification payload delivered to subscribed functions.

See https://docs.aws.amazon.com/AmazonS3/latest/userguide/notification-content-structure.html
"""

from collections.abc import Callable
from typing import Any, NotRequired, TypedDict
from urllib.parse import unquote_plus


class UserIdentity(TypedDict):
    principalId: str


RequestParameters = TypedDict("RequestParameters", {"sourceIPAddress": str})

ResponseElements = TypedDict(
    "ResponseElements", {"x-amz-request-id": str, "x-amz-id-2": str}
)


class S3BucketEntity(TypedDict):
    name: str
    ownerIdentity: UserIdentity
    arn: str


class S3ObjectEntity(TypedDict):
    key: str
    size: NotRequired[int]
    eTag: NotRequired[str]
    versionId: NotRequired[str]
    sequencer: str


class S3Entity(TypedDict):
    s3SchemaVersion: str
    configurationId: str
    bucket: S3BucketEntity
    object: S3ObjectEntity


class BucketRecord(TypedDict):
    eventVersion: str
    eventSource: str
    awsRegion: str
    eventTime: str
    eventName: str
    userIdentity: UserIdentity
    requestParameters: RequestParameters
    responseElements: ResponseElements
    s3: S3Entity


class BucketEvent(TypedDict, total=False):
    Records: list[BucketRecord]


# Lambda handler signature: (event, lambda context) -> None
type BucketEventHandler = Callable[[BucketEvent, Any], None]


def records(event: BucketEvent) -> list[BucketRecord]:
    return event.get("Records") or []


def object_keys(event: BucketEvent) -> list[str]:
    """Object keys of every record, URL-decoded (S3 encodes keys in notifications)."""
    return [unquote_plus(record["s3"]["object"]["key"]) for record in records(event)]
