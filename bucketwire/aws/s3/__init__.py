from .events import BucketEvent, BucketEventHandler, BucketRecord, object_keys, records
from .subscription import (
    VALID_S3_EVENTS,
    BucketEventSubscription,
    on_delete,
    on_object_created,
    on_object_removed,
    on_put,
    subscribe,
)
from .bucket import Bucket, S3BucketResources  # isort: skip

__all__ = [
    "VALID_S3_EVENTS",
    "Bucket",
    "BucketEvent",
    "BucketEventHandler",
    "BucketEventSubscription",
    "BucketRecord",
    "S3BucketResources",
    "object_keys",
    "on_delete",
    "on_object_created",
    "on_object_removed",
    "on_put",
    "records",
    "subscribe",
]
