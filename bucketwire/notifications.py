"""Coalescing of S3 bucket subscriptions into one notification resource per bucket.

AWS accepts a single notification configuration per bucket (see
https://github.com/hashicorp/terraform-provider-aws/issues/1715), while subscriptions are
declared one by one from anywhere in a program. Each subscription is therefore only
registered here when it is declared. The ``BucketNotification`` resources are created when
the run's ``RegistrationContext`` is flushed at the end of the declaration phase.
"""

import logging
from dataclasses import dataclass
from typing import final

from pulumi import Output, ResourceOptions
from pulumi_aws import lambda_, s3

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True)
class SubscriptionRequest:
    """One registered interest in a bucket's events."""

    name: str
    events: tuple[str, ...]
    function_arn: Output[str]
    permission: lambda_.Permission
    filter_prefix: str | None = None
    filter_suffix: str | None = None

    def to_notification_args(self) -> s3.BucketNotificationLambdaFunctionArgs:
        return s3.BucketNotificationLambdaFunctionArgs(
            events=list(self.events),
            filter_prefix=self.filter_prefix,
            filter_suffix=self.filter_suffix,
            lambda_function_arn=self.function_arn,
        )


type Snapshot = dict[s3.Bucket, list[SubscriptionRequest]]


class SubscriptionRegistry:
    """Subscription requests keyed by bucket resource, in registration order.

    Buckets are compared by identity, two bucket resources with the same name are
    different keys.
    """

    def __init__(self) -> None:
        self._subscriptions: Snapshot = {}

    def __len__(self) -> int:
        return sum(len(requests) for requests in self._subscriptions.values())

    def register(self, bucket: s3.Bucket, request: SubscriptionRequest) -> None:
        self._subscriptions.setdefault(bucket, []).append(request)

    def drain_all(self) -> Snapshot:
        """Take every pending request and leave an empty registry behind.

        This is a single swap: requests registered while the returned snapshot is being
        consumed go to the new mapping and are never part of this snapshot.
        """
        snapshot, self._subscriptions = self._subscriptions, {}
        return snapshot

    def pending_for(self, bucket: s3.Bucket) -> list[SubscriptionRequest]:
        return list(self._subscriptions.get(bucket, []))


def coalesce(snapshot: Snapshot) -> list[s3.BucketNotification]:
    """Declare one BucketNotification per bucket in ``snapshot``."""
    notifications = []
    for bucket, requests in snapshot.items():
        if not requests:
            logger.debug("Skipping bucket with no subscriptions")
            continue
        notifications.append(_declare_notification(bucket, requests))
    return notifications


def _declare_notification(
    bucket: s3.Bucket, requests: list[SubscriptionRequest]
) -> s3.BucketNotification:
    logger.debug(
        "Declaring notification '%s' with %d subscription(s)",
        requests[0].name,
        len(requests),
    )
    # Logical name is the name of the first subscription registered for the bucket
    return s3.BucketNotification(
        requests[0].name,
        bucket=bucket.id,
        lambda_functions=[request.to_notification_args() for request in requests],
        opts=ResourceOptions(
            parent=bucket, depends_on=[request.permission for request in requests]
        ),
    )


@final
class RegistrationContext:
    """Bucket subscriptions declared during one program run.

    Created once per run (see ``AppContext.registrations``) and flushed by the app when
    the declaration phase is over.

    ``flush`` swaps the registry for an empty one before declaring any resource. It can
    therefore be called any number of times: each call declares notifications only for
    subscriptions registered since the previous call, and a call with nothing pending
    declares nothing.
    """

    def __init__(self, registry: SubscriptionRegistry | None = None) -> None:
        self._registry = SubscriptionRegistry() if registry is None else registry

    @property
    def pending(self) -> int:
        """Number of subscription requests waiting for the next flush."""
        return len(self._registry)

    def register(self, bucket: s3.Bucket, request: SubscriptionRequest) -> None:
        logger.debug("Registering subscription '%s'", request.name)
        self._registry.register(bucket, request)

    def drain_all(self) -> Snapshot:
        return self._registry.drain_all()

    def pending_for(self, bucket: s3.Bucket) -> list[SubscriptionRequest]:
        return self._registry.pending_for(bucket)

    def flush(self) -> list[s3.BucketNotification]:
        snapshot = self.drain_all()
        if not snapshot:
            logger.debug("No pending bucket subscriptions to flush")
            return []

        notifications = coalesce(snapshot)
        logger.info(
            "Declared %d bucket notification(s) for %d subscription(s)",
            len(notifications),
            sum(len(requests) for requests in snapshot.values()),
        )
        return notifications
