import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Unpack, final

import pulumi
import pulumi_aws
from pulumi import Output

from bucketwire.aws.function import FunctionConfigDict
from bucketwire.aws.s3 import subscription
from bucketwire.aws.s3.subscription import BucketEventSubscription, BucketHandler
from bucketwire.component import Component
from bucketwire.context import context

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True)
class S3BucketResources:
    bucket: pulumi_aws.s3.Bucket
    public_access_block: pulumi_aws.s3.BucketPublicAccessBlock


@final
class Bucket(Component[S3BucketResources]):
    """S3 bucket whose events can be delivered to Lambda functions.

    Args:
        name: Bucket name, prefixed with the app and environment
        versioning: Enable object versioning
        force_destroy: Allow deleting the bucket while it still contains objects

    Examples:
        uploads = Bucket("uploads")

        # Every created object
        uploads.on_put("thumbnail", "functions/images.thumbnail")

        # Only deletions of markers, under a prefix
        uploads.on_object_removed(
            "audit", "functions/audit.handler", event="DeleteMarkerCreated", filter_prefix="logs/"
        )

        # Full control over the events
        uploads.subscribe(
            "sync", "functions/sync.handler", events=["s3:ObjectCreated:*", "s3:ObjectRemoved:*"]
        )

    All subscriptions of a bucket end up in a single BucketNotification, declared when the
    app finishes declaring resources.
    """

    _subscriptions: list[BucketEventSubscription]

    def __init__(self, name: str, /, *, versioning: bool = False, force_destroy: bool = False):
        super().__init__(name)
        self.versioning = versioning
        self.force_destroy = force_destroy
        self._subscriptions = []
        self._subscription_names: set[str] = set()

    @property
    def arn(self) -> Output[str]:
        """Get the ARN of the S3 bucket."""
        return self.resources.bucket.arn

    @property
    def bucket_name(self) -> Output[str]:
        return self.resources.bucket.bucket

    @property
    def subscriptions(self) -> list[BucketEventSubscription]:
        return list(self._subscriptions)

    def _create_resources(self) -> S3BucketResources:
        logger.debug("Creating resources for bucket '%s'", self.name)
        bucket = pulumi_aws.s3.Bucket(
            context().prefix(self.name),
            bucket=context().prefix(self.name),
            versioning={"enabled": self.versioning},
            force_destroy=self.force_destroy,
            tags=context().tags or None,
        )
        public_access_block = pulumi_aws.s3.BucketPublicAccessBlock(
            context().prefix(f"{self.name}-pab"),
            bucket=bucket.id,
            block_public_acls=True,
            block_public_policy=True,
            ignore_public_acls=True,
            restrict_public_buckets=True,
        )

        pulumi.export(f"s3bucket_{self.name}_arn", bucket.arn)
        pulumi.export(f"s3bucket_{self.name}_name", bucket.bucket)

        return S3BucketResources(bucket, public_access_block)

    def _subscription_base_name(self, name: str, suffix: str = "") -> str:
        # Keyed by the name the helper derives, suffix included
        derived = f"{name}{suffix}"
        if derived in self._subscription_names:
            raise ValueError(f"Subscription '{derived}' already exists for bucket '{self.name}'")
        return f"{self.name}-{name}"

    def _add(
        self, name: str, sub: BucketEventSubscription, suffix: str = ""
    ) -> BucketEventSubscription:
        self._subscription_names.add(f"{name}{suffix}")
        self._subscriptions.append(sub)
        return sub

    def subscribe(
        self,
        name: str,
        handler: BucketHandler | None = None,
        /,
        *,
        events: Sequence[str],
        filter_prefix: str | None = None,
        filter_suffix: str | None = None,
        **opts: Unpack[FunctionConfigDict],
    ) -> BucketEventSubscription:
        """Subscribe a Lambda function to the given events of this bucket.

        Raises:
            InvalidArgumentError: If events is empty or contains unknown event types
            ValueError: If a subscription with the same name already exists
        """
        sub = subscription.subscribe(
            self._subscription_base_name(name),
            self,
            handler,
            events=events,
            filter_prefix=filter_prefix,
            filter_suffix=filter_suffix,
            **opts,
        )
        return self._add(name, sub)

    def on_put(
        self,
        name: str,
        handler: BucketHandler | None = None,
        /,
        *,
        filter_prefix: str | None = None,
        filter_suffix: str | None = None,
        **opts: Unpack[FunctionConfigDict],
    ) -> BucketEventSubscription:
        sub = subscription.on_put(
            self._subscription_base_name(name, subscription.PUT_SUFFIX),
            self,
            handler,
            filter_prefix=filter_prefix,
            filter_suffix=filter_suffix,
            **opts,
        )
        return self._add(name, sub, subscription.PUT_SUFFIX)

    def on_delete(
        self,
        name: str,
        handler: BucketHandler | None = None,
        /,
        *,
        filter_prefix: str | None = None,
        filter_suffix: str | None = None,
        **opts: Unpack[FunctionConfigDict],
    ) -> BucketEventSubscription:
        sub = subscription.on_delete(
            self._subscription_base_name(name, subscription.DELETE_SUFFIX),
            self,
            handler,
            filter_prefix=filter_prefix,
            filter_suffix=filter_suffix,
            **opts,
        )
        return self._add(name, sub, subscription.DELETE_SUFFIX)

    def on_object_created(  # noqa: PLR0913
        self,
        name: str,
        handler: BucketHandler | None = None,
        /,
        *,
        event: str | None = None,
        filter_prefix: str | None = None,
        filter_suffix: str | None = None,
        **opts: Unpack[FunctionConfigDict],
    ) -> BucketEventSubscription:
        sub = subscription.on_object_created(
            self._subscription_base_name(name, subscription.OBJECT_CREATED_SUFFIX),
            self,
            handler,
            event=event,
            filter_prefix=filter_prefix,
            filter_suffix=filter_suffix,
            **opts,
        )
        return self._add(name, sub, subscription.OBJECT_CREATED_SUFFIX)

    def on_object_removed(  # noqa: PLR0913
        self,
        name: str,
        handler: BucketHandler | None = None,
        /,
        *,
        event: str | None = None,
        filter_prefix: str | None = None,
        filter_suffix: str | None = None,
        **opts: Unpack[FunctionConfigDict],
    ) -> BucketEventSubscription:
        sub = subscription.on_object_removed(
            self._subscription_base_name(name, subscription.OBJECT_REMOVED_SUFFIX),
            self,
            handler,
            event=event,
            filter_prefix=filter_prefix,
            filter_suffix=filter_suffix,
            **opts,
        )
        return self._add(name, sub, subscription.OBJECT_REMOVED_SUFFIX)
