"""Subscribing Lambda functions to S3 bucket events.

Each subscription declares its ``lambda_.Permission`` right away and registers itself with
the run's ``RegistrationContext``. The bucket's single ``BucketNotification`` is declared
later, when the app flushes the registrations (see ``bucketwire.notifications``).
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Unpack, final

from pulumi_aws import lambda_, s3

from bucketwire.aws.function import Function, FunctionConfig, FunctionConfigDict
from bucketwire.component import safe_name
from bucketwire.context import context
from bucketwire.exceptions import InvalidArgumentError
from bucketwire.notifications import RegistrationContext, SubscriptionRequest

if TYPE_CHECKING:
    from bucketwire.aws.s3.bucket import Bucket

logger = logging.getLogger(__name__)

MAX_PERMISSION_NAME_LENGTH = 100

OBJECT_CREATED = "s3:ObjectCreated"
OBJECT_REMOVED = "s3:ObjectRemoved"

OBJECT_CREATED_QUALIFIERS = ("*", "Put", "Post", "Copy", "CompleteMultipartUpload")
OBJECT_REMOVED_QUALIFIERS = ("*", "Delete", "DeleteMarkerCreated")

# Appended to the subscription name by the helpers
PUT_SUFFIX = "-put"
DELETE_SUFFIX = "-delete"
OBJECT_CREATED_SUFFIX = "-object-created"
OBJECT_REMOVED_SUFFIX = "-object-removed"

VALID_S3_EVENTS = (
    *(f"{OBJECT_CREATED}:{q}" for q in OBJECT_CREATED_QUALIFIERS),
    *(f"{OBJECT_REMOVED}:{q}" for q in OBJECT_REMOVED_QUALIFIERS),
    "s3:ObjectRestore:*",
    "s3:ObjectRestore:Post",
    "s3:ObjectRestore:Completed",
    "s3:ObjectRestore:Delete",
    "s3:ReducedRedundancyLostObject",
    "s3:Replication:*",
    "s3:Replication:OperationFailedReplication",
    "s3:Replication:OperationMissedThreshold",
    "s3:Replication:OperationReplicatedAfterThreshold",
    "s3:Replication:OperationNotTracked",
    "s3:LifecycleExpiration:*",
    "s3:LifecycleExpiration:Delete",
    "s3:LifecycleExpiration:DeleteMarkerCreated",
    "s3:LifecycleTransition",
    "s3:IntelligentTiering",
    "s3:ObjectTagging:*",
    "s3:ObjectTagging:Put",
    "s3:ObjectTagging:Delete",
    "s3:ObjectAcl:Put",
)

type BucketHandler = str | FunctionConfig | FunctionConfigDict | Function | lambda_.Function


@final
@dataclass(frozen=True)
class BucketEventSubscription:
    """A function subscribed to a bucket's events.

    The bucket's ``BucketNotification`` is not part of the subscription as it only exists
    once the app has flushed its registrations.
    """

    name: str
    bucket: s3.Bucket
    function: lambda_.Function
    permission: lambda_.Permission
    events: tuple[str, ...]
    filter_prefix: str | None = None
    filter_suffix: str | None = None


def _validate_events(events: Sequence[str]) -> tuple[str, ...]:
    if isinstance(events, str):
        raise TypeError("events must be a list of event names, not a single string")
    if not events:
        raise InvalidArgumentError("events list cannot be empty")
    invalid = [event for event in events if event not in VALID_S3_EVENTS]
    if invalid:
        raise InvalidArgumentError(
            f"Invalid S3 event type(s): {', '.join(map(repr, invalid))}. "
            f"Valid event types are: {', '.join(VALID_S3_EVENTS)}"
        )
    return tuple(events)


def _parse_handler(
    handler: BucketHandler | None, opts: FunctionConfigDict
) -> FunctionConfig | Function | lambda_.Function:
    if isinstance(handler, dict | FunctionConfig | Function | lambda_.Function) and opts:
        raise ValueError(
            "Invalid configuration: cannot combine complete handler "
            "configuration with additional options"
        )

    if isinstance(handler, FunctionConfig | Function | lambda_.Function):
        return handler

    if isinstance(handler, dict):
        return FunctionConfig(**handler)

    if isinstance(handler, str):
        if "handler" in opts:
            raise ValueError(
                "Ambiguous handler configuration: handler is specified both as positional "
                "argument and in options"
            )
        return FunctionConfig(handler=handler, **opts)

    if handler is None:
        if "handler" not in opts:
            raise ValueError(
                "Missing handler configuration: when handler argument is None, "
                "'handler' option must be provided"
            )
        return FunctionConfig(**opts)

    raise TypeError(f"Invalid handler type: {type(handler).__name__}")


def _resolve_function(
    name: str, handler: FunctionConfig | Function | lambda_.Function
) -> lambda_.Function:
    if isinstance(handler, lambda_.Function):
        return handler
    if isinstance(handler, Function):
        return handler.resources.function
    return Function(f"{name}-bucket-event", handler).resources.function


def _bucket_resource(bucket: "Bucket | s3.Bucket") -> s3.Bucket:
    if isinstance(bucket, s3.Bucket):
        return bucket
    resources = getattr(bucket, "resources", None)
    if resources is None or not isinstance(getattr(resources, "bucket", None), s3.Bucket):
        raise TypeError(
            f"Invalid bucket type: expected Bucket or pulumi_aws.s3.Bucket, "
            f"got {type(bucket).__name__}"
        )
    return resources.bucket


def _qualifier(event: str | None, allowed: Sequence[str], category: str) -> str:
    if event is None:
        return "*"
    if not event:
        raise InvalidArgumentError(f"{category} event qualifier cannot be empty")
    if event not in allowed:
        raise InvalidArgumentError(
            f"Invalid {category} event qualifier '{event}'. Must be one of {', '.join(allowed)}"
        )
    return event


def subscribe(  # noqa: PLR0913
    name: str,
    bucket: "Bucket | s3.Bucket",
    handler: BucketHandler | None = None,
    /,
    *,
    events: Sequence[str],
    filter_prefix: str | None = None,
    filter_suffix: str | None = None,
    registrations: RegistrationContext | None = None,
    **opts: Unpack[FunctionConfigDict],
) -> BucketEventSubscription:
    """Subscribe a Lambda function to events of a bucket.

    Use this when full control over the events is wanted and the helpers (``on_put``,
    ``on_delete``, ``on_object_created``, ``on_object_removed``) are not sufficient.

    Args:
        name: Unique name of the subscription, used for its permission and function
        bucket: Bucket component or pulumi_aws.s3.Bucket resource
        handler: Handler path, function configuration or an existing function
        events: S3 event types, e.g. ``["s3:ObjectCreated:*"]``. Cannot be empty.
        filter_prefix: Only notify for object keys starting with this prefix
        filter_suffix: Only notify for object keys ending with this suffix
        registrations: Registration context to use instead of the current app's one.
            Resource names still take the current app's prefix, so an app context is
            required either way.
        **opts: Lambda function configuration (memory, timeout, etc.)

    Raises:
        InvalidArgumentError: If events is empty or contains unknown event types
        RuntimeError: If no app context is initialized
    """
    events = _validate_events(events)
    parsed_handler = _parse_handler(handler, opts)
    prefix = context().prefix()
    if registrations is None:
        registrations = context().registrations

    bucket_resource = _bucket_resource(bucket)
    function = _resolve_function(name, parsed_handler)
    subscription_name = safe_name(prefix, name, MAX_PERMISSION_NAME_LENGTH)

    permission = lambda_.Permission(
        subscription_name,
        action="lambda:InvokeFunction",
        function=function.name,
        principal="s3.amazonaws.com",
        source_arn=bucket_resource.id.apply(lambda bucket_name: f"arn:aws:s3:::{bucket_name}"),
    )

    registrations.register(
        bucket_resource,
        SubscriptionRequest(
            name=subscription_name,
            events=events,
            function_arn=function.arn,
            permission=permission,
            filter_prefix=filter_prefix,
            filter_suffix=filter_suffix,
        ),
    )
    logger.debug("Subscribed '%s' to %s", subscription_name, ", ".join(events))

    return BucketEventSubscription(
        name=subscription_name,
        bucket=bucket_resource,
        function=function,
        permission=permission,
        events=events,
        filter_prefix=filter_prefix,
        filter_suffix=filter_suffix,
    )


def on_put(  # noqa: PLR0913
    name: str,
    bucket: "Bucket | s3.Bucket",
    handler: BucketHandler | None = None,
    /,
    *,
    filter_prefix: str | None = None,
    filter_suffix: str | None = None,
    registrations: RegistrationContext | None = None,
    **opts: Unpack[FunctionConfigDict],
) -> BucketEventSubscription:
    """Subscribe to every object created in the bucket (``s3:ObjectCreated:*``)."""
    return subscribe(
        f"{name}{PUT_SUFFIX}",
        bucket,
        handler,
        events=[f"{OBJECT_CREATED}:*"],
        filter_prefix=filter_prefix,
        filter_suffix=filter_suffix,
        registrations=registrations,
        **opts,
    )


def on_delete(  # noqa: PLR0913
    name: str,
    bucket: "Bucket | s3.Bucket",
    handler: BucketHandler | None = None,
    /,
    *,
    filter_prefix: str | None = None,
    filter_suffix: str | None = None,
    registrations: RegistrationContext | None = None,
    **opts: Unpack[FunctionConfigDict],
) -> BucketEventSubscription:
    """Subscribe to every object removed from the bucket (``s3:ObjectRemoved:*``)."""
    return subscribe(
        f"{name}{DELETE_SUFFIX}",
        bucket,
        handler,
        events=[f"{OBJECT_REMOVED}:*"],
        filter_prefix=filter_prefix,
        filter_suffix=filter_suffix,
        registrations=registrations,
        **opts,
    )


def on_object_created(  # noqa: PLR0913
    name: str,
    bucket: "Bucket | s3.Bucket",
    handler: BucketHandler | None = None,
    /,
    *,
    event: str | None = None,
    filter_prefix: str | None = None,
    filter_suffix: str | None = None,
    registrations: RegistrationContext | None = None,
    **opts: Unpack[FunctionConfigDict],
) -> BucketEventSubscription:
    """Subscribe to ``s3:ObjectCreated`` events.

    Args:
        event: One of "*", "Put", "Post", "Copy", "CompleteMultipartUpload".
            Defaults to "*".
    """
    qualifier = _qualifier(event, OBJECT_CREATED_QUALIFIERS, OBJECT_CREATED)
    return subscribe(
        f"{name}{OBJECT_CREATED_SUFFIX}",
        bucket,
        handler,
        events=[f"{OBJECT_CREATED}:{qualifier}"],
        filter_prefix=filter_prefix,
        filter_suffix=filter_suffix,
        registrations=registrations,
        **opts,
    )


def on_object_removed(  # noqa: PLR0913
    name: str,
    bucket: "Bucket | s3.Bucket",
    handler: BucketHandler | None = None,
    /,
    *,
    event: str | None = None,
    filter_prefix: str | None = None,
    filter_suffix: str | None = None,
    registrations: RegistrationContext | None = None,
    **opts: Unpack[FunctionConfigDict],
) -> BucketEventSubscription:
    """Subscribe to ``s3:ObjectRemoved`` events.

    Args:
        event: One of "*", "Delete", "DeleteMarkerCreated". Defaults to "*".
    """
    qualifier = _qualifier(event, OBJECT_REMOVED_QUALIFIERS, OBJECT_REMOVED)
    return subscribe(
        f"{name}{OBJECT_REMOVED_SUFFIX}",
        bucket,
        handler,
        events=[f"{OBJECT_REMOVED}:{qualifier}"],
        filter_prefix=filter_prefix,
        filter_suffix=filter_suffix,
        registrations=registrations,
        **opts,
    )
