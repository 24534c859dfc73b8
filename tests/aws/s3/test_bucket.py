import pulumi
import pytest

from bucketwire.aws.s3 import Bucket
from bucketwire.context import AppContext, _ContextStore, context
from bucketwire.exceptions import InvalidArgumentError

from ..pulumi_mocks import ACCOUNT_ID, DEFAULT_REGION, tid, tn

# Test prefix
TP = "test-test-"

THUMBNAIL_HANDLER = "functions/images.thumbnail"
CLEANUP_HANDLER = "functions/images.cleanup"


@pulumi.runtime.test
def test_bucket_properties(pulumi_mocks):
    bucket = Bucket("photos")

    def check_resources(args):
        bucket_id, arn, bucket_name = args
        assert bucket_id == tid(TP + "photos")
        assert arn == f"arn:aws:s3:::{TP}photos"
        assert bucket_name == TP + "photos"

    pulumi.Output.all(bucket.resources.bucket.id, bucket.arn, bucket.bucket_name).apply(
        check_resources
    )


@pulumi.runtime.test
def test_bucket_resources(pulumi_mocks):
    bucket = Bucket("photos")

    def check_resources(_):
        (created,) = pulumi_mocks.created_buckets(TP + "photos")
        assert created.inputs["bucket"] == TP + "photos"
        assert created.inputs["versioning"] == {"enabled": False}
        assert created.inputs["forceDestroy"] is False
        assert "tags" not in created.inputs

        (pab,) = pulumi_mocks.created_public_access_blocks(TP + "photos-pab")
        assert pab.inputs["bucket"] == tid(TP + "photos")
        assert pab.inputs["blockPublicAcls"] is True
        assert pab.inputs["blockPublicPolicy"] is True
        assert pab.inputs["ignorePublicAcls"] is True
        assert pab.inputs["restrictPublicBuckets"] is True

    bucket.resources.public_access_block.id.apply(check_resources)


@pulumi.runtime.test
def test_bucket_options_and_tags(pulumi_mocks):
    _ContextStore.clear()
    _ContextStore.set(AppContext(name="test", env="test", tags={"team": "media"}))
    bucket = Bucket("archive", versioning=True, force_destroy=True)

    def check_resources(_):
        (created,) = pulumi_mocks.created_buckets(TP + "archive")
        assert created.inputs["versioning"] == {"enabled": True}
        assert created.inputs["forceDestroy"] is True
        assert created.inputs["tags"] == {"team": "media"}

    bucket.resources.bucket.id.apply(check_resources)


def test_bucket_does_not_create_resources_until_needed():
    bucket = Bucket("photos")

    assert not bucket.resources_created
    assert bucket.subscriptions == []


@pytest.mark.parametrize(
    ("method", "kwargs", "expected_name", "expected_events"),
    [
        pytest.param("on_put", {}, "photos-thumbnail-put", ["s3:ObjectCreated:*"], id="on_put"),
        pytest.param(
            "on_delete", {}, "photos-thumbnail-delete", ["s3:ObjectRemoved:*"], id="on_delete"
        ),
        pytest.param(
            "on_object_created",
            {"event": "Copy"},
            "photos-thumbnail-object-created",
            ["s3:ObjectCreated:Copy"],
            id="on_object_created",
        ),
        pytest.param(
            "on_object_removed",
            {},
            "photos-thumbnail-object-removed",
            ["s3:ObjectRemoved:*"],
            id="on_object_removed",
        ),
        pytest.param(
            "subscribe",
            {"events": ["s3:ObjectCreated:Put", "s3:ObjectRestore:Completed"]},
            "photos-thumbnail",
            ["s3:ObjectCreated:Put", "s3:ObjectRestore:Completed"],
            id="subscribe",
        ),
    ],
)
@pulumi.runtime.test
def test_bucket_subscription_methods(
    pulumi_mocks, project_cwd, method, kwargs, expected_name, expected_events
):
    bucket = Bucket("photos")

    sub = getattr(bucket, method)("thumbnail", THUMBNAIL_HANDLER, **kwargs)

    assert sub.name == TP + expected_name
    assert bucket.subscriptions == [sub]
    notifications = context().registrations.flush()

    def check_resources(_):
        (fn,) = pulumi_mocks.created_functions()
        assert fn.name == f"{TP}{expected_name}-bucket-event"
        (permission,) = pulumi_mocks.created_permissions(TP + expected_name)
        assert permission.inputs["sourceArn"] == f"arn:aws:s3:::{tid(TP + 'photos')}"

        (notification,) = pulumi_mocks.created_bucket_notifications()
        assert notification.name == TP + expected_name
        (entry,) = notification.inputs["lambdaFunctions"]
        assert entry["events"] == expected_events

    pulumi.Output.all(sub.permission.id, *[n.id for n in notifications]).apply(check_resources)


@pulumi.runtime.test
def test_bucket_subscriptions_merge_into_one_notification(pulumi_mocks, project_cwd):
    bucket = Bucket("photos")
    thumbnail = bucket.on_put("thumbnail", THUMBNAIL_HANDLER, filter_suffix=".jpg")
    cleanup = bucket.on_delete("cleanup", CLEANUP_HANDLER, filter_prefix="thumbs/")

    notifications = context().registrations.flush()

    def check_resources(_):
        (notification,) = pulumi_mocks.created_bucket_notifications()
        assert notification.name == TP + "photos-thumbnail-put"
        assert notification.inputs["bucket"] == tid(TP + "photos")
        thumbnail_entry, cleanup_entry = notification.inputs["lambdaFunctions"]
        assert thumbnail_entry["lambdaFunctionArn"] == (
            f"arn:aws:lambda:{DEFAULT_REGION}:{ACCOUNT_ID}:function:"
            f"{tn(TP + 'photos-thumbnail-put-bucket-event')}"
        )
        assert thumbnail_entry["filterSuffix"] == ".jpg"
        assert cleanup_entry["events"] == ["s3:ObjectRemoved:*"]
        assert cleanup_entry["filterPrefix"] == "thumbs/"

    assert bucket.subscriptions == [thumbnail, cleanup]
    assert len(notifications) == 1
    pulumi.Output.all(thumbnail.permission.id, cleanup.permission.id, notifications[0].id).apply(
        check_resources
    )


@pulumi.runtime.test
def test_bucket_rejects_duplicate_subscription_name(pulumi_mocks, project_cwd):
    bucket = Bucket("photos")
    bucket.on_put("thumbnail", THUMBNAIL_HANDLER)

    with pytest.raises(ValueError, match="Subscription 'thumbnail-put' already exists"):
        bucket.on_put("thumbnail", CLEANUP_HANDLER)

    assert len(bucket.subscriptions) == 1
    assert context().registrations.pending == 1


@pulumi.runtime.test
def test_bucket_allows_same_name_for_different_helpers(pulumi_mocks, project_cwd):
    bucket = Bucket("photos")

    put = bucket.on_put("sync", THUMBNAIL_HANDLER)
    delete = bucket.on_delete("sync", CLEANUP_HANDLER)

    assert [put.name, delete.name] == [TP + "photos-sync-put", TP + "photos-sync-delete"]
    assert bucket.subscriptions == [put, delete]
    assert context().registrations.pending == 2


@pulumi.runtime.test
def test_bucket_rejects_helper_clashing_with_subscribe_name(pulumi_mocks, project_cwd):
    bucket = Bucket("photos")
    bucket.subscribe("sync-put", THUMBNAIL_HANDLER, events=["s3:ObjectCreated:*"])

    with pytest.raises(ValueError, match="Subscription 'sync-put' already exists"):
        bucket.on_put("sync", CLEANUP_HANDLER)

    assert len(bucket.subscriptions) == 1
    assert context().registrations.pending == 1


def test_bucket_invalid_subscription_is_not_recorded():
    bucket = Bucket("photos")

    with pytest.raises(InvalidArgumentError):
        bucket.subscribe("thumbnail", THUMBNAIL_HANDLER, events=[])

    assert bucket.subscriptions == []
    assert not bucket.resources_created
