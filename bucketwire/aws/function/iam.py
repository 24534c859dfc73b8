from pulumi_aws.iam import (
    GetPolicyDocumentStatementArgs,
    GetPolicyDocumentStatementPrincipalArgs,
    Role,
    RolePolicyAttachment,
    get_policy_document,
)

from bucketwire.component import safe_name
from bucketwire.context import context

from .constants import LAMBDA_BASIC_EXECUTION_ROLE, MAX_ROLE_NAME_LENGTH


def _create_lambda_role(name: str) -> Role:
    """Create basic execution role for Lambda."""
    assume_role_policy = get_policy_document(
        statements=[
            GetPolicyDocumentStatementArgs(
                actions=["sts:AssumeRole"],
                principals=[
                    GetPolicyDocumentStatementPrincipalArgs(
                        identifiers=["lambda.amazonaws.com"], type="Service"
                    )
                ],
            )
        ]
    )

    return Role(
        safe_name(context().prefix(), name, MAX_ROLE_NAME_LENGTH, "-r"),
        assume_role_policy=assume_role_policy.json,
        tags=context().tags or None,
    )


def _attach_role_policies(
    name: str, role: Role, policy_arns: list[str]
) -> list[RolePolicyAttachment]:
    """Attach the basic execution policy and any configured managed policies to the role."""
    attachments = [
        RolePolicyAttachment(
            context().prefix(f"{name}-basic-execution-r-p-attachment"),
            role=role.name,
            policy_arn=LAMBDA_BASIC_EXECUTION_ROLE,
        )
    ]
    attachments.extend(
        RolePolicyAttachment(
            context().prefix(f"{name}-r-p-attachment-{index}"),
            role=role.name,
            policy_arn=policy_arn,
        )
        for index, policy_arn in enumerate(policy_arns)
    )
    return attachments
