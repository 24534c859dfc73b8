import logging
from dataclasses import dataclass
from typing import Unpack, final

import pulumi
from pulumi import Output, ResourceOptions
from pulumi_aws import lambda_
from pulumi_aws.iam import Role, RolePolicyAttachment

from bucketwire.aws.function.config import FunctionConfig, FunctionConfigDict
from bucketwire.aws.function.constants import (
    DEFAULT_ARCHITECTURE,
    DEFAULT_MEMORY,
    DEFAULT_RUNTIME,
    DEFAULT_TIMEOUT,
    MAX_FUNCTION_NAME_LENGTH,
)
from bucketwire.aws.function.iam import _attach_role_policies, _create_lambda_role
from bucketwire.aws.function.packaging import _create_lambda_archive
from bucketwire.component import Component, safe_name
from bucketwire.context import context

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True)
class FunctionResources:
    function: lambda_.Function
    role: Role
    role_attachments: list[RolePolicyAttachment]


@final
class Function(Component[FunctionResources]):
    """AWS Lambda function component packaged from a handler in the project.

    Args:
        name: Function name
        config: Complete function configuration as FunctionConfig or dict
        **opts: Individual function configuration parameters

    You can configure the function in two ways:
        - Provide complete config:
            function = Function(
                name="resize-image",
                config={"handler": "functions/images.resize", "timeout": 30}
            )
        - Provide individual parameters:
            function = Function(
                name="resize-image",
                handler="functions/images.resize",
                memory=512,
            )
    """

    _config: FunctionConfig

    def __init__(
        self,
        name: str,
        config: None | FunctionConfig | FunctionConfigDict = None,
        **opts: Unpack[FunctionConfigDict],
    ):
        self._config = self._parse_config(config, opts)
        super().__init__(name)

    @staticmethod
    def _parse_config(
        config: None | FunctionConfig | FunctionConfigDict, opts: FunctionConfigDict
    ) -> FunctionConfig:
        if not config and not opts:
            raise ValueError(
                "Missing function handler: must provide either a complete configuration via "
                "'config' parameter or at least the 'handler' option"
            )
        if config and opts:
            raise ValueError(
                "Invalid configuration: cannot combine 'config' parameter with additional options "
                "- provide all settings either in 'config' or as separate options"
            )
        if config is None:
            return FunctionConfig(**opts)
        if isinstance(config, FunctionConfig):
            return config
        if isinstance(config, dict):
            return FunctionConfig(**config)

        raise TypeError(
            f"Invalid config type: expected FunctionConfig or dict, got {type(config).__name__}"
        )

    @property
    def config(self) -> FunctionConfig:
        return self._config

    @property
    def arn(self) -> Output[str]:
        return self.resources.function.arn

    @property
    def function_name(self) -> Output[str]:
        return self.resources.function.name

    def _create_resources(self) -> FunctionResources:
        logger.debug("Creating resources for function '%s'", self.name)
        lambda_role = _create_lambda_role(self.name)
        role_attachments = _attach_role_policies(self.name, lambda_role, self.config.policies)

        function_resource = lambda_.Function(
            safe_name(context().prefix(), self.name, MAX_FUNCTION_NAME_LENGTH),
            role=lambda_role.arn,
            architectures=[self.config.architecture or DEFAULT_ARCHITECTURE],
            runtime=self.config.runtime or DEFAULT_RUNTIME,
            code=_create_lambda_archive(self.config),
            handler=self.config.handler_format,
            environment={"variables": self.config.environment} if self.config.environment else None,
            memory_size=self.config.memory or DEFAULT_MEMORY,
            timeout=self.config.timeout or DEFAULT_TIMEOUT,
            tags=context().tags or None,
            # The role must carry its policies before the function can be invoked
            opts=ResourceOptions(depends_on=role_attachments),
        )
        pulumi.export(f"function_{self.name}_arn", function_resource.arn)
        pulumi.export(f"function_{self.name}_name", function_resource.name)
        pulumi.export(f"function_{self.name}_role_arn", lambda_role.arn)

        return FunctionResources(function_resource, lambda_role, role_attachments)
