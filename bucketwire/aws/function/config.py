from dataclasses import dataclass, field
from typing import TypedDict

from bucketwire.aws.function.constants import (
    SUPPORTED_ARCHITECTURES,
    SUPPORTED_RUNTIMES,
    AwsArchitecture,
    AwsLambdaRuntime,
)


class FunctionConfigDict(TypedDict, total=False):
    handler: str
    folder: str
    memory: int
    timeout: int
    environment: dict[str, str]
    architecture: AwsArchitecture
    runtime: AwsLambdaRuntime
    policies: list[str]


@dataclass(frozen=True, kw_only=True)
class FunctionConfig:
    # handler is mandatory but rest defaults to None. Default values are applied when
    # the function resource is created.
    handler: str
    folder: str | None = None
    memory: int | None = None
    timeout: int | None = None
    environment: dict[str, str] = field(default_factory=dict)
    architecture: AwsArchitecture | None = None
    runtime: AwsLambdaRuntime | None = None
    policies: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        handler_parts = self.handler.split("::")

        if len(handler_parts) > 2:  # noqa: PLR2004
            raise ValueError("Handler can only contain one :: separator")

        if len(handler_parts) == 2:  # noqa: PLR2004
            if self.folder is not None:
                raise ValueError("Cannot specify both 'folder' and use '::' in handler")
            folder_path, handler_path = handler_parts
            if "." in folder_path:
                raise ValueError("Folder path should not contain dots")
        else:
            if self.folder is not None and "." in self.folder:
                raise ValueError("Folder path should not contain dots")
            handler_path = self.handler

        if "." not in handler_path:
            raise ValueError(
                "Handler must contain a dot separator between file path and function name"
            )

        file_path, function_name = handler_path.rsplit(".", 1)
        if not file_path or not function_name:
            raise ValueError("Both file path and function name must be non-empty")

        if "." in file_path:
            raise ValueError("File path part should not contain dots")

        self._validate_sizing()
        self._validate_platform()
        self._validate_policies()

    def _validate_sizing(self) -> None:
        if self.memory is not None and not 128 <= self.memory <= 10240:  # noqa: PLR2004
            raise ValueError(f"memory must be between 128 and 10240 MB, got {self.memory}")
        if self.timeout is not None and not 1 <= self.timeout <= 900:  # noqa: PLR2004
            raise ValueError(f"timeout must be between 1 and 900 seconds, got {self.timeout}")

    def _validate_platform(self) -> None:
        if self.runtime is not None and self.runtime not in SUPPORTED_RUNTIMES:
            raise ValueError(
                f"Unsupported runtime '{self.runtime}'. Must be one of {SUPPORTED_RUNTIMES}"
            )
        if self.architecture is not None and self.architecture not in SUPPORTED_ARCHITECTURES:
            raise ValueError(
                f"Unsupported architecture '{self.architecture}'. "
                f"Must be one of {SUPPORTED_ARCHITECTURES}"
            )

    def _validate_policies(self) -> None:
        if not isinstance(self.policies, list):
            raise TypeError(
                f"'policies' must be a list of policy ARNs, got {type(self.policies).__name__}"
            )
        for index, policy_arn in enumerate(self.policies):
            if not isinstance(policy_arn, str) or not policy_arn.startswith("arn:"):
                raise ValueError(f"Item at index {index} in 'policies' is not a policy ARN")

    @property
    def folder_path(self) -> str | None:
        """Returns the folder containing the handler code.

        For "functions/orders::handler.process" → "functions/orders"
        For "handler.process" with folder="functions/orders" → "functions/orders"
        For "functions/users.process" without folder → None
        """
        return self.folder or (self.handler.split("::")[0] if "::" in self.handler else None)

    @property
    def _handler_part(self) -> str:
        return self.handler.split("::")[1] if "::" in self.handler else self.handler

    @property
    def handler_file_path(self) -> str:
        """Returns the file path portion of the handler (without function name).

        For "api::orders/handler.process" → "orders/handler"
        For "handler.process" → "handler"
        """
        return self._handler_part.rsplit(".", 1)[0]

    @property
    def handler_format(self) -> str:
        """Returns the handler string in AWS Lambda format.

        For "api::orders/handler.process" → "orders/handler.process"
        For "orders/handler.process" → "handler.process" (last segment only)
        """
        return self._handler_part if self.folder_path else self.handler.split("/")[-1]
