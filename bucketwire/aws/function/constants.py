from typing import Literal, get_args

type AwsArchitecture = Literal["x86_64", "arm64"]
type AwsLambdaRuntime = Literal["python3.12", "python3.13"]

SUPPORTED_ARCHITECTURES: tuple[str, ...] = get_args(AwsArchitecture.__value__)
SUPPORTED_RUNTIMES: tuple[str, ...] = get_args(AwsLambdaRuntime.__value__)

DEFAULT_RUNTIME: AwsLambdaRuntime = "python3.12"
DEFAULT_ARCHITECTURE: AwsArchitecture = "x86_64"
DEFAULT_MEMORY = 128
DEFAULT_TIMEOUT = 60

# Never packaged with a handler
LAMBDA_EXCLUDED_FILES = ["Pulumi.yaml", "Pulumi.yml", ".DS_Store"]
LAMBDA_EXCLUDED_DIRS = ["__pycache__", ".pytest_cache"]
LAMBDA_EXCLUDED_EXTENSIONS = [".pyc"]

MAX_FUNCTION_NAME_LENGTH = 64
MAX_ROLE_NAME_LENGTH = 64
LAMBDA_BASIC_EXECUTION_ROLE = "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
