from pathlib import Path

from pulumi import Asset, AssetArchive, FileAsset

from bucketwire.project import get_project_root

from .config import FunctionConfig
from .constants import LAMBDA_EXCLUDED_DIRS, LAMBDA_EXCLUDED_EXTENSIONS, LAMBDA_EXCLUDED_FILES


def _create_lambda_archive(function_config: FunctionConfig) -> AssetArchive:
    """Create an AssetArchive for Lambda function based on configuration.
    Handles both single file and folder-based Lambdas.
    """

    project_root = get_project_root()

    assets: dict[str, Asset] = {}
    handler_file = str(Path(function_config.handler_file_path).with_suffix(".py"))
    if function_config.folder_path:
        full_folder_path = project_root / function_config.folder_path
        if not full_folder_path.exists():
            raise ValueError(f"Folder not found: {full_folder_path}")

        absolute_handler_file = full_folder_path / handler_file
        if not absolute_handler_file.exists():
            raise ValueError(f"Handler file not found in folder: {absolute_handler_file}")

        assets |= {
            str(file_path.relative_to(full_folder_path)): FileAsset(file_path)
            for file_path in full_folder_path.rglob("*")
            if not (
                file_path.is_dir()
                or file_path.name in LAMBDA_EXCLUDED_FILES
                or file_path.parent.name in LAMBDA_EXCLUDED_DIRS
                or file_path.suffix in LAMBDA_EXCLUDED_EXTENSIONS
            )
        }
    else:
        absolute_handler_file = project_root / handler_file
        if not absolute_handler_file.exists():
            raise ValueError(f"Handler file not found: {absolute_handler_file}")
        assets[absolute_handler_file.name] = FileAsset(absolute_handler_file)

    return AssetArchive(assets)
