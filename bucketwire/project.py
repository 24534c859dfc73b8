import logging
from functools import cache
from pathlib import Path

from bucketwire.exceptions import BucketwireProjectError

logger = logging.getLogger(__name__)

PROJECT_MARKER_FILES = ("Pulumi.yaml", "Pulumi.yml")


@cache
def get_project_root() -> Path:
    """Find and cache the project root by looking for the Pulumi project file.
    Raises BucketwireProjectError if not found.
    """
    start_path = Path.cwd().resolve()

    current = start_path
    while current != current.parent:
        if any((current / marker).exists() for marker in PROJECT_MARKER_FILES):
            logger.debug("Project root resolved to %s", current)
            return current
        current = current.parent

    raise BucketwireProjectError(
        f"Could not find project root: no {' or '.join(PROJECT_MARKER_FILES)} found in "
        f"{start_path} or its parent directories"
    )
