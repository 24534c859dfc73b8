from dataclasses import dataclass, field
from typing import ClassVar

from bucketwire.notifications import RegistrationContext


@dataclass(frozen=True)
class AppContext:
    """Context information available while a bucketwire program declares resources."""

    name: str
    env: str
    tags: dict[str, str] = field(default_factory=dict)
    registrations: RegistrationContext = field(default_factory=RegistrationContext)

    def prefix(self, name: str | None = None) -> str:
        """Get resource name prefix or prefixed name.

        Args:
            name: Optional name to prefix. If None, returns just the prefix with trailing dash.

        Returns:
            If name is None: "{app}-{env}-"
            If name provided: "{app}-{env}-{name}"
        """
        base = f"{self.name.lower()}-{self.env.lower()}-"
        return base if name is None else f"{base}{name}"


class _ContextStore:
    """Internal storage for the current app context."""

    _instance: ClassVar[AppContext | None] = None

    @classmethod
    def set(cls, context: AppContext) -> None:
        """Set the context. Can only be called once per program run."""
        if cls._instance is not None:
            raise RuntimeError("Context has already been initialized")
        cls._instance = context

    @classmethod
    def get(cls) -> AppContext:
        if cls._instance is None:
            raise RuntimeError(
                "bucketwire context not initialized. This usually means you're declaring "
                "resources outside of a BucketwireApp program."
            )
        return cls._instance

    @classmethod
    def clear(cls) -> None:
        """Clear the context. Only used for testing."""
        cls._instance = None


def context() -> AppContext:
    """Get the current bucketwire app context.

    Returns:
        AppContext with app name, environment, tags and the run's RegistrationContext.

    Raises:
        RuntimeError: If called before context is initialized.
    """
    return _ContextStore.get()
