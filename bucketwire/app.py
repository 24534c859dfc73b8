import logging
from collections.abc import Callable
from importlib import import_module
from pathlib import Path
from typing import ClassVar, final

import pulumi

from bucketwire.component import ComponentRegistry
from bucketwire.config import BucketwireAppConfig
from bucketwire.context import AppContext, _ContextStore, context

from .project import get_project_root

logger = logging.getLogger(__name__)


type BucketwireConfigFn = Callable[[str], BucketwireAppConfig]


@final
class BucketwireApp:
    """Entry point of a bucketwire Pulumi program.

    Examples:
        app = BucketwireApp("media", modules=["infra/*.py"])

        @app.config
        def config(env: str) -> BucketwireAppConfig:
            return BucketwireAppConfig(tags={"env": env})

        @app.run
        def run() -> None:
            uploads = Bucket("uploads")
            uploads.on_put("thumbnail", "functions/images.thumbnail")

        app.execute()  # in the Pulumi project's __main__.py
    """

    __instance: ClassVar["BucketwireApp | None"] = None

    def __init__(self, name: str, modules: list[str] | None = None):
        if BucketwireApp.__instance is not None:
            raise RuntimeError("BucketwireApp has already been instantiated.")

        self._name = name
        self._modules = modules or []
        self._config_func: BucketwireConfigFn | None = None
        self._run_func: Callable[[], None] | None = None
        BucketwireApp.__instance = self

    @classmethod
    def get_instance(cls) -> "BucketwireApp":
        if cls.__instance is None:
            raise RuntimeError(
                "BucketwireApp has not been instantiated. Ensure 'app = BucketwireApp(...)' is "
                "called in your Pulumi program."
            )
        return cls.__instance

    @classmethod
    def _reset(cls) -> None:
        """Forget the current instance. Only used for testing."""
        cls.__instance = None

    @property
    def name(self) -> str:
        return self._name

    def config(self, func: BucketwireConfigFn) -> BucketwireConfigFn:
        if self._config_func:
            raise RuntimeError("Config function already registered.")
        self._config_func = func
        logger.debug("Config function '%s' registered for app '%s'.", func.__name__, self._name)
        return func

    def run(self, func: Callable[[], None]) -> Callable[[], None]:
        if self._run_func:
            raise RuntimeError("Run function already registered.")
        self._run_func = func
        logger.debug("Run function '%s' registered for app '%s'.", func.__name__, self._name)
        return func

    def _app_config(self, env: str) -> BucketwireAppConfig:
        if not self._config_func:
            return BucketwireAppConfig()
        app_config = self._config_func(env)
        if app_config is None or not isinstance(app_config, BucketwireAppConfig):
            raise ValueError(
                "@app.config function must return an instance of BucketwireAppConfig."
            )
        if not app_config.is_valid_environment(env):
            raise ValueError(
                f"Environment '{env}' is not one of the configured environments: "
                f"{', '.join(app_config.environments)}"
            )
        return app_config

    def program(self, env: str) -> Callable[[], None]:
        """Build the Pulumi program function for ``env``.

        The returned function can be passed to the Pulumi automation API or called from a
        Pulumi project's ``__main__.py``.
        """
        if not self._run_func:
            raise RuntimeError("No @BucketwireApp.run function defined.")
        run_func = self._run_func

        def pulumi_program() -> None:
            app_config = self._app_config(env)
            # One context, and so one RegistrationContext, per program run
            _ContextStore.clear()
            _ContextStore.set(AppContext(name=self._name, env=env, tags=dict(app_config.tags)))
            logger.info("Declaring resources for app '%s' in environment '%s'", self._name, env)
            run_func()
            self.drive()

        return pulumi_program

    def execute(self, env: str | None = None) -> None:
        """Run the program inside the current Pulumi process, env defaults to the stack name."""
        self.program(env or pulumi.get_stack())()

    def drive(self) -> None:
        self._load_modules(self._modules)
        self.finalize()

    def finalize(self) -> None:
        """Declare the bucket notifications of every registered subscription.

        Components are resolved first, which may create more components and register more
        subscriptions. Resolving and flushing repeat until every component is resolved and
        a flush has nothing left to declare.
        """
        registrations = context().registrations
        while True:
            self._resolve_components()
            declared = registrations.flush()
            if not declared and self._all_components_resolved():
                break

    @staticmethod
    def _all_components_resolved() -> bool:
        return all(c.resources_created for c in ComponentRegistry.all_instances())

    @staticmethod
    def _resolve_components() -> None:
        for component in ComponentRegistry.all_instances():
            _ = component.resources

    def _load_modules(self, modules: list[str]) -> None:
        if not modules:
            return
        project_root = get_project_root()
        exclude_dirs = {"__pycache__", "build", "dist", "node_modules", ".egg-info"}
        for pattern in modules:
            # Direct module import
            if "." in pattern and not any(c in pattern for c in "/*?[]"):
                import_module(pattern)
                continue

            for file in project_root.rglob(pattern):
                path = Path(file).relative_to(project_root)

                if any(part.startswith(".") for part in path.parts):
                    continue

                if path.suffix == ".py" and not any(
                    excluded in path.parts for excluded in exclude_dirs
                ):
                    parts = list(path.with_suffix("").parts)
                    if all(part.isidentifier() for part in parts):
                        import_module(".".join(parts))
