from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class BucketwireAppConfig:
    """bucketwire app configuration.

    Returned by the function registered with ``@app.config`` for the environment being
    deployed.

    Attributes:
        environments: Names of the environments this app may be deployed to. When empty,
            any environment name is accepted.
        tags: Tags applied to every bucket and function declared by bucketwire components.

    ## Examples

    ```python
    @app.config
    def config(env: str) -> BucketwireAppConfig:
        return BucketwireAppConfig(environments=["staging", "prod"], tags={"team": "data"})
    ```
    """

    environments: list[str] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)

    def is_valid_environment(self, env: str) -> bool:
        return not self.environments or env in self.environments
