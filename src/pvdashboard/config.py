"""Configuration for the persistent volume dashboard."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Self

import yaml
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from safir.logging import (
    LogLevel,
    Profile,
    configure_logging,
    configure_uvicorn_logging,
)

from .constants import (
    DEFAULT_KUBECONFIG_PATH,
    DEFAULT_PORT,
    ENV_PREFIX,
    ROOT_LOGGER,
)

__all__ = ["Config", "EnvFirstSettings"]


class EnvFirstSettings(BaseSettings):
    """Base class for Pydantic settings with environment overrides.

    Classes that inherit from this base class will prioritize environment
    variables over arguments to the class constructor.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX, extra="forbid", validate_by_name=True
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Override the sources of settings.

        Deactivate :file:`.env` and secret file support. Allow environment
        variables to override init parameters, since init parameters come
        from the YAML configuration file and environment variables should
        take precedence.
        """
        return (env_settings, init_settings)


class Config(EnvFirstSettings):
    """Configuration for the persistent volume dashboard."""

    # Single-word settings are set in YAML by field name. An alias of the
    # same name would also match unprefixed environment variables such as
    # PORT.
    name: Annotated[
        str,
        Field(
            title="Name of application",
            description="Used in the page title and when reporting to Slack",
            validation_alias=AliasChoices(ENV_PREFIX + "NAME"),
        ),
    ] = "pvdashboard"

    log_level: Annotated[
        LogLevel,
        Field(
            title="Log level",
            description="Python logging level",
            examples=[LogLevel.INFO],
            validation_alias=AliasChoices(
                ENV_PREFIX + "LOG_LEVEL", "logLevel"
            ),
        ),
    ] = LogLevel.INFO

    log_profile: Annotated[
        Profile,
        Field(
            title="Application logging profile",
            description=(
                "``production`` uses JSON logging. ``development`` uses"
                " logging that may be easier for humans to read but that"
                " cannot be easily parsed by computers."
            ),
            examples=[Profile.development],
            validation_alias=AliasChoices(
                ENV_PREFIX + "LOG_PROFILE", "logProfile"
            ),
        ),
    ] = Profile.production

    kubeconfig_path: Annotated[
        Path,
        Field(
            title="Path to kubeconfig",
            description=(
                "Kubeconfig file holding the cluster connection parameters"
                " and credentials. Ignored if ``kubernetesInCluster`` is set."
            ),
            validation_alias=AliasChoices(
                "KUBECONFIG", ENV_PREFIX + "KUBECONFIG_PATH", "kubeconfigPath"
            ),
        ),
    ] = DEFAULT_KUBECONFIG_PATH

    kubernetes_in_cluster: Annotated[
        bool,
        Field(
            title="Use in-cluster Kubernetes credentials",
            description=(
                "If true, authenticate with the service account of the pod"
                " running the dashboard instead of a kubeconfig file"
            ),
            validation_alias=AliasChoices(
                ENV_PREFIX + "KUBERNETES_IN_CLUSTER", "kubernetesInCluster"
            ),
        ),
    ] = False

    template_path: Annotated[
        Path | None,
        Field(
            title="Path to dashboard template",
            description=(
                "Jinja template rendered for the dashboard page. If not set,"
                " the template shipped with the package is used."
            ),
            validation_alias=AliasChoices(
                ENV_PREFIX + "TEMPLATE_PATH", "templatePath"
            ),
        ),
    ] = None

    reload_templates: Annotated[
        bool,
        Field(
            title="Reload template on every request",
            description=(
                "If true, the template is read and parsed from disk for each"
                " request, so edits take effect without a restart. If false,"
                " it is parsed once at startup."
            ),
            validation_alias=AliasChoices(
                ENV_PREFIX + "RELOAD_TEMPLATES", "reloadTemplates"
            ),
        ),
    ] = True

    log_pod_placement: Annotated[
        bool,
        Field(
            title="Log pod placement of claims",
            description=(
                "Whether to look up the pods mounting each claim at startup"
                " and log the node each of them runs on"
            ),
            validation_alias=AliasChoices(
                ENV_PREFIX + "LOG_POD_PLACEMENT", "logPodPlacement"
            ),
        ),
    ] = True

    pod_lookup_errors_fatal: Annotated[
        bool,
        Field(
            title="Abort startup on pod lookup errors",
            description=(
                "By default, failures listing pods for the placement log are"
                " logged and ignored. If true, they abort startup like any"
                " other listing failure."
            ),
            validation_alias=AliasChoices(
                ENV_PREFIX + "POD_LOOKUP_ERRORS_FATAL", "podLookupErrorsFatal"
            ),
        ),
    ] = False

    host: Annotated[
        str,
        Field(
            title="Listen address",
            validation_alias=AliasChoices(ENV_PREFIX + "HOST"),
        ),
    ] = "0.0.0.0"  # noqa: S104

    port: Annotated[
        int,
        Field(
            title="Listen port",
            validation_alias=AliasChoices(ENV_PREFIX + "PORT"),
        ),
    ] = DEFAULT_PORT

    slack_webhook: Annotated[
        SecretStr | None,
        Field(
            title="Slack webhook for alerts",
            description=(
                "If set, failures gathering data from Kubernetes at startup"
                " will be reported to Slack via this webhook"
            ),
            validation_alias=AliasChoices(
                ENV_PREFIX + "SLACK_WEBHOOK", "slackWebhook"
            ),
        ),
    ] = None

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Construct the configuration from a YAML file.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.

        Returns
        -------
        Config
            The corresponding configuration.
        """
        with path.open("r") as f:
            settings = yaml.safe_load(f) or {}

        # Pass settings as init arguments rather than using model_validate so
        # that environment variables are still consulted and take precedence.
        return cls(**settings)

    @classmethod
    def load(cls, path: Path) -> Self:
        """Load the configuration, tolerating a missing configuration file.

        Every setting has a default and may be set from the environment, so
        the configuration file is optional.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.

        Returns
        -------
        Config
            The corresponding configuration.
        """
        if path.exists():
            return cls.from_file(path)
        return cls()

    def configure_logging(self) -> None:
        """Configure application and uvicorn logging."""
        configure_logging(
            profile=self.log_profile,
            log_level=self.log_level,
            name=ROOT_LOGGER,
        )
        configure_uvicorn_logging(self.log_level)
