"""Component factory and process-global context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

import structlog
from kubernetes_asyncio import client
from kubernetes_asyncio import config as kubernetes_config
from kubernetes_asyncio.client import ApiClient
from safir.kubernetes import initialize_kubernetes
from structlog.stdlib import BoundLogger

from .config import Config
from .constants import ROOT_LOGGER
from .models.domain.dashboard import Snapshot
from .services.aggregator import SnapshotAggregator
from .storage.kubernetes.namespace import NamespaceStorage
from .storage.kubernetes.pod import PodStorage
from .storage.kubernetes.pv import PersistentVolumeStorage
from .storage.kubernetes.pvc import PersistentVolumeClaimStorage
from .templates import DashboardRenderer

__all__ = ["Factory", "ProcessContext", "load_kubernetes_config"]


async def load_kubernetes_config(config: Config) -> None:
    """Load the Kubernetes connection parameters and credentials.

    Parameters
    ----------
    config
        Dashboard configuration.
    """
    if config.kubernetes_in_cluster:
        await initialize_kubernetes()
    else:
        path = str(config.kubeconfig_path)
        await kubernetes_config.load_kube_config(config_file=path)


@dataclass(frozen=True, slots=True)
class ProcessContext:
    """Per-process global application state.

    Holds the snapshot gathered at startup along with everything needed to
    render it. Managed by
    `~pvdashboard.dependencies.context.ContextDependency`.
    """

    config: Config
    """Dashboard configuration."""

    kubernetes_client: ApiClient
    """Kubernetes client used to gather the snapshot."""

    renderer: DashboardRenderer
    """Renderer for the dashboard page."""

    snapshot: Snapshot
    """Volumes and claims gathered at startup."""

    @classmethod
    async def from_config(cls, config: Config) -> Self:
        """Create a new process context and gather the snapshot.

        Parameters
        ----------
        config
            Dashboard configuration.

        Returns
        -------
        ProcessContext
            Shared context for a dashboard process.

        Raises
        ------
        KubernetesError
            Raised if the snapshot could not be gathered.
        TemplateLoadError
            Raised if templates are not reloaded and the template could not
            be loaded.
        """
        renderer = DashboardRenderer(
            config.template_path, reload=config.reload_templates
        )
        await load_kubernetes_config(config)
        kubernetes_client = client.ApiClient()
        logger = structlog.get_logger(ROOT_LOGGER)
        factory = Factory(config, kubernetes_client, logger)
        try:
            aggregator = factory.create_snapshot_aggregator()
            snapshot = await aggregator.build_snapshot()
        except Exception:
            await kubernetes_client.close()
            raise
        return cls(
            config=config,
            kubernetes_client=kubernetes_client,
            renderer=renderer,
            snapshot=snapshot,
        )

    async def aclose(self) -> None:
        """Free allocated resources."""
        await self.kubernetes_client.close()


class Factory:
    """Build dashboard components.

    Parameters
    ----------
    config
        Dashboard configuration.
    kubernetes_client
        Kubernetes client.
    logger
        Logger to use.
    """

    def __init__(
        self,
        config: Config,
        kubernetes_client: ApiClient,
        logger: BoundLogger,
    ) -> None:
        self._config = config
        self._kubernetes_client = kubernetes_client
        self._logger = logger

    def create_snapshot_aggregator(self) -> SnapshotAggregator:
        """Create a service to gather the dashboard snapshot.

        Returns
        -------
        SnapshotAggregator
            Newly-created aggregator.
        """
        return SnapshotAggregator(
            pv_storage=PersistentVolumeStorage(
                self._kubernetes_client, self._logger
            ),
            namespace_storage=NamespaceStorage(
                self._kubernetes_client, self._logger
            ),
            pvc_storage=PersistentVolumeClaimStorage(
                self._kubernetes_client, self._logger
            ),
            pod_storage=PodStorage(self._kubernetes_client, self._logger),
            log_pod_placement=self._config.log_pod_placement,
            pod_lookup_errors_fatal=self._config.pod_lookup_errors_fatal,
            logger=self._logger,
        )
