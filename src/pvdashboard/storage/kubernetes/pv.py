"""Storage layer for ``PersistentVolume`` objects."""

from __future__ import annotations

from kubernetes_asyncio import client
from kubernetes_asyncio.client import (
    ApiClient,
    ApiException,
    V1PersistentVolume,
)
from structlog.stdlib import BoundLogger

from ...exceptions import KubernetesError

__all__ = ["PersistentVolumeStorage"]


class PersistentVolumeStorage:
    """Storage layer for ``PersistentVolume`` objects.

    Parameters
    ----------
    api_client
        Kubernetes API client.
    logger
        Logger to use.
    """

    def __init__(self, api_client: ApiClient, logger: BoundLogger) -> None:
        self._api = client.CoreV1Api(api_client)
        self._logger = logger

    async def list(self) -> list[V1PersistentVolume]:
        """List all persistent volumes.

        Returns
        -------
        list of kubernetes_asyncio.client.models.V1PersistentVolume
            List of persistent volumes.

        Raises
        ------
        KubernetesError
            Raised for exceptions from the Kubernetes API server.
        """
        self._logger.debug("Listing persistent volumes")
        try:
            objs = await self._api.list_persistent_volume()
        except ApiException as e:
            raise KubernetesError.from_exception(
                "Error listing persistent volumes", e, kind="PersistentVolume"
            ) from e
        return objs.items
