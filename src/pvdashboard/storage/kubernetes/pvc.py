"""Storage layer for ``PersistentVolumeClaim`` objects."""

from __future__ import annotations

from kubernetes_asyncio import client
from kubernetes_asyncio.client import (
    ApiClient,
    ApiException,
    V1PersistentVolumeClaim,
)
from structlog.stdlib import BoundLogger

from ...exceptions import KubernetesError

__all__ = ["PersistentVolumeClaimStorage"]


class PersistentVolumeClaimStorage:
    """Storage layer for ``PersistentVolumeClaim`` objects.

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

    async def list(self, namespace: str) -> list[V1PersistentVolumeClaim]:
        """List all persistent volume claims in a namespace.

        Parameters
        ----------
        namespace
            Namespace to search.

        Returns
        -------
        list of kubernetes_asyncio.client.models.V1PersistentVolumeClaim
            List of persistent volume claims.

        Raises
        ------
        KubernetesError
            Raised for exceptions from the Kubernetes API server.
        """
        self._logger.debug(
            "Listing persistent volume claims", namespace=namespace
        )
        try:
            objs = await self._api.list_namespaced_persistent_volume_claim(
                namespace
            )
        except ApiException as e:
            raise KubernetesError.from_exception(
                "Error listing persistent volume claims",
                e,
                kind="PersistentVolumeClaim",
                namespace=namespace,
            ) from e
        return objs.items
