"""Storage layer for ``Namespace`` objects."""

from __future__ import annotations

from kubernetes_asyncio import client
from kubernetes_asyncio.client import ApiClient, ApiException, V1Namespace
from structlog.stdlib import BoundLogger

from ...exceptions import KubernetesError

__all__ = ["NamespaceStorage"]


class NamespaceStorage:
    """Storage layer for ``Namespace`` objects.

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

    async def list(self) -> list[V1Namespace]:
        """List all namespaces.

        Returns
        -------
        list of kubernetes_asyncio.client.V1Namespace
            List of namespaces.

        Raises
        ------
        KubernetesError
            Raised for exceptions from the Kubernetes API server.
        """
        self._logger.debug("Listing namespaces")
        try:
            objs = await self._api.list_namespace()
        except ApiException as e:
            raise KubernetesError.from_exception(
                "Error listing namespaces", e, kind="Namespace"
            ) from e
        return objs.items
