"""Storage layer for ``Pod`` objects."""

from __future__ import annotations

from kubernetes_asyncio import client
from kubernetes_asyncio.client import ApiClient, ApiException, V1Pod
from structlog.stdlib import BoundLogger

from ...exceptions import KubernetesError

__all__ = ["PodStorage"]


class PodStorage:
    """Storage layer for ``Pod`` objects.

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

    async def list(self, namespace: str) -> list[V1Pod]:
        """List all pods in a namespace.

        Parameters
        ----------
        namespace
            Namespace to search.

        Returns
        -------
        list of kubernetes_asyncio.client.models.V1Pod
            List of pods.

        Raises
        ------
        KubernetesError
            Raised for exceptions from the Kubernetes API server.
        """
        try:
            objs = await self._api.list_namespaced_pod(namespace)
        except ApiException as e:
            raise KubernetesError.from_exception(
                "Error listing pods", e, kind="Pod", namespace=namespace
            ) from e
        return objs.items

    @staticmethod
    def claims_mounted_by(pod: V1Pod) -> set[str]:
        """Determine which persistent volume claims a pod mounts.

        Parameters
        ----------
        pod
            Pod to inspect.

        Returns
        -------
        set of str
            Names of the claims referenced by the pod's volumes. Claims are
            always in the same namespace as the pod.
        """
        if not pod.spec or not pod.spec.volumes:
            return set()
        return {
            v.persistent_volume_claim.claim_name
            for v in pod.spec.volumes
            if v.persistent_volume_claim
        }
