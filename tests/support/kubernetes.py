"""Mock for the Kubernetes API.

A derivative class of the Safir Kubernetes mock and a copy of its patching
function, adding support for persistent volumes and persistent volume
claims and keeping objects in creation order.
"""

from __future__ import annotations

import os
from collections import defaultdict
from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import AsyncMock, Mock, patch

from kubernetes_asyncio import client, config
from kubernetes_asyncio.client import (
    ApiException,
    V1Namespace,
    V1NamespaceList,
    V1ObjectMeta,
    V1PersistentVolume,
    V1PersistentVolumeClaim,
    V1PersistentVolumeClaimList,
    V1PersistentVolumeList,
    V1Pod,
    V1PodList,
)
from safir.testing.kubernetes import MockKubernetesApi

from .data import (
    read_input_claims_json,
    read_input_pods_json,
    read_input_volumes_json,
)

__all__ = [
    "MockDashboardKubernetesApi",
    "fail_on",
    "patch_kubernetes",
]


class MockDashboardKubernetesApi(MockKubernetesApi):
    """Mock Kubernetes API for testing.

    Only the calls made while gathering the dashboard snapshot, plus the
    matching create calls used to populate the mock, are supported. Errors
    can be injected with the ``error_callback`` attribute inherited from the
    Safir mock.
    """

    def __init__(self) -> None:
        super().__init__()
        self._namespaces: dict[str, V1Namespace] = {}
        self._volumes: dict[str, V1PersistentVolume] = {}
        self._claims: defaultdict[str, dict[str, V1PersistentVolumeClaim]]
        self._claims = defaultdict(dict)
        self._pods: defaultdict[str, dict[str, V1Pod]] = defaultdict(dict)

    async def load_for_test(self, config: str) -> None:
        """Populate the mock from the input data of a test configuration.

        Every namespace mentioned in the claim or pod data is created.

        Parameters
        ----------
        config
            Name of one of the directories under ``tests/configs``.
        """
        for volume in read_input_volumes_json(config):
            await self.create_persistent_volume(volume)
        claims = read_input_claims_json(config)
        pods = read_input_pods_json(config)
        for namespace in [*claims, *pods]:
            if namespace not in self._namespaces:
                metadata = V1ObjectMeta(name=namespace)
                await self.create_namespace(V1Namespace(metadata=metadata))
        for namespace, namespace_claims in claims.items():
            for claim in namespace_claims:
                await self.create_namespaced_persistent_volume_claim(
                    namespace, claim
                )
        for namespace, namespace_pods in pods.items():
            for pod in namespace_pods:
                await self.create_namespaced_pod(namespace, pod)

    # NAMESPACE API

    async def create_namespace(self, body: V1Namespace) -> None:
        self._maybe_error("create_namespace", body)
        name = body.metadata.name
        if name in self._namespaces:
            msg = f"Namespace {name} already exists"
            raise ApiException(status=409, reason=msg)
        self._namespaces[name] = body

    async def list_namespace(self, **kwargs: Any) -> V1NamespaceList:
        self._maybe_error("list_namespace")
        return V1NamespaceList(items=list(self._namespaces.values()))

    # PERSISTENTVOLUME API

    async def create_persistent_volume(self, body: V1PersistentVolume) -> None:
        self._maybe_error("create_persistent_volume", body)
        self._volumes[body.metadata.name] = body

    async def list_persistent_volume(
        self, **kwargs: Any
    ) -> V1PersistentVolumeList:
        self._maybe_error("list_persistent_volume")
        return V1PersistentVolumeList(items=list(self._volumes.values()))

    # PERSISTENTVOLUMECLAIM API

    async def create_namespaced_persistent_volume_claim(
        self, namespace: str, body: V1PersistentVolumeClaim
    ) -> None:
        self._maybe_error(
            "create_namespaced_persistent_volume_claim", namespace, body
        )
        self._require_namespace(namespace)
        self._claims[namespace][body.metadata.name] = body

    async def list_namespaced_persistent_volume_claim(
        self, namespace: str, **kwargs: Any
    ) -> V1PersistentVolumeClaimList:
        self._maybe_error("list_namespaced_persistent_volume_claim", namespace)
        claims = list(self._claims[namespace].values())
        return V1PersistentVolumeClaimList(items=claims)

    # POD API

    async def create_namespaced_pod(self, namespace: str, body: V1Pod) -> None:
        self._maybe_error("create_namespaced_pod", namespace, body)
        self._require_namespace(namespace)
        self._pods[namespace][body.metadata.name] = body

    async def list_namespaced_pod(
        self, namespace: str, **kwargs: Any
    ) -> V1PodList:
        self._maybe_error("list_namespaced_pod", namespace)
        return V1PodList(items=list(self._pods[namespace].values()))

    def _require_namespace(self, namespace: str) -> None:
        if namespace not in self._namespaces:
            msg = f"Namespace {namespace} not found"
            raise ApiException(status=404, reason=msg)


def fail_on(method: str, status: int = 500) -> Callable[..., None]:
    """Build an error callback that fails one Kubernetes API method.

    Parameters
    ----------
    method
        Name of the API method that should fail.
    status
        HTTP status of the resulting exception.

    Returns
    -------
    Callable
        Callback suitable for the ``error_callback`` attribute of the mock.
    """

    def callback(name: str, *args: Any) -> None:
        if name == method:
            raise ApiException(status=status, reason="Injected failure")

    return callback


def patch_kubernetes() -> Iterator[MockDashboardKubernetesApi]:
    """Replace the Kubernetes API with a mock class.

    Copied from `safir.testing.kubernetes.patch_kubernetes`, changing the
    type of the mock class and also patching out loading of kubeconfig
    files.

    Returns
    -------
    MockDashboardKubernetesApi
        The mock Kubernetes API object.
    """
    mock_api = MockDashboardKubernetesApi()
    with (
        patch.object(config, "load_incluster_config"),
        patch.object(config, "load_kube_config", new_callable=AsyncMock),
        patch.object(client, "CoreV1Api") as mock_class,
    ):
        mock_class.return_value = mock_api
        mock_api_client = Mock(spec=client.ApiClient)
        mock_api_client.close = AsyncMock()
        with patch.object(client, "ApiClient") as mock_client:
            mock_client.return_value = mock_api_client
            os.environ["KUBERNETES_PORT"] = "tcp://10.0.0.1:443"
            yield mock_api
            del os.environ["KUBERNETES_PORT"]
