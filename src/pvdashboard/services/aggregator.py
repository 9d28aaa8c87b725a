"""Gather persistent volumes and claims into a dashboard snapshot."""

from __future__ import annotations

from collections import defaultdict

from safir.datetime import current_datetime
from structlog.stdlib import BoundLogger

from ..exceptions import KubernetesError
from ..models.domain.dashboard import Claim, PodPlacement, Snapshot, Volume
from ..storage.kubernetes.namespace import NamespaceStorage
from ..storage.kubernetes.pod import PodStorage
from ..storage.kubernetes.pv import PersistentVolumeStorage
from ..storage.kubernetes.pvc import PersistentVolumeClaimStorage

__all__ = ["SnapshotAggregator"]


class SnapshotAggregator:
    """Build the snapshot of volumes and claims shown on the dashboard.

    The snapshot is built once when the application starts. Any failure to
    list volumes, namespaces, or claims is fatal. Looking up the pods that
    mount each claim is only done for diagnostic logging and by default does
    not stop the snapshot from being built if it fails.

    Parameters
    ----------
    pv_storage
        Storage for persistent volumes.
    namespace_storage
        Storage for namespaces.
    pvc_storage
        Storage for persistent volume claims.
    pod_storage
        Storage for pods.
    log_pod_placement
        Whether to log the nodes of pods mounting each claim.
    pod_lookup_errors_fatal
        Whether failures listing pods should be raised rather than logged.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        pv_storage: PersistentVolumeStorage,
        namespace_storage: NamespaceStorage,
        pvc_storage: PersistentVolumeClaimStorage,
        pod_storage: PodStorage,
        log_pod_placement: bool = True,
        pod_lookup_errors_fatal: bool = False,
        logger: BoundLogger,
    ) -> None:
        self._pv_storage = pv_storage
        self._namespace_storage = namespace_storage
        self._pvc_storage = pvc_storage
        self._pod_storage = pod_storage
        self._log_pod_placement = log_pod_placement
        self._pod_lookup_errors_fatal = pod_lookup_errors_fatal
        self._logger = logger

    async def build_snapshot(self) -> Snapshot:
        """Query Kubernetes and build the dashboard snapshot.

        Returns
        -------
        Snapshot
            All persistent volumes and claims in the cluster.

        Raises
        ------
        KubernetesError
            Raised if listing volumes, namespaces, or claims failed, or if
            listing pods failed and such failures are configured to be fatal.
        """
        volumes = await self.get_volumes()
        objs = await self._namespace_storage.list()
        namespaces = [n.metadata.name for n in objs]
        claims = []
        for namespace in namespaces:
            claims.extend(await self.get_claims(namespace))
        self._logger.info(
            "Persistent volume claims found in cluster",
            count=len(claims),
            namespaces=len(namespaces),
        )

        if self._log_pod_placement:
            for placement in await self.find_pod_placements(claims):
                self._logger.info(
                    "Pod is running on node",
                    pod=placement.pod,
                    node=placement.node or None,
                    claim=placement.claim,
                    namespace=placement.namespace,
                )

        return Snapshot(
            volumes=tuple(volumes),
            claims=tuple(claims),
            namespaces=tuple(namespaces),
            created_at=current_datetime(),
        )

    async def get_volumes(self) -> list[Volume]:
        """Get all persistent volumes in the cluster.

        Returns
        -------
        list of Volume
            Volumes in the order returned by Kubernetes.

        Raises
        ------
        KubernetesError
            Raised for exceptions from the Kubernetes API server.
        """
        pvs = await self._pv_storage.list()
        volumes = [Volume.from_kubernetes(v) for v in pvs]
        for volume in volumes:
            self._logger.debug(
                "Found persistent volume",
                name=volume.name,
                size=volume.size,
                status=volume.status,
            )
        self._logger.info(
            "Persistent volumes found in cluster", count=len(volumes)
        )
        return volumes

    async def get_claims(self, namespace: str) -> list[Claim]:
        """Get all persistent volume claims in a namespace.

        Parameters
        ----------
        namespace
            Namespace to search.

        Returns
        -------
        list of Claim
            Claims in the order returned by Kubernetes. Claims bound to a
            volume that does not exist are included unchanged.

        Raises
        ------
        KubernetesError
            Raised for exceptions from the Kubernetes API server.
        """
        pvcs = await self._pvc_storage.list(namespace)
        return [Claim.from_kubernetes(c, namespace) for c in pvcs]

    async def find_pod_placements(
        self, claims: list[Claim]
    ) -> list[PodPlacement]:
        """Find the pods mounting each claim and the nodes they run on.

        Pods are listed once per namespace containing claims.

        Parameters
        ----------
        claims
            Claims for which to find pods.

        Returns
        -------
        list of PodPlacement
            Pod placements, ordered by claim. Namespaces whose pods could
            not be listed are skipped.

        Raises
        ------
        KubernetesError
            Raised if listing pods failed and such failures are configured to
            be fatal.
        """
        by_namespace: defaultdict[str, list[Claim]] = defaultdict(list)
        for claim in claims:
            by_namespace[claim.namespace].append(claim)

        placements = []
        for namespace, namespace_claims in by_namespace.items():
            try:
                pods = await self._pod_storage.list(namespace)
            except KubernetesError as e:
                if self._pod_lookup_errors_fatal:
                    raise
                msg = "Cannot list pods, skipping pod placement"
                self._logger.warning(msg, namespace=namespace, error=str(e))
                continue
            mounts = [
                (p, self._pod_storage.claims_mounted_by(p)) for p in pods
            ]
            for claim in namespace_claims:
                for pod, mounted in mounts:
                    if claim.name not in mounted:
                        continue
                    node = (pod.spec.node_name or "") if pod.spec else ""
                    placement = PodPlacement(
                        pod=pod.metadata.name,
                        namespace=namespace,
                        claim=claim.name,
                        node=node,
                    )
                    placements.append(placement)
        return placements
