"""Data types for the dashboard snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Self

from kubernetes_asyncio.client import (
    V1ObjectMeta,
    V1PersistentVolume,
    V1PersistentVolumeClaim,
)
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...constants import CREATION_TIME_FORMAT

__all__ = [
    "Claim",
    "PodPlacement",
    "Snapshot",
    "Volume",
    "format_creation_time",
]


def format_creation_time(metadata: V1ObjectMeta) -> str:
    """Format the creation timestamp of a Kubernetes object.

    Parameters
    ----------
    metadata
        Metadata of the object.

    Returns
    -------
    str
        Creation time in ``CREATION_TIME_FORMAT``, or the empty string if the
        object has no creation timestamp.
    """
    if not metadata.creation_timestamp:
        return ""
    return metadata.creation_timestamp.strftime(CREATION_TIME_FORMAT)


class Volume(BaseModel):
    """A ``PersistentVolume`` as shown on the dashboard."""

    model_config = ConfigDict(
        alias_generator=to_camel, frozen=True, populate_by_name=True
    )

    name: Annotated[str, Field(title="Name of the volume")]

    uid: Annotated[
        str, Field(title="Unique ID", description="Assigned by Kubernetes")
    ]

    size: Annotated[
        str,
        Field(
            title="Declared capacity",
            description="Storage capacity as a Kubernetes quantity",
            examples=["10Gi"],
        ),
    ]

    creation_time: Annotated[str, Field(title="Creation time")]

    labels: Annotated[dict[str, str], Field(title="Labels")] = {}

    status: Annotated[
        str,
        Field(title="Phase", examples=["Available", "Bound", "Released"]),
    ] = ""

    @classmethod
    def from_kubernetes(cls, pv: V1PersistentVolume) -> Self:
        """Create from a Kubernetes API object.

        Parameters
        ----------
        pv
            Kubernetes persistent volume.

        Returns
        -------
        Volume
            The corresponding dashboard entry.
        """
        size = ""
        if pv.spec and pv.spec.capacity:
            size = str(pv.spec.capacity.get("storage", ""))
        return cls(
            name=pv.metadata.name,
            uid=pv.metadata.uid or "",
            size=size,
            creation_time=format_creation_time(pv.metadata),
            labels=pv.metadata.labels or {},
            status=(pv.status.phase or "") if pv.status else "",
        )


class Claim(BaseModel):
    """A ``PersistentVolumeClaim`` as shown on the dashboard."""

    model_config = ConfigDict(
        alias_generator=to_camel, frozen=True, populate_by_name=True
    )

    name: Annotated[str, Field(title="Name of the claim")]

    namespace: Annotated[str, Field(title="Namespace of the claim")]

    uid: Annotated[
        str, Field(title="Unique ID", description="Assigned by Kubernetes")
    ]

    creation_time: Annotated[str, Field(title="Creation time")]

    labels: Annotated[dict[str, str], Field(title="Labels")] = {}

    status: Annotated[
        str, Field(title="Phase", examples=["Pending", "Bound", "Lost"])
    ] = ""

    volume_name: Annotated[
        str,
        Field(
            title="Bound volume",
            description=(
                "Name of the volume the claim is bound to, empty if unbound."
                " The volume may not exist."
            ),
        ),
    ] = ""

    @classmethod
    def from_kubernetes(
        cls, pvc: V1PersistentVolumeClaim, namespace: str
    ) -> Self:
        """Create from a Kubernetes API object.

        Parameters
        ----------
        pvc
            Kubernetes persistent volume claim.
        namespace
            Namespace in which the claim was listed. This is recorded rather
            than the namespace in the object metadata, which may be unset.

        Returns
        -------
        Claim
            The corresponding dashboard entry.
        """
        return cls(
            name=pvc.metadata.name,
            namespace=namespace,
            uid=pvc.metadata.uid or "",
            creation_time=format_creation_time(pvc.metadata),
            labels=pvc.metadata.labels or {},
            status=(pvc.status.phase or "") if pvc.status else "",
            volume_name=(pvc.spec.volume_name or "") if pvc.spec else "",
        )


class Snapshot(BaseModel):
    """All volumes and claims in the cluster at one point in time."""

    model_config = ConfigDict(
        alias_generator=to_camel, frozen=True, populate_by_name=True
    )

    volumes: Annotated[tuple[Volume, ...], Field(title="Volumes")] = ()

    claims: Annotated[tuple[Claim, ...], Field(title="Claims")] = ()

    namespaces: Annotated[
        tuple[str, ...],
        Field(
            title="Namespaces",
            description="Namespaces that were searched for claims",
        ),
    ] = ()

    created_at: Annotated[
        datetime, Field(title="When the data was gathered")
    ]

    def volume_names(self) -> set[str]:
        """Names of all volumes in the snapshot.

        Returns
        -------
        set of str
            Volume names, for checking whether a claim's volume exists.
        """
        return {v.name for v in self.volumes}


@dataclass(frozen=True, slots=True)
class PodPlacement:
    """Node placement of a pod that mounts a claim.

    Only used for diagnostic logging, never shown on the dashboard.
    """

    pod: str
    """Name of the pod."""

    namespace: str
    """Namespace of the pod and the claim."""

    claim: str
    """Name of the claim the pod mounts."""

    node: str
    """Node the pod is scheduled on, empty if not yet scheduled."""
