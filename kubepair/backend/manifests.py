"""Request bodies for the storage claim and compute unit of a pair.

Bodies are plain dicts; the Kubernetes client serializes them as-is.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from kubepair.config import APP_NAME, DEFAULT_COMMAND, DEFAULT_MOUNT_PATH

VOLUME_NAME = APP_NAME
DEFAULT_LABELS: Mapping[str, str] = {"app": APP_NAME}


def build_storage_claim(
    namespace: str,
    name: str,
    size: str,
    storage_class: str | None = None,
    labels: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "accessModes": ["ReadWriteOnce"],
        "resources": {"requests": {"storage": size}},
    }
    if storage_class:
        spec["storageClassName"] = storage_class

    return {
        "apiVersion": "v1",
        "kind": "PersistentVolumeClaim",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": dict(labels if labels is not None else DEFAULT_LABELS),
        },
        "spec": spec,
    }


def build_compute_unit(
    namespace: str,
    name: str,
    image: str,
    claim_name: str,
    labels: Mapping[str, str] | None = None,
    command: Sequence[str] = DEFAULT_COMMAND,
    mount_path: str = DEFAULT_MOUNT_PATH,
) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": dict(labels if labels is not None else DEFAULT_LABELS),
        },
        "spec": {
            "containers": [
                {
                    "name": name,
                    "image": image,
                    "command": list(command),
                    "volumeMounts": [{"name": VOLUME_NAME, "mountPath": mount_path}],
                }
            ],
            "volumes": [
                {
                    "name": VOLUME_NAME,
                    "persistentVolumeClaim": {"claimName": claim_name, "readOnly": False},
                }
            ],
        },
    }


def manifest_identity(manifest: Mapping[str, Any]) -> tuple[str, str]:
    """Return ``(namespace, name)`` from a manifest's metadata."""
    metadata = manifest.get("metadata") or {}
    return metadata.get("namespace", "default"), metadata["name"]


def claim_name_of(manifest: Mapping[str, Any]) -> str | None:
    """Return the claim a compute unit manifest mounts, if any."""
    for volume in (manifest.get("spec") or {}).get("volumes") or []:
        claim = volume.get("persistentVolumeClaim")
        if claim:
            return claim.get("claimName")
    return None
