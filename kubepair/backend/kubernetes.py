"""ClusterBackend implemented on the official Kubernetes Python client."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from kubepair.backend.base import (
    CLAIM_PENDING,
    COMPUTE_UNIT_KIND,
    STORAGE_CLAIM_KIND,
    ClaimStatus,
    UnitStatus,
)
from kubepair.backend.manifests import manifest_identity
from kubepair.exceptions import AlreadyExistsError, BackendError, ConfigurationError, NotFoundError
from kubepair.logger import Logger, session_logger

FOREGROUND = "Foreground"

T = TypeVar("T")


def load_core_api(kubeconfig: str | None = None, context: str | None = None) -> client.CoreV1Api:
    """Build a CoreV1Api from a kubeconfig file, or from in-cluster config."""
    try:
        if kubeconfig:
            config.load_kube_config(config_file=kubeconfig, context=context)
        else:
            try:
                config.load_incluster_config()
            except ConfigException:
                config.load_kube_config(context=context)
    except (ConfigException, OSError) as exc:
        raise ConfigurationError(
            "KUBECONFIG_UNUSABLE",
            f"could not load Kubernetes configuration: {exc}",
            {"kubeconfig": kubeconfig, "context": context},
        ) from exc
    return client.CoreV1Api()


class KubernetesBackend:
    """PersistentVolumeClaims as storage claims, Pods as compute units."""

    def __init__(self, core_api: client.CoreV1Api, *, logger: Logger | None = None) -> None:
        self._api = core_api
        self._logger = logger or session_logger

    @classmethod
    def from_kubeconfig(
        cls,
        kubeconfig: str | None = None,
        *,
        context: str | None = None,
        logger: Logger | None = None,
    ) -> "KubernetesBackend":
        return cls(load_core_api(kubeconfig, context), logger=logger)

    # -- storage claims -----------------------------------------------------

    def create_storage_claim(self, manifest: dict[str, Any]) -> None:
        namespace, name = manifest_identity(manifest)
        self._call(
            STORAGE_CLAIM_KIND,
            namespace,
            name,
            lambda: self._api.create_namespaced_persistent_volume_claim(namespace=namespace, body=manifest),
        )

    def get_storage_claim(self, namespace: str, name: str) -> ClaimStatus:
        claim = self._call(
            STORAGE_CLAIM_KIND,
            namespace,
            name,
            lambda: self._api.read_namespaced_persistent_volume_claim(name=name, namespace=namespace),
        )
        status = getattr(claim, "status", None)
        return ClaimStatus(phase=getattr(status, "phase", None) or CLAIM_PENDING)

    def delete_storage_claim(self, namespace: str, name: str) -> None:
        self._call(
            STORAGE_CLAIM_KIND,
            namespace,
            name,
            lambda: self._api.delete_namespaced_persistent_volume_claim(
                name=name,
                namespace=namespace,
                propagation_policy=FOREGROUND,
            ),
        )

    # -- compute units ------------------------------------------------------

    def create_compute_unit(self, manifest: dict[str, Any]) -> None:
        namespace, name = manifest_identity(manifest)
        self._call(
            COMPUTE_UNIT_KIND,
            namespace,
            name,
            lambda: self._api.create_namespaced_pod(namespace=namespace, body=manifest),
        )

    def get_compute_unit(self, namespace: str, name: str) -> UnitStatus:
        pod = self._call(
            COMPUTE_UNIT_KIND,
            namespace,
            name,
            lambda: self._api.read_namespaced_pod(name=name, namespace=namespace),
        )
        status = getattr(pod, "status", None)
        ready = False
        for condition in getattr(status, "conditions", None) or []:
            if condition.type == "Ready" and condition.status == "True":
                ready = True
                break
        return UnitStatus(ready=ready, phase=getattr(status, "phase", None))

    def delete_compute_unit(self, namespace: str, name: str) -> None:
        self._call(
            COMPUTE_UNIT_KIND,
            namespace,
            name,
            lambda: self._api.delete_namespaced_pod(
                name=name,
                namespace=namespace,
                propagation_policy=FOREGROUND,
            ),
        )

    # -- helpers ------------------------------------------------------------

    def _call(self, kind: str, namespace: str, name: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except ApiException as exc:
            raise translate_api_exception(exc, kind, namespace, name) from exc
        except BackendError:
            raise
        except Exception as exc:
            # urllib3 transport failures and the like.
            self._logger.debug(
                "backend.transport_error",
                event="backend.transport_error",
                kind=kind,
                namespace=namespace,
                name=name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise BackendError(
                f"{kind} {namespace}/{name}: {exc}",
                code="BACKEND_UNAVAILABLE",
                details={"kind": kind, "namespace": namespace, "name": name, "cause_type": type(exc).__name__},
            ) from exc


def translate_api_exception(exc: ApiException, kind: str, namespace: str, name: str) -> BackendError:
    """Map an ApiException onto the backend error taxonomy."""
    status = exc.status
    if status == 409:
        return AlreadyExistsError(kind, namespace, name, reason=exc.reason)
    if status == 404:
        return NotFoundError(kind, namespace, name, reason=exc.reason)
    return BackendError(
        f"{kind} {namespace}/{name}: API call failed: {exc.reason}",
        status=status,
        reason=exc.reason,
        details={"kind": kind, "namespace": namespace, "name": name},
    )
