"""
Volume reconciliation commands.
"""

from typing import List

import typer

from volume_reconciler.cli.lib.config import ReconcilerConfig, load_config
from volume_reconciler.cli.lib.validators import parse_label_selector, validate_name, validate_replicas
from volume_reconciler.cluster.coordinator import ResizeCoordinator
from volume_reconciler.cluster.enumerator import VolumeEnumerator
from volume_reconciler.cluster.models import ClusterContext, ManifestVolumeSpec
from volume_reconciler.cluster.store import KubernetesVolumeStore
from volume_reconciler.filesystems.ext234 import Ext234Resize
from volume_reconciler.filesystems.pod import PodFilesystemResizer
from volume_reconciler.providers.base import VolumeResizer
from volume_reconciler.providers.ebs import EBSVolumeResizer

app = typer.Typer(help="Volume reconciliation commands")

SUPPORTED_BACKENDS = ("ebs",)


def build_context(namespace: str, selector: str, replicas: int) -> ClusterContext:
    validate_name(namespace)
    validate_replicas(replicas)
    labels = parse_label_selector(selector)
    cluster_name = labels.get("cluster-name", namespace)
    return ClusterContext(name=cluster_name, namespace=namespace, labels=labels, replicas=replicas)


def build_store(cfg: ReconcilerConfig) -> KubernetesVolumeStore:
    return KubernetesVolumeStore.from_config(cfg.kubeconfig or None)


def build_resizers(names: List[str], cfg: ReconcilerConfig) -> List[VolumeResizer]:
    resizers: List[VolumeResizer] = []
    for name in names:
        if name == "ebs":
            resizers.append(
                EBSVolumeResizer(
                    region=cfg.aws_region,
                    timeout=cfg.resize_timeout,
                    poll_interval=cfg.resize_poll_interval,
                )
            )
        else:
            raise ValueError(f"Unknown resize backend {name!r} (supported: {', '.join(SUPPORTED_BACKENDS)})")
    return resizers


def build_coordinator(context: ClusterContext, store: KubernetesVolumeStore, cfg: ReconcilerConfig) -> ResizeCoordinator:
    filesystem_resizer = PodFilesystemResizer(
        store.core_api,
        strategies=[Ext234Resize()],
        container=cfg.container_name,
        data_mount=cfg.data_mount,
    )
    return ResizeCoordinator(context, store, filesystem_resizer, data_volume_name=cfg.data_volume_name)


@app.command("list")
def list_volumes(
    namespace: str = typer.Option(..., "--namespace", "-n", help="Cluster namespace"),
    selector: str = typer.Option(..., "--selector", "-l", help="Cluster label selector (key=value,...)"),
    replicas: int = typer.Option(..., "--replicas", help="Number of running replicas"),
):
    """
    List the volumes of running replicas.
    """
    try:
        cfg = load_config()
        context = build_context(namespace, selector, replicas)
        volumes = VolumeEnumerator(context, build_store(cfg)).list_eligible_volumes()
        if not volumes:
            typer.echo("No volumes found")
            return
        for vol in volumes:
            claim = f"{vol.claim_ref.namespace}/{vol.claim_ref.name}" if vol.claim_ref else "-"
            typer.echo(f"{vol.name} size={vol.size_gb}GB claim={claim}")
    except Exception as e:
        typer.echo(f"Error listing volumes: {e}", err=True)
        raise typer.Exit(1)


@app.command("needs-resize")
def needs_resize(
    size: str = typer.Option(..., "--size", help="Desired volume size (e.g., 20Gi)"),
    namespace: str = typer.Option(..., "--namespace", "-n", help="Cluster namespace"),
    selector: str = typer.Option(..., "--selector", "-l", help="Cluster label selector (key=value,...)"),
    replicas: int = typer.Option(..., "--replicas", help="Number of running replicas"),
):
    """
    Check whether any volume differs from the desired size.

    Exits with 0 if a resize is needed and 2 if volumes already match.
    """
    try:
        cfg = load_config()
        context = build_context(namespace, selector, replicas)
        coordinator = build_coordinator(context, build_store(cfg), cfg)
        needed = coordinator.needs_resize(ManifestVolumeSpec(size=size))
    except Exception as e:
        typer.echo(f"Error checking volumes: {e}", err=True)
        raise typer.Exit(1)

    if needed:
        typer.echo(f"Volumes need resizing to {size}")
        return
    typer.echo(f"Volumes already match {size}")
    raise typer.Exit(2)


@app.command()
def resize(
    size: str = typer.Option(..., "--size", help="Desired volume size (e.g., 20Gi)"),
    namespace: str = typer.Option(..., "--namespace", "-n", help="Cluster namespace"),
    selector: str = typer.Option(..., "--selector", "-l", help="Cluster label selector (key=value,...)"),
    replicas: int = typer.Option(..., "--replicas", help="Number of running replicas"),
    backend: List[str] = typer.Option(["ebs"], "--backend", help="Resize backend (repeatable)"),
):
    """
    Resize volumes to the desired size.

    Grows each block device through its backend, grows the filesystem in the
    owning pod and records the new capacity.
    """
    try:
        cfg = load_config()
        context = build_context(namespace, selector, replicas)
        resizers = build_resizers(backend, cfg)
        coordinator = build_coordinator(context, build_store(cfg), cfg)

        typer.echo(f"Resizing volumes of {context.name} to {size}")
        coordinator.resize(ManifestVolumeSpec(size=size), resizers)
        typer.echo("Volumes resized successfully")
    except Exception as e:
        typer.echo(f"Error resizing volumes: {e}", err=True)
        raise typer.Exit(1)


@app.command("delete-claims")
def delete_claims(
    namespace: str = typer.Option(..., "--namespace", "-n", help="Cluster namespace"),
    selector: str = typer.Option(..., "--selector", "-l", help="Cluster label selector (key=value,...)"),
    force: bool = typer.Option(False, "--force", help="Skip confirmation"),
):
    """
    Delete all volume claims of the cluster (best-effort).
    """
    try:
        cfg = load_config()
        context = build_context(namespace, selector, 0)
        if not force:
            typer.confirm(f"Delete all volume claims matching {selector} in {namespace}?", abort=True)
        deleted = VolumeEnumerator(context, build_store(cfg)).delete_claims()
        typer.echo(f"Deleted {deleted} volume claims")
    except typer.Abort:
        raise
    except Exception as e:
        typer.echo(f"Error deleting volume claims: {e}", err=True)
        raise typer.Exit(1)
