"""Interpretation of platform and orchestrator CLI output.

``bx cs`` only offers tabular text, so cluster state, the datacenter and
worker addresses are read from its columns.  Service ports come from
``kubectl get services -o json`` as structured data.

Every parser raises ``ParseError`` (never returns a sentinel) when the
output does not have the expected shape.
"""

from __future__ import annotations

import ipaddress
import json
from pathlib import Path
from typing import Any

from kubeship.core.errors import ParseError

# ``bx cs cluster-get`` prints "The specified cluster could not be found" for unknown names.
CLUSTER_ABSENT_MARKER = "specified"
PENDING_MARKER = "pending"


def cluster_is_absent(output: str) -> bool:
    """True when ``cluster-get`` output says the cluster does not exist."""
    return CLUSTER_ABSENT_MARKER in output


def cluster_is_pending(output: str) -> bool:
    """True while ``cluster-get`` output still reports the pending state."""
    return PENDING_MARKER in output


def parse_datacenter(output: str) -> str:
    """Return the last field of the ``Datacenter`` line of ``cluster-get``."""
    for line in output.splitlines():
        if "Datacenter" in line:
            fields = line.split()
            if len(fields) >= 2:
                return fields[-1]
    raise ParseError("No Datacenter line in cluster details output")


def kubeconfig_path(cluster: str, datacenter: str, home: Path | None = None) -> Path:
    """Location ``bx cs cluster-config`` writes the cluster's kube config to."""
    base = (home or Path.home()) / ".bluemix" / "plugins" / "container-service" / "clusters"
    return base / cluster / f"kube-config-{datacenter}-{cluster}.yml"


def _is_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def parse_worker_public_ip(output: str) -> str:
    """Public IP of the first worker listed by ``bx cs workers``.

    The table's second column is the public IP; the ``OK`` banner and the
    header row are skipped because their second field is not an address.
    """
    for line in output.splitlines():
        fields = line.split()
        if len(fields) >= 2 and _is_ip(fields[1]):
            return fields[1]
    raise ParseError("No worker with a public IP in workers output")


def parse_node_port(services_json: str, name: str) -> int:
    """NodePort of the first service whose name contains ``name``.

    ``services_json`` is the output of ``kubectl get services -o json``.
    """
    try:
        payload: dict[str, Any] = json.loads(services_json)
    except json.JSONDecodeError as exc:
        raise ParseError("Service list is not valid JSON", cause=exc) from exc

    for item in payload.get("items", []):
        service_name = item.get("metadata", {}).get("name", "")
        if name not in service_name:
            continue
        for port in item.get("spec", {}).get("ports", []):
            if port.get("nodePort"):
                return int(port["nodePort"])
        raise ParseError(f"Service {service_name!r} exposes no node port")
    raise ParseError(f"No service matching {name!r}")


def service_slug(name: str) -> str:
    """Lowercase, dash-stripped form of an application name."""
    return name.lower().replace("-", "")
