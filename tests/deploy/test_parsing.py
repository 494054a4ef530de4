"""Tests for interpreting bx and kubectl output."""

from __future__ import annotations

from pathlib import Path

import pytest

from kubeship.core.errors import ParseError
from kubeship.deploy.parsing import (
    cluster_is_absent,
    cluster_is_pending,
    kubeconfig_path,
    parse_datacenter,
    parse_node_port,
    parse_worker_public_ip,
    service_slug,
)
from tests._support import (
    CLUSTER_ABSENT_OUTPUT,
    CLUSTER_PENDING_OUTPUT,
    CLUSTER_READY_OUTPUT,
    NODE_PORT,
    SERVICES_JSON,
    WORKER_IP,
    WORKERS_OUTPUT,
)


class TestClusterState:
    def test_absent(self):
        assert cluster_is_absent(CLUSTER_ABSENT_OUTPUT)
        assert not cluster_is_absent(CLUSTER_READY_OUTPUT)

    def test_pending(self):
        assert cluster_is_pending(CLUSTER_PENDING_OUTPUT)
        assert not cluster_is_pending(CLUSTER_READY_OUTPUT)


class TestDatacenter:
    def test_last_field(self):
        assert parse_datacenter(CLUSTER_READY_OUTPUT) == "hou02"

    def test_missing(self):
        with pytest.raises(ParseError):
            parse_datacenter(CLUSTER_ABSENT_OUTPUT)


def test_kubeconfig_path():
    path = kubeconfig_path("todo", "hou02", home=Path("/home/dev"))
    assert path == Path(
        "/home/dev/.bluemix/plugins/container-service/clusters/todo/kube-config-hou02-todo.yml"
    )


class TestWorkerIP:
    def test_first_worker(self):
        assert parse_worker_public_ip(WORKERS_OUTPUT) == WORKER_IP

    def test_skips_header_and_banner(self):
        output = "OK\nID   Public IP   Private IP\nw1   10.0.0.5   10.1.1.1\nw2   10.0.0.6   10.1.1.2\n"
        assert parse_worker_public_ip(output) == "10.0.0.5"

    def test_no_workers(self):
        with pytest.raises(ParseError):
            parse_worker_public_ip("OK\nNo workers were found for this cluster.\n")


class TestNodePort:
    def test_matching_service(self):
        assert parse_node_port(SERVICES_JSON, "todo") == NODE_PORT

    def test_no_match(self):
        with pytest.raises(ParseError, match="No service"):
            parse_node_port(SERVICES_JSON, "shop")

    def test_service_without_node_port(self):
        with pytest.raises(ParseError, match="no node port"):
            parse_node_port(SERVICES_JSON, "kubernetes")

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            parse_node_port("error: You must be logged in", "todo")


def test_service_slug():
    assert service_slug("Todo-List-App") == "todolistapp"
