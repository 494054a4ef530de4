"""The thirteen kubeship actions.

``Deployer`` owns one method per action.  Each method first checks its
required positional values (raising ``MissingArgumentError`` before any
tool runs), then issues the external commands in a fixed order through
a ``CommandRunner``.  User-facing progress lines go through the
``notify`` callback; diagnostics go to the structured logger.

Command order per action::

    install_tools  curl <installer> | bash ; bx plugin install container-service
    login          bx login --sso -a <api> ; bx target --cf
    setup          bx cr login ; bx cs cluster-get [; cluster-create ; poll]
                   ; bx cr namespace-add ; bx cs workers ; bx cs cluster-config --export
                   ; export KUBECONFIG
    build          docker build -t <image> .
    run            docker run --name <image> -d -p 8080:8080 <image>
    stop           docker rm -fv <image>            (failure suppressed)
    push           docker tag ; docker push ; docker ps ; bx cr images
    create_db      kubectl apply -f manifest.yml ; bx service create ; bx cs cluster-service-bind
    get_ip         bx cs workers ; kubectl get services -o json
    deploy         bx cs workers ; kubectl expose deployment/<app> --type=NodePort
    populate_db    3 x HTTP POST of sample to-do items
    delete         unbind ; key-delete ; service delete ; kubectl delete services
                   ; kubectl delete deployment ; bx cs cluster-rm

Tags:
    actions, deploy, bx, docker, kubectl, cloudant
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx

from kubeship.core.errors import ManifestNotFoundError, NetworkError, ParseError, ToolError
from kubeship.core.logging import get_logger
from kubeship.core.settings import KubeshipSettings, get_settings
from kubeship.deploy import actions
from kubeship.deploy.parsing import (
    cluster_is_absent,
    cluster_is_pending,
    kubeconfig_path,
    parse_datacenter,
    parse_node_port,
    parse_worker_public_ip,
    service_slug,
)
from kubeship.deploy.polling import Poller, PollPolicy
from kubeship.deploy.results import AppEndpoint, ClusterInfo
from kubeship.deploy.tools import CommandRunner

logger = get_logger(__name__)

# Sample to-do items posted by populate_db.
SAMPLE_TODOS: list[dict[str, object]] = [
    {"title": "Wash the car", "order": 0, "completed": False},
    {"title": "Walk the dog", "order": 2, "completed": True},
    {"title": "Clean the gutters", "order": 1, "completed": False},
]


def _silent(message: str) -> None:
    return None


class Deployer:
    """Runs kubeship actions against the external CLIs.

    Parameters
    ----------
    settings
        Effective settings; defaults to ``get_settings()``.
    runner
        Command runner; a fresh ``CommandRunner`` when omitted.
    notify
        Receives user-facing progress lines.
    poller
        Readiness poller for ``setup``; built from settings when omitted.
    http_client
        ``httpx.Client`` for ``populate_db``; created per call when omitted.

    Example::

        deployer = Deployer(notify=print)
        deployer.build("todolist")
        deployer.push("todolist", "todolist_space")
    """

    def __init__(
        self,
        settings: KubeshipSettings | None = None,
        runner: CommandRunner | None = None,
        notify: Callable[[str], None] | None = None,
        poller: Poller | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.runner = runner or CommandRunner(timeout=self.settings.command_timeout_seconds)
        self.notify = notify or _silent
        self.poller = poller or Poller(
            PollPolicy(
                interval=self.settings.poll_interval_seconds,
                max_wait=self.settings.poll_max_wait_seconds,
                backoff=self.settings.poll_backoff,
                max_interval=self.settings.poll_max_interval_seconds,
            )
        )
        self.http_client = http_client
        self.created: list[tuple[str, str]] = []
        """Resources created by this instance, in creation order: (kind, name)."""

    # ------------------------------------------------------------------
    # Tooling and session
    # ------------------------------------------------------------------

    def install_tools(self) -> None:
        """Install the platform CLI bundle and the container-service plugin.

        Neither step is checked; failures are logged and the action
        carries on.
        """
        self._unchecked("installer", ["bash", "-c", f"curl -sL {self.settings.installer_url} | bash"])
        self._unchecked(
            "plugin",
            ["bx", "plugin", "install", "container-service", "-r", self.settings.plugin_repo],
        )

    def _unchecked(self, step: str, argv: list[str]) -> None:
        try:
            result = self.runner.run(argv, check=False)
        except ToolError as exc:
            logger.warning("install.skipped", step=step, error=exc.message)
            return
        if not result.ok:
            logger.warning("install.failed", step=step, exit_code=result.returncode)

    def login(self) -> None:
        """Authenticate via SSO and target the Cloud Foundry runtime."""
        self.notify("Setting api and login tools.")
        self.runner.run(["bx", "login", "--sso", "-a", self.settings.login_url])
        self.runner.run(["bx", "target", "--cf"])

    # ------------------------------------------------------------------
    # Cluster
    # ------------------------------------------------------------------

    def setup(self, cluster: str | None, namespace: str | None) -> ClusterInfo:
        """Ensure the cluster exists, add the registry namespace, export KUBECONFIG."""
        actions.require(actions.SETUP, cluster, namespace)

        self.runner.run(["bx", "cr", "login"])

        created = False
        attempts = 0
        lookup = self._cluster_get(cluster)
        if cluster_is_absent(lookup):
            self.notify("Attempting to create new cluster...")
            self.runner.run(["bx", "cs", "cluster-create", "--name", cluster])
            self.created.append(("cluster", cluster))
            logger.info("cluster.created", cluster=cluster)
            created = True

            outcome = self.poller.wait_until(
                lambda: self._cluster_get(cluster),
                lambda output: not cluster_is_pending(output),
                subject=cluster,
                on_wait=lambda attempt, output: self.notify("Cluster still provisioning..."),
            )
            attempts = outcome.attempts
            self.notify("Cluster deployed successfully.")

        self.runner.run(["bx", "cr", "namespace-add", namespace])
        self.runner.run(["bx", "cs", "workers", cluster])
        self.runner.run(["bx", "cs", "cluster-config", cluster, "--export"])

        try:
            datacenter = parse_datacenter(self._cluster_get(cluster))
        except ParseError as exc:
            raise exc.with_context(cluster=cluster, table="cluster-get")
        config_path = kubeconfig_path(cluster, datacenter)
        self.runner.export_env("KUBECONFIG", str(config_path))

        return ClusterInfo(
            name=cluster,
            created=created,
            datacenter=datacenter,
            kubeconfig=config_path,
            poll_attempts=attempts,
        )

    def _cluster_get(self, cluster: str) -> str:
        return self.runner.run(["bx", "cs", "cluster-get", cluster], check=False, capture=True).output

    # ------------------------------------------------------------------
    # Container image
    # ------------------------------------------------------------------

    def build(self, image: str | None) -> None:
        """Build the image from the Dockerfile in the working directory."""
        actions.require(actions.BUILD, image)
        self.runner.run(["docker", "build", "-t", image, "."])

    def run(self, image: str | None) -> None:
        """Run the image detached with the application port published."""
        actions.require(actions.RUN, image)
        port = self.settings.app_port
        argv = ["docker", "run", "--name", image, "-d", "-p", f"{port}:{port}", image]
        if self.settings.docker_sudo:
            argv.insert(0, "sudo")
        self.runner.run(argv)

    def stop(self, image: str | None) -> None:
        """Force-remove the container; a missing container is not an error."""
        actions.require(actions.STOP, image)
        try:
            result = self.runner.run(["docker", "rm", "-fv", image], check=False)
        except ToolError as exc:
            logger.warning("container.remove_skipped", container=image, error=exc.message)
            return
        if not result.ok:
            logger.info("container.not_removed", container=image, exit_code=result.returncode)

    def registry_tag(self, image: str, namespace: str) -> str:
        return f"{self.settings.registry_url}/{namespace}/{image}"

    def push(self, image: str | None, namespace: str | None) -> str:
        """Tag the image for the registry namespace and push it.

        Returns the pushed tag.
        """
        actions.require(actions.PUSH, image, namespace)
        tag = self.registry_tag(image, namespace)
        self.runner.run(["docker", "tag", image, tag])
        self.runner.run(["docker", "push", tag])
        self.runner.run(["docker", "ps"])
        self.runner.run(["bx", "cr", "images"])
        logger.info("image.pushed", tag=tag)
        return tag

    # ------------------------------------------------------------------
    # Database service
    # ------------------------------------------------------------------

    def create_db(self, cluster: str | None, instance: str | None) -> None:
        """Apply the manifest, create the database service and bind it."""
        actions.require(actions.CREATE_DB, cluster, instance)

        manifest = Path(self.settings.manifest_path)
        if not manifest.is_file():
            raise ManifestNotFoundError(str(manifest))

        self.runner.run(["kubectl", "apply", "-f", str(manifest)])
        self.runner.run([
            "bx", "service", "create",
            self.settings.database_type, self.settings.database_plan, instance,
        ])
        self.created.append(("service", instance))
        self.runner.run([
            "bx", "cs", "cluster-service-bind", cluster, self.settings.bind_group, instance,
        ])
        logger.info("database.bound", cluster=cluster, instance=instance)

    def populate_db(self, url: str | None) -> int:
        """POST the sample to-do items to the application.

        Response codes are logged, not checked.  Returns the number of
        requests that got a 2xx answer.
        """
        actions.require(actions.POPULATE_DB, url)

        client = self.http_client or httpx.Client(timeout=self.settings.http_timeout_seconds)
        accepted = 0
        try:
            for todo in SAMPLE_TODOS:
                try:
                    response = client.post(url, json=todo)
                except httpx.HTTPError as exc:
                    raise NetworkError(f"Could not reach {url}: {exc}", cause=exc) from exc
                logger.info("todo.posted", title=todo["title"], status=response.status_code)
                if response.is_success:
                    accepted += 1
                else:
                    logger.warning("todo.rejected", title=todo["title"], status=response.status_code)
        finally:
            if self.http_client is None:
                client.close()

        self.notify("Populated the database with sample data")
        return accepted

    # ------------------------------------------------------------------
    # Exposure
    # ------------------------------------------------------------------

    def worker_ip(self, cluster: str) -> str:
        output = self.runner.run(["bx", "cs", "workers", cluster], capture=True).stdout
        try:
            return parse_worker_public_ip(output).strip()
        except ParseError as exc:
            raise exc.with_context(cluster=cluster, table="workers")

    def deploy(self, app: str | None, cluster: str | None = None) -> str:
        """Expose ``deployment/<app>`` as a NodePort service on the worker IP.

        ``cluster`` names the cluster whose worker IP is used and defaults
        to ``app``.  Returns the external IP.
        """
        actions.require(actions.DEPLOY, app)

        ip = self.worker_ip(cluster or app)
        logger.debug("deploy.slug", app=app, slug=service_slug(app))
        self.runner.run([
            "kubectl", "expose", f"deployment/{app}",
            "--type=NodePort",
            f"--external-ip={ip}",
            f"--name={app}",
            f"--port={self.settings.app_port}",
        ])
        self.created.append(("exposure", app))
        logger.info("deployment.exposed", app=app, ip=ip)
        return ip

    def get_ip(self, cluster: str | None) -> AppEndpoint:
        """Find the worker's public IP and the service's node port."""
        actions.require(actions.GET_IP, cluster)

        ip = self.worker_ip(cluster)
        services = self.runner.run(
            ["kubectl", "get", "services", "-o", "json"], capture=True
        ).stdout
        try:
            port = parse_node_port(services, cluster)
        except ParseError as exc:
            raise exc.with_context(cluster=cluster, table="services")
        endpoint = AppEndpoint(ip=ip, port=port)
        self.notify(f"You may view the application at: {endpoint.url}")
        return endpoint

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def delete(
        self,
        cluster: str | None,
        instance: str | None,
        namespace: str | None,
    ) -> None:
        """Unbind and delete the database service, then remove the app and cluster."""
        actions.require(actions.DELETE, cluster, instance, namespace)

        self.unbind_service(cluster, instance, namespace)
        self.runner.run(["kubectl", "delete", "services", instance])
        self.runner.run(["kubectl", "delete", "deployment", cluster])
        self.remove_cluster(cluster)

    def unbind_service(self, cluster: str, instance: str, namespace: str) -> None:
        """Unbind the service from the cluster and delete its key and instance."""
        self.runner.run(["bx", "cs", "cluster-service-unbind", cluster, namespace, instance])
        self.runner.run(["bx", "service", "key-delete", instance, f"kube-{instance}"])
        self.runner.run(["bx", "service", "delete", instance])
        logger.info("database.deleted", instance=instance)

    def remove_cluster(self, cluster: str) -> None:
        self.runner.run(["bx", "cs", "cluster-rm", cluster])
        logger.info("cluster.removed", cluster=cluster)

    def discard_service(self, cluster: str, instance: str) -> None:
        """Undo ``create_db``: unbind if bound, then delete the service instance."""
        self.runner.run(
            ["bx", "cs", "cluster-service-unbind", cluster, self.settings.bind_group, instance],
            check=False,
        )
        self.runner.run(["bx", "service", "key-delete", instance, f"kube-{instance}"], check=False)
        self.runner.run(["bx", "service", "delete", instance])
        logger.info("database.discarded", instance=instance)

    def unexpose(self, app: str) -> None:
        """Undo ``deploy``: delete the NodePort service."""
        self.runner.run(["kubectl", "delete", "services", app])
