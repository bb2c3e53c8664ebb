"""
Node process control.

NodeController is the capability the chaos injector needs from whatever
supervises the Solr processes. Implementations shell out to a container
runtime or to operator supplied commands.
"""

import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import Logger

from hdfs_stress.config import NodeControlMode, Settings
from hdfs_stress.process import run_command


@dataclass(frozen=True)
class ClusterNode:
    """One Solr node: its process/container name and its base URL."""

    name: str
    base_url: str


class NodeController(ABC):
    """Abstract stop/start capability for cluster node processes."""

    @abstractmethod
    async def stop(self, node: ClusterNode) -> None:
        """Stop the node process, simulating a crash."""
        pass

    @abstractmethod
    async def start(self, node: ClusterNode) -> None:
        """Start a previously stopped node process."""
        pass


class CommandNodeController(NodeController):
    """
    Runs configurable command templates.

    ``{node}`` in a template is replaced by the node name and ``{url}`` by its
    base URL; the result is split shell-style but not run through a shell.
    """

    def __init__(
        self,
        stop_template: str,
        start_template: str,
        logger: Logger,
        timeout_s: float = 120.0,
    ) -> None:
        self._stop_template = stop_template
        self._start_template = start_template
        self._logger = logger
        self._timeout_s = timeout_s

    def _argv(self, template: str, node: ClusterNode) -> list[str]:
        return [
            part.format(node=node.name, url=node.base_url) for part in shlex.split(template)
        ]

    async def stop(self, node: ClusterNode) -> None:
        self._logger.warning("Stopping node %s", node.name)
        await run_command(
            self._argv(self._stop_template, node), timeout_s=self._timeout_s, logger=self._logger
        )

    async def start(self, node: ClusterNode) -> None:
        self._logger.info("Starting node %s", node.name)
        await run_command(
            self._argv(self._start_template, node), timeout_s=self._timeout_s, logger=self._logger
        )


class DockerNodeController(CommandNodeController):
    """Stops and starts Solr containers with the docker CLI."""

    def __init__(self, logger: Logger, timeout_s: float = 120.0, docker: str = "docker") -> None:
        super().__init__(
            stop_template=f"{docker} stop {{node}}",
            start_template=f"{docker} start {{node}}",
            logger=logger,
            timeout_s=timeout_s,
        )


def build_node_controller(settings: Settings, logger: Logger) -> NodeController:
    """Node controller selected by ``settings.node_control``."""
    if settings.node_control == NodeControlMode.DOCKER:
        return DockerNodeController(logger, timeout_s=settings.node_command_timeout_s)
    return CommandNodeController(
        settings.node_stop_command,
        settings.node_start_command,
        logger,
        timeout_s=settings.node_command_timeout_s,
    )
