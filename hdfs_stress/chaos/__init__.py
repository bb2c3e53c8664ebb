"""
Fault injection: node process control, deferred actions and the
restart-into-safe-mode chaos cycle.
"""

from hdfs_stress.chaos.injector import ChaosInjector, ChaosOutcome
from hdfs_stress.chaos.nodes import (
    ClusterNode,
    CommandNodeController,
    DockerNodeController,
    NodeController,
    build_node_controller,
)
from hdfs_stress.chaos.schedule import DeferredAction, DeferredState

__all__ = [
    "ChaosInjector",
    "ChaosOutcome",
    "ClusterNode",
    "CommandNodeController",
    "DeferredAction",
    "DeferredState",
    "DockerNodeController",
    "NodeController",
    "build_node_controller",
]
