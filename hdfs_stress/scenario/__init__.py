"""
Stress scenario: topology planning, indexing, cleanup verification and
orchestration of the create/index/delete and chaos cycles.
"""

from hdfs_stress.scenario.context import ClusterContext, build_context
from hdfs_stress.scenario.indexing import DocIdCounter, IndexingAgent
from hdfs_stress.scenario.orchestrator import (
    CycleReport,
    ScenarioOrchestrator,
    ScenarioSummary,
)
from hdfs_stress.scenario.topology import Topology, TopologyPlanner, plan_topology
from hdfs_stress.scenario.verifier import CleanupVerifier

__all__ = [
    "CleanupVerifier",
    "ClusterContext",
    "CycleReport",
    "DocIdCounter",
    "IndexingAgent",
    "ScenarioOrchestrator",
    "ScenarioSummary",
    "Topology",
    "TopologyPlanner",
    "build_context",
    "plan_topology",
]
