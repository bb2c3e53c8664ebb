"""
Cluster-level control: collection lifecycle and cluster state observation.
"""

from hdfs_stress.cluster.lifecycle import ClusterLifecycleDriver, RecoveryProgress
from hdfs_stress.cluster.state import ClusterStateReader

__all__ = ["ClusterLifecycleDriver", "ClusterStateReader", "RecoveryProgress"]
