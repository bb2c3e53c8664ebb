"""
SolrCloud integration.

Provides:
- AsyncSolrClient: async REST client for one Solr node
- Response models for cluster status, select and system status
"""

from hdfs_stress.solr.client import AsyncSolrClient
from hdfs_stress.solr.types import (
    CollectionStatus,
    CommitVariant,
    QueryResponse,
    ReplicaState,
    ReplicaStatus,
    ShardStatus,
    SystemInfo,
)

__all__ = [
    "AsyncSolrClient",
    "CollectionStatus",
    "CommitVariant",
    "QueryResponse",
    "ReplicaState",
    "ReplicaStatus",
    "ShardStatus",
    "SystemInfo",
]
