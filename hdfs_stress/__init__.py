"""
HDFS collection lifecycle stress harness.

Validates that a SolrCloud cluster storing its cores on HDFS:
- releases every HDFS data directory when a collection is deleted,
  across randomized sharding and replication topologies
- recovers a node restarted while the NameNode is in safe mode
"""

__version__ = "1.0.0"

from hdfs_stress.config import Settings, get_settings

__all__ = ["__version__", "Settings", "get_settings"]
