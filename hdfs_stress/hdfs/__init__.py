"""
HDFS integration: WebHDFS existence checks and NameNode safe mode control.
"""

from hdfs_stress.hdfs.controller import HdfsController
from hdfs_stress.hdfs.webhdfs import WebHdfsFileSystem, to_hdfs_path

__all__ = ["HdfsController", "WebHdfsFileSystem", "to_hdfs_path"]
