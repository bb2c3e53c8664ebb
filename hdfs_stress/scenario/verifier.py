"""
Post-deletion storage verification.
"""

from collections.abc import Iterable
from logging import Logger

from hdfs_stress.errors import ResidualResourceError
from hdfs_stress.hdfs.controller import HdfsController


class CleanupVerifier:
    """Asserts that no recorded data directory survived its collection."""

    def __init__(self, storage: HdfsController, logger: Logger) -> None:
        self._storage = storage
        self._logger = logger

    async def verify_absent(self, paths: Iterable[str]) -> int:
        """
        Check every path through its own uncached filesystem handle.

        Returns:
            Number of paths verified

        Raises:
            ResidualResourceError: First path that still exists
        """
        checked = 0
        for path in paths:
            # A fresh handle per path; a reused one can serve stale metadata
            async with self._storage.open_filesystem() as fs:
                still_there = await fs.exists(path)
            if still_there:
                raise ResidualResourceError(path)
            checked += 1

        self._logger.info("Verified %d data directories removed", checked)
        return checked
