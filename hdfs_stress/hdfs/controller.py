"""
HDFS metadata control.

Safe mode is driven through ``hdfs dfsadmin -safemode`` because WebHDFS has
no operation for it; existence checks go through WebHDFS.
"""

import shlex
from logging import Logger

from hdfs_stress.config import Settings
from hdfs_stress.hdfs.webhdfs import WebHdfsFileSystem
from hdfs_stress.process import run_command


class HdfsController:
    """
    Storage metadata control for the NameNode backing the Solr cores.

    ``open_filesystem`` hands out a fresh, uncached handle on every call.
    """

    def __init__(self, settings: Settings, logger: Logger) -> None:
        self._settings = settings
        self._logger = logger
        self._dfsadmin = shlex.split(settings.dfsadmin_command)

    def open_filesystem(self) -> WebHdfsFileSystem:
        """New WebHDFS handle; use it as an async context manager."""
        return WebHdfsFileSystem(
            self._settings.webhdfs_url,
            self._settings.hdfs_user,
            self._logger,
        )

    async def exists(self, path: str) -> bool:
        async with self.open_filesystem() as fs:
            return await fs.exists(path)

    async def _safemode(self, subcommand: str) -> str:
        return await run_command(
            [*self._dfsadmin, "-safemode", subcommand],
            timeout_s=self._settings.hdfs_command_timeout_s,
            logger=self._logger,
        )

    async def is_in_safe_mode(self) -> bool:
        output = await self._safemode("get")
        # Output is "Safe mode is ON" or one such line per NameNode in HA setups
        return "safe mode is on" in output.lower()

    async def enter_safe_mode(self, force: bool = True) -> None:
        """
        Put the NameNode into safe mode.

        Args:
            force: Issue ``enter`` unconditionally; when False the NameNode is
                queried first and left alone if it is already in safe mode.
        """
        if not force and await self.is_in_safe_mode():
            self._logger.info("NameNode already in safe mode")
            return
        await self._safemode("enter")
        self._logger.warning("NameNode entered safe mode")

    async def leave_safe_mode(self) -> None:
        await self._safemode("leave")
        self._logger.info("NameNode left safe mode")
