"""
Tests for WebHDFS existence checks and safe mode control.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx
from httpx import Response

from hdfs_stress.config import Settings
from hdfs_stress.errors import CommandError, TransportError
from hdfs_stress.hdfs.controller import HdfsController
from hdfs_stress.hdfs.webhdfs import WebHdfsFileSystem, to_hdfs_path
from hdfs_stress.logging import get_logger

NAMENODE = "http://namenode:9870"
DATA_DIR = "hdfs://namenode:8020/solr/c1/core_node1/data"
STATUS_URL = f"{NAMENODE}/webhdfs/v1/solr/c1/core_node1/data"


class TestToHdfsPath:
    def test_strips_scheme_and_authority(self) -> None:
        assert to_hdfs_path(DATA_DIR) == "/solr/c1/core_node1/data"

    def test_bare_path_and_trailing_slash(self) -> None:
        assert to_hdfs_path("/solr/c1/") == "/solr/c1"
        assert to_hdfs_path("/") == "/"

    def test_relative_path_rejected(self) -> None:
        with pytest.raises(ValueError, match="absolute"):
            to_hdfs_path("solr/c1")


class TestWebHdfsFileSystem:
    @respx.mock
    @pytest.mark.asyncio
    async def test_exists(self) -> None:
        route = respx.get(STATUS_URL).mock(
            return_value=Response(200, json={"FileStatus": {"type": "DIRECTORY"}})
        )

        async with WebHdfsFileSystem(NAMENODE, "hdfs", get_logger("test")) as fs:
            assert await fs.exists(DATA_DIR) is True

        request = route.calls.last.request
        assert request.url.params["op"] == "GETFILESTATUS"
        assert request.url.params["user.name"] == "hdfs"
        assert request.headers["Cache-Control"] == "no-cache"

    @respx.mock
    @pytest.mark.asyncio
    async def test_missing_path(self) -> None:
        respx.get(STATUS_URL).mock(
            return_value=Response(404, json={"RemoteException": {"exception": "FileNotFound"}})
        )

        async with WebHdfsFileSystem(NAMENODE, "hdfs", get_logger("test")) as fs:
            assert await fs.exists(DATA_DIR) is False
            assert await fs.get_file_status(DATA_DIR) is None

    @respx.mock
    @pytest.mark.asyncio
    async def test_server_error_raises(self) -> None:
        respx.get(STATUS_URL).mock(return_value=Response(500, text="boom"))

        async with WebHdfsFileSystem(NAMENODE, "hdfs", get_logger("test")) as fs:
            with pytest.raises(TransportError) as exc_info:
                await fs.exists(DATA_DIR)

        assert exc_info.value.status_code == 500

    @respx.mock
    @pytest.mark.asyncio
    async def test_unreachable_namenode(self) -> None:
        respx.get(STATUS_URL).mock(side_effect=httpx.ConnectError("refused"))

        async with WebHdfsFileSystem(NAMENODE, "hdfs", get_logger("test")) as fs:
            with pytest.raises(TransportError, match="WebHDFS request failed"):
                await fs.exists(DATA_DIR)

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        fs = WebHdfsFileSystem(NAMENODE, "hdfs", get_logger("test"))
        await fs.close()
        await fs.close()
        assert fs.is_closed


class TestHdfsController:
    @pytest.fixture
    def controller(self, settings: Settings) -> HdfsController:
        return HdfsController(
            settings.model_copy(update={"dfsadmin_command": "sudo -u hdfs hdfs dfsadmin"}),
            get_logger("test"),
        )

    def test_open_filesystem_returns_fresh_handles(self, controller: HdfsController) -> None:
        first = controller.open_filesystem()
        second = controller.open_filesystem()
        assert first is not second

    @respx.mock
    @pytest.mark.asyncio
    async def test_exists_uses_new_connection_each_time(
        self, controller: HdfsController
    ) -> None:
        route = respx.get(STATUS_URL).mock(
            side_effect=[
                Response(200, json={"FileStatus": {}}),
                Response(404),
            ]
        )

        assert await controller.exists(DATA_DIR) is True
        assert await controller.exists(DATA_DIR) is False
        assert route.call_count == 2

    @pytest.mark.asyncio
    async def test_enter_leave_argv(self, controller: HdfsController) -> None:
        with patch(
            "hdfs_stress.hdfs.controller.run_command",
            AsyncMock(return_value="Safe mode is ON\n"),
        ) as run:
            await controller.enter_safe_mode()
            await controller.leave_safe_mode()

        argvs = [call.args[0] for call in run.await_args_list]
        assert argvs == [
            ["sudo", "-u", "hdfs", "hdfs", "dfsadmin", "-safemode", "enter"],
            ["sudo", "-u", "hdfs", "hdfs", "dfsadmin", "-safemode", "leave"],
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "output,expected",
        [
            ("Safe mode is ON\n", True),
            ("Safe mode is OFF\n", False),
            ("Safe mode is ON in nn1/10.0.0.1:8020\nSafe mode is OFF in nn2/10.0.0.2:8020\n", True),
        ],
    )
    async def test_is_in_safe_mode(
        self, controller: HdfsController, output: str, expected: bool
    ) -> None:
        with patch("hdfs_stress.hdfs.controller.run_command", AsyncMock(return_value=output)):
            assert await controller.is_in_safe_mode() is expected

    @pytest.mark.asyncio
    async def test_unforced_enter_skips_when_already_on(
        self, controller: HdfsController
    ) -> None:
        with patch(
            "hdfs_stress.hdfs.controller.run_command",
            AsyncMock(return_value="Safe mode is ON\n"),
        ) as run:
            await controller.enter_safe_mode(force=False)

        assert [call.args[0][-1] for call in run.await_args_list] == ["get"]

    @pytest.mark.asyncio
    async def test_command_failure_propagates(self, controller: HdfsController) -> None:
        error = CommandError(["hdfs", "dfsadmin", "-safemode", "leave"], 255, "denied")
        with patch("hdfs_stress.hdfs.controller.run_command", AsyncMock(side_effect=error)):
            with pytest.raises(CommandError, match="exit code 255"):
                await controller.leave_safe_mode()
