"""
Pytest configuration and shared fixtures.
"""

import logging
import os
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
import respx

from hdfs_stress.config import NodeControlMode, Settings, get_settings
from hdfs_stress.scenario.context import ClusterContext, build_context
from tests.fixtures.fake_cluster import (
    NODE_NAMES,
    SOLR_NODES,
    WEBHDFS_URL,
    FakeHdfs,
    FakeHdfsController,
    FakeNodeController,
    FakeSolrCloud,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Ensure no STRESS_* variables from the shell leak into tests."""
    for var in list(os.environ):
        if var.upper().startswith("STRESS_"):
            monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the fake cluster with fast polling."""
    return Settings(
        _env_file=None,
        solr_nodes=",".join(SOLR_NODES),
        node_names=",".join(NODE_NAMES),
        node_control=NodeControlMode.COMMAND,
        webhdfs_url=WEBHDFS_URL,
        poll_interval_ms=5,
        leader_timeout_ms=2000,
        delete_timeout_ms=500,
        recovery_timeout_s=2.0,
        chaos_max_delay_ms=50,
        max_docs_per_node=50,
        seed=1234,
    )


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("hdfs_stress.tests")


@pytest.fixture
def fake_hdfs() -> FakeHdfs:
    return FakeHdfs()


@pytest.fixture
def fake_cloud(fake_hdfs: FakeHdfs) -> Generator[FakeSolrCloud, None, None]:
    """FakeSolrCloud + FakeHdfs mounted on a respx router for the test."""
    cloud = FakeSolrCloud(fake_hdfs)
    with respx.mock(assert_all_called=False) as router:
        cloud.install(router)
        fake_hdfs.install(router)
        yield cloud


@pytest_asyncio.fixture
async def context(
    settings: Settings,
    logger: logging.Logger,
    fake_cloud: FakeSolrCloud,
    fake_hdfs: FakeHdfs,
) -> AsyncGenerator[ClusterContext, None]:
    """Cluster context wired to the fake cluster; closed after the test."""
    ctx = build_context(
        settings,
        logger,
        node_controller=FakeNodeController(fake_cloud),
        storage=FakeHdfsController(fake_hdfs, settings, logger),
    )
    yield ctx
    await ctx.close()
