"""
Tests for per-node indexing and cleanup verification against the fake cluster.
"""

import pytest

from hdfs_stress.errors import ResidualResourceError, SolrResponseError
from hdfs_stress.logging import get_logger
from hdfs_stress.scenario.context import ClusterContext
from hdfs_stress.scenario.indexing import DOC_TEXT, DOC_TEXT_FIELD, DocIdCounter, IndexingAgent
from hdfs_stress.scenario.verifier import CleanupVerifier
from hdfs_stress.solr.types import CommitVariant
from tests.fixtures.fake_cluster import HDFS_ROOT, FakeHdfs, FakeSolrCloud
from tests.fixtures.stub_random import StubRandom


class TestDocIdCounter:
    def test_sequential_ids(self) -> None:
        counter = DocIdCounter()
        assert [counter.next_id() for _ in range(3)] == [0, 1, 2]
        assert counter.issued == 3

    def test_start(self) -> None:
        counter = DocIdCounter(start=10)
        assert counter.next_id() == 10


class TestIndexingAgent:
    def test_batch_uses_shared_counter(self, context: ClusterContext) -> None:
        counter = DocIdCounter()
        agent = IndexingAgent(context.settings, get_logger("test"), StubRandom(), counter)

        first = agent.make_batch()
        second = agent.make_batch()

        assert len(first) == context.settings.max_docs_per_node
        assert first[0] == {"id": 0, DOC_TEXT_FIELD: DOC_TEXT}
        assert second[0]["id"] == len(first)

    def test_commit_choice(self, context: ClusterContext) -> None:
        counter = DocIdCounter()
        hard = IndexingAgent(context.settings, get_logger("test"), StubRandom(0.2), counter)
        soft = IndexingAgent(context.settings, get_logger("test"), StubRandom(0.7), counter)

        assert hard.choose_commit() == CommitVariant.HARD
        assert soft.choose_commit() == CommitVariant.SOFT_WAIT

    @pytest.mark.asyncio
    async def test_index_records_node_data_dir(
        self, context: ClusterContext, fake_cloud: FakeSolrCloud
    ) -> None:
        await context.lifecycle.create_collection("c1", 2, 1, 8)
        agent = IndexingAgent(
            context.settings, get_logger("test"), StubRandom(0.2, randint_max=False), DocIdCounter()
        )
        data_dirs: list[str] = []

        for node in context.nodes:
            await agent.index_random_batch(context.client_for(node), "c1", data_dirs)

        assert data_dirs == [
            f"{HDFS_ROOT}/c1/core_node1/data",
            f"{HDFS_ROOT}/c1/core_node2/data",
        ]
        assert len(fake_cloud.collections["c1"].docs) == 2
        assert fake_cloud.commits == [{"commit": "true", "wt": "json"}] * 2

    @pytest.mark.asyncio
    async def test_missing_data_dir_is_an_error(
        self, context: ClusterContext, fake_cloud: FakeSolrCloud, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        await context.lifecycle.create_collection("c1", 1, 1, 1)
        agent = IndexingAgent(context.settings, get_logger("test"), StubRandom(), DocIdCounter())
        client = context.client_for(context.nodes[0])

        async def no_dir(*args, **kwargs):
            return {"responseHeader": {"status": 0}, "core": {"directory": {}}}

        monkeypatch.setattr(client, "query", no_dir)
        data_dirs: list[str] = []

        with pytest.raises(SolrResponseError):
            await agent.index_random_batch(client, "c1", data_dirs)
        assert data_dirs == []


class TestCleanupVerifier:
    @pytest.mark.asyncio
    async def test_all_absent(self, context: ClusterContext, fake_hdfs: FakeHdfs) -> None:
        verifier = CleanupVerifier(context.storage, get_logger("test"))
        paths = [f"{HDFS_ROOT}/c1/core_node{i}/data" for i in range(1, 4)]

        assert await verifier.verify_absent(paths) == 3
        assert fake_hdfs.status_requests == 3

    @pytest.mark.asyncio
    async def test_empty_list(self, context: ClusterContext, fake_hdfs: FakeHdfs) -> None:
        verifier = CleanupVerifier(context.storage, get_logger("test"))

        assert await verifier.verify_absent([]) == 0
        assert fake_hdfs.status_requests == 0

    @pytest.mark.asyncio
    async def test_first_survivor_reported(
        self, context: ClusterContext, fake_hdfs: FakeHdfs
    ) -> None:
        fake_hdfs.add(f"{HDFS_ROOT}/c1/core_node2/data")
        verifier = CleanupVerifier(context.storage, get_logger("test"))
        paths = [f"{HDFS_ROOT}/c1/core_node{i}/data" for i in range(1, 4)]

        with pytest.raises(ResidualResourceError) as exc_info:
            await verifier.verify_absent(paths)

        assert exc_info.value.path == f"{HDFS_ROOT}/c1/core_node2/data"
        assert str(exc_info.value) == (
            f"Data directory exists after collection removal : {HDFS_ROOT}/c1/core_node2/data"
        )
        # Stops at the first survivor
        assert fake_hdfs.status_requests == 2
