"""
Per-node indexing with data directory capture.
"""

import random
from logging import Logger

from hdfs_stress.config import Settings
from hdfs_stress.solr.client import AsyncSolrClient
from hdfs_stress.solr.types import CommitVariant

DOC_TEXT_FIELD = "txt_t"
DOC_TEXT = "just some random text for a doc"
SYSTEM_INFO_TIMEOUT_S = 30.0


class DocIdCounter:
    """Monotonic document id source shared by every node in one cycle."""

    def __init__(self, start: int = 0) -> None:
        self._next = start

    @property
    def issued(self) -> int:
        return self._next

    def next_id(self) -> int:
        value = self._next
        self._next += 1
        return value


class IndexingAgent:
    """Writes a random batch to a node, commits, and records the node's data directory."""

    def __init__(
        self,
        settings: Settings,
        logger: Logger,
        rng: random.Random,
        counter: DocIdCounter,
    ) -> None:
        self._max_docs = settings.max_docs_per_node
        self._logger = logger
        self._rng = rng
        self._counter = counter

    def make_batch(self) -> list[dict[str, int | str]]:
        doc_count = self._rng.randint(1, self._max_docs)
        return [
            {"id": self._counter.next_id(), DOC_TEXT_FIELD: DOC_TEXT} for _ in range(doc_count)
        ]

    def choose_commit(self) -> CommitVariant:
        return CommitVariant.HARD if self._rng.random() < 0.5 else CommitVariant.SOFT_WAIT

    async def index_random_batch(
        self,
        node_client: AsyncSolrClient,
        collection: str,
        data_dirs: list[str],
    ) -> str:
        """
        Index 1..max_docs_per_node documents through ``node_client`` and commit.

        The data directory reported by the node's system status handler is
        appended to ``data_dirs`` and returned.
        """
        docs = self.make_batch()
        await node_client.add(docs, collection=collection)

        variant = self.choose_commit()
        await node_client.commit(variant, collection=collection)

        info = await node_client.system_info(collection=collection, timeout=SYSTEM_INFO_TIMEOUT_S)
        data_dirs.append(info.data_dir)

        self._logger.info(
            "Indexed %d docs on %s (%s commit), data dir %s",
            len(docs),
            node_client.base_url,
            variant.value,
            info.data_dir,
        )
        return info.data_dir
