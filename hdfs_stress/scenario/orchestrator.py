"""
Scenario orchestration.

One scenario runs 1-2 create/index/delete cycles against a single collection
name, then optionally one restart-into-safe-mode chaos cycle:

    START -> CREATE_INDEX_DELETE x N -> [CHAOS_CYCLE] -> DONE

The flow is linear. Any error aborts the scenario and propagates to the
caller; the chaos cycle never leaves its deferred safe mode exit running.
"""

from dataclasses import dataclass, field
from logging import Logger
from uuid import uuid4

from hdfs_stress.chaos.injector import ChaosInjector, ChaosOutcome
from hdfs_stress.errors import UnexpectedResultCount
from hdfs_stress.logging import clear_scenario_id, get_logger, set_scenario_id
from hdfs_stress.scenario.context import ClusterContext
from hdfs_stress.scenario.indexing import DocIdCounter, IndexingAgent
from hdfs_stress.scenario.topology import Topology, TopologyPlanner, choose_base_shard_count
from hdfs_stress.scenario.verifier import CleanupVerifier

MATCH_ALL = "*:*"

logger = get_logger(__name__)


@dataclass
class CycleReport:
    """One completed create/index/delete cycle."""

    number: int
    topology: Topology
    documents: int
    data_dirs: list[str]
    deleted_by_query: bool


@dataclass
class ScenarioSummary:
    scenario_id: str
    base_shard_count: int
    auto_soft_commit: bool
    cycles: list[CycleReport] = field(default_factory=list)
    chaos: ChaosOutcome | None = None

    @property
    def directories_verified(self) -> int:
        return sum(len(cycle.data_dirs) for cycle in self.cycles)


class ScenarioOrchestrator:
    """
    Drives a scenario against the cluster in ``context``.

    Whether the chaos cycle and auto soft commit are used is drawn once, at
    construction, from the context's random source.
    """

    def __init__(self, context: ClusterContext, log: Logger | None = None) -> None:
        self._ctx = context
        self._settings = context.settings
        self._logger = log or logger
        rng = context.rng

        self._planner = TopologyPlanner(choose_base_shard_count(self._settings, rng), rng)
        self._run_chaos = rng.random() < self._settings.chaos_probability
        self._auto_soft_commit = rng.random() < self._settings.auto_soft_commit_probability

        self._verifier = CleanupVerifier(context.storage, self._logger)
        self._injector = ChaosInjector(
            context.node_controller,
            context.storage,
            context.lifecycle,
            self._settings,
            self._logger,
            rng,
        )

    @property
    def run_chaos(self) -> bool:
        return self._run_chaos

    @property
    def auto_soft_commit(self) -> bool:
        return self._auto_soft_commit

    @property
    def collection(self) -> str:
        return self._settings.collection_name

    async def run(self) -> ScenarioSummary:
        """Run every cycle; raises on the first failure."""
        summary = ScenarioSummary(
            scenario_id=uuid4().hex[:8],
            base_shard_count=self._planner.base_shard_count,
            auto_soft_commit=self._auto_soft_commit,
        )
        set_scenario_id(summary.scenario_id)
        try:
            cycles = self._settings.cycles or self._ctx.rng.randint(1, 2)
            self._logger.info(
                "Starting scenario: cycles=%d baseShards=%d chaos=%s autoSoftCommit=%s",
                cycles,
                summary.base_shard_count,
                self._run_chaos,
                self._auto_soft_commit,
            )

            for number in range(1, cycles + 1):
                summary.cycles.append(await self.create_index_delete(number))

            if self._run_chaos:
                summary.chaos = await self.chaos_cycle()

            self._logger.info(
                "Scenario passed: %d cycles, %d data directories verified, chaos=%s",
                len(summary.cycles),
                summary.directories_verified,
                summary.chaos is not None,
            )
            return summary
        finally:
            clear_scenario_id()

    async def _create(self, topology: Topology) -> None:
        lifecycle = self._ctx.lifecycle
        await lifecycle.create_collection(
            self.collection,
            topology.num_shards,
            topology.replication_factor,
            topology.max_shards_per_node,
        )
        if self._auto_soft_commit:
            await lifecycle.enable_auto_soft_commit(
                self.collection, self._settings.auto_soft_commit_max_time_ms
            )
        await lifecycle.wait_for_recoveries(self.collection, allow_failures=False)

    async def create_index_delete(self, number: int) -> CycleReport:
        """
        One cycle: create, index on every node, optionally delete by query,
        delete the collection and verify its data directories are gone.
        """
        ctx = self._ctx
        admin = ctx.admin_client
        topology = self._planner.next_topology()
        self._logger.info("Cycle %d: %s", number, topology)

        await self._create(topology)
        admin.set_default_collection(self.collection)
        await ctx.state.force_refresh(self.collection)
        for shard_id in topology.shard_ids:
            await ctx.lifecycle.wait_for_leader(
                self.collection, shard_id, self._settings.leader_timeout_ms
            )

        counter = DocIdCounter()
        agent = IndexingAgent(self._settings, self._logger, ctx.rng, counter)
        data_dirs: list[str] = []
        for node in ctx.nodes:
            await agent.index_random_batch(ctx.client_for(node), self.collection, data_dirs)

        deleted_by_query = ctx.rng.random() < 0.5
        if deleted_by_query:
            await admin.delete_by_query(MATCH_ALL)
            await admin.commit()
            result = await admin.search(MATCH_ALL)
            if result.num_found != 0:
                raise UnexpectedResultCount(MATCH_ALL, 0, result.num_found)

        await admin.commit()
        await admin.search(MATCH_ALL)

        await ctx.lifecycle.delete_collection(self.collection)
        await ctx.lifecycle.wait_for_collection_absent(
            self.collection, self._settings.delete_timeout_ms
        )
        await self._verifier.verify_absent(data_dirs)

        return CycleReport(
            number=number,
            topology=topology,
            documents=counter.issued,
            data_dirs=data_dirs,
            deleted_by_query=deleted_by_query,
        )

    async def chaos_cycle(self) -> ChaosOutcome:
        """Single-replica collection, then a node restart into HDFS safe mode."""
        ctx = self._ctx
        chaos_topology = Topology(
            num_shards=1, replication_factor=1, max_shards_per_node=1, oversharded=False
        )
        self._logger.info("Chaos cycle: %s", chaos_topology)

        await self._create(chaos_topology)
        outcome = await self._injector.run_chaos_cycle(ctx.nodes[0], self.collection)

        if self._settings.delete_after_chaos:
            await ctx.lifecycle.delete_collection(self.collection)
            await ctx.lifecycle.wait_for_collection_absent(
                self.collection, self._settings.delete_timeout_ms
            )
        return outcome
