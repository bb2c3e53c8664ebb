"""
Node restart into HDFS safe mode.

Stops a Solr node, puts the NameNode into safe mode, schedules the exit from
safe mode after a random delay and restarts the node straight away, so node
recovery races the storage layer becoming writable again.
"""

import random
from dataclasses import dataclass
from logging import Logger

from hdfs_stress.chaos.nodes import ClusterNode, NodeController
from hdfs_stress.chaos.schedule import DeferredAction
from hdfs_stress.cluster.lifecycle import ClusterLifecycleDriver
from hdfs_stress.config import Settings
from hdfs_stress.hdfs.controller import HdfsController


@dataclass
class ChaosOutcome:
    """What happened during one chaos cycle."""

    node: str
    delay_ms: int
    safe_mode_exit_fired: bool
    safe_mode_exit_cancelled: bool
    restored_after_cancel: bool = False


class ChaosInjector:
    """Runs the stop / safe mode / restart / recover sequence against one node."""

    def __init__(
        self,
        nodes: NodeController,
        storage: HdfsController,
        lifecycle: ClusterLifecycleDriver,
        settings: Settings,
        logger: Logger,
        rng: random.Random,
    ) -> None:
        self._nodes = nodes
        self._storage = storage
        self._lifecycle = lifecycle
        self._settings = settings
        self._logger = logger
        self._rng = rng

    async def run_chaos_cycle(self, node: ClusterNode, collection: str) -> ChaosOutcome:
        """
        Restart ``node`` while HDFS is in safe mode and wait for ``collection`` to recover.

        The deferred safe mode exit is cancelled (or awaited, if already
        running) before this method returns or raises.

        Raises:
            ConvergenceTimeout: The collection did not recover in time
            CommandError: Node control or dfsadmin failed
        """
        await self._nodes.stop(node)
        try:
            await self._storage.enter_safe_mode(force=True)
        except BaseException:
            # Never leave the node down behind a failed dfsadmin call
            await self._nodes.start(node)
            raise

        delay_ms = self._rng.randrange(self._settings.chaos_max_delay_ms)
        leave_safe_mode = DeferredAction(
            delay_ms / 1000,
            self._storage.leave_safe_mode,
            self._logger,
            name="leave-safe-mode",
        )
        leave_safe_mode.start()

        try:
            await self._nodes.start(node)
            await self._lifecycle.wait_for_recoveries(collection, allow_failures=True)
        finally:
            cancelled = await leave_safe_mode.aclose()
            if cancelled:
                self._logger.warning(
                    "Safe mode exit (delay %dms) cancelled before it fired", delay_ms
                )

        outcome = ChaosOutcome(
            node=node.name,
            delay_ms=delay_ms,
            safe_mode_exit_fired=leave_safe_mode.fired,
            safe_mode_exit_cancelled=cancelled,
        )
        if cancelled and self._settings.chaos_restore_safe_mode:
            await self._storage.leave_safe_mode()
            outcome.restored_after_cancel = True

        self._logger.info(
            "Chaos cycle on %s done: delay=%dms fired=%s",
            node.name,
            delay_ms,
            outcome.safe_mode_exit_fired,
        )
        return outcome
