"""
Async subprocess helper shared by node control and HDFS admin commands.
"""

import asyncio
from logging import Logger

from hdfs_stress.errors import CommandError


async def run_command(argv: list[str], *, timeout_s: float, logger: Logger) -> str:
    """
    Run ``argv`` to completion and return its combined output.

    Args:
        argv: Program and arguments (no shell)
        timeout_s: Kill the process after this many seconds
        logger: Logger for command tracing

    Returns:
        Decoded stdout+stderr

    Raises:
        CommandError: Non-zero exit, timeout, or missing executable
    """
    logger.info("Running command: %s", " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except FileNotFoundError as e:
        raise CommandError(argv, 127, str(e)) from e

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        raise CommandError(argv, None) from None

    output = stdout.decode(errors="replace") if stdout else ""
    if proc.returncode != 0:
        raise CommandError(argv, proc.returncode, output)

    logger.debug("Command output: %s", output.strip())
    return output
