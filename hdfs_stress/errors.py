"""
Failure taxonomy for stress scenarios.

Every error here is fatal to the scenario that raises it. Nothing in the
harness retries a convergence wait; callers see the first failure.
"""


class ConvergenceTimeout(Exception):
    """Raised when a bounded wait (leader, recovery, collection removal) exceeds its deadline."""

    def __init__(self, what: str, timeout_s: float):
        super().__init__(f"Timeout after {timeout_s:.1f}s waiting for {what}")
        self.what = what
        self.timeout_s = timeout_s


class RecoveryFailedError(Exception):
    """Raised when a replica reports recovery_failed and failures are not allowed."""

    def __init__(self, collection: str, shard: str, replica: str):
        super().__init__(
            f"Replica {replica} of {collection}/{shard} failed to recover"
        )
        self.collection = collection
        self.shard = shard
        self.replica = replica


class ResidualResourceError(AssertionError):
    """Raised when a data directory survives the deletion of its collection."""

    def __init__(self, path: str):
        super().__init__(f"Data directory exists after collection removal : {path}")
        self.path = path


class UnexpectedResultCount(AssertionError):
    """Raised when a verification query returns the wrong number of documents."""

    def __init__(self, query: str, expected: int, actual: int):
        super().__init__(f"Query {query!r} expected {expected} results, found {actual}")
        self.query = query
        self.expected = expected
        self.actual = actual


class TransportError(Exception):
    """Raised when a Solr or WebHDFS call fails at the network or HTTP layer."""

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class SolrResponseError(TransportError):
    """Raised when Solr answers but the body reports an error or lacks a required field."""

    pass


class CommandError(Exception):
    """Raised when a node control or dfsadmin command fails or times out."""

    def __init__(self, argv: list[str], returncode: int | None, output: str = ""):
        joined = " ".join(argv)
        if returncode is None:
            message = f"Command timed out: {joined}"
        else:
            message = f"Command failed with exit code {returncode}: {joined}"
        if output:
            message = f"{message}\n{output.strip()}"
        super().__init__(message)
        self.argv = argv
        self.returncode = returncode
        self.output = output
