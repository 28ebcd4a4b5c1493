"""Exception hierarchy for pg-dump-sample.

Every failure raised by the dump engine derives from ``DumpError`` so
callers can catch the whole family at once.  Errors raised while working
on a particular table carry the table name and the phase that failed.

Usage:
    from pg_dump_sample.exceptions import DumpError, CycleError

    try:
        make_dump(client, manifest, sink)
    except CycleError as e:
        print(" -> ".join(e.cycle))
    except DumpError as e:
        print(f"Dump failed: {e}")
"""


class DumpError(Exception):
    """Base exception for pg-dump-sample."""

    def __init__(
        self,
        message: str,
        table: str | None = None,
        phase: str | None = None,
    ) -> None:
        self.table = table
        self.phase = phase
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        context = []
        if self.table is not None:
            context.append(f"table {self.table}")
        if self.phase is not None:
            context.append(self.phase)
        if not context:
            return self.message
        return f"{', '.join(context)}: {self.message}"


class ManifestError(DumpError):
    """Raised when the manifest is malformed or cannot be read."""

    pass


class MetadataError(DumpError):
    """Raised when a column or foreign-key lookup fails."""

    pass


class TemplateError(DumpError):
    """Raised when a query template cannot be rendered."""

    pass


class StreamError(DumpError):
    """Raised when row export or a write to the output sink fails."""

    pass


class CycleError(DumpError):
    """Raised when tables reference each other through foreign keys.

    Attributes:
        cycle: Table names along the cycle, first and last entries equal.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(
            f"circular foreign key dependency: {' -> '.join(cycle)}",
            table=cycle[0] if cycle else None,
            phase="dependencies",
        )


class ConnectionFailedError(DumpError):
    """Raised when the database connection cannot be established."""

    pass


class ProfileNotFoundError(DumpError):
    """Raised when the requested database profile is not configured."""

    pass
