"""Failure taxonomy for generation steps.

Gateway operations raise these; the gateway's dispatch entry point turns them
into a ``Failure`` value whose ``reason`` is ``str(exc)``.  ``UnknownStep`` is
the exception: it signals a programming error and is always propagated.
"""


class AtelierError(Exception):
    """Base class for every failure a generation step can report."""


class IOFailure(AtelierError):
    """A file read, write, copy or delete could not complete."""


class ProcessFailure(AtelierError):
    def __init__(self, command: list[str], returncode: int | None, output: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.output = output.strip()
        shown = " ".join(command)
        if returncode is None:
            message = f"could not launch `{shown}`"
        else:
            message = f"`{shown}` exited with status {returncode}"
        if self.output:
            message = f"{message}: {self.output}"
        super().__init__(message)


class ParseFailure(AtelierError):
    """The manifest could not be parsed or a required key is missing."""


class ArchiveFailure(AtelierError):
    """A download did not produce a file or an archive could not be unpacked."""


class UnsupportedPlatform(AtelierError):
    """The host operating system is not one of the supported platforms."""


class UnknownStep(AtelierError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"No gateway handler registered for step kind '{kind}'")
