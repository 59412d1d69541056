"""
CI runner environment: action inputs, executable search path and log output.

GitHub-style runners communicate through environment variables and files:
- ``INPUT_<NAME>`` carries action inputs
- ``GITHUB_PATH`` names a file; each line appended to it is added to ``PATH``
  for every later step of the job
- Lines written to stdout starting with ``::`` are workflow commands
  (``::debug::``, ``::group::``...)

Outside a runner the same calls still work: the search path is updated in the
current process only and log records are printed as plain text.
"""

import logging
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import List, Mapping, MutableMapping, Optional, TextIO, Union

logger = logging.getLogger(__name__)

PATH_FILE_ENV_VAR = "GITHUB_PATH"
ACTIONS_ENV_VAR = "GITHUB_ACTIONS"


def is_github_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Check whether we are running inside a GitHub Actions job."""
    if environ is None:
        environ = os.environ
    return environ.get(ACTIONS_ENV_VAR, "").lower() == "true"


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read an action input.

    Inputs are passed as ``INPUT_<NAME>`` with spaces replaced by underscores
    and the name upper-cased. Missing inputs read as an empty string.

    Example:
        >>> get_input("z3Version", {"INPUT_Z3VERSION": " 4.14.0 "})
        '4.14.0'
    """
    if environ is None:
        environ = os.environ
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return environ.get(key, "").strip()


class SearchPath:
    """
    Process-scoped executable search path.

    Every added directory is prepended to ``PATH`` of the current process (so
    it wins over preinstalled copies) and, when ``GITHUB_PATH`` is set,
    appended as a line to that file so later steps of the job see it too.

    Attributes:
        added: Directories added through this instance, in call order
    """

    def __init__(self, environ: Optional[MutableMapping[str, str]] = None):
        """
        Args:
            environ: Environment mapping to mutate (default: ``os.environ``)
        """
        self.environ = os.environ if environ is None else environ
        self.added: List[Path] = []

    def add_path(self, directory: Union[str, Path]) -> None:
        """
        Add a directory to the executable search path.

        Args:
            directory: Directory containing executables
        """
        directory = Path(directory)
        entry = str(directory)

        path_file = self.environ.get(PATH_FILE_ENV_VAR)
        if path_file:
            with open(path_file, "a", encoding="utf-8") as f:
                f.write(f"{entry}\n")

        current = self.environ.get("PATH", "")
        self.environ["PATH"] = f"{entry}{os.pathsep}{current}" if current else entry

        self.added.append(directory)
        logger.debug(f"Added {entry} to PATH")


# ============================================================================
# Logging
# ============================================================================


def _escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandHandler(logging.StreamHandler):
    """
    Logging handler rendering records as runner workflow commands.

    DEBUG records become ``::debug::`` (shown when step debug logging is
    enabled), WARNING ``::warning::``, ERROR and above ``::error::``. INFO
    records are printed as-is.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__(stream if stream is not None else sys.stdout)

    def format(self, record: logging.LogRecord) -> str:
        message = _escape_data(super().format(record))
        if record.levelno >= logging.ERROR:
            return f"::error::{message}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{message}"
        if record.levelno >= logging.INFO:
            return message
        return f"::debug::{message}"


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Configure root logging for a command-line run.

    Under GitHub Actions everything down to DEBUG is forwarded as workflow
    commands; the runner decides whether debug lines are displayed.

    Args:
        verbose: Enable debug output
        quiet: Errors only
        environ: Environment mapping (default: ``os.environ``)
    """
    if is_github_actions(environ):
        handler = WorkflowCommandHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logging.basicConfig(
            level=logging.ERROR if quiet else logging.DEBUG,
            handlers=[handler],
            force=True,
        )
        for noisy in ("urllib3", "filelock"):
            logging.getLogger(noisy).setLevel(logging.WARNING)
        return

    if verbose:
        level = logging.DEBUG
        format_str = "%(levelname)s [%(name)s] %(message)s"
    elif quiet:
        level = logging.ERROR
        format_str = "%(levelname)s: %(message)s"
    else:
        level = logging.INFO
        format_str = "%(message)s"

    logging.basicConfig(level=level, format=format_str, force=True)


@contextmanager
def group(name: str, stream: Optional[TextIO] = None):
    """
    Fold the output produced inside the block into a named log group.

    Outside GitHub Actions the group is only marked with a log line.

    Example:
        >>> with group("z3"):
        ...     provisioner.install("z3", "4.14.0", descriptors)
    """
    if is_github_actions():
        out = stream if stream is not None else sys.stdout
        out.write(f"::group::{_escape_data(name)}\n")
        out.flush()
        try:
            yield
        finally:
            out.write("::endgroup::\n")
            out.flush()
    else:
        logger.debug(f"== {name} ==")
        yield


__all__ = [
    "is_github_actions",
    "get_input",
    "SearchPath",
    "WorkflowCommandHandler",
    "configure_logging",
    "group",
]
