"""Exit codes for the relpack CLI.

One code per packaging step so scripting callers can tell which step failed
without parsing output. The values are part of the CLI contract.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: Build tool failed or a binary is missing
    - 2: Dependency download failed
    - 3: Dependency checksum mismatch
    - 4: Archive malformed or member missing
    - 5: Writing the bundle failed
    - 6: Manifest missing or invalid
    - 130: Interrupted (Ctrl-C)
    """

    OK = 0
    BUILD_ERROR = 1
    DOWNLOAD_ERROR = 2
    INTEGRITY_ERROR = 3
    EXTRACTION_ERROR = 4
    COPY_ERROR = 5
    MANIFEST_ERROR = 6
    INTERRUPTED = 130

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
