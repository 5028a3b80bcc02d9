"""Size accounting for deletion candidates.

Sizes are the sum of regular file sizes below a path. Symlinks are never
followed, so a walk cannot escape into another tree or count a file
twice through a link.
"""

import logging
import os
import stat
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# 1 GiB
LARGE_DELETION_THRESHOLD = 1024**3


@dataclass(frozen=True, slots=True)
class SizeReport:
    """Measured size of a path.

    Attributes:
        total_bytes: Sum of regular file sizes that could be read.
        complete: False if some entries could not be read.
        unreadable: Number of entries that could not be read.
    """

    total_bytes: int
    complete: bool = True
    unreadable: int = 0


def measure(path: str) -> SizeReport:
    """Recursively measure the size of a path without following symlinks.

    Unreadable directories and entries are skipped and counted, so a
    permission problem deep in a tree yields a partial size instead of
    failing the whole measurement.

    Args:
        path: Path to measure.

    Returns:
        SizeReport for the path (zero bytes if it does not exist).
    """
    try:
        st = os.lstat(path)
    except FileNotFoundError:
        return SizeReport(total_bytes=0)
    except OSError as e:
        logger.warning("Cannot stat %s: %s", path, e)
        return SizeReport(total_bytes=0, complete=False, unreadable=1)

    if stat.S_ISREG(st.st_mode):
        return SizeReport(total_bytes=st.st_size)
    if not stat.S_ISDIR(st.st_mode):
        return SizeReport(total_bytes=0)

    total = 0
    unreadable = 0
    stack = [path]

    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError as e:
                        logger.debug("Cannot stat %s: %s", entry.path, e)
                        unreadable += 1
        except OSError as e:
            logger.debug("Cannot read directory %s: %s", current, e)
            unreadable += 1

    if unreadable:
        logger.warning("Size of %s is partial: %d entries unreadable", path, unreadable)

    return SizeReport(total_bytes=total, complete=unreadable == 0, unreadable=unreadable)


def is_large_deletion(size_bytes: int) -> bool:
    """Check if a deletion size exceeds the large-deletion threshold."""
    return size_bytes > LARGE_DELETION_THRESHOLD
