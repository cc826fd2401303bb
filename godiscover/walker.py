"""
Tree Walker — enumerate Go source files under a root.

Pure path filtering, no parsing.  Directory skip rules prune whole
subtrees: once a directory is excluded none of its descendants are seen.
Entries are visited in sorted order so scans are reproducible.
"""

import os
import stat
import logging
from typing import Callable, Iterator, List, Optional

from .errors import RootAccessError, WalkError
from .models import WalkOptions

logger = logging.getLogger(__name__)

GO_SOURCE_SUFFIX = ".go"
GO_TEST_SUFFIX = "_test.go"
VENDOR_DIR = "vendor"
TESTDATA_DIR = "testdata"


def is_source_file(name: str, options: WalkOptions) -> bool:
    """True if a file name passes the extension and test-file rules."""
    if not name.endswith(GO_SOURCE_SUFFIX):
        return False
    if options.skip_tests and name.endswith(GO_TEST_SUFFIX):
        return False
    return True


def is_excluded_dir(name: str, options: WalkOptions) -> bool:
    """True if a directory name matches any skip rule."""
    if options.skip_hidden and name.startswith("."):
        return True
    if options.skip_vendor and name == VENDOR_DIR:
        return True
    if options.skip_testdata and name == TESTDATA_DIR:
        return True
    return name in options.exclude_dirs


def iter_source_files(root: str, options: Optional[WalkOptions] = None) -> Iterator[str]:
    """
    Yield every Go source file under ``root`` that survives the skip rules.

    ``root`` may be a single file, in which case it is yielded only if it
    passes the file rules.  The root directory itself is never subject to
    the directory rules.

    Raises:
        RootAccessError: the root does not exist or cannot be stat-ed.
        WalkError:       a directory could not be listed mid-traversal.
    """
    if options is None:
        options = WalkOptions()

    try:
        st = os.stat(root)
    except OSError as e:
        raise RootAccessError(root, e.strerror or str(e)) from e

    if not stat.S_ISDIR(st.st_mode):
        if is_source_file(os.path.basename(root), options):
            yield root
        return

    def _onerror(err: OSError):
        raise WalkError(err.filename or root, err.strerror or str(err)) from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_onerror):
        kept = []
        for d in sorted(dirnames):
            if is_excluded_dir(d, options):
                logger.debug("Skipping directory %s", os.path.join(dirpath, d))
                continue
            kept.append(d)
        # In-place so os.walk does not descend into pruned directories
        dirnames[:] = kept

        for fname in sorted(filenames):
            if is_source_file(fname, options):
                yield os.path.join(dirpath, fname)


def walk(root: str, options: Optional[WalkOptions], visit: Callable[[str], None]):
    """Call ``visit(path)`` for every source file under ``root``.

    Errors from the traversal and from ``visit`` propagate to the caller.
    """
    for path in iter_source_files(root, options):
        visit(path)


def collect_source_files(root: str, options: Optional[WalkOptions] = None) -> List[str]:
    """All source file paths under ``root``, in visiting order."""
    return list(iter_source_files(root, options))
