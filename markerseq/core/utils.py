import glob
import re

from markerseq.core.constants import *
from markerseq.core.errors import CorruptFileError
from markerseq.core.genome.intervals import GenomeInterval
from markerseq.core.io.binseq import read_header

_UNSAFE_CHARS = re.compile("[^%s]" % SANITIZE_ALLOWED)


def sanitize_file_name(name):
    """
    Returns a version of ``name`` that can be used as a single path segment
    Every character outside [A-Za-z0-9_.-] is replaced by an underscore
    """
    safe = _UNSAFE_CHARS.sub(SANITIZE_REPLACEMENT, name)
    if not safe or safe in (".", ".."):
        return SANITIZE_REPLACEMENT * max(1, len(safe))
    return safe


def sequence_file_name(base_file_name, chr_name):
    """ Per-chromosome file name: ``{base}.{sanitized chromosome}.bin`` """
    return SEQ_FILE_SEPARATOR.join((str(base_file_name), sanitize_file_name(chr_name), SEQ_FILE_EXT))


def find_sequence_files(base_file_name):
    """
    Sorted list of the per-chromosome files saved under ``base_file_name``
    The glob also matches files of other bases sharing the prefix (``toy`` vs ``toy.v2``), so a file is kept
    only if its own chromosome name maps back to its path. Unreadable files are kept for the caller to report
    """
    pattern = SEQ_FILE_SEPARATOR.join((glob.escape(str(base_file_name)), "*", SEQ_FILE_EXT))
    file_names = []
    for file_name in sorted(glob.glob(pattern)):
        try:
            chr_name = read_header(file_name)["chr_name"]
        except CorruptFileError:
            file_names.append(file_name)
            continue
        if chr_name is not None and sequence_file_name(base_file_name, chr_name) == file_name:
            file_names.append(file_name)
    return file_names


def is_case_insensitive_match(chr_a: str, chr_b: str) -> bool:
    return chr_a.lower() == chr_b.lower()


def parse_region(region):
    """ Parses ``chr:start-end`` (0-based, inclusive) into a GenomeInterval """
    return GenomeInterval.parse(region)
