"""
Binary storage of the markers of one chromosome.

A file is a sequence of ``pickle`` frames:

    header      dict with the format magic/version, the chromosome name and the number of markers
    starts      numpy int64 array
    ends        numpy int64 array (inclusive)
    ids         list of marker ids
    lengths     numpy int64 array with the length of each sequence
    sequences   all sequences concatenated into a single ASCII ``bytes`` blob

Coordinates are stored as arrays rather than per-record objects to keep files compact.

Reading a file unpickles it, which can run arbitrary code: only load files from a trusted source.
"""

import logging
import pickle

import numpy as np

from markerseq.core.constants import *
from markerseq.core.errors import CorruptFileError
from markerseq.core.genome.intervals import MarkerSeq

logger = logging.getLogger(__name__)

_COORD_DTYPE = np.int64


def save_markers(path, markers):
    """
    Writes the markers (all on the same chromosome, sequences set) to ``path``
    """
    markers = list(markers)
    chr_names = {m.chr_name for m in markers}
    if len(chr_names) > 1:
        raise ValueError("Markers from more than one chromosome: %s" % ", ".join(sorted(chr_names)))
    if any(m.sequence is None for m in markers):
        raise ValueError("Cannot save markers without a sequence")

    header = {
        "magic": BINSEQ_MAGIC,
        "version": BINSEQ_VERSION,
        "chr_name": chr_names.pop() if chr_names else None,
        "count": len(markers),
    }
    starts = np.fromiter((m.start for m in markers), dtype=_COORD_DTYPE, count=len(markers))
    ends = np.fromiter((m.end for m in markers), dtype=_COORD_DTYPE, count=len(markers))
    lengths = np.fromiter((len(m.sequence) for m in markers), dtype=_COORD_DTYPE, count=len(markers))
    sequences = "".join(m.sequence for m in markers).encode(BINSEQ_ENCODING)

    with open(path, "wb") as f:
        pickle.dump(header, f)
        pickle.dump(starts, f)
        pickle.dump(ends, f)
        pickle.dump([m.id for m in markers], f)
        pickle.dump(lengths, f)
        pickle.dump(sequences, f)
    logger.debug("Wrote %d markers for '%s' to %s", header["count"], header["chr_name"], path)


def read_header(path):
    """ Reads only the header frame of a sequence file """
    with open(path, "rb") as f:
        return _check_header(path, _load_frame(path, f))


def load_markers(path):
    """
    Reads back the markers written by ``save_markers``
    The chromosome handle of each marker is restored as the chromosome name
    The file is unpickled, it must come from a trusted source
    """
    with open(path, "rb") as f:
        header = _check_header(path, _load_frame(path, f))
        starts = _load_frame(path, f)
        ends = _load_frame(path, f)
        ids = _load_frame(path, f)
        lengths = _load_frame(path, f)
        sequences = _load_frame(path, f)

    n = header["count"]
    if not (len(starts) == len(ends) == len(ids) == len(lengths) == n):
        raise CorruptFileError("Inconsistent record count in '%s'" % path)
    if int(np.sum(lengths)) != len(sequences):
        raise CorruptFileError("Sequence data size mismatch in '%s'" % path)

    chr_name = header["chr_name"]
    offsets = np.concatenate(([0], np.cumsum(lengths))).astype(_COORD_DTYPE)
    sequences = sequences.decode(BINSEQ_ENCODING)
    markers = []
    for i in range(n):
        try:
            markers.append(MarkerSeq(chr_name, int(starts[i]), int(ends[i]), id=ids[i],
                                     sequence=sequences[offsets[i]:offsets[i + 1]]))
        except ValueError as e:
            raise CorruptFileError("Invalid record %d in '%s': %s" % (i, path, e)) from e
    return markers


def _load_frame(path, f):
    try:
        return pickle.load(f)
    except (EOFError, pickle.UnpicklingError, AttributeError, ImportError, IndexError, ValueError) as e:
        raise CorruptFileError("Truncated or unreadable sequence file '%s'" % path) from e


def _check_header(path, header):
    if not isinstance(header, dict) or header.get("magic") != BINSEQ_MAGIC:
        raise CorruptFileError("'%s' is not a marker sequence file" % path)
    if header.get("version") != BINSEQ_VERSION:
        raise CorruptFileError("Unsupported sequence file version %s in '%s'" % (header.get("version"), path))
    return header
