"""
Exceptions raised while building, querying and persisting genomic sequences.

Bounds problems (``OutOfRangeError``) are recoverable: callers log them and skip the
offending gene or region. Anything else that goes wrong while cutting a sequence out of
a chromosome (``FatalExtractionError``) means the input can not be trusted and aborts
the whole operation.
"""


class MarkerSeqError(Exception):
    """Base class for all markerseq errors"""


class OutOfRangeError(MarkerSeqError, IndexError):
    """An interval falls (partially) outside the chromosome sequence"""
    def __init__(self, interval, chr_len):
        self.interval = interval
        self.chr_len = chr_len
        super().__init__("Interval %s outside chromosome range (chromo length: %d)" % (interval, chr_len))


class FatalExtractionError(MarkerSeqError, RuntimeError):
    """Slicing a chromosome sequence failed for a reason other than the region bounds"""
    def __init__(self, region, chr_len):
        self.region = region
        self.chr_len = chr_len
        super().__init__("Error trying to add sequence for region:\n\tChromosome sequence length: %d\n\tRegion: %s"
                         % (chr_len, region))


class MissingTreeError(MarkerSeqError, LookupError):
    """No (or an empty) interval tree for the requested chromosome"""
    def __init__(self, chr_name, reason="No tree found"):
        self.chr_name = chr_name
        super().__init__("%s for chromosome '%s'" % (reason, chr_name))


class CorruptFileError(MarkerSeqError, ValueError):
    """A binary sequence file could not be decoded"""
