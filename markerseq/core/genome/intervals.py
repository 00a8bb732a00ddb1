import re
from collections import defaultdict
from operator import itemgetter

from markerseq.core.constants import *
from markerseq.core.errors import OutOfRangeError

_REGION_RE = re.compile(r"^(?P<chr>.+)%s(?P<start>[\d,]+)%s(?P<end>[\d,]+)$"
                        % (re.escape(REGION_CHR_SEPARATOR), re.escape(REGION_POS_SEPARATOR)))


class GenomeInterval(tuple):
    """
    Represents an interval on the genome defined by the 3-tuple: chromosome name, start, and end positions
    Assumes a 0-based start, includes both endpoints
    Intervals sort by (chromosome name, start, end)
    """
    def __new__(cls, chr_name, start, end, *args, **kwargs):
        start = int(start)
        end = int(end)
        if start > end:
            raise ValueError("Interval start %d greater than end %d on '%s'" % (start, end, chr_name))
        return tuple.__new__(cls, (chr_name, start, end))

    def __getnewargs__(self):
        return tuple(self)

    chr_name = property(itemgetter(0))
    start = property(itemgetter(1))
    end = property(itemgetter(2))

    def __len__(self):
        """ Returns the length of the interval """
        return self.end - self.start + 1

    def __str__(self):
        """ Returns a string representation of the interval """
        return "%s%s%d%s%d" % (self.chr_name, REGION_CHR_SEPARATOR, self.start, REGION_POS_SEPARATOR, self.end)

    def __repr__(self):
        return "%s(%r, %d, %d)" % (type(self).__name__, self.chr_name, self.start, self.end)

    def __contains__(self, item):
        """ True if the position or interval lies entirely inside this interval """
        if isinstance(item, int):
            return self.start <= item <= self.end
        return self.chr_name == item.chr_name and self.start <= item.start and item.end <= self.end

    def contains(self, interval):
        return interval in self

    @staticmethod
    def pos_to_interval(chr_name, pos):
        """ Converts a single position to an interval """
        return GenomeInterval(chr_name, pos, pos)

    @staticmethod
    def parse(region):
        """
        Parses a region string such as ``chr1:10-30`` or ``chr1:1,000-2,000``
        Coordinates are taken as they are: 0-based, both ends inclusive
        """
        match = _REGION_RE.match(region.strip())
        if match is None:
            raise ValueError("Malformed region '%s', expected chr%sstart%send" %
                             (region, REGION_CHR_SEPARATOR, REGION_POS_SEPARATOR))
        return GenomeInterval(match.group("chr"),
                              int(match.group("start").replace(",", "")),
                              int(match.group("end").replace(",", "")))

    def overlap(self, interval):
        """ Returns the size of the overlap between the two intervals """
        if self.chr_name != interval.chr_name:
            return 0
        return max(0, min(interval.end, self.end) - max(interval.start, self.start) + 1)

    def overlaps(self, interval):
        return self.overlap(interval) > 0

    def adjacent_or_overlapping(self, interval):
        """ True if the two intervals share a position or touch end-to-start """
        return self.chr_name == interval.chr_name and \
               interval.start <= self.end + 1 and self.start <= interval.end + 1

    def interval(self):
        """ Plain positional copy, dropping any annotation a subclass carries """
        return GenomeInterval(self.chr_name, self.start, self.end)


class MarkerSeq(GenomeInterval):
    """
    A genomic marker that owns the (upper case) nucleotide sequence it covers
    The sequence can only be set once and must span the whole interval
    """
    def __new__(cls, chr_name, start, end, id=None, chromosome=None, sequence=None):
        return GenomeInterval.__new__(cls, chr_name, start, end)

    def __init__(self, chr_name, start, end, id=None, chromosome=None, sequence=None):
        self.id = id if id is not None else self.positional_id()
        # Opaque chromosome handle, passed through from the gene that produced this marker
        self.chromosome = chromosome if chromosome is not None else chr_name
        self.sequence = None
        if sequence is not None:
            self.set_sequence(sequence)

    def set_sequence(self, sequence: str):
        if self.sequence is not None:
            raise ValueError("Sequence already set for marker %s" % self.id)
        if len(sequence) != len(self):
            raise ValueError("Sequence length %d does not match marker %s length %d" %
                             (len(sequence), str(self), len(self)))
        self.sequence = sequence.upper()

    def positional_id(self):
        return str(GenomeInterval.interval(self))

    def get_sequence(self, interval):
        """ Returns the part of this marker's sequence covered by ``interval`` """
        if interval not in self:
            raise OutOfRangeError(interval, len(self))
        first = interval.start - self.start
        return self.sequence[first:first + len(interval)]

    def __eq__(self, other):
        # a marker never equals a bare interval, otherwise equal objects would hash differently
        if isinstance(other, MarkerSeq):
            return tuple.__eq__(self, other) and self.id == other.id and self.sequence == other.sequence
        return False

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return tuple.__hash__(self) ^ hash(self.id) ^ hash(self.sequence)

    def __repr__(self):
        return "MarkerSeq(%r, %d, %d, id=%r)" % (self.chr_name, self.start, self.end, self.id)

    def to_bed(self):
        return "%s\t%d\t%d\t%s" % (self.chr_name, self.start, self.end + 1, self.id)

    def to_fasta(self):
        return ">%s\n%s" % (self.id, self.sequence if self.sequence is not None else "")


def merge_intervals(intervals):
    """
    Collapses overlapping or adjacent intervals into the minimal set of disjoint intervals
    covering the same positions. Bounds are inclusive, so [10, 20] and [21, 30] become [10, 30]
    Intervals on different chromosomes are merged independently
    Returns new GenomeInterval objects sorted by (chromosome name, start)
    """
    chr2intervals = defaultdict(list)
    for interval in intervals:
        chr2intervals[interval.chr_name].append(interval)

    merged = []
    for chr_name in sorted(chr2intervals):
        current = None
        for interval in sorted(chr2intervals[chr_name], key=lambda i: (i.start, i.end)):
            if current is None:
                current = [interval.start, interval.end]
            elif interval.start <= current[1] + 1:
                current[1] = max(current[1], interval.end)
            else:
                merged.append(GenomeInterval(chr_name, current[0], current[1]))
                current = [interval.start, interval.end]
        if current is not None:
            merged.append(GenomeInterval(chr_name, current[0], current[1]))
    return merged
