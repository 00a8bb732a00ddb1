from itertools import count

from intervaltree import IntervalTree

from markerseq.core.genome.intervals import GenomeInterval


class MarkerTree:
    """
    Interval index over the markers of a single chromosome
    Markers use inclusive ends, the underlying IntervalTree is half-open, so a marker [s, e] is stored as [s, e + 1)
    """
    def __init__(self, chr_name, markers=()):
        self.chr_name = chr_name
        self.tree = IntervalTree()
        # IntervalTree is a set: tag every entry so that identical markers added twice are both kept
        self._serial = count()
        for marker in markers:
            self.insert(marker)

    def insert(self, marker):
        if marker.chr_name != self.chr_name:
            raise ValueError("Cannot add marker %s to the tree of chromosome '%s'" % (str(marker), self.chr_name))
        self.tree.addi(marker.start, marker.end + 1, (next(self._serial), marker))

    add = insert

    @staticmethod
    def _markers(entries):
        return [marker for _, marker in sorted((i.data for i in entries), key=lambda d: (d[1].start, d[1].end, d[0]))]

    def query_overlapping(self, start, end=None):
        """
        Returns the markers overlapping the inclusive range [start, end], sorted by position
        ``start`` can also be a GenomeInterval, in which case ``end`` is ignored
        """
        if isinstance(start, GenomeInterval):
            if start.chr_name != self.chr_name:
                return []
            start, end = start.start, start.end
        if end is None:
            end = start
        return self._markers(self.tree.overlap(start, end + 1))

    def query_point(self, pos):
        return self._markers(self.tree.at(pos))

    def all(self):
        """ All markers in the tree, sorted by position """
        return self._markers(self.tree)

    intervals = all

    def size(self):
        return len(self.tree)

    def is_empty(self):
        return self.tree.is_empty()

    def total_length(self):
        return sum(len(i.data[1]) for i in self.tree)

    def __len__(self):
        return self.size()

    def __iter__(self):
        return iter(self.all())

    def __str__(self):
        return "%s\t%d\t%d" % (self.chr_name, self.size(), self.total_length())


class IntervalForest:
    """
    Stores markers as a set of interval trees indexed by chromosome name
    Supports range overlap queries. Trees are created on demand and never removed
    """
    def __init__(self, markers=()):
        self.chr2tree = {}
        for marker in markers:
            self.add(marker)

    def add(self, marker):
        tree = self.chr2tree.get(marker.chr_name)
        if tree is None:
            tree = self.chr2tree[marker.chr_name] = MarkerTree(marker.chr_name)
        tree.insert(marker)

    insert = add

    def get_tree(self, chr_name):
        """ Returns the tree for the chromosome, None if there is no such tree """
        return self.chr2tree.get(chr_name)

    def tree_names(self):
        return list(self.chr2tree.keys())

    def trees(self):
        """ Lazily yields (chromosome name, tree) pairs, in insertion order """
        for chr_name, tree in self.chr2tree.items():
            yield chr_name, tree

    def query(self, interval):
        """ Returns the markers overlapping the given genome interval """
        tree = self.get_tree(interval.chr_name)
        if tree is None:
            return []
        return tree.query_overlapping(interval)

    def __contains__(self, chr_name):
        return chr_name in self.chr2tree

    def __len__(self):
        return len(self.chr2tree)

    def __iter__(self):
        return iter(self.chr2tree.values())
