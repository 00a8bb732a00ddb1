"""
Stores all "relevant" sequences of a genome.

The store is able to:
    i)   build the regions of interest (merged gene regions) for a chromosome
    ii)  keep the genomic sequence of each region, indexed by interval
    iii) retrieve genomic sequences by interval
    iv)  save / load the sequences as one binary file per chromosome
"""

import logging

import pandas as pd
from tqdm import tqdm

from markerseq.core.errors import FatalExtractionError, MissingTreeError, OutOfRangeError
from markerseq.core.genome.forest import IntervalForest
from markerseq.core.genome.intervals import GenomeInterval, MarkerSeq, merge_intervals
from markerseq.core.io.binseq import load_markers, save_markers
from markerseq.core.utils import find_sequence_files, is_case_insensitive_match, sequence_file_name

logger = logging.getLogger(__name__)


def progress_level():
    """
    Level of the verbose progress messages: INFO where it is enabled (e.g. the command line),
    WARNING otherwise so that they still reach stderr when no logging has been configured
    """
    return logging.INFO if logger.isEnabledFor(logging.INFO) else logging.WARNING


def check_bounds(interval, chr_len):
    """ Raises OutOfRangeError unless [start, end] lies inside a chromosome of length ``chr_len`` """
    if interval.start < 0 or interval.end + 1 > chr_len:
        raise OutOfRangeError(interval, chr_len)


def extract_sequence(region, chr_seq, chromosome=None):
    """
    Cuts the (upper case) sequence of ``region`` out of the chromosome sequence
    Returns a MarkerSeq identified by its position, e.g. ``chr1:10-30``

    Raises OutOfRangeError if the region falls outside the chromosome, and
    FatalExtractionError if anything else goes wrong while building the marker
    """
    check_bounds(region, len(chr_seq))
    try:
        seq = chr_seq[region.start:region.end + 1].upper()
        marker = MarkerSeq(region.chr_name, region.start, region.end, chromosome=chromosome)
        marker.set_sequence(seq)
    except Exception as e:
        raise FatalExtractionError(region, len(chr_seq)) from e
    return marker


class GenomicSequences:
    """
    Sequences of the merged gene regions of a genome, kept in an interval forest (one tree per chromosome)
    The genome is only read, never modified
    """
    def __init__(self, genome, verbose=False):
        self.genome = genome
        self.verbose = verbose
        self.interval_forest = IntervalForest()

    def set_verbose(self, verbose):
        self.verbose = verbose

    def _progress(self, msg, *args):
        if self.verbose:
            logger.log(progress_level(), msg, *args)

    def add_gene_sequences(self, chr_name, chr_seq):
        """
        Adds the sequences of all (merged) gene regions on chromosome ``chr_name``
        Returns the number of sequences added

        Calling this twice for the same chromosome adds the sequences twice
        """
        chr_len = len(chr_seq)
        regions = self.gene_regions(chr_name, chr_len)

        # Collapse overlapping regions
        logger.debug("Size before merge: %d", len(regions))
        regions = merge_intervals(regions)
        logger.debug("Size after merge: %d", len(regions))

        # Find and add sequences for all regions
        chromosomes = {}
        for gene in self.genome.genes_on(chr_name):
            chromosomes.setdefault(gene.chr_name, gene.chromosome)
        seqs_added = 0
        for region in regions:
            if not is_case_insensitive_match(region.chr_name, chr_name):
                continue
            try:
                marker = extract_sequence(region, chr_seq, chromosomes.get(region.chr_name))
            except OutOfRangeError as e:
                logger.warning("Ignoring region outside chromosome range (chromo length: %d). Sequence (merged genes): %s",
                               e.chr_len, str(region))
                continue
            self.interval_forest.add(marker)
            seqs_added += 1

        logger.debug("%s", self)
        return seqs_added

    def gene_regions(self, chr_name, chr_len):
        """
        Intervals of the genes on chromosome ``chr_name`` that fit in a chromosome of length ``chr_len``
        Genes outside the chromosome are reported and skipped
        """
        regions = []
        for gene in self.genome.genes_on(chr_name):
            try:
                check_bounds(gene, chr_len)
            except OutOfRangeError:
                logger.warning("Ignoring gene outside chromosome range (chromo length: %d). Gene: %s",
                               chr_len, gene.to_str())
                continue
            regions.append(gene.interval())
        return regions

    def is_empty(self):
        for tree in self.interval_forest:
            if not tree.is_empty():
                return False
        return True

    def iterator(self):
        """ All stored markers, one list built per call """
        markers = []
        for chr_name, tree in self.interval_forest.trees():
            markers.extend(tree.intervals())
        return markers

    def __iter__(self):
        return iter(self.iterator())

    def __len__(self):
        return sum(tree.size() for tree in self.interval_forest)

    def query(self, interval, start=None, end=None):
        """
        Returns the stored markers overlapping an interval, sorted by position
        Accepts either a GenomeInterval or ``chr_name, start, end`` (0-based, inclusive)
        """
        if not isinstance(interval, GenomeInterval):
            interval = GenomeInterval(interval, start, end)
        return self.interval_forest.query(interval)

    def get_sequence(self, interval):
        """
        Returns the sequence of ``interval`` if a stored marker covers it completely, None otherwise
        """
        for marker in self.query(interval):
            if interval in marker:
                return marker.get_sequence(interval)
        return None

    def save(self, base_file_name):
        """
        Saves the genomic sequences into separate files, one per chromosome
        Returns the names of the files written
        """
        if self.is_empty():
            return []

        chr_names = sorted(self.interval_forest.tree_names())
        file_names = []
        for chr_name in tqdm(chr_names, desc="Saving sequences", unit="chr", disable=not self.verbose):
            try:
                file_names.append(self.save_chromosome(base_file_name, chr_name))
            except MissingTreeError as e:
                self._progress("%s", e)
        return file_names

    def save_chromosome(self, base_file_name, chr_name):
        """ Saves the sequences of chromosome ``chr_name`` to a binary file """
        tree = self.interval_forest.get_tree(chr_name)
        if tree is None:
            raise MissingTreeError(chr_name)
        if tree.is_empty():
            raise MissingTreeError(chr_name, "No sequences found")

        file_name = sequence_file_name(base_file_name, chr_name)
        self._progress("Saving sequences for chromosome '%s' to file '%s'", chr_name, file_name)
        save_markers(file_name, tree.intervals())
        return file_name

    def load(self, base_file_name, chr_names=None):
        """
        Loads sequences previously saved under ``base_file_name``
        If ``chr_names`` is given only those chromosomes are loaded, and each of them must have a file
        Returns the number of sequences loaded
        """
        if chr_names is None:
            files = [(None, file_name) for file_name in find_sequence_files(base_file_name)]
        else:
            files = [(chr_name, sequence_file_name(base_file_name, chr_name)) for chr_name in chr_names]

        loaded = 0
        for chr_name, file_name in files:
            self._progress("Loading sequences from file '%s'", file_name)
            try:
                markers = load_markers(file_name)
            except FileNotFoundError as e:
                if chr_name is None:
                    raise
                raise MissingTreeError(chr_name, "No sequence file") from e
            for marker in markers:
                self.interval_forest.add(marker)
            loaded += len(markers)
        return loaded

    def summary_table(self):
        """ Number of sequences and total sequence length stored per chromosome """
        rows = []
        for chr_name in sorted(self.interval_forest.tree_names()):
            tree = self.interval_forest.get_tree(chr_name)
            rows.append({"chr": chr_name, "count": tree.size(), "length": tree.total_length()})
        return pd.DataFrame(rows, columns=["chr", "count", "length"])

    def __str__(self):
        s = "Genomic sequences '%s'\n" % self.genome.id
        table = self.summary_table()
        for chr_name, n, length in table.itertuples(index=False, name=None):
            s += "\t%s\t%d\t%d\n" % (chr_name, n, length)
        s += "\tTOTAL\t%d\t%d\n" % (int(table["count"].sum()), int(table["length"].sum()))
        return s
