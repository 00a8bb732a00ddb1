from markerseq.core.genome.intervals import GenomeInterval
from markerseq.core.utils import is_case_insensitive_match


class Gene(GenomeInterval):
    """
    A gene annotation: a named interval (0-based, inclusive ends) on a chromosome
    ``chromosome`` is an opaque handle carried over to the markers built from the gene
    """
    def __init__(self, chr_name, start, end, id, chromosome=None):
        self.id = id
        self.chromosome = chromosome if chromosome is not None else chr_name

    def __repr__(self):
        return "Gene(%r, %d, %d, %r)" % (self.chr_name, self.start, self.end, self.id)

    def to_str(self):
        return "%s\t%s" % (str(self), self.id)


class Genome:
    """
    Minimal reference genome: an identifier plus its gene annotations
    """
    def __init__(self, id, genes=()):
        self.id = id
        self._genes = list(genes)

    def add_gene(self, gene):
        self._genes.append(gene)

    def genes(self):
        return tuple(self._genes)

    def genes_on(self, chr_name):
        """ Genes on the given chromosome (name matched case-insensitively) """
        return [gene for gene in self._genes if is_case_insensitive_match(gene.chr_name, chr_name)]

    def chr_names(self):
        return sorted({gene.chr_name for gene in self._genes})

    def __len__(self):
        return len(self._genes)

    def __str__(self):
        return "Genome '%s': %d genes" % (self.id, len(self._genes))
