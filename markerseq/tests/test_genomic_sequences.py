import logging
import os

import pytest

from markerseq.core.errors import FatalExtractionError, OutOfRangeError
from markerseq.core.genome.genome import Gene, Genome
from markerseq.core.genome.genomic_sequences import GenomicSequences, extract_sequence
from markerseq.core.genome.intervals import GenomeInterval
from markerseq.core.io.binseq import load_markers

CHR1 = ("acgt" * 50)  # length 200, lower case on purpose
CHR2 = ("ggccaatt" * 10)  # length 80


def example_genome():
    return Genome("toy", [
        Gene("chr1", 10, 20, "A"),
        Gene("chr1", 15, 30, "B"),
        Gene("chr1", 100, 110, "C"),
        Gene("chr2", 0, 9, "E"),
    ])


def test_add_gene_sequences_example():
    store = GenomicSequences(example_genome())
    assert store.is_empty()

    assert store.add_gene_sequences("chr1", CHR1) == 2
    assert not store.is_empty()

    markers = sorted(store)
    assert [str(m) for m in markers] == ["chr1:10-30", "chr1:100-110"]
    assert [m.id for m in markers] == ["chr1:10-30", "chr1:100-110"]
    for m in markers:
        assert len(m.sequence) == m.end - m.start + 1
        assert m.sequence == CHR1[m.start:m.end + 1].upper()

    assert str(store) == "Genomic sequences 'toy'\n\tchr1\t2\t32\n\tTOTAL\t2\t32\n"


def test_out_of_range_gene_is_skipped():
    genome = Genome("toy", [Gene("chr1", 190, 205, "D"), Gene("chr1", 0, 4, "F")])
    store = GenomicSequences(genome)
    assert store.add_gene_sequences("chr1", CHR1) == 1
    assert [str(m) for m in store] == ["chr1:0-4"]


def test_no_genes_in_bounds():
    genome = Genome("toy", [Gene("chr1", 190, 205, "D"), Gene("chr2", 0, 4, "F")])
    store = GenomicSequences(genome)
    assert store.add_gene_sequences("chr1", CHR1) == 0
    assert store.add_gene_sequences("chr3", "ACGT") == 0
    assert store.is_empty()
    assert len(store) == 0


def test_chromosome_name_is_case_insensitive():
    genome = Genome("toy", [Gene("Chr1", 0, 3, "A")])
    store = GenomicSequences(genome)
    assert store.add_gene_sequences("chr1", CHR1) == 1
    assert [m.chr_name for m in store] == ["Chr1"]


def test_chromosome_handle_is_passed_through():
    handle = object()
    genome = Genome("toy", [Gene("chr1", 0, 3, "A", chromosome=handle)])
    store = GenomicSequences(genome)
    store.add_gene_sequences("chr1", CHR1)
    assert store.iterator()[0].chromosome is handle


def test_repeated_add_is_not_deduplicated():
    store = GenomicSequences(example_genome())
    assert store.add_gene_sequences("chr1", CHR1) == 2
    assert store.add_gene_sequences("chr1", CHR1) == 2
    assert len(store) == 4
    assert len(store.iterator()) == 4


def test_iterator_is_rebuilt_on_each_call():
    store = GenomicSequences(example_genome())
    store.add_gene_sequences("chr1", CHR1)
    first = store.iterator()
    store.add_gene_sequences("chr2", CHR2)
    assert len(first) == 2
    assert len(store.iterator()) == 3
    assert len(list(store)) == len(list(store)) == 3


def test_extract_sequence():
    marker = extract_sequence(GenomeInterval("chr1", 4, 7), "aaaaCGtacc")
    assert marker.sequence == "CGTA"
    assert marker.id == "chr1:4-7"

    with pytest.raises(OutOfRangeError):
        extract_sequence(GenomeInterval("chr1", 8, 10), "aaaaCGtacc")


def test_extract_sequence_fatal_error():
    # 'ß' upper-cases to two characters, the extracted sequence no longer fits the region
    with pytest.raises(FatalExtractionError) as e:
        extract_sequence(GenomeInterval("chr1", 0, 3), "acßtacgt")
    assert e.value.chr_len == 8
    assert e.value.region == GenomeInterval("chr1", 0, 3)


def test_fatal_error_aborts_add():
    genome = Genome("toy", [Gene("chr1", 0, 3, "A"), Gene("chr1", 10, 12, "B")])
    store = GenomicSequences(genome)
    with pytest.raises(FatalExtractionError):
        store.add_gene_sequences("chr1", "acßtacgtacgtacgt")


def test_query_and_get_sequence():
    store = GenomicSequences(example_genome())
    store.add_gene_sequences("chr1", CHR1)

    assert [str(m) for m in store.query("chr1", 25, 105)] == ["chr1:10-30", "chr1:100-110"]
    assert [str(m) for m in store.query(GenomeInterval("chr1", 31, 99))] == []
    assert store.query("chr9", 0, 10) == []

    assert store.get_sequence(GenomeInterval("chr1", 12, 15)) == CHR1[12:16].upper()
    assert store.get_sequence(GenomeInterval("chr1", 28, 35)) is None


def test_save_and_load(tmp_path):
    base = str(tmp_path / "toy")
    store = GenomicSequences(example_genome())
    store.add_gene_sequences("chr2", CHR2)
    store.add_gene_sequences("chr1", CHR1)

    file_names = store.save(base)
    assert file_names == [base + ".chr1.bin", base + ".chr2.bin"]
    assert all(os.path.exists(f) for f in file_names)

    markers = load_markers(base + ".chr1.bin")
    assert markers == store.interval_forest.get_tree("chr1").intervals()

    loaded = GenomicSequences(example_genome())
    assert loaded.load(base) == 3
    assert sorted(loaded) == sorted(store)
    assert [m.sequence for m in sorted(loaded)] == [m.sequence for m in sorted(store)]
    assert str(loaded) == str(store)


def test_load_selected_chromosomes(tmp_path):
    base = str(tmp_path / "toy")
    store = GenomicSequences(example_genome())
    store.add_gene_sequences("chr1", CHR1)
    store.add_gene_sequences("chr2", CHR2)
    store.save(base)

    loaded = GenomicSequences(example_genome())
    assert loaded.load(base, ["chr2"]) == 1
    assert loaded.interval_forest.tree_names() == ["chr2"]


def test_load_missing_chromosome(tmp_path):
    from markerseq.core.errors import MissingTreeError

    store = GenomicSequences(example_genome())
    with pytest.raises(MissingTreeError):
        store.load(str(tmp_path / "toy"), ["chr1"])
    assert store.load(str(tmp_path / "toy")) == 0


def test_save_empty_store(tmp_path):
    store = GenomicSequences(example_genome())
    assert store.save(str(tmp_path / "toy")) == []
    assert os.listdir(str(tmp_path)) == []


def test_save_sanitizes_chromosome_names(tmp_path):
    genome = Genome("toy", [Gene("HLA-A*01:01", 0, 3, "A")])
    store = GenomicSequences(genome)
    store.add_gene_sequences("HLA-A*01:01", "acgtacgt")
    assert store.save(str(tmp_path / "toy")) == [str(tmp_path / "toy") + ".HLA-A_01_01.bin"]


def test_save_io_error_propagates(tmp_path):
    store = GenomicSequences(example_genome())
    store.add_gene_sequences("chr1", CHR1)
    with pytest.raises(OSError):
        store.save(str(tmp_path / "missing_dir" / "toy"))


def test_verbose_does_not_change_output(tmp_path):
    quiet = GenomicSequences(example_genome())
    loud = GenomicSequences(example_genome(), verbose=True)
    for store in (quiet, loud):
        store.add_gene_sequences("chr1", CHR1)
        store.add_gene_sequences("chr2", CHR2)
    quiet_files = quiet.save(str(tmp_path / "quiet"))
    loud_files = loud.save(str(tmp_path / "loud"))

    for q, l in zip(quiet_files, loud_files):
        with open(q, "rb") as fq, open(l, "rb") as fl:
            assert fq.read() == fl.read()


def test_summary_table():
    store = GenomicSequences(example_genome())
    assert store.summary_table().empty
    assert str(store) == "Genomic sequences 'toy'\n\tTOTAL\t0\t0\n"

    store.add_gene_sequences("chr2", CHR2)
    store.add_gene_sequences("chr1", CHR1)
    table = store.summary_table()
    assert list(table["chr"]) == ["chr1", "chr2"]
    assert list(table["count"]) == [2, 1]
    assert list(table["length"]) == [32, 10]


def test_load_ignores_bases_sharing_a_prefix(tmp_path):
    base = str(tmp_path / "toy")
    first = GenomicSequences(Genome("toy", [Gene("chr1", 0, 4, "A")]))
    first.add_gene_sequences("chr1", CHR1)
    first.save(base)
    second = GenomicSequences(Genome("toy2", [Gene("chr2", 0, 4, "B")]))
    second.add_gene_sequences("chr2", CHR2)
    second.save(base + ".v2")

    loaded = GenomicSequences(Genome("toy"))
    assert loaded.load(base) == 1
    assert loaded.interval_forest.tree_names() == ["chr1"]


class RecordCollector(logging.Handler):
    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


def saving_records(tmp_path, verbose, level):
    store_logger = logging.getLogger("markerseq.core.genome.genomic_sequences")
    collector = RecordCollector()
    old_level = store_logger.level
    store_logger.addHandler(collector)
    store_logger.setLevel(level)
    try:
        store = GenomicSequences(example_genome(), verbose=verbose)
        store.add_gene_sequences("chr1", CHR1)
        store.save(str(tmp_path / "toy"))
    finally:
        store_logger.removeHandler(collector)
        store_logger.setLevel(old_level)
    return [r for r in collector.records if r.getMessage().startswith("Saving sequences for chromosome")]


def test_verbose_progress_without_logging_setup(tmp_path):
    # Python's default level: INFO is disabled, progress must still get through
    records = saving_records(tmp_path, verbose=True, level=logging.WARNING)
    assert [r.levelno for r in records] == [logging.WARNING]
    assert "'chr1'" in records[0].getMessage()


def test_verbose_progress_with_info_enabled(tmp_path):
    records = saving_records(tmp_path, verbose=True, level=logging.INFO)
    assert [r.levelno for r in records] == [logging.INFO]


def test_quiet_store_reports_no_progress(tmp_path):
    assert saving_records(tmp_path, verbose=False, level=logging.DEBUG) == []
