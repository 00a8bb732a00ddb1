from enum import Enum


# IO constants
SEQ_FILE_EXT = "bin"
SEQ_FILE_SEPARATOR = "."
BINSEQ_MAGIC = "MARKERSEQ"
BINSEQ_VERSION = 1
BINSEQ_ENCODING = "ascii"

# Characters allowed verbatim in a sanitized file name, everything else becomes SANITIZE_REPLACEMENT
SANITIZE_ALLOWED = "A-Za-z0-9_.\\-"
SANITIZE_REPLACEMENT = "_"


# Output formats for stored records
OUTPUT_FORMAT = Enum("OUTPUT_FORMAT", "FASTA BED")


# Region strings, e.g. "chr1:10-30" (0-based, both ends inclusive)
REGION_CHR_SEPARATOR = ":"
REGION_POS_SEPARATOR = "-"
