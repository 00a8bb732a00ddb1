import logging

import click
import click_log

import sys

from . import __version__
from markerseq.core.constants import OUTPUT_FORMAT
from markerseq.core.errors import MarkerSeqError
from markerseq.core.genome.genome import Genome
from markerseq.core.genome.genomic_sequences import GenomicSequences
from markerseq.core.io.binseq import read_header
from markerseq.core.utils import find_sequence_files, parse_region
from markerseq.engine import config_utils


logger = logging.getLogger("markerseq")
click_log.basic_config(logger)
logger.handlers[0].formatter = logging.Formatter(
    "[%(levelname)s %(asctime)s %(name)8s] %(message)s", "%Y-%m-%d %H:%M:%S"
)


def _open_store(base_file_name, config_file, verbose):
    """Builds an empty store and works out the base file name from the arguments or the config"""
    genome_id = None
    if config_file is not None:
        config = config_utils.load_config(config_file, config_utils.CONFIG_TYPE.STORE)
        base_file_name = base_file_name or config.base_file_name
        genome_id = config.genome_id
        verbose = verbose or config.verbose
    if base_file_name is None:
        raise click.UsageError("A base file name or --config must be given")
    store = GenomicSequences(Genome(genome_id or base_file_name), verbose=verbose)
    return store, base_file_name


config_option = click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False),
                             help="YAML store config")
verbose_option = click.option("--verbose", is_flag=True, default=False, help="Report progress while loading")


@click.group()
def cli():
    logger.debug("Invoked via: markerseq %s", " ".join(sys.argv))


@cli.command()
@click_log.simple_verbosity_option(logger)
def version():
    """Print the version of markerseq."""
    click.echo(__version__)


@cli.command()
@click.argument("base", required=False)
@config_option
@verbose_option
@click_log.simple_verbosity_option(logger)
def summary(base, config_file, verbose):
    """Print the number of sequences and total length stored per chromosome."""
    store, base = _open_store(base, config_file, verbose)
    try:
        store.load(base)
    except MarkerSeqError as e:
        raise click.ClickException(str(e))
    click.echo(str(store), nl=False)


@cli.command()
@click.argument("region")
@click.option("--base", default=None, help="Base file name the sequences were saved under")
@config_option
@verbose_option
@click.option("--format", "output_format", type=click.Choice(["fasta", "bed"], case_sensitive=False), default="fasta",
              show_default=True, help="Output format of the overlapping sequences")
@click.option("--exact", is_flag=True, default=False,
              help="Print only the sequence of REGION itself (it must be covered by one stored sequence)")
@click_log.simple_verbosity_option(logger)
def query(region, base, config_file, verbose, output_format, exact):
    """Print the stored sequences overlapping REGION (chr:start-end, 0-based, inclusive)."""
    try:
        interval = parse_region(region)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="REGION")

    store, base = _open_store(base, config_file, verbose)
    try:
        store.load(base, [interval.chr_name])
    except MarkerSeqError as e:
        raise click.ClickException(str(e))

    if exact:
        seq = store.get_sequence(interval)
        if seq is None:
            raise click.ClickException("No stored sequence covers %s" % str(interval))
        click.echo(">%s\n%s" % (str(interval), seq))
        return

    for marker in store.query(interval):
        click.echo(marker.to_bed() if OUTPUT_FORMAT[output_format.upper()] == OUTPUT_FORMAT.BED else marker.to_fasta())


@cli.command()
@click.argument("base")
@click_log.simple_verbosity_option(logger)
def files(base):
    """List the per-chromosome sequence files saved under BASE."""
    for file_name in find_sequence_files(base):
        try:
            header = read_header(file_name)
        except MarkerSeqError as e:
            logger.warning("%s", e)
            continue
        click.echo("%s\t%s\t%d" % (file_name, header["chr_name"], header["count"]))


def main_entry():
    cli()


if __name__ == "__main__":
    cli()
