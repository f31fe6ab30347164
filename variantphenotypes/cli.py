"""Command-line interface for VariantPhenotypes."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

import click

from . import __version__
from .database import PhenotypeDB
from .exceptions import MalformedRecordError, MissingSourceError
from .fetchers.clinvar import download_clinvar_xml, iter_clinvar_sets, read_release_date
from .importer import ClinVarImporter, ImportConfig, load_done_list

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(__version__)
def main():
    """Load ClinVar phenotype annotations into a variation database."""
    pass


@main.command("import")
@click.option("--input", "-i", "input_file", required=True,
              type=click.Path(exists=True, dir_okay=False), help="ClinVar XML release (.xml or .xml.gz)")
@click.option("--db", required=True, type=click.Path(dir_okay=False), help="Database path")
@click.option("--assembly", "-a", required=True, help="Assembly of the locations to keep, e.g. GRCh37")
@click.option("--structural", is_flag=True, help="Import structural variants (dbVar) only")
@click.option("--done-list", type=click.Path(exists=True, dir_okay=False),
              help="Accessions already imported (second whitespace-separated column)")
@click.option("--cleanup", is_flag=True, help="Delete all previously imported ClinVar data first")
@click.option("--source", "source_name", default="ClinVar", show_default=True, help="Source name")
@click.option("--source-version", help="Version to record for the source (default: release date)")
@click.option("--progress-file", type=click.Path(dir_okay=False),
              help="Append imported accessions here, usable as the next --done-list")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def import_clinvar(input_file, db, assembly, structural, done_list, cleanup,
                   source_name, source_version, progress_file, verbose):
    """Import a ClinVar XML release."""
    _setup_logging(verbose)
    input_path = Path(input_file)

    done = load_done_list(Path(done_list)) if done_list else frozenset()
    if done:
        click.echo(f"Skipping {len(done)} accessions from {done_list}")

    vdb = PhenotypeDB(Path(db))
    progress = open(progress_file, "a") if progress_file else None
    importer = None
    try:
        config = ImportConfig(
            assembly=assembly,
            source_name=source_name,
            source_version=source_version or read_release_date(input_path),
            structural=structural,
            done=done,
        )
        importer = ClinVarImporter(vdb, config, progress=progress)
        if cleanup:
            counts = importer.cleanup()
            click.echo(f"Removed previous {source_name} data: "
                       + ", ".join(f"{k}={v}" for k, v in counts.items()))
        importer.update_source_version()
        report = importer.run(iter_clinvar_sets(input_path))
    except MissingSourceError as e:
        raise click.ClickException(str(e))
    except MalformedRecordError as e:
        logger.error("Malformed ClinVar record:\n%s", e.record_xml)
        raise click.ClickException(f"Aborting import: {e}")
    except ET.ParseError as e:
        line, column = e.position
        last = importer.last_accession if importer is not None else None
        logger.error("Invalid XML at line %d, column %d of %s; last record read: %s",
                     line, column, input_path, last or "none")
        raise click.ClickException(
            f"Aborting import, cannot parse {input_path} at line {line}, column {column}: {e}"
        )
    finally:
        if progress is not None:
            progress.close()
        vdb.close()

    click.echo(f"\n{'='*60}")
    click.echo(f"Records:            {report.total}")
    click.echo(f"Imported:           {report.imported}")
    click.echo(f"Skipped:            {report.skipped}")
    for reason, count in sorted(report.skip_reasons.items()):
        click.echo(f"  {reason:<30} {count}")
    click.echo(f"Not applicable:     {report.dropped}")
    click.echo(f"Phenotype features: {report.phenotype_features}")


@main.command()
@click.option("--db", required=True, type=click.Path(dir_okay=False), help="Database path")
@click.option("--source", "source_name", default="ClinVar", show_default=True, help="Source name")
@click.confirmation_option(prompt="Delete all phenotype features and synonyms of this source?")
def cleanup(db, source_name):
    """Remove everything imported from a source."""
    vdb = PhenotypeDB(Path(db))
    try:
        source = vdb.fetch_source_by_name(source_name)
        if source is None:
            raise click.ClickException(f"Source {source_name!r} not found")
        counts = vdb.delete_source_annotations(source["source_id"])
        vdb.commit()
    finally:
        vdb.close()

    for table, count in counts.items():
        click.echo(f"{table:<28} {count}")


@main.command()
@click.option("--force", is_flag=True, help="Re-download even if cached")
def download(force):
    """Download the latest ClinVar XML release."""
    _setup_logging(False)
    path = download_clinvar_xml(force=force)
    click.echo(f"ClinVar release: {path}")


@main.command()
@click.option("--db", type=click.Path(), default=None, help="Database path")
def stats(db):
    """Show database statistics."""
    vdb = PhenotypeDB(Path(db) if db else None)

    click.echo("VariantPhenotypes Database Statistics")
    click.echo("=" * 60)

    for table, count in vdb.table_counts().items():
        click.echo(f"{table:<32} {count:>10}")

    cur = vdb.conn.execute("""
        SELECT s.name, s.version, COUNT(pf.phenotype_feature_id)
        FROM source s LEFT JOIN phenotype_feature pf ON pf.source_id = s.source_id
        GROUP BY s.source_id
        ORDER BY s.name
    """)
    click.echo(f"\n{'Source':<12} {'Version':<14} {'Phenotype features':<20}")
    click.echo("-" * 50)
    for row in cur:
        click.echo(f"{row[0]:<12} {row[1] or 'N/A':<14} {row[2]:<20}")

    click.echo(f"\nDatabase: {vdb.db_path}")
    vdb.close()


@main.command()
@click.option("--variant", "-v", "name", required=True, help="Variation name, e.g. rs80358596")
@click.option("--db", type=click.Path(), default=None, help="Database path")
def query(name, db):
    """Show a variation's locations and phenotype annotations."""
    vdb = PhenotypeDB(Path(db) if db else None)
    try:
        variation = vdb.fetch_variation_by_name(name)
        if variation is None:
            click.echo(f"No variation named {name}")
            return

        click.echo(f"{variation.name} ({variation.source}) "
                   f"significance: {variation.clinical_significance or 'N/A'}")
        for feature in vdb.fetch_features_by_variation(variation):
            click.echo(f"  {feature.seq_region_name}:{feature.start}-{feature.end} "
                       f"{feature.allele_string} map_weight={feature.map_weight}")

        synonyms = vdb.get_synonyms(variation.id)
        if synonyms:
            click.echo("  synonyms: " + ", ".join(f"{s['name']} ({s['source_name']})" for s in synonyms))

        features = vdb.fetch_phenotype_features_by_object(variation.name)
        click.echo(f"\n{len(features)} phenotype features")
        click.echo(f"{'Accession':<18} {'Significance':<24} {'Review status':<40}")
        click.echo("-" * 84)
        for pf in features:
            click.echo(f"{pf.attributes.get('external_id', 'N/A'):<18} "
                       f"{pf.attributes.get('clinvar_clin_sig', 'N/A')[:23]:<24} "
                       f"{pf.attributes.get('review_status', 'N/A')[:39]:<40}")
    finally:
        vdb.close()


if __name__ == "__main__":
    main()
