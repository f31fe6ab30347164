"""Import a ClinVar XML release into the phenotype database."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, TextIO
from xml.etree.ElementTree import Element

from .database import PhenotypeDB
from .exceptions import MissingSourceError
from .fetchers.clinvar import extract_record
from .models import (
    STRUCTURAL_VARIATION,
    VARIATION,
    ClinVarRecord,
    ImportReport,
    ImportResult,
    ImportStatus,
)
from .resolvers import PhenotypeResolver, VariantResolver
from .writer import AnnotationWriter

logger = logging.getLogger(__name__)


def strip_version(accession: str) -> str:
    """RCV000000001.1 -> RCV000000001"""
    return accession.split(".", 1)[0]


def load_done_list(path: Path) -> FrozenSet[str]:
    """
    Read accessions imported by a previous run.

    The file is whitespace-delimited; the accession is the second column.
    Lines with fewer than two columns are ignored.
    """
    done = set()
    with open(path) as f:
        for line in f:
            fields = line.split()
            if len(fields) >= 2:
                done.add(strip_version(fields[1]))
    return frozenset(done)


@dataclass(frozen=True)
class ImportConfig:
    """Parameters of one import run."""
    assembly: str
    source_name: str = "ClinVar"
    source_version: Optional[str] = None
    structural: bool = False
    done: FrozenSet[str] = frozenset()


class ClinVarImporter:
    """
    Sequential ClinVar importer.

    Each record is extracted, filtered, resolved and written, then committed,
    before the next one is read. Recoverable problems come back as skipped
    ImportResults; malformed records and storage errors propagate.

    Raises:
        MissingSourceError: the configured source is not in the database
    """

    def __init__(self, db: PhenotypeDB, config: ImportConfig,
                 progress: Optional[TextIO] = None):
        self.db = db
        self.config = config
        self.progress = progress
        self.last_accession: Optional[str] = None

        self.source = db.fetch_source_by_name(config.source_name)
        if self.source is None:
            raise MissingSourceError(f"Source {config.source_name!r} not found in {db.db_path}")

        self.variant_resolver = VariantResolver(db)
        self.writer = AnnotationWriter(db, self.source, PhenotypeResolver(db))

    def update_source_version(self):
        if self.config.source_version:
            self.db.update_source_version(self.source["source_id"], self.config.source_version)
            self.db.commit()
            logger.info("%s version set to %s", self.source["name"], self.config.source_version)

    def cleanup(self) -> dict:
        """Delete everything previously imported from this source."""
        counts = self.db.delete_source_annotations(self.source["source_id"])
        self.db.commit()
        logger.info("Removed previous %s data: %s", self.source["name"], counts)
        return counts

    def run(self, elements: Iterable[Element]) -> ImportReport:
        """
        Import every ClinVarSet element.

        Raises:
            MalformedRecordError: a ClinVarSet could not be extracted
        """
        report = ImportReport()
        for element in elements:
            record = extract_record(element, self.config.assembly)
            self.last_accession = record.versioned_accession
            try:
                result = self.import_record(record)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

            report.add(result)
            if result.status is ImportStatus.SKIPPED:
                logger.warning("Skipped %s: %s", result.accession, result.reason)
            elif result.status is ImportStatus.IMPORTED and self.progress is not None:
                self.progress.write(f"imported\t{record.versioned_accession}\n")

        logger.info(
            "Processed %d records: %d imported, %d skipped, %d dropped",
            report.total, report.imported, report.skipped, report.dropped,
        )
        return report

    def import_record(self, record: ClinVarRecord) -> ImportResult:
        """Filter and dispatch one record."""
        if strip_version(record.accession) in self.config.done:
            return ImportResult(ImportStatus.SKIPPED, record.accession, "already imported")

        if self.config.structural:
            # short variant data takes precedence
            if record.dbvar_ids and not record.dbsnp_ids:
                return self._import_structural_variation(record)
        elif record.dbsnp_ids:
            return self._import_variation(record)

        return ImportResult(ImportStatus.DROPPED, record.accession)

    def _import_variation(self, record: ClinVarRecord) -> ImportResult:
        rs_id = record.dbsnp_ids[0]
        name = rs_id if rs_id.startswith("rs") else f"rs{rs_id}"

        resolution = self.variant_resolver.resolve(
            name, record.chromosome, record.hgvs_genomic, record.start, record.end
        )
        if not resolution.found:
            return ImportResult(ImportStatus.SKIPPED, record.accession, resolution.reason)
        if not resolution.features:
            return ImportResult(ImportStatus.SKIPPED, record.accession, "variation has no features")

        written = self.writer.write(
            record, resolution.variation, VARIATION, resolution.features, resolution.alt_allele
        )
        return ImportResult(
            ImportStatus.IMPORTED, record.accession, phenotype_features=len(written)
        )

    def _import_structural_variation(self, record: ClinVarRecord) -> ImportResult:
        name = record.dbvar_ids[0]
        sv = self.db.fetch_structural_variation_by_name(name)
        if sv is None:
            return ImportResult(
                ImportStatus.SKIPPED, record.accession, "structural variation not found"
            )

        features = self.db.fetch_features_by_structural_variation(sv)
        if not features:
            return ImportResult(
                ImportStatus.SKIPPED, record.accession, "structural variation has no features"
            )

        written = self.writer.write(record, sv, STRUCTURAL_VARIATION, features)
        return ImportResult(
            ImportStatus.IMPORTED, record.accession, phenotype_features=len(written)
        )
