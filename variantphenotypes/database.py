"""SQLite database operations for variations and their phenotype annotations."""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional

from .models import (
    GENOTYPED,
    Allele,
    OntologyAccession,
    Phenotype,
    PhenotypeFeature,
    StructuralVariation,
    StructuralVariationFeature,
    Variation,
    VariationFeature,
)

logger = logging.getLogger(__name__)

DEFAULT_DB = Path(
    os.environ.get(
        "VARIANTPHENOTYPES_DB",
        Path(__file__).parent.parent / "data" / "phenotypes.db",
    )
)

SCHEMA = """
-- Data providers; version is overwritten on each import run
CREATE TABLE IF NOT EXISTS source (
    source_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    version TEXT,
    description TEXT
);

-- Chromosomes / contigs features are placed on
CREATE TABLE IF NOT EXISTS seq_region (
    seq_region_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS variation (
    variation_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,           -- e.g., rs80358596
    source_id INTEGER NOT NULL REFERENCES source(source_id),
    somatic INTEGER NOT NULL DEFAULT 0,
    clinical_significance TEXT,          -- denormalized summary of annotations
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS allele (
    allele_id INTEGER PRIMARY KEY,
    variation_id INTEGER NOT NULL REFERENCES variation(variation_id),
    allele TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS variation_feature (
    variation_feature_id INTEGER PRIMARY KEY,
    seq_region_id INTEGER NOT NULL REFERENCES seq_region(seq_region_id),
    seq_region_start INTEGER NOT NULL,
    seq_region_end INTEGER NOT NULL,
    seq_region_strand INTEGER NOT NULL DEFAULT 1,
    variation_id INTEGER NOT NULL REFERENCES variation(variation_id),
    allele_string TEXT,                  -- e.g., G/A
    variation_name TEXT,
    map_weight INTEGER NOT NULL DEFAULT 1,  -- number of genome hits
    source_id INTEGER NOT NULL REFERENCES source(source_id),
    validation_status TEXT,              -- comma-separated states
    consequence_types TEXT DEFAULT 'INTERGENIC',
    flags INTEGER NOT NULL DEFAULT 0     -- bit 1: genotyped
);

-- Alternate names of a variation; one row per (variation, source, name)
CREATE TABLE IF NOT EXISTS variation_synonym (
    variation_synonym_id INTEGER PRIMARY KEY,
    variation_id INTEGER NOT NULL REFERENCES variation(variation_id),
    source_id INTEGER NOT NULL REFERENCES source(source_id),
    name TEXT NOT NULL,
    UNIQUE(variation_id, source_id, name)
);

CREATE TABLE IF NOT EXISTS structural_variation (
    structural_variation_id INTEGER PRIMARY KEY,
    variation_name TEXT NOT NULL UNIQUE, -- e.g., nsv1067853
    source_id INTEGER NOT NULL REFERENCES source(source_id)
);

CREATE TABLE IF NOT EXISTS structural_variation_feature (
    structural_variation_feature_id INTEGER PRIMARY KEY,
    structural_variation_id INTEGER NOT NULL
        REFERENCES structural_variation(structural_variation_id),
    seq_region_id INTEGER NOT NULL REFERENCES seq_region(seq_region_id),
    seq_region_start INTEGER NOT NULL,
    seq_region_end INTEGER NOT NULL,
    seq_region_strand INTEGER NOT NULL DEFAULT 1,
    variation_name TEXT
);

CREATE TABLE IF NOT EXISTS phenotype (
    phenotype_id INTEGER PRIMARY KEY,
    description TEXT NOT NULL
);

-- Not unique: the same accession may be attached more than once
CREATE TABLE IF NOT EXISTS phenotype_ontology_accession (
    phenotype_id INTEGER NOT NULL REFERENCES phenotype(phenotype_id),
    accession TEXT NOT NULL,             -- e.g., HP:0003002, Orphanet:145
    mapped_by_attrib TEXT,
    mapping_type TEXT
);

CREATE TABLE IF NOT EXISTS attrib_type (
    attrib_type_id INTEGER PRIMARY KEY,
    code TEXT NOT NULL UNIQUE,
    name TEXT
);

CREATE TABLE IF NOT EXISTS phenotype_feature (
    phenotype_feature_id INTEGER PRIMARY KEY,
    phenotype_id INTEGER NOT NULL REFERENCES phenotype(phenotype_id),
    source_id INTEGER NOT NULL REFERENCES source(source_id),
    type TEXT NOT NULL,                  -- Variation, StructuralVariation
    object_id TEXT NOT NULL,             -- variation name
    is_significant INTEGER NOT NULL DEFAULT 1,
    seq_region_id INTEGER NOT NULL REFERENCES seq_region(seq_region_id),
    seq_region_start INTEGER NOT NULL,
    seq_region_end INTEGER NOT NULL,
    seq_region_strand INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS phenotype_feature_attrib (
    phenotype_feature_id INTEGER NOT NULL
        REFERENCES phenotype_feature(phenotype_feature_id),
    attrib_type_id INTEGER NOT NULL REFERENCES attrib_type(attrib_type_id),
    value TEXT
);

-- Seed data
INSERT OR IGNORE INTO source (name, description) VALUES
    ('ClinVar', 'Variants with clinical significance from ClinVar'),
    ('dbSNP', 'Variants from dbSNP'),
    ('dbVar', 'Structural variants from dbVar');

INSERT OR IGNORE INTO attrib_type (code, name) VALUES
    ('review_status', 'Review status'),
    ('external_id', 'External identifier'),
    ('clinvar_clin_sig', 'ClinVar clinical significance'),
    ('risk_allele', 'Risk allele'),
    ('associated_gene', 'Associated gene'),
    ('MIM', 'MIM number');

-- Indexes
CREATE INDEX IF NOT EXISTS idx_vf_variation ON variation_feature(variation_id);
CREATE INDEX IF NOT EXISTS idx_vf_region ON variation_feature(seq_region_id, seq_region_start);
CREATE INDEX IF NOT EXISTS idx_svf_sv ON structural_variation_feature(structural_variation_id);
CREATE INDEX IF NOT EXISTS idx_phenotype_description ON phenotype(description);
CREATE INDEX IF NOT EXISTS idx_pf_object ON phenotype_feature(object_id, type);
CREATE INDEX IF NOT EXISTS idx_pf_source ON phenotype_feature(source_id);
CREATE INDEX IF NOT EXISTS idx_pfa_feature ON phenotype_feature_attrib(phenotype_feature_id);
"""

VF_COLUMNS = """
    vf.variation_feature_id, vf.seq_region_id, sr.name AS seq_region_name,
    vf.seq_region_start, vf.seq_region_end, vf.seq_region_strand,
    vf.variation_id, vf.allele_string, vf.variation_name, vf.map_weight,
    s.name AS source_name, vf.validation_status, vf.consequence_types, vf.flags
"""

VF_TABLES = """
    variation_feature vf
    JOIN source s ON vf.source_id = s.source_id
    JOIN seq_region sr ON vf.seq_region_id = sr.seq_region_id
"""


class PhenotypeDB:
    """SQLite database of variations, phenotypes and phenotype features.

    Write methods do not commit; callers decide the transaction boundary
    (the importer commits once per ClinVar record).
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._attrib_types: Dict[str, int] = {}
        self._init_schema()

    def _init_schema(self):
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def commit(self):
        self.conn.commit()

    def rollback(self):
        self.conn.rollback()

    # ------------------------------------------------------------------
    # Sources and regions

    def fetch_source_by_name(self, name: str) -> Optional[dict]:
        cur = self.conn.execute("SELECT * FROM source WHERE name = ?", [name])
        row = cur.fetchone()
        return dict(row) if row else None

    def update_source_version(self, source_id: int, version: str):
        self.conn.execute(
            "UPDATE source SET version = ? WHERE source_id = ?", [version, source_id]
        )

    def _source_id(self, name: str) -> int:
        source = self.fetch_source_by_name(name)
        if source is None:
            cur = self.conn.execute("INSERT INTO source (name) VALUES (?)", [name])
            return cur.lastrowid
        return source["source_id"]

    def get_seq_region_id(self, name: str) -> int:
        """Resolve a chromosome name to its seq_region_id, registering it if new."""
        name = name[3:] if name.lower().startswith("chr") else name
        cur = self.conn.execute("SELECT seq_region_id FROM seq_region WHERE name = ?", [name])
        row = cur.fetchone()
        if row:
            return row[0]
        cur = self.conn.execute("INSERT INTO seq_region (name) VALUES (?)", [name])
        logger.debug("Registered seq_region %s", name)
        return cur.lastrowid

    def _attrib_type_id(self, code: str) -> int:
        if code not in self._attrib_types:
            cur = self.conn.execute(
                "SELECT attrib_type_id FROM attrib_type WHERE code = ?", [code]
            )
            row = cur.fetchone()
            if row is None:
                raise KeyError(f"Unknown attrib type: {code}")
            self._attrib_types[code] = row[0]
        return self._attrib_types[code]

    # ------------------------------------------------------------------
    # Variations

    def fetch_variation_by_name(self, name: str) -> Optional[Variation]:
        cur = self.conn.execute(
            """
            SELECT v.variation_id, v.name, v.somatic, v.clinical_significance,
                   s.name AS source_name
            FROM variation v JOIN source s ON v.source_id = s.source_id
            WHERE v.name = ?
            """,
            [name],
        )
        row = cur.fetchone()
        if row is None:
            return None
        return Variation(
            name=row["name"],
            source=row["source_name"],
            is_somatic=bool(row["somatic"]),
            clinical_significance=row["clinical_significance"],
            id=row["variation_id"],
        )

    def store_variation(self, variation: Variation) -> Variation:
        cur = self.conn.execute(
            "INSERT INTO variation (name, source_id, somatic) VALUES (?, ?, ?)",
            [variation.name, self._source_id(variation.source), int(variation.is_somatic)],
        )
        variation.id = cur.lastrowid
        return variation

    def store_allele(self, allele: Allele) -> Allele:
        cur = self.conn.execute(
            "INSERT INTO allele (variation_id, allele) VALUES (?, ?)",
            [allele.variation_id, allele.allele],
        )
        allele.id = cur.lastrowid
        return allele

    def get_alleles(self, variation_id: int) -> List[Allele]:
        cur = self.conn.execute(
            "SELECT * FROM allele WHERE variation_id = ? ORDER BY allele_id", [variation_id]
        )
        return [
            Allele(variation_id=row["variation_id"], allele=row["allele"], id=row["allele_id"])
            for row in cur.fetchall()
        ]

    def store_variation_feature(self, feature: VariationFeature) -> VariationFeature:
        cur = self.conn.execute(
            """
            INSERT INTO variation_feature
                (seq_region_id, seq_region_start, seq_region_end, seq_region_strand,
                 variation_id, allele_string, variation_name, map_weight, source_id,
                 validation_status, consequence_types, flags)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                feature.seq_region_id, feature.start, feature.end, feature.strand,
                feature.variation_id, feature.allele_string, feature.variation_name,
                feature.map_weight, self._source_id(feature.source or "dbSNP"),
                ",".join(feature.validation_states) or None,
                ",".join(feature.consequence_types) or None,
                feature.flags,
            ],
        )
        feature.id = cur.lastrowid
        return feature

    def merge_clinical_significance(self, variation_id: int, label: str):
        """Add a label to the variation's comma-separated significance summary."""
        cur = self.conn.execute(
            "SELECT clinical_significance FROM variation WHERE variation_id = ?",
            [variation_id],
        )
        row = cur.fetchone()
        current = row[0].split(",") if row and row[0] else []
        for value in label.split(","):
            value = value.strip()
            if value and value not in current:
                current.append(value)
        self.conn.execute(
            "UPDATE variation SET clinical_significance = ? WHERE variation_id = ?",
            [",".join(current) or None, variation_id],
        )

    def insert_synonym(self, variation_id: int, source_id: int, name: str) -> bool:
        """Record an alternate name; returns False if the triple already exists."""
        cur = self.conn.execute(
            """
            INSERT OR IGNORE INTO variation_synonym (variation_id, source_id, name)
            VALUES (?, ?, ?)
            """,
            [variation_id, source_id, name],
        )
        return cur.rowcount == 1

    def get_synonyms(self, variation_id: int) -> List[dict]:
        cur = self.conn.execute(
            """
            SELECT vs.name, s.name AS source_name
            FROM variation_synonym vs JOIN source s ON vs.source_id = s.source_id
            WHERE vs.variation_id = ?
            ORDER BY vs.variation_synonym_id
            """,
            [variation_id],
        )
        return [dict(row) for row in cur.fetchall()]

    def get_synonym_sources(self, variation_id: int) -> List[str]:
        """Names of all sources that hold a synonym for the variation."""
        cur = self.conn.execute(
            """
            SELECT DISTINCT s.name
            FROM variation_synonym vs JOIN source s ON s.source_id = vs.source_id
            WHERE vs.variation_id = ?
            ORDER BY s.name
            """,
            [variation_id],
        )
        return [row[0] for row in cur.fetchall()]

    # ------------------------------------------------------------------
    # Variation features

    def _feature_from_row(self, row: sqlite3.Row) -> VariationFeature:
        validation = row["validation_status"] or "0"
        return VariationFeature(
            id=row["variation_feature_id"],
            seq_region_id=row["seq_region_id"],
            seq_region_name=row["seq_region_name"],
            start=row["seq_region_start"],
            end=row["seq_region_end"],
            strand=row["seq_region_strand"],
            variation_id=row["variation_id"],
            allele_string=row["allele_string"],
            variation_name=row["variation_name"],
            map_weight=row["map_weight"],
            source=row["source_name"],
            validation_states=validation.split(","),
            consequence_types=(row["consequence_types"] or "INTERGENIC").split(","),
            flags=row["flags"],
        )

    def _fetch_features(self, constraint: str, params: list) -> List[VariationFeature]:
        cur = self.conn.execute(
            f"SELECT {VF_COLUMNS} FROM {VF_TABLES} WHERE {constraint} "
            "ORDER BY vf.variation_feature_id",
            params,
        )
        return [self._feature_from_row(row) for row in cur.fetchall()]

    def fetch_features_by_variation(self, variation: Variation) -> List[VariationFeature]:
        """All genome hits of a variation."""
        if variation.id is None:
            raise ValueError("Variation must have an id to fetch its features")
        return self._fetch_features("vf.variation_id = ?", [variation.id])

    def fetch_features_by_region(self, region: str, start: int, end: int) -> List[VariationFeature]:
        """Variation features overlapping region:start-end."""
        return self._fetch_features(
            "sr.name = ? AND vf.seq_region_end >= ? AND vf.seq_region_start <= ?",
            [region, start, end],
        )

    def fetch_genotyped_features_by_region(
        self, region: str, start: int, end: int
    ) -> List[VariationFeature]:
        """Variation features overlapping region:start-end that have been genotyped."""
        return self._fetch_features(
            "sr.name = ? AND vf.seq_region_end >= ? AND vf.seq_region_start <= ? "
            "AND vf.flags & ?",
            [region, start, end, GENOTYPED],
        )

    def fetch_features_with_annotation_by_region(
        self,
        region: str,
        start: int,
        end: int,
        variation_source: Optional[str] = None,
        annotation_source: Optional[str] = None,
        phenotype: Optional[str] = None,
    ) -> List[VariationFeature]:
        """
        Variation features in a region that carry at least one phenotype annotation.

        Args:
            region: seq_region name (chromosome)
            start: features must end after this position
            end: features must start before this position
            variation_source: only features from this variation source
            annotation_source: only features annotated by this source
            phenotype: only features annotated with this phenotype description
        """
        sql = f"""
        SELECT {VF_COLUMNS}
        FROM {VF_TABLES}
        JOIN phenotype_feature pf
            ON pf.object_id = vf.variation_name AND pf.type = 'Variation'
        JOIN source ps ON pf.source_id = ps.source_id
        JOIN phenotype p ON pf.phenotype_id = p.phenotype_id
        WHERE sr.name = ? AND vf.seq_region_end > ? AND vf.seq_region_start < ?
        """
        params: list = [region, start, end]
        if variation_source is not None:
            sql += " AND s.name = ?"
            params.append(variation_source)
        if annotation_source is not None:
            sql += " AND ps.name = ?"
            params.append(annotation_source)
        if phenotype is not None:
            sql += " AND p.description = ?"
            params.append(phenotype)
        sql += " GROUP BY vf.variation_feature_id ORDER BY vf.variation_feature_id"

        cur = self.conn.execute(sql, params)
        return [self._feature_from_row(row) for row in cur.fetchall()]

    def list_feature_ids(self) -> List[int]:
        cur = self.conn.execute(
            "SELECT variation_feature_id FROM variation_feature ORDER BY variation_feature_id"
        )
        return [row[0] for row in cur.fetchall()]

    # ------------------------------------------------------------------
    # Structural variations (read by the importer, written only when loading dbVar)

    def store_structural_variation(self, sv: StructuralVariation) -> StructuralVariation:
        cur = self.conn.execute(
            "INSERT INTO structural_variation (variation_name, source_id) VALUES (?, ?)",
            [sv.name, self._source_id(sv.source)],
        )
        sv.id = cur.lastrowid
        return sv

    def store_structural_variation_feature(
        self, feature: StructuralVariationFeature
    ) -> StructuralVariationFeature:
        cur = self.conn.execute(
            """
            INSERT INTO structural_variation_feature
                (structural_variation_id, seq_region_id, seq_region_start,
                 seq_region_end, seq_region_strand, variation_name)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                feature.structural_variation_id, feature.seq_region_id, feature.start,
                feature.end, feature.strand, feature.variation_name,
            ],
        )
        feature.id = cur.lastrowid
        return feature

    def fetch_structural_variation_by_name(self, name: str) -> Optional[StructuralVariation]:
        cur = self.conn.execute(
            """
            SELECT sv.structural_variation_id, sv.variation_name, s.name AS source_name
            FROM structural_variation sv JOIN source s ON sv.source_id = s.source_id
            WHERE sv.variation_name = ?
            """,
            [name],
        )
        row = cur.fetchone()
        if row is None:
            return None
        return StructuralVariation(
            name=row["variation_name"],
            source=row["source_name"],
            id=row["structural_variation_id"],
        )

    def fetch_features_by_structural_variation(
        self, sv: StructuralVariation
    ) -> List[StructuralVariationFeature]:
        if sv.id is None:
            raise ValueError("Structural variation must have an id to fetch its features")
        cur = self.conn.execute(
            """
            SELECT svf.*, sr.name AS seq_region_name
            FROM structural_variation_feature svf
            JOIN seq_region sr ON svf.seq_region_id = sr.seq_region_id
            WHERE svf.structural_variation_id = ?
            ORDER BY svf.structural_variation_feature_id
            """,
            [sv.id],
        )
        return [
            StructuralVariationFeature(
                id=row["structural_variation_feature_id"],
                structural_variation_id=row["structural_variation_id"],
                seq_region_id=row["seq_region_id"],
                seq_region_name=row["seq_region_name"],
                start=row["seq_region_start"],
                end=row["seq_region_end"],
                strand=row["seq_region_strand"],
                variation_name=row["variation_name"],
            )
            for row in cur.fetchall()
        ]

    # ------------------------------------------------------------------
    # Phenotypes

    def fetch_phenotype_by_description(self, description: str) -> Optional[Phenotype]:
        """First phenotype with this exact description, or None."""
        cur = self.conn.execute(
            "SELECT * FROM phenotype WHERE description = ? ORDER BY phenotype_id LIMIT 1",
            [description],
        )
        row = cur.fetchone()
        if row is None:
            return None
        phenotype = Phenotype(description=row["description"], id=row["phenotype_id"])
        cur = self.conn.execute(
            "SELECT * FROM phenotype_ontology_accession WHERE phenotype_id = ? ORDER BY rowid",
            [phenotype.id],
        )
        phenotype.ontology_accessions = [
            OntologyAccession(
                accession=acc["accession"],
                mapping_source=acc["mapped_by_attrib"],
                mapping_type=acc["mapping_type"],
            )
            for acc in cur.fetchall()
        ]
        return phenotype

    def store_phenotype(self, phenotype: Phenotype) -> Phenotype:
        cur = self.conn.execute(
            "INSERT INTO phenotype (description) VALUES (?)", [phenotype.description]
        )
        phenotype.id = cur.lastrowid
        return phenotype

    def store_ontology_accession(self, phenotype: Phenotype, accession: OntologyAccession):
        """Attach an ontology accession to a stored phenotype (no de-duplication)."""
        if phenotype.id is None:
            raise ValueError("Phenotype must be stored before adding accessions")
        self.conn.execute(
            """
            INSERT INTO phenotype_ontology_accession
                (phenotype_id, accession, mapped_by_attrib, mapping_type)
            VALUES (?, ?, ?, ?)
            """,
            [phenotype.id, accession.accession, accession.mapping_source, accession.mapping_type],
        )

    # ------------------------------------------------------------------
    # Phenotype features

    def store_phenotype_feature(self, pf: PhenotypeFeature) -> PhenotypeFeature:
        cur = self.conn.execute(
            """
            INSERT INTO phenotype_feature
                (phenotype_id, source_id, type, object_id, is_significant,
                 seq_region_id, seq_region_start, seq_region_end, seq_region_strand)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                pf.phenotype_id, pf.source_id, pf.type, pf.object_id, int(pf.is_significant),
                pf.seq_region_id, pf.start, pf.end, pf.strand,
            ],
        )
        pf.id = cur.lastrowid
        self.conn.executemany(
            """
            INSERT INTO phenotype_feature_attrib (phenotype_feature_id, attrib_type_id, value)
            VALUES (?, ?, ?)
            """,
            [(pf.id, self._attrib_type_id(code), value) for code, value in pf.attributes.items()],
        )
        return pf

    def fetch_phenotype_features_by_object(
        self, object_id: str, type: Optional[str] = None
    ) -> List[PhenotypeFeature]:
        sql = "SELECT * FROM phenotype_feature WHERE object_id = ?"
        params: list = [object_id]
        if type is not None:
            sql += " AND type = ?"
            params.append(type)
        sql += " ORDER BY phenotype_feature_id"

        features = []
        for row in self.conn.execute(sql, params).fetchall():
            attrib_cur = self.conn.execute(
                """
                SELECT at.code, pfa.value
                FROM phenotype_feature_attrib pfa
                JOIN attrib_type at ON pfa.attrib_type_id = at.attrib_type_id
                WHERE pfa.phenotype_feature_id = ?
                """,
                [row["phenotype_feature_id"]],
            )
            features.append(PhenotypeFeature(
                id=row["phenotype_feature_id"],
                phenotype_id=row["phenotype_id"],
                source_id=row["source_id"],
                type=row["type"],
                object_id=row["object_id"],
                is_significant=bool(row["is_significant"]),
                seq_region_id=row["seq_region_id"],
                start=row["seq_region_start"],
                end=row["seq_region_end"],
                strand=row["seq_region_strand"],
                attributes={code: value for code, value in attrib_cur.fetchall()},
            ))
        return features

    def delete_source_annotations(self, source_id: int) -> Dict[str, int]:
        """
        Remove everything a source has written.

        Deletes the source's phenotype features, their attributes and its
        variation synonyms, and clears the clinical significance summary of
        every variation (not only those the source annotated).

        Returns:
            Dict of table -> rows removed or updated
        """
        counts = {}
        cur = self.conn.execute(
            """
            DELETE FROM phenotype_feature_attrib WHERE phenotype_feature_id IN (
                SELECT phenotype_feature_id FROM phenotype_feature WHERE source_id = ?
            )
            """,
            [source_id],
        )
        counts["phenotype_feature_attrib"] = cur.rowcount
        cur = self.conn.execute("DELETE FROM phenotype_feature WHERE source_id = ?", [source_id])
        counts["phenotype_feature"] = cur.rowcount
        cur = self.conn.execute("DELETE FROM variation_synonym WHERE source_id = ?", [source_id])
        counts["variation_synonym"] = cur.rowcount
        cur = self.conn.execute("UPDATE variation SET clinical_significance = NULL")
        counts["variation"] = cur.rowcount
        return counts

    # ------------------------------------------------------------------

    def table_counts(self) -> Dict[str, int]:
        tables = [
            "variation", "allele", "variation_feature", "variation_synonym",
            "structural_variation", "structural_variation_feature", "phenotype",
            "phenotype_ontology_accession", "phenotype_feature", "phenotype_feature_attrib",
        ]
        return {
            table: self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            for table in tables
        }

    def close(self):
        self.conn.close()
