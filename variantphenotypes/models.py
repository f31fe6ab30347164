"""In-memory objects built from database rows and ClinVar records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

# phenotype_feature.type values
VARIATION = "Variation"
STRUCTURAL_VARIATION = "StructuralVariation"

# variation_feature.flags bits
GENOTYPED = 1


@dataclass
class Variation:
    name: str
    source: str = "dbSNP"
    is_somatic: bool = False
    clinical_significance: Optional[str] = None
    id: Optional[int] = None


@dataclass
class Allele:
    variation_id: int
    allele: str
    id: Optional[int] = None


@dataclass
class VariationFeature:
    """Genomic location of a variation.

    Most variations hit the genome once; ``map_weight`` counts the hits.
    """
    seq_region_id: int
    start: int
    end: int
    strand: int = 1
    variation_id: Optional[int] = None
    variation_name: Optional[str] = None
    allele_string: Optional[str] = None
    map_weight: int = 1
    source: Optional[str] = None
    seq_region_name: Optional[str] = None
    validation_states: List[str] = field(default_factory=list)
    consequence_types: List[str] = field(default_factory=lambda: ["INTERGENIC"])
    flags: int = 0
    id: Optional[int] = None

    @property
    def is_genotyped(self) -> bool:
        return bool(self.flags & GENOTYPED)


@dataclass
class StructuralVariation:
    name: str
    source: str = "dbVar"
    id: Optional[int] = None


@dataclass
class StructuralVariationFeature:
    structural_variation_id: int
    seq_region_id: int
    start: int
    end: int
    strand: int = 1
    variation_name: Optional[str] = None
    seq_region_name: Optional[str] = None
    id: Optional[int] = None


@dataclass
class OntologyAccession:
    accession: str
    mapping_source: str = "Data source"
    mapping_type: str = "is"


@dataclass
class Phenotype:
    description: str
    ontology_accessions: List[OntologyAccession] = field(default_factory=list)
    id: Optional[int] = None


@dataclass
class PhenotypeFeature:
    """One assertion linking a located feature to a phenotype."""
    phenotype_id: int
    source_id: int
    type: str
    object_id: str
    seq_region_id: int
    start: int
    end: int
    strand: int = 1
    is_significant: bool = True
    attributes: Dict[str, str] = field(default_factory=dict)
    id: Optional[int] = None


@dataclass
class Trait:
    name: Optional[str]
    ontology_accession: Optional[str] = None


@dataclass
class ClinVarRecord:
    """Flat view of one ClinVarSet, as extracted from the XML release."""
    accession: str
    version: Optional[str] = None
    record_status: Optional[str] = None
    review_status: Optional[str] = None
    description: Optional[str] = None
    clinical_significance: Optional[str] = None
    chromosome: Optional[str] = None
    start: Optional[int] = None
    end: Optional[int] = None
    strand: int = 1
    hgvs_genomic: Optional[str] = None
    gene_symbols: Optional[str] = None
    xrefs: Dict[str, List[str]] = field(default_factory=dict)
    traits: List[Trait] = field(default_factory=list)

    @property
    def versioned_accession(self) -> str:
        if self.version:
            return f"{self.accession}.{self.version}"
        return self.accession

    @property
    def dbsnp_ids(self) -> List[str]:
        return self.xrefs.get("dbSNP", [])

    @property
    def dbvar_ids(self) -> List[str]:
        return self.xrefs.get("dbVar", [])

    @property
    def omim_ids(self) -> List[str]:
        return self.xrefs.get("OMIM", [])

    @property
    def disease(self) -> Optional[str]:
        # last trait wins
        return self.traits[-1].name if self.traits else None

    @property
    def ontology_accession(self) -> Optional[str]:
        return self.traits[-1].ontology_accession if self.traits else None


class ImportStatus(str, Enum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    DROPPED = "dropped"


@dataclass
class ImportResult:
    status: ImportStatus
    accession: str
    reason: Optional[str] = None
    phenotype_features: int = 0


@dataclass
class ImportReport:
    """Tally of a whole import run."""
    imported: int = 0
    skipped: int = 0
    dropped: int = 0
    phenotype_features: int = 0
    skip_reasons: Dict[str, int] = field(default_factory=dict)

    def add(self, result: ImportResult) -> None:
        if result.status is ImportStatus.IMPORTED:
            self.imported += 1
            self.phenotype_features += result.phenotype_features
        elif result.status is ImportStatus.SKIPPED:
            self.skipped += 1
            reason = result.reason or "unknown"
            self.skip_reasons[reason] = self.skip_reasons.get(reason, 0) + 1
        else:
            self.dropped += 1

    @property
    def total(self) -> int:
        return self.imported + self.skipped + self.dropped
