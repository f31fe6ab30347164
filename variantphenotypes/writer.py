"""Write ClinVar assertions as phenotype features."""

import logging
from typing import Dict, List, Optional, Sequence, Union

from .database import PhenotypeDB
from .models import (
    VARIATION,
    ClinVarRecord,
    PhenotypeFeature,
    StructuralVariation,
    StructuralVariationFeature,
    Variation,
    VariationFeature,
)
from .resolvers import PhenotypeResolver

logger = logging.getLogger(__name__)

UNSPECIFIED_PHENOTYPES = {"not provided", "not specified"}
PLACEHOLDER_ALLELE = "-"


class AnnotationWriter:
    """Turn one flat ClinVar record into phenotype features for a variation.

    Args:
        db: open PhenotypeDB
        source: source row (dict with ``source_id`` and ``name``) annotations belong to
    """

    def __init__(self, db: PhenotypeDB, source: dict,
                 phenotype_resolver: Optional[PhenotypeResolver] = None):
        self.db = db
        self.source = source
        self.phenotype_resolver = phenotype_resolver or PhenotypeResolver(db)

    @property
    def default_description(self) -> str:
        return f"{self.source['name']}: phenotype not specified"

    def disease_description(self, record: ClinVarRecord) -> str:
        disease = record.disease
        if not disease or not disease.strip() or disease in UNSPECIFIED_PHENOTYPES:
            return self.default_description
        return disease

    def attributes(self, record: ClinVarRecord, alt_allele: Optional[str]) -> Dict[str, str]:
        """Attribute bag shared by every feature written for the record."""
        attributes = {
            "review_status": record.review_status or self.default_description,
            "external_id": record.versioned_accession,
            "clinvar_clin_sig": record.clinical_significance or self.default_description,
        }
        if alt_allele is not None and alt_allele != PLACEHOLDER_ALLELE:
            attributes["risk_allele"] = alt_allele
        if record.gene_symbols:
            attributes["associated_gene"] = record.gene_symbols
        if record.omim_ids:
            attributes["MIM"] = record.omim_ids[0].split(".", 1)[0]
        return attributes

    def write(
        self,
        record: ClinVarRecord,
        feature_object: Union[Variation, StructuralVariation],
        feature_kind: str,
        features: Sequence[Union[VariationFeature, StructuralVariationFeature]],
        alt_allele: Optional[str] = None,
    ) -> List[PhenotypeFeature]:
        """
        Store one phenotype feature per genomic location of the object.

        Returns:
            The stored phenotype features; all share one phenotype and one
            attribute bag.
        """
        phenotype = self.phenotype_resolver.resolve(
            self.disease_description(record), record.ontology_accession
        )
        attributes = self.attributes(record, alt_allele)

        written = []
        for feature in features:
            written.append(self.db.store_phenotype_feature(PhenotypeFeature(
                phenotype_id=phenotype.id,
                source_id=self.source["source_id"],
                type=feature_kind,
                object_id=feature_object.name,
                is_significant=True,
                seq_region_id=feature.seq_region_id,
                start=feature.start,
                end=feature.end,
                strand=feature.strand,
                attributes=dict(attributes),
            )))

        if feature_kind == VARIATION and written:
            self.db.insert_synonym(feature_object.id, self.source["source_id"], record.accession)
            self.db.merge_clinical_significance(
                feature_object.id, attributes["clinvar_clin_sig"]
            )

        logger.debug(
            "%s: %d phenotype feature(s) for %s (%s)",
            record.accession, len(written), feature_object.name, phenotype.description,
        )
        return written
