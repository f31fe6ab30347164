"""Look up or create the variations and phenotypes annotations hang off."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .database import PhenotypeDB
from .exceptions import HGVSParseError
from .alleles import parse_genomic_alleles
from .models import (
    Allele,
    OntologyAccession,
    Phenotype,
    Variation,
    VariationFeature,
)

logger = logging.getLogger(__name__)


@dataclass
class VariationResolution:
    """Outcome of VariantResolver.resolve; ``variation`` is None when not found."""
    variation: Optional[Variation] = None
    features: List[VariationFeature] = field(default_factory=list)
    alt_allele: Optional[str] = None
    created: bool = False
    reason: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.variation is not None


class VariantResolver:
    """Find a variation by name, creating it from ClinVar data when missing."""

    def __init__(self, db: PhenotypeDB, variation_source: str = "dbSNP"):
        self.db = db
        self.variation_source = variation_source

    def resolve(
        self,
        name: str,
        chromosome: Optional[str],
        hgvs: Optional[str],
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> VariationResolution:
        """
        Resolve a variation and its genomic features.

        Args:
            name: variation name, e.g. "rs80358596"
            chromosome: chromosome of the target assembly location
            hgvs: top-level genomic HGVS, e.g. "NC_000013.10:g.32914438G>A"
            start: location start on the chromosome
            end: location end (defaults to start)

        Returns:
            VariationResolution; not found (with a reason) when the alleles
            cannot be derived, or the variation is unknown and there is not
            enough data to create it.
        """
        ref = alt = None
        if hgvs:
            try:
                ref, alt = parse_genomic_alleles(hgvs)
            except HGVSParseError as e:
                logger.warning("Cannot derive alleles for %s: %s", name, e)
                return VariationResolution(reason="unparseable HGVS")
            if ref == alt:
                logger.warning("No informative allele for %s from %s", name, hgvs)
                return VariationResolution(reason="no informative allele")

        variation = self.db.fetch_variation_by_name(name)
        if variation is not None:
            return VariationResolution(
                variation=variation,
                features=self.db.fetch_features_by_variation(variation),
                alt_allele=alt,
            )

        # ClinVar can be ahead of the variation catalogue; not an error
        if not chromosome or start is None or ref is None:
            logger.info("%s not in database and too little data to create it", name)
            return VariationResolution(reason="variation not found")

        variation = self.db.store_variation(
            Variation(name=name, source=self.variation_source, is_somatic=False)
        )
        for allele in (ref, alt):
            self.db.store_allele(Allele(variation_id=variation.id, allele=allele))

        feature = self.db.store_variation_feature(VariationFeature(
            seq_region_id=self.db.get_seq_region_id(chromosome),
            seq_region_name=chromosome,
            start=start,
            end=end if end is not None else start,
            strand=1,
            variation_id=variation.id,
            variation_name=name,
            allele_string=f"{ref}/{alt}",
            map_weight=1,
            source=self.variation_source,
        ))
        logger.debug("Created %s %s/%s at %s:%s", name, ref, alt, chromosome, start)

        return VariationResolution(
            variation=variation, features=[feature], alt_allele=alt, created=True
        )


def normalize_description(description: str) -> str:
    """Decode escaped commas and drop apostrophes."""
    return description.replace("\\x2c", ",").replace("'", "")


class PhenotypeResolver:
    """Find a phenotype by description, creating it when missing."""

    MAPPING_SOURCE = "Data source"
    MAPPING_TYPE = "is"

    def __init__(self, db: PhenotypeDB):
        self.db = db

    def resolve(self, description: str, accession: Optional[str] = None) -> Phenotype:
        description = normalize_description(description)

        phenotype = self.db.fetch_phenotype_by_description(description)
        if phenotype is None:
            phenotype = self.db.store_phenotype(Phenotype(description=description))
            logger.debug("Created phenotype %r", description)

        # attached every time, even if this accession is already present
        if accession:
            ontology = OntologyAccession(
                accession=accession,
                mapping_source=self.MAPPING_SOURCE,
                mapping_type=self.MAPPING_TYPE,
            )
            self.db.store_ontology_accession(phenotype, ontology)
            phenotype.ontology_accessions.append(ontology)

        return phenotype
