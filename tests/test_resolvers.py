from variantphenotypes.resolvers import PhenotypeResolver, VariantResolver, normalize_description

HGVS = "NC_000013.10:g.32914438G>A"


def _counts(db):
    counts = db.table_counts()
    return counts["variation"], counts["allele"], counts["variation_feature"]


def test_creates_variation_alleles_and_feature(db):
    resolution = VariantResolver(db).resolve("rs123", "13", HGVS, 32914438, 32914438)

    assert resolution.found
    assert resolution.created
    assert resolution.alt_allele == "A"
    assert resolution.variation.name == "rs123"
    assert resolution.variation.source == "dbSNP"
    assert resolution.variation.is_somatic is False

    alleles = [a.allele for a in db.get_alleles(resolution.variation.id)]
    assert alleles == ["G", "A"]

    [feature] = resolution.features
    assert feature.seq_region_name == "13"
    assert (feature.start, feature.end, feature.strand) == (32914438, 32914438, 1)
    assert feature.map_weight == 1
    assert feature.allele_string == "G/A"


def test_existing_variation_is_not_rewritten(db):
    resolver = VariantResolver(db)
    first = resolver.resolve("rs123", "13", HGVS, 32914438)
    db.commit()
    before = _counts(db)

    again = resolver.resolve("rs123", "13", HGVS, 32914438)

    assert _counts(db) == before
    assert not again.created
    assert again.variation.id == first.variation.id
    assert [f.id for f in again.features] == [f.id for f in first.features]
    assert again.alt_allele == "A"


def test_existing_variation_without_location_data(db):
    resolver = VariantResolver(db)
    resolver.resolve("rs123", "13", HGVS, 32914438)
    resolution = resolver.resolve("rs123", None, None)
    assert resolution.found
    assert resolution.alt_allele is None


def test_unknown_variation_without_position(db):
    resolution = VariantResolver(db).resolve("rs123", None, HGVS)
    assert not resolution.found
    assert resolution.reason == "variation not found"
    assert _counts(db) == (0, 0, 0)


def test_unknown_variation_without_hgvs(db):
    resolution = VariantResolver(db).resolve("rs123", "13", None, 32914438)
    assert not resolution.found
    assert _counts(db) == (0, 0, 0)


def test_unparseable_hgvs(db):
    resolution = VariantResolver(db).resolve("rs123", "13", "NC_000013.10:g.100_200del", 100)
    assert not resolution.found
    assert resolution.reason == "unparseable HGVS"
    assert _counts(db) == (0, 0, 0)


def test_uninformative_allele(db):
    resolution = VariantResolver(db).resolve("rs123", "13", "NC_000013.10:g.100_101delCTinsCT", 100)
    assert not resolution.found
    assert resolution.reason == "no informative allele"


def test_normalize_description():
    assert normalize_description("Crohn\\x2c disease") == "Crohn, disease"
    assert normalize_description("Alzheimer's disease") == "Alzheimers disease"


def test_phenotype_created_once(db):
    resolver = PhenotypeResolver(db)
    first = resolver.resolve("Alzheimer's disease")
    second = resolver.resolve("Alzheimers disease")
    assert first.id == second.id
    assert first.description == "Alzheimers disease"
    assert db.table_counts()["phenotype"] == 1


def test_ontology_accession_always_attached(db):
    resolver = PhenotypeResolver(db)
    resolver.resolve("Cardiomyopathy", "HP:0001638")
    resolver.resolve("Cardiomyopathy", "HP:0001638")
    resolver.resolve("Cardiomyopathy")

    phenotype = db.fetch_phenotype_by_description("Cardiomyopathy")
    assert [a.accession for a in phenotype.ontology_accessions] == ["HP:0001638", "HP:0001638"]
    assert phenotype.ontology_accessions[0].mapping_source == "Data source"
    assert phenotype.ontology_accessions[0].mapping_type == "is"
