import gzip
import xml.etree.ElementTree as ET
import shutil

import pytest

from conftest import clinvar_set
from variantphenotypes.exceptions import MalformedRecordError
from variantphenotypes.fetchers.clinvar import (
    clinical_significance,
    extract_record,
    fetch_clinvar,
    iter_clinvar_sets,
    read_release_date,
)


def test_sample_record(sample_sets):
    record = extract_record(sample_sets["RCV000000001"], "GRCh37")

    assert record.accession == "RCV000000001"
    assert record.versioned_accession == "RCV000000001.1"
    assert record.clinical_significance == "pathogenic"
    assert record.review_status == "classified by single submitter"
    assert record.chromosome == "13"
    assert (record.start, record.end, record.strand) == (32914438, 32914438, 1)
    assert record.hgvs_genomic == "NC_000013.10:g.32914438G>A"
    assert record.gene_symbols == "BRCA2"
    assert record.xrefs == {"dbSNP": ["123"], "OMIM": ["600185.0009"]}
    assert record.disease == "Breast-ovarian cancer, familial 2"
    assert record.ontology_accession == "HP:0003002"


def test_location_follows_assembly(sample_sets):
    record = extract_record(sample_sets["RCV000000001"], "GRCh38")
    assert record.start == 32340301

    record = extract_record(sample_sets["RCV000000001"], "NCBI36")
    assert record.chromosome is None
    assert record.start is None


def test_conflicting_significance_uses_explanation(sample_sets):
    record = extract_record(sample_sets["RCV000000002"], "GRCh37")
    assert record.clinical_significance == "pathogenic,benign"


@pytest.mark.parametrize("description, explanation, expected", [
    ("Pathogenic", None, "pathogenic"),
    ("Likely benign", "ignored", "likely benign"),
    ("Conflicting interpretations", "Pathogenic(2);Uncertain significance(1)",
     "pathogenic,uncertain significance"),
    ("conflicting data from submitters", None, "conflicting data from submitters"),
    (None, None, None),
])
def test_clinical_significance(description, explanation, expected):
    assert clinical_significance(description, explanation) == expected


def test_multiple_gene_symbols_joined(sample_sets):
    record = extract_record(sample_sets["RCV000000002"], "GRCh37")
    assert record.gene_symbols == "BRCA1,NBR2"


def test_last_non_preferred_hgvs_wins(sample_sets):
    record = extract_record(sample_sets["RCV000000002"], "GRCh37")
    assert record.hgvs_genomic == "NC_000017.10:g.41245466G>A"


def test_preferred_hgvs_beats_later_fallback():
    element = clinvar_set("""
        <MeasureSet Type="Variant"><Measure Type="single nucleotide variant">
          <AttributeSet><Attribute Type="HGVS, genomic, top level, previous">NC_1:g.1A>C</Attribute></AttributeSet>
          <AttributeSet><Attribute Type="HGVS, genomic, top level">NC_2:g.2A>G</Attribute></AttributeSet>
          <AttributeSet><Attribute Type="HGVS, genomic, top level, other">NC_3:g.3A>T</Attribute></AttributeSet>
        </Measure></MeasureSet>
    """)
    assert extract_record(element, "GRCh37").hgvs_genomic == "NC_2:g.2A>G"


def test_last_preferred_hgvs_wins():
    element = clinvar_set("""
        <MeasureSet Type="Variant"><Measure Type="single nucleotide variant">
          <AttributeSet><Attribute Type="HGVS, genomic, top level">NC_1:g.1A>C</Attribute></AttributeSet>
          <AttributeSet><Attribute Type="HGVS, genomic, top level">NC_2:g.2A>G</Attribute></AttributeSet>
        </Measure></MeasureSet>
    """)
    assert extract_record(element, "GRCh37").hgvs_genomic == "NC_2:g.2A>G"


def test_last_accession_wins():
    element = clinvar_set("""
        <ClinVarAccession Acc="RCV000000200" Version="4" Type="RCV"/>
    """, acc="RCV000000100")
    record = extract_record(element, "GRCh37")
    assert record.accession == "RCV000000200"
    assert record.version == "4"


def test_orphanet_accession_prefixed(sample_sets):
    record = extract_record(sample_sets["RCV000000003"], "GRCh37")
    assert record.disease == "Developmental delay"
    assert record.ontology_accession == "Orphanet:1234"
    assert record.dbvar_ids == ["nsv1"]


def test_ontology_read_only_from_second_trait_xref():
    # The ontology link is taken from the XRef at index 1 of the trait name
    # and nowhere else. If ClinVar reorders these, this test must fail.
    element = clinvar_set("""
        <TraitSet Type="Disease"><Trait Type="Disease">
          <Name>
            <ElementValue Type="Preferred">Cardiomyopathy</ElementValue>
            <XRef ID="HP:0001638" DB="Human Phenotype Ontology"/>
            <XRef ID="C0878544" DB="MedGen"/>
            <XRef ID="HP:0000001" DB="Human Phenotype Ontology"/>
          </Name>
        </Trait></TraitSet>
    """)
    record = extract_record(element, "GRCh37")
    assert record.disease == "Cardiomyopathy"
    assert record.ontology_accession is None

    element = clinvar_set("""
        <TraitSet Type="Disease"><Trait Type="Disease">
          <Name>
            <ElementValue Type="Preferred">Cardiomyopathy</ElementValue>
            <XRef ID="HP:0001638" DB="Human Phenotype Ontology"/>
          </Name>
        </Trait></TraitSet>
    """)
    assert extract_record(element, "GRCh37").ontology_accession is None


def test_preferred_trait_name_over_first():
    element = clinvar_set("""
        <TraitSet Type="Disease"><Trait Type="Disease">
          <Name><ElementValue Type="Alternate">LQT2</ElementValue></Name>
          <Name><ElementValue Type="Preferred">Long QT syndrome 2</ElementValue></Name>
        </Trait></TraitSet>
    """)
    assert extract_record(element, "GRCh37").disease == "Long QT syndrome 2"

    element = clinvar_set("""
        <TraitSet Type="Disease"><Trait Type="Disease">
          <Name><ElementValue Type="Alternate">LQT2</ElementValue></Name>
        </Trait></TraitSet>
    """)
    assert extract_record(element, "GRCh37").disease == "LQT2"


def test_missing_optional_fields():
    record = extract_record(clinvar_set(""), "GRCh37")
    assert record.clinical_significance is None
    assert record.review_status is None
    assert record.gene_symbols is None
    assert record.hgvs_genomic is None
    assert record.xrefs == {}
    assert record.traits == []
    assert record.disease is None


def test_missing_reference_assertion_is_malformed():
    import xml.etree.ElementTree as ET
    element = ET.fromstring('<ClinVarSet ID="7"><Title>orphan</Title></ClinVarSet>')
    with pytest.raises(MalformedRecordError) as excinfo:
        extract_record(element, "GRCh37")
    assert "orphan" in excinfo.value.record_xml


def test_missing_accession_is_malformed():
    import xml.etree.ElementTree as ET
    element = ET.fromstring(
        '<ClinVarSet><ReferenceClinVarAssertion><RecordStatus>current</RecordStatus>'
        '</ReferenceClinVarAssertion></ClinVarSet>'
    )
    with pytest.raises(MalformedRecordError):
        extract_record(element, "GRCh37")


def test_bad_coordinates_are_malformed():
    element = clinvar_set("""
        <MeasureSet Type="Variant"><Measure>
          <SequenceLocation Assembly="GRCh37" Chr="1" start="abc" stop="10"/>
        </Measure></MeasureSet>
    """)
    with pytest.raises(MalformedRecordError):
        extract_record(element, "GRCh37")


def test_iter_clinvar_sets_gzip(sample_xml, tmp_path):
    gz_path = tmp_path / "release.xml.gz"
    with open(sample_xml, "rb") as src, gzip.open(gz_path, "wb") as dst:
        shutil.copyfileobj(src, dst)

    accessions = [r.accession for r in fetch_clinvar(gz_path)]
    assert accessions == [f"RCV00000000{i}" for i in range(1, 7)]
    assert read_release_date(gz_path) == "2013-06-04"


def test_iter_clinvar_sets_count(sample_xml):
    assert sum(1 for _ in iter_clinvar_sets(sample_xml)) == 6


def test_iter_clinvar_sets_detaches_finished_records(sample_xml, monkeypatch):
    roots = []
    iterparse = ET.iterparse

    def recording_iterparse(source, events=None):
        for event, element in iterparse(source, events=events):
            if event == "start" and not roots:
                roots.append(element)
            yield event, element

    monkeypatch.setattr(ET, "iterparse", recording_iterparse)

    attached = [len(roots[0]) for _ in iter_clinvar_sets(sample_xml)]

    assert len(attached) == 6
    assert max(attached) == 1
    assert len(roots[0]) == 0
