import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from variantphenotypes.database import PhenotypeDB
from variantphenotypes.models import StructuralVariation, StructuralVariationFeature

DATA_DIR = Path(__file__).parent / "data"
SAMPLE_XML = DATA_DIR / "clinvar_sample.xml"


@pytest.fixture
def db(tmp_path):
    vdb = PhenotypeDB(tmp_path / "phenotypes.db")
    yield vdb
    vdb.close()


@pytest.fixture
def clinvar_source(db):
    return db.fetch_source_by_name("ClinVar")


@pytest.fixture
def sample_xml():
    return SAMPLE_XML


@pytest.fixture
def sample_sets():
    """ClinVarSet elements of the sample release, keyed by accession."""
    root = ET.parse(SAMPLE_XML).getroot()
    return {
        s.find("ReferenceClinVarAssertion/ClinVarAccession").get("Acc"): s
        for s in root.findall("ClinVarSet")
    }


@pytest.fixture
def dbvar_nsv1(db):
    """Structural variation nsv1 with two genomic locations."""
    sv = db.store_structural_variation(StructuralVariation(name="nsv1"))
    for region, start, end in (("1", 1000, 50000), ("5", 200, 900)):
        db.store_structural_variation_feature(StructuralVariationFeature(
            structural_variation_id=sv.id,
            seq_region_id=db.get_seq_region_id(region),
            start=start,
            end=end,
            variation_name="nsv1",
        ))
    db.commit()
    return sv


def clinvar_set(body: str, acc: str = "RCV000000100", version: str = "1") -> ET.Element:
    """Wrap assertion content in a minimal ClinVarSet element."""
    return ET.fromstring(
        f"""<ClinVarSet ID="1">
          <ReferenceClinVarAssertion ID="1">
            <ClinVarAccession Acc="{acc}" Version="{version}" Type="RCV"/>
            {body}
          </ReferenceClinVarAssertion>
        </ClinVarSet>"""
    )
