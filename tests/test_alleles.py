import pytest

from variantphenotypes.alleles import parse_genomic_alleles, parse_genomic_variant
from variantphenotypes.exceptions import HGVSParseError


@pytest.mark.parametrize("notation, expected", [
    ("NC_000013.10:g.32914438G>A", ("G", "A")),
    ("NC_000013.10:g.100_102delCTT", ("CTT", "-")),
    ("NC_000013.10:g.100delC", ("C", "-")),
    ("NC_000013.10:g.100_101insAG", ("-", "AG")),
    ("NC_000013.10:g.100_101dupAG", ("AG", "AGAG")),
    ("NC_000013.10:g.100_101delCTinsGGA", ("CT", "GGA")),
])
def test_parse_genomic_alleles(notation, expected):
    assert parse_genomic_alleles(notation) == expected


@pytest.mark.parametrize("notation", [
    "",
    "g.100G>A",
    "not hgvs at all",
    "NC_000013.10:c.100G>A",
    "NC_000013.10:g.100_102del",
    "NC_000013.10:g.100_102delCT",
    "NC_000013.10:g.100_105insA",
    "NC_000013.10:g.100_101delinsGGA",
    "NC_000013.10:g.100_102inv",
])
def test_unparseable_notation(notation):
    with pytest.raises(HGVSParseError):
        parse_genomic_alleles(notation)


def test_library_errors_are_wrapped():
    with pytest.raises(HGVSParseError) as excinfo:
        parse_genomic_variant("NC_000013.10:g.G>A")
    assert isinstance(excinfo.value, ValueError)


def test_parsed_variant_keeps_accession():
    variant = parse_genomic_variant("NC_000013.10:g.32914438G>A")
    assert variant.ac == "NC_000013.10"
    assert variant.posedit.pos.start.base == 32914438
