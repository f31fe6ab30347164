"""Read ClinVar full-release XML and flatten each ClinVarSet into a record."""

import gzip
import logging
import os
import re
import xml.etree.ElementTree as ET
from collections import defaultdict
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import requests

from ..exceptions import MalformedRecordError
from ..models import ClinVarRecord, Trait

logger = logging.getLogger(__name__)

# ClinVar FTP: https://ftp.ncbi.nlm.nih.gov/pub/clinvar/
# ClinVarFullRelease_00-latest.xml.gz - every ClinVarSet with its assertions
CLINVAR_XML_URL = "https://ftp.ncbi.nlm.nih.gov/pub/clinvar/xml/ClinVarFullRelease_00-latest.xml.gz"
DEFAULT_DATA_DIR = Path(__file__).parent.parent.parent / "data"

HGVS_PREFERRED = "HGVS, genomic, top level"
HGVS_FALLBACK = "HGVS, genomic, top"

ONTOLOGY_PREFIXES = {
    "Human Phenotype Ontology": "",
    "Orphanet": "Orphanet:",
}

_COUNT_RE = re.compile(r"\(\d+\)")
_COMMA_RE = re.compile(r"\s*,\s*")


def get_cache_path() -> Path:
    """Get the download directory, creating if needed."""
    cache_dir = Path(os.environ.get("CLINVAR_CACHE", DEFAULT_DATA_DIR))
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def download_clinvar_xml(force: bool = False, url: str = CLINVAR_XML_URL) -> Path:
    """
    Download the ClinVar full-release XML if not cached.

    Args:
        force: Re-download even if file exists
        url: Release to download

    Returns:
        Path to the downloaded file
    """
    local_path = get_cache_path() / url.rsplit("/", 1)[-1]

    if local_path.exists() and not force:
        return local_path

    logger.info("Downloading ClinVar XML from %s to %s", url, local_path)
    partial = local_path.with_suffix(local_path.suffix + ".part")
    with requests.get(url, stream=True, timeout=60) as response:
        response.raise_for_status()
        with open(partial, "wb") as out:
            for chunk in response.iter_content(chunk_size=1 << 20):
                out.write(chunk)
    partial.replace(local_path)
    logger.info("Download complete: %s", local_path)

    return local_path


def _open(path: Path):
    path = Path(path)
    if path.suffix == ".gz":
        return gzip.open(path, "rb")
    return open(path, "rb")


def read_release_date(path: Path) -> Optional[str]:
    """Return the ``Dated`` attribute of the release root element, if any."""
    with _open(path) as handle:
        for _, element in ET.iterparse(handle, events=("start",)):
            return element.get("Dated")
    return None


def iter_clinvar_sets(path: Path) -> Iterator[ET.Element]:
    """
    Stream ClinVarSet elements from a (gzipped) ClinVar XML release.

    Each element is cleared and detached from the release root once the
    caller moves on, so only one record is held in memory at a time.
    """
    with _open(path) as handle:
        root = None
        for event, element in ET.iterparse(handle, events=("start", "end")):
            if event == "start":
                if root is None:
                    root = element
                continue
            if element.tag == "ClinVarSet":
                yield element
                element.clear()
                root.clear()


def clinical_significance(description: Optional[str], explanation: Optional[str]) -> Optional[str]:
    """
    Lower-cased significance label for a record.

    Conflicting interpretations are summarised by the explanation text
    instead of the description.

    Examples:
        ("Pathogenic", None) -> "pathogenic"
        ("conflicting data from submitters", "Pathogenic(3); Benign(1)")
            -> "pathogenic,benign"
    """
    if description is None:
        return None
    if "conflict" in description.lower() and explanation:
        text = _COUNT_RE.sub("", explanation.lower())
        text = text.replace(";", ",")
        return _COMMA_RE.sub(",", text).strip()
    return description.lower()


def _element_value(parent: Optional[ET.Element], type_: Optional[str] = None) -> Optional[str]:
    if parent is None:
        return None
    for value in parent.findall("ElementValue"):
        if type_ is None or value.get("Type") == type_:
            return (value.text or "").strip() or None
    return None


def gene_symbols(relationships: List[ET.Element]) -> Optional[str]:
    """
    Gene symbol(s) of the measure relationships.

    A single relationship contributes its first symbol; several are joined
    with commas, leaving out relationships without a symbol.
    """
    if not relationships:
        return None
    if len(relationships) == 1:
        return _element_value(relationships[0].find("Symbol"))
    symbols = [_element_value(rel.find("Symbol")) for rel in relationships]
    return ",".join(s for s in symbols if s) or None


def hgvs_genomic(attributes: List[ET.Element]) -> Optional[str]:
    """
    Pick the top-level genomic HGVS expression of a measure.

    An exact "HGVS, genomic, top level" attribute is preferred. Failing that,
    an attribute whose type contains "HGVS, genomic, top" is used. In both
    cases a later match replaces an earlier one.
    """
    preferred = None
    fallback = None
    for attribute in attributes:
        type_ = attribute.get("Type") or ""
        value = (attribute.text or "").strip() or None
        if type_ == HGVS_PREFERRED:
            preferred = value
        elif HGVS_FALLBACK in type_:
            fallback = value
    return preferred if preferred is not None else fallback


def second_xref(name: ET.Element) -> Optional[ET.Element]:
    """
    Return the cross reference at index 1 of a trait name, if present.

    Only this position is consulted for the ontology link: in the releases
    this importer was written against, a trait name's first XRef points at
    MedGen/GeneReviews and the second at HPO or Orphanet. Names with a
    different layout yield no ontology accession.
    """
    xrefs = name.findall("XRef")
    return xrefs[1] if len(xrefs) > 1 else None


def ontology_accession(xref: Optional[ET.Element]) -> Optional[str]:
    if xref is None:
        return None
    prefix = ONTOLOGY_PREFIXES.get(xref.get("DB"))
    if prefix is None or not xref.get("ID"):
        return None
    return prefix + xref.get("ID")


def extract_traits(assertion: ET.Element) -> List[Trait]:
    traits = []
    for trait in assertion.findall("TraitSet/Trait"):
        names = trait.findall("Name")
        if not names:
            continue
        chosen = next(
            (name for name in names if _element_value(name, "Preferred") is not None),
            names[0],
        )
        traits.append(Trait(
            name=_element_value(chosen),
            ontology_accession=ontology_accession(second_xref(chosen)),
        ))
    return traits


def _location(
    measures: List[ET.Element], assembly: str, record_xml
) -> Tuple[Optional[str], Optional[int], Optional[int]]:
    chromosome = start = end = None
    for measure in measures:
        for location in measure.findall("SequenceLocation"):
            if location.get("Assembly") != assembly:
                continue
            try:
                chromosome = location.get("Chr")
                start = int(location.get("start")) if location.get("start") else None
                end = int(location.get("stop")) if location.get("stop") else start
            except ValueError as e:
                raise MalformedRecordError(f"Bad sequence location: {e}", record_xml()) from e
    return chromosome, start, end


def extract_record(element: ET.Element, assembly: str) -> ClinVarRecord:
    """
    Flatten one ClinVarSet element.

    Args:
        element: a ClinVarSet element
        assembly: assembly name whose SequenceLocation is kept (e.g. "GRCh37")

    Returns:
        ClinVarRecord

    Raises:
        MalformedRecordError: the set has no reference assertion, no
            accession, or unusable coordinates
    """
    def record_xml() -> str:
        return ET.tostring(element, encoding="unicode")

    assertion = element.find("ReferenceClinVarAssertion")
    if assertion is None:
        raise MalformedRecordError("ClinVarSet without ReferenceClinVarAssertion", record_xml())

    # the last accession listed wins
    accession = version = None
    for acc in assertion.findall("ClinVarAccession"):
        accession = acc.get("Acc")
        version = acc.get("Version")
    if not accession:
        raise MalformedRecordError("ReferenceClinVarAssertion without accession", record_xml())

    significance = assertion.find("ClinicalSignificance")
    description = explanation = review_status = None
    if significance is not None:
        review_status = significance.findtext("ReviewStatus")
        description = significance.findtext("Description")
        explanation = significance.findtext("Explanation")

    measures = assertion.findall("MeasureSet/Measure")

    xrefs = defaultdict(list)
    relationships = []
    attributes = []
    for measure in measures:
        for xref in measure.findall("XRef"):
            if xref.get("DB") and xref.get("ID"):
                xrefs[xref.get("DB")].append(xref.get("ID"))
        relationships.extend(measure.findall("MeasureRelationship"))
        attributes.extend(measure.findall("AttributeSet/Attribute"))

    chromosome, start, end = _location(measures, assembly, record_xml)

    return ClinVarRecord(
        accession=accession,
        version=version,
        record_status=assertion.findtext("RecordStatus"),
        review_status=review_status,
        description=description,
        clinical_significance=clinical_significance(description, explanation),
        chromosome=chromosome,
        start=start,
        end=end,
        strand=1,
        hgvs_genomic=hgvs_genomic(attributes),
        gene_symbols=gene_symbols(relationships),
        xrefs=dict(xrefs),
        traits=extract_traits(assertion),
    )


def fetch_clinvar(path: Path, assembly: str = "GRCh37") -> Iterator[ClinVarRecord]:
    """Yield flat records for every ClinVarSet in a release file."""
    for element in iter_clinvar_sets(path):
        yield extract_record(element, assembly)


if __name__ == "__main__":
    # Quick look at a release file
    import sys
    release = Path(sys.argv[1]) if len(sys.argv) > 1 else get_cache_path() / CLINVAR_XML_URL.rsplit("/", 1)[-1]

    count = 0
    sample = None
    for record in fetch_clinvar(release):
        count += 1
        if count == 1:
            sample = record

    print(f"Total records: {count}")
    if sample:
        print(f"Sample: {sample}")
