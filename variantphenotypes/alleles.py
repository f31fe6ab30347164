"""Derive reference/alternate alleles from top-level genomic HGVS.

The expression is parsed with the biocommons ``hgvs`` parser; only the edit
types ClinVar uses for genomic top-level HGVS are turned into an allele pair:

    NC_000013.10:g.32914438G>A          substitution      -> ("G", "A")
    NC_000013.10:g.100_102delCTT        deletion          -> ("CTT", "-")
    NC_000013.10:g.100_101insAG         insertion         -> ("-", "AG")
    NC_000013.10:g.100_101dupAG         duplication       -> ("AG", "AGAG")
    NC_000013.10:g.100_101delCTinsGGA   deletion-insertion -> ("CT", "GGA")

Deletions that do not spell out the deleted bases cannot be resolved without
the reference sequence and raise HGVSParseError.
"""

from typing import Optional, Tuple

import hgvs.parser
from hgvs.exceptions import HGVSError

from .exceptions import HGVSParseError

EMPTY_ALLELE = "-"

# Initialize hgvs parser lazily; building the grammar is slow
_hgvs_parser = None


def get_hgvs_parser():
    """Get singleton HGVS parser"""
    global _hgvs_parser
    if _hgvs_parser is None:
        _hgvs_parser = hgvs.parser.Parser()
    return _hgvs_parser


def parse_genomic_variant(notation: str):
    """
    Parse a genomic HGVS expression into an hgvs SequenceVariant.

    Raises:
        HGVSParseError: not valid HGVS, or not a g. expression
    """
    if not notation or not notation.strip():
        raise HGVSParseError(f"Not an HGVS genomic notation: {notation!r}")
    try:
        variant = get_hgvs_parser().parse_hgvs_variant(notation.strip())
    except HGVSError as e:
        raise HGVSParseError(f"Cannot parse {notation!r}: {e}") from e
    if variant.type != "g":
        raise HGVSParseError(f"Not a genomic (g.) expression: {notation!r}")
    return variant


def _bases(sequence: Optional[str], notation: str) -> str:
    if not sequence or not sequence.isalpha():
        raise HGVSParseError(f"Allele sequence not given in {notation!r}")
    return sequence.upper()


def _span(variant, notation: str) -> Tuple[int, int]:
    pos = variant.posedit.pos
    start = pos.start.base if pos.start is not None else None
    end = pos.end.base if pos.end is not None else start
    if start is None or end is None:
        raise HGVSParseError(f"Uncertain position in {notation!r}")
    return start, end


def _check_span(variant, sequence: str, notation: str) -> None:
    start, end = _span(variant, notation)
    if end - start + 1 != len(sequence):
        raise HGVSParseError(
            f"Allele {sequence} does not span positions in {notation!r}"
        )


def parse_genomic_alleles(notation: str) -> Tuple[str, str]:
    """
    Derive the (reference, alternate) allele pair from HGVS genomic notation.

    Args:
        notation: "accession:g.change", e.g. "NC_000013.10:g.32914438G>A"

    Returns:
        Tuple of reference and alternate allele; "-" marks an empty allele.

    Raises:
        HGVSParseError: the expression cannot be parsed, or its edit is not
            one of the supported forms
    """
    variant = parse_genomic_variant(notation)
    edit = variant.posedit.edit
    try:
        edit_type = edit.type
    except HGVSError as e:
        raise HGVSParseError(f"No alleles in {notation!r}: {e}") from e

    if edit_type in ("sub", "delins", "identity"):
        ref = _bases(edit.ref, notation)
        if edit_type != "sub":
            _check_span(variant, ref, notation)
        return ref, _bases(edit.alt, notation)

    if edit_type == "del":
        ref = _bases(edit.ref, notation)
        _check_span(variant, ref, notation)
        return ref, EMPTY_ALLELE

    if edit_type == "ins":
        # delins without the deleted bases parses as a bare insertion
        if "del" in notation.rsplit(":", 1)[-1]:
            raise HGVSParseError(f"Deleted sequence not given in {notation!r}")
        start, end = _span(variant, notation)
        if end != start + 1:
            raise HGVSParseError(f"Insertion not between flanking bases: {notation!r}")
        return EMPTY_ALLELE, _bases(edit.alt, notation)

    if edit_type == "dup":
        ref = _bases(edit.ref, notation)
        _check_span(variant, ref, notation)
        return ref, ref + ref

    raise HGVSParseError(f"Unsupported HGVS edit {edit_type!r} in {notation!r}")
