"""Rule-based extraction of administrative components."""

from alamat_parser.extraction.rules import DEFAULT_LEXICON, ComponentExtractor, ExtractionRule

__all__ = ["ComponentExtractor", "ExtractionRule", "DEFAULT_LEXICON"]
