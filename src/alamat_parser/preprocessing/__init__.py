"""Preprocessing module for address normalization."""

from alamat_parser.preprocessing.normalizer import AddressNormalizer, normalize_text

__all__ = ["AddressNormalizer", "normalize_text"]
