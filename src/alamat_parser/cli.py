"""Command-line interface for the Indonesian Address Parser."""

import argparse
import json
import logging
import sys
from pathlib import Path

from alamat_parser import __version__


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Resolve Indonesian addresses against a gazetteer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Resolve a single address against the bundled sample table
  alamat-parser "Kebon Melati Tanah Abang Jakarta Pusat"

  # Resolve a file of addresses against your own table
  alamat-parser --gazetteer wilayah.csv --input addresses.txt --output parsed.json

  # Keep learned corrections between runs
  alamat-parser --learning-state learning.json "jl sudirman tanahabang"
        """
    )

    parser.add_argument(
        "address",
        nargs="?",
        help="Address to resolve (or use --input for file)"
    )
    parser.add_argument(
        "--input", "-i",
        help="Input file with addresses (one per line)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Output JSON file"
    )
    parser.add_argument(
        "--gazetteer", "-g",
        help="CSV reference table (default: bundled sample)"
    )
    parser.add_argument(
        "--format", "-f",
        choices=["json", "table", "simple"],
        default="json",
        help="Output format (default: json)"
    )
    parser.add_argument(
        "--threshold", "-t",
        type=float,
        help="Fuzzy match threshold for province fallback (0-1)"
    )
    parser.add_argument(
        "--no-learning",
        action="store_true",
        help="Do not update learning state"
    )
    parser.add_argument(
        "--learning-state",
        help="JSON file to import learning state from and save it back to"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print learning statistics to stderr after resolving"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"indonesian-address-parser {__version__}"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from alamat_parser import AddressResolver, GazetteerLoadError

    # Get addresses to resolve
    addresses = []
    if args.input:
        with open(args.input, encoding="utf-8") as f:
            addresses = [line.strip() for line in f if line.strip()]
    elif args.address:
        addresses = [args.address]
    else:
        parser.print_help()
        sys.exit(1)

    # Load resolver
    try:
        if args.gazetteer:
            print(f"Loading gazetteer from {args.gazetteer}...", file=sys.stderr)
            resolver = AddressResolver.from_csv(args.gazetteer)
        else:
            print("Using bundled sample gazetteer", file=sys.stderr)
            resolver = AddressResolver.with_sample_gazetteer()
    except GazetteerLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.threshold is not None:
        resolver.set_fuzzy_threshold(args.threshold)
    if args.no_learning:
        resolver.set_learning_enabled(False)

    state_path = Path(args.learning_state) if args.learning_state else None
    if state_path and state_path.exists():
        resolver.import_learning_state(json.loads(state_path.read_text(encoding="utf-8")))

    # Resolve addresses
    results = [resolver.resolve(addr) for addr in addresses]

    if state_path:
        state_path.write_text(resolver.export_learning_state().model_dump_json(indent=2), encoding="utf-8")

    # Output
    if args.format == "json":
        output = [r.model_dump(mode="json") for r in results]
        json_str = json.dumps(output, indent=2, ensure_ascii=False)

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(json_str)
            print(f"Saved to {args.output}", file=sys.stderr)
        else:
            print(json_str)

    elif args.format == "table":
        for i, result in enumerate(results):
            parsed = result.parsed
            print(f"\n{'='*60}")
            print(f"Address {i+1}: {parsed.original[:50]}")
            print(f"{'='*60}")
            print(f"{'Field':<15} {'Value':<44}")
            print("-" * 60)
            for field in ("province", "regency_city", "district", "village", "postal_code", "detail"):
                print(f"{field:<15} {getattr(parsed, field) or '-':<44}")
            print(f"{'confidence':<15} {result.confidence:.0%}")
            for suggestion in result.suggestions:
                print(f"{'suggestion':<15} {suggestion.field}: {suggestion.value} ({suggestion.similarity:.0%})")

    else:  # simple
        for result in results:
            parsed = result.parsed
            parts = []
            if parsed.village:
                parts.append(f"Kel: {parsed.village}")
            if parsed.district:
                parts.append(f"Kec: {parsed.district}")
            if parsed.regency_city:
                parts.append(f"Kab/Kota: {parsed.regency_city}")
            if parsed.province:
                parts.append(f"Prov: {parsed.province}")
            if parsed.postal_code:
                parts.append(f"Kode pos: {parsed.postal_code}")

            print(" | ".join(parts) if parts else "No components found")

    if args.stats:
        stats = resolver.get_learning_stats()
        print(json.dumps(stats.model_dump()), file=sys.stderr)


if __name__ == "__main__":
    main()
