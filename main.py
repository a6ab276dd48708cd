#!/usr/bin/env python3
"""
Software Bill of Materials (SBOM) Comparator

A tool to compare two SBOM files (CycloneDX JSON, XML or YAML, or a
component spreadsheet) and report which components were added, removed or
changed version between them.

This script serves as the main entry point for the comparator.
It handles:
1. Command line and configuration file options
2. Running the comparison
3. Reporting the outcome
4. Error handling and exit codes
"""
import argparse
import logging
import sys
import time
from pathlib import Path

# Add src directory to Python path to allow importing from the package
sys.path.insert(0, str(Path(__file__).parent / "src"))
from sbom_comparator.comparator import SBomComparator
from sbom_comparator.config import load_config
from sbom_comparator.exceptions import SBomComparatorError

logger = logging.getLogger("sbom_comparator")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare two Software Bills of Materials (SBoms).")
    parser.add_argument("-f1", "--orgsbom", required=True, help="original SBom file")
    parser.add_argument("-f2", "--newsbom", required=True, help="new SBom file")
    parser.add_argument("-o", "--output",
                        help="output file name, default is diff.json or diff.xml")
    parser.add_argument("-ob", "--outputBomFile", dest="output_bom_file",
                        help="output file name of the diff bom, default is diffBom.json or diffBom.xml")
    parser.add_argument("-f", "--format", dest="output_format",
                        help="output file format, valid values json, xml. Default is xml")
    parser.add_argument("-t", "--htmloutput", dest="html_output",
                        help="output html file name, default name is sbomcompared")
    parser.add_argument("--output-dir", help="directory to write the output files to")
    parser.add_argument("--config", help="YAML configuration file (default comparator_config.yaml)")
    parser.add_argument("--compact", action="store_true",
                        help="write single line JSON/XML instead of indented output")
    parser.add_argument("--log-level", help="logging level, e.g. DEBUG, INFO, WARNING")
    return parser


def main(argv=None):
    """
    Main entry point for the SBOM Comparator.

    Command line usage:
        python main.py -f1 original.json -f2 new.json [-f json] [-o diff]

    Returns:
        int: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)
    start = time.monotonic()
    return_code = 0
    try:
        config = load_config(args.config).merged(
            output_format=args.output_format,
            output_file=args.output,
            output_bom_file=args.output_bom_file,
            html_output_file=args.html_output,
            output_dir=args.output_dir,
            log_level=args.log_level,
            pretty=False if args.compact else None,
        )
        logging.basicConfig(
            level=getattr(logging, str(config.log_level).upper(), logging.WARNING),
            format='%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s',
        )

        print("SBom Comparator")
        print("=" * 40)
        print(f"📖 Comparing {args.orgsbom} -> {args.newsbom}")

        comparator = SBomComparator(config)
        artifacts = comparator.compare_files(args.orgsbom, args.newsbom)
        result = artifacts.result
        logger.debug("\n%s", result.describe())

        print("\n📊 Components by status:")
        for status, count in result.counts().items():
            print(f"  • {status}: {count} component(s)")
        if not result.has_changes:
            print("ℹ️ No differences found.")

        print(f"\n✅ Diff written to: {artifacts.diff_path.resolve()}")
        print(f"✅ Diff SBom written to: {artifacts.bom_path.resolve()}")
        print(f"✅ HTML report written to: {artifacts.html_path.resolve()}")
        print("\n🎉 Done!")

    except FileNotFoundError as e:
        print(f"❌ File not found: {e}")
        return_code = 1
    except SBomComparatorError as e:
        print(f"❌ Comparison failed: {e}")
        return_code = 1
    except ValueError as e:
        print(f"❌ Data error: {e}")
        return_code = 1
    except Exception as e:
        print(f"❌ Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        return_code = 1
    finally:
        outcome = "fail" if return_code else "successfully compare two SBoms"
        logger.info("It took %.3f seconds to %s.", time.monotonic() - start, outcome)
    return return_code


if __name__ == "__main__":
    exit(main())
