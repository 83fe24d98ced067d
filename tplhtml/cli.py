"""
tplhtml - HTML Template Normalizer

Imports an HTML template with %s placeholders and writes the minified export,
or dumps the parsed document tree for debugging.
"""

import argparse
import sys
import json
import os
import logging

from .template_api import load_template, save_template
from .exceptions import TemplateEditorError
from . import __version__

logger = logging.getLogger('tplhtml')


def setup_logging(verbose=False, quiet=False):
    """Configure logging based on CLI flags.

    Args:
        verbose: If True, show DEBUG level messages
        quiet: If True, suppress all non-error output
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger = logging.getLogger('tplhtml')
    root_logger.setLevel(level)
    root_logger.addHandler(handler)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="tplhtml",
        description="Normalize and export HTML templates with %s placeholders.",
        epilog="Examples:\n"
               "  tplhtml template.html -o exported.html\n"
               "  tplhtml template.html -o tree.json\n"
               "  tplhtml template.html -o exported.html --verbose",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument("input_file", help="Input HTML template (.html, .htm)")
    parser.add_argument("-o", "--output", required=True,
                        help="Output file (.html, .htm, or .json for the parsed tree)")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Write the parsed document tree as JSON regardless of extension")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", default=False,
                        help="Show detailed debug output")
    parser.add_argument("-q", "--quiet", action="store_true", default=False,
                        help="Suppress all non-error output")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    input_file = args.input_file

    # Validate input is HTML
    input_ext = os.path.splitext(input_file)[1].lower()
    if input_ext not in ['.html', '.htm']:
        logger.error("Only HTML templates are supported. Got: %s", input_ext)
        sys.exit(1)

    output_ext = os.path.splitext(args.output)[1].lower()
    as_json = args.json or output_ext == ".json"
    if not as_json and output_ext not in [".html", ".htm"]:
        logger.error("Unsupported output format: %s", output_ext)
        logger.error("Supported formats: .html, .htm, .json")
        sys.exit(1)

    try:
        document = load_template(input_file)

        if as_json:
            # Debug: output the parsed tree
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            logger.info("Successfully wrote document tree to %s", args.output)
        else:
            save_template(document, args.output)

    except TemplateEditorError as e:
        logger.error("%s", e)
        sys.exit(1)
    except OSError as e:
        logger.error("I/O error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
