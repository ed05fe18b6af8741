"""gopp Main Entry Point

Command-line interface for the gopp preprocessor.
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

# Add project root and src/ to path for local imports
_project_root = str(Path(__file__).parent.parent.parent)
_src_dir = str(Path(__file__).parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

try:
    from .config import PrepConfig, ConfigError
    from .directives import DEFAULT_PREFIX
    from .emitter import EmitterError
    from .engine import VERSION
    from .lexer import LexerError
    from .prep import prep_dir, prep_file, clean
except ImportError:
    from gopp.config import PrepConfig, ConfigError
    from gopp.directives import DEFAULT_PREFIX
    from gopp.emitter import EmitterError
    from gopp.engine import VERSION
    from gopp.lexer import LexerError
    from gopp.prep import prep_dir, prep_file, clean


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gppc",
        description="gopp - C-like preprocessor for Go source",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gppc prep main.go                          # Preprocess to stdout
  gppc prep main.go -o main_prep.go          # Preprocess to a file
  gppc prep . -D WINDOWS                     # Preprocess a tree into _gppc/
  gppc prep src -D OS=linux -U _GOPP -c      # Keep comments, cancel a builtin
  gppc clean                                 # Remove _gppc/
"""
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"gopp v{VERSION}"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    prep = subparsers.add_parser("prep", help="Preprocess a file or directory")
    prep.add_argument(
        "path",
        help="File or directory to process ('-' for stdin)"
    )
    prep.add_argument(
        "-D",
        dest="defines",
        action="append",
        default=[],
        metavar="NAME[=defn]",
        help="Predefine NAME as a macro. Unless given, default macro value is 1."
    )
    prep.add_argument(
        "-U",
        dest="undefines",
        action="append",
        default=[],
        metavar="NAME",
        help="Cancel any previous/builtin definition of macro NAME."
    )
    prep.add_argument(
        "-e",
        dest="extensions",
        action="append",
        default=[],
        metavar="EXT",
        help="Add file extensions that will be processed. (default: .go)"
    )
    prep.add_argument(
        "-i",
        dest="ignores",
        action="append",
        default=[],
        metavar="PATH",
        help="Add directories/files to avoid when prepping."
    )
    comments = prep.add_mutually_exclusive_group()
    comments.add_argument(
        "-c", "--comments",
        dest="strip_comments",
        action="store_false",
        help="Don't eat comments."
    )
    comments.add_argument(
        "-C", "--no-comments",
        dest="strip_comments",
        action="store_true",
        help="Eat any comments that are found. (default)"
    )
    prep.set_defaults(strip_comments=True)
    prep.add_argument(
        "-o", "--output",
        help="Output (default: _gppc for directories, <stdout> for files)"
    )
    prep.add_argument(
        "--prefix",
        default=DEFAULT_PREFIX,
        help=f"Directive comment prefix (default: {DEFAULT_PREFIX})"
    )
    prep.add_argument(
        "--nested",
        action="store_true",
        help="Allow nested ifdef/ifndef blocks"
    )
    prep.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    clean_cmd = subparsers.add_parser("clean", help="Remove the output directory")
    clean_cmd.add_argument(
        "-o", "--output",
        default=None,
        help="Output directory to remove (default: _gppc)"
    )

    return parser


def run_prep(args: argparse.Namespace) -> int:
    config = PrepConfig(
        defines=args.defines,
        undefines=args.undefines,
        extensions=args.extensions,
        ignores=args.ignores,
        strip_comments=args.strip_comments,
        prefix=args.prefix,
        output=args.output,
        nested=args.nested,
    )

    path = args.path
    if path != '-' and not Path(path).exists():
        print(f"Error: '{path}' does not exist", file=sys.stderr)
        return 1

    try:
        if path != '-' and Path(path).is_dir():
            if '..' in Path(path).parts:
                print("Warning! This may be interesting if you've got '..' in the prep path.",
                      file=sys.stderr)
            result = prep_dir(path, config.output_dir, config)
            print(f"Preprocessed {len(result.processed)} file(s) into {config.output_dir}",
                  file=sys.stderr)
            return 0 if result.ok else 1

        prep_file(path, args.output or '-', config.new_engine())
        return 0

    except ConfigError as e:
        print(f"Config Error: {e}", file=sys.stderr)
        return 1

    except LexerError as e:
        print(f"Lexer Error: {e}", file=sys.stderr)
        return 1

    except EmitterError as e:
        print(f"Emitter Error: {e}", file=sys.stderr)
        return 1

    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run_clean(args: argparse.Namespace) -> int:
    out_dir = args.output or PrepConfig().output_dir
    if clean(out_dir):
        print(f"Removed {out_dir}", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for gppc."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if args.command == "prep":
        return run_prep(args)
    return run_clean(args)


if __name__ == "__main__":
    sys.exit(main())
