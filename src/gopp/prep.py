"""gopp file and directory processing.

A single file is preprocessed to a file or stdout. A directory is walked and
every file with a configured extension is preprocessed into a mirrored tree
under the output directory. Each file starts from a freshly seeded engine so
macros defined in one file never leak into the next.
"""

import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from .config import PrepConfig
from .diagnostics import Diagnostic
from .engine import Gopp


PathLike = Union[str, Path]


@dataclass
class PrepResult:
    """Outcome of a directory run."""
    processed: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.skipped


def prep_file(in_path: PathLike, out_path: PathLike, gopp: Gopp) -> str:
    """Preprocess one file. ``-`` stands for stdin / stdout.

    Returns the emitted text. Read, lex, emit and write errors propagate.
    """
    if str(in_path) == '-':
        gopp.sink.path = '<stdin>'
        source = sys.stdin.read()
    else:
        gopp.sink.path = str(in_path)
        source = Path(in_path).read_text(encoding='utf-8')

    text = gopp.preprocess(source)

    if str(out_path) == '-':
        sys.stdout.write(text)
    else:
        Path(out_path).write_text(text, encoding='utf-8')
    return text


def _is_ignored(path: Path, in_dir: Path, ignores: List[str]) -> bool:
    candidates = {
        os.path.normpath(str(path)),
        os.path.normpath(os.path.relpath(path, in_dir)),
        os.path.abspath(path),
    }
    for ignore in ignores:
        for prefix in (os.path.normpath(ignore), os.path.abspath(ignore)):
            for candidate in candidates:
                if candidate == prefix or candidate.startswith(prefix + os.sep):
                    return True
    return False


def prep_dir(in_dir: PathLike, out_dir: PathLike, config: PrepConfig) -> PrepResult:
    """Preprocess every matching file below *in_dir* into *out_dir*.

    A file that fails is reported on stderr and skipped; the walk goes on.
    """
    in_dir = Path(in_dir)
    out_dir = Path(out_dir)
    ignores = config.all_ignores()
    if str(out_dir) not in ignores:
        ignores.append(str(out_dir))
    result = PrepResult()

    for root, dirs, files in os.walk(in_dir):
        root_path = Path(root)
        # Prune ignored directories so we never walk into our own output.
        dirs[:] = sorted(d for d in dirs
                         if not _is_ignored(root_path / d, in_dir, ignores))

        rel_root = root_path.relative_to(in_dir)
        try:
            (out_dir / rel_root).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"{root_path} (mkdir): {e} -- skipping", file=sys.stderr)
            dirs[:] = []
            continue

        for name in sorted(files):
            path = root_path / name
            if path.suffix not in config.extensions:
                continue
            if _is_ignored(path, in_dir, ignores):
                continue

            gopp = config.new_engine()
            target = out_dir / rel_root / name
            try:
                prep_file(path, target, gopp)
            except Exception as e:
                print(f"{path}: {e} -- skipping", file=sys.stderr)
                result.skipped.append(path)
            else:
                result.processed.append(path)
            result.diagnostics.extend(gopp.sink.diagnostics)

    return result


def clean(out_dir: PathLike) -> bool:
    """Remove a previous output tree. Returns True if something was removed."""
    out_dir = Path(out_dir)
    if not out_dir.exists():
        return False
    shutil.rmtree(out_dir)
    return True
