"""gopp Configuration

Options shared by the command line and the directory walker, and the seed
macros every input unit starts from.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .directives import DEFAULT_PREFIX
from .engine import VERSION, Gopp


DEFAULT_OUTPUT_DIR = "_gppc"
DEFAULT_EXTENSIONS = [".go"]


class ConfigError(Exception):
    """Raised for unusable configuration values."""
    pass


def parse_define(define: str) -> Tuple[str, str]:
    """Parse a ``NAME[=defn]`` argument. A bare NAME gets the value ``1``."""
    if '=' in define:
        name, value = define.split('=', 1)
    else:
        name, value = define, '1'
    name = name.strip()
    if not name:
        raise ConfigError(f"missing macro name in define {define!r}")
    return name, value


@dataclass
class PrepConfig:
    """Everything needed to preprocess one file or a whole tree."""
    defines: List[str] = field(default_factory=list)  # raw NAME[=defn] arguments
    undefines: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    ignores: List[str] = field(default_factory=list)
    strip_comments: bool = True
    prefix: str = DEFAULT_PREFIX
    output: Optional[str] = None
    nested: bool = False

    def __post_init__(self):
        for ext in DEFAULT_EXTENSIONS:
            if ext not in self.extensions:
                self.extensions.append(ext)
        self.extensions = [ext if ext.startswith('.') else '.' + ext
                           for ext in self.extensions]

    @property
    def output_dir(self) -> str:
        return self.output or DEFAULT_OUTPUT_DIR

    def all_ignores(self) -> List[str]:
        """Ignored path prefixes; the output directory is always skipped."""
        ignores = list(self.ignores)
        if self.output_dir not in ignores:
            ignores.append(self.output_dir)
        return ignores

    def seed_macros(self) -> Dict[str, Optional[str]]:
        """Macros every input unit starts from, in definition order."""
        defines = [f'_GPPC="{VERSION}"'] + self.defines
        seeds: Dict[str, Optional[str]] = {
            '_GPPC_DEFINES': "`-D " + " -D ".join(defines) + "`",
        }
        for define in defines:
            name, value = parse_define(define)
            seeds[name] = value
        for name in self.undefines:
            seeds.pop(name, None)
        return seeds

    def new_engine(self) -> Gopp:
        """A fresh preprocessor seeded from this configuration."""
        gopp = Gopp(strip_comments=self.strip_comments, prefix=self.prefix,
                    seeds=self.seed_macros(), nested=self.nested)
        # -U also cancels built-ins such as _GOPP
        for name in self.undefines:
            gopp.seeds.pop(name, None)
            gopp.undefine(name)
        return gopp
