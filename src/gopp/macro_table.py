"""gopp Macro Table

Maps macro names to an optional replacement text. A macro without a value
is a flag: it can be tested with ``ifdef``/``ifndef`` but has no
substitution form.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional


@dataclass(frozen=True)
class Macro:
    """A named substitution rule."""
    name: str
    value: Optional[str] = None  # None for flag-only macros

    @property
    def is_flag(self) -> bool:
        return self.value is None


class MacroTable:
    """Mapping of macro name to Macro. Later definitions overwrite earlier ones."""

    def __init__(self, seeds: Optional[Mapping[str, Optional[str]]] = None):
        self._macros: Dict[str, Macro] = {}
        if seeds:
            for name, value in seeds.items():
                self._macros[name] = Macro(name, value)

    def define_value(self, name: str, value: str) -> None:
        self._macros[name] = Macro(name, value)

    def define_flag(self, name: str) -> None:
        self._macros[name] = Macro(name, None)

    def undefine(self, name: str) -> None:
        self._macros.pop(name, None)

    def lookup(self, name: str) -> Optional[Macro]:
        return self._macros.get(name)

    def is_defined(self, name: str) -> bool:
        return name in self._macros

    def clear(self) -> None:
        self._macros.clear()

    def copy(self) -> 'MacroTable':
        return MacroTable(self.as_dict())

    def as_dict(self) -> Dict[str, Optional[str]]:
        """Return a plain ``{name: value}`` snapshot."""
        return {name: macro.value for name, macro in self._macros.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._macros

    def __len__(self) -> int:
        return len(self._macros)

    def __iter__(self) -> Iterator[str]:
        return iter(self._macros)

    def __repr__(self) -> str:
        return f"MacroTable({self.as_dict()!r})"
