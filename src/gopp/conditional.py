"""gopp Conditional State

Two models of ``ifdef``/``ifndef``/``else``/``endif`` handling:

  - ConditionalState: a single ``suppressing`` flag. Blocks cannot nest; a
    second ``ifdef`` simply re-evaluates the flag. This is the default and
    matches how gopp has always behaved.
  - ConditionalStack: one frame per open block, so nested blocks work. Opt
    in with ``nested=True`` on the engine.

Both apply ``define``/``undef`` to the macro table only while not
suppressing.
"""

from typing import List

from .directives import Define, Directive, Else, EndIf, IfDef, IfNDef, Undef
from .macro_table import MacroTable


class ConditionalState:
    """Single-flag suppress/emit state."""

    def __init__(self):
        self.suppressing = False

    def reset(self) -> None:
        self.suppressing = False

    @property
    def unterminated(self) -> bool:
        """True when processing ended inside a suppressed block."""
        return self.suppressing

    def _enter(self, condition: bool) -> None:
        self.suppressing = not condition

    def _flip(self) -> None:
        self.suppressing = not self.suppressing

    def _leave(self) -> None:
        if self.suppressing:
            self.suppressing = False

    def apply(self, directive: Directive, macros: MacroTable) -> bool:
        """Apply *directive*; return True if the macro table was mutated."""
        if isinstance(directive, IfDef):
            self._enter(macros.lookup(directive.name) is not None)
        elif isinstance(directive, IfNDef):
            self._enter(macros.lookup(directive.name) is None)
        elif isinstance(directive, Else):
            self._flip()
        elif isinstance(directive, EndIf):
            self._leave()
        elif isinstance(directive, Define):
            if not self.suppressing:
                macros.define_value(directive.name, directive.value)
                return True
        elif isinstance(directive, Undef):
            if not self.suppressing:
                macros.undefine(directive.name)
                return True
        return False


class ConditionalStack(ConditionalState):
    """Nested suppress/emit state, one frame per open ifdef/ifndef."""

    def __init__(self):
        super().__init__()
        # Each frame records whether its own condition currently holds.
        self.frames: List[bool] = []

    def reset(self) -> None:
        super().reset()
        self.frames = []

    @property
    def depth(self) -> int:
        return len(self.frames)

    @property
    def unterminated(self) -> bool:
        return bool(self.frames)

    def _update(self) -> None:
        self.suppressing = not all(self.frames)

    def _enter(self, condition: bool) -> None:
        self.frames.append(condition)
        self._update()

    def _flip(self) -> None:
        # A stray else has no frame to toggle.
        if self.frames:
            self.frames[-1] = not self.frames[-1]
            self._update()

    def _leave(self) -> None:
        if self.frames:
            self.frames.pop()
            self._update()
