"""
Label and Name Generation
=========================

Collision-free names for both compiler stages.

Front end (IR labels)
---------------------
`LabelGenerator` hands out `BASE_n` names from one per-unit counter that
advances on every request, so an if/else consumes two numbers:

    IF_FALSE_0, IF_END_1, WHILE_EXP_2, WHILE_END_3, ...

Back end (assembly symbols)
---------------------------
`AsmNames` tracks the module tag and the function being lowered:

| Purpose                 | Form                  | Example              |
|-------------------------|-----------------------|----------------------|
| static variable         | Module.index          | Counter.0            |
| IR label                | Function$label        | Main.loop$WHILE_END_3|
| call return address     | Function$RET.n        | Main.main$RET.4      |
| comparison branch pair  | Tn / En               | T7, E7               |

The comparison and return counters are never reset while one assembly
output is being produced, so concatenated modules cannot collide.
"""

from dataclasses import dataclass


class LabelGenerator:
    """Per-unit generator of `BASE_n` control-flow labels."""

    def __init__(self, start: int = 0):
        self._counter = start

    def new(self, base: str) -> str:
        """Return a fresh label built on `base`."""
        label = f"{base}_{self._counter}"
        self._counter += 1
        return label

    def reset(self) -> None:
        self._counter = 0


# Qualifier for IR labels seen before any function instruction
NO_FUNCTION = "null"


@dataclass
class AsmNames:
    """
    Naming state for one assembly output.

    Attributes:
        module: Module tag of the unit being lowered (qualifies statics)
        function: Fully qualified name of the function being lowered
        comparisons: Number of comparison label pairs issued so far
        calls: Number of return-address labels issued so far
    """
    module: str = ""
    function: str = NO_FUNCTION
    comparisons: int = 0
    calls: int = 0

    def start_module(self, module: str) -> None:
        """Switch to a new unit; counters keep running."""
        self.module = module
        self.function = NO_FUNCTION

    def static_symbol(self, index: int) -> str:
        return f"{self.module}.{index}"

    def flow_label(self, label: str) -> str:
        return f"{self.function}${label}"

    def comparison_labels(self) -> tuple[str, str]:
        """Return a fresh (true-branch, join) label pair."""
        n = self.comparisons
        self.comparisons += 1
        return f"T{n}", f"E{n}"

    def return_label(self) -> str:
        label = f"{self.function}$RET.{self.calls}"
        self.calls += 1
        return label
