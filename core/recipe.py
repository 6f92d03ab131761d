"""
Cookery — Recipe System
A recipe is an ordered list of operation steps stored as plain text,
one step per line: "<token>" or "<token> <integer>".
Recipes replay a cook: same recipe -> same family of results.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from effects import OPERATIONS, is_known, generate_parameter
from effects.random_source import resolve_rng, randint

LIGHT_RECIPE_RANGE = (4, 7)   # Step count for live-mode recipes
DEFAULT_ITERATIONS = 5        # Step count for a plain random cook


@dataclass
class RecipeStep:
    """One operation in a recipe.

    operation: Canonical token ("-resize"). Unknown tokens are kept as-is.
    parameter: Optional integer. None = the operation draws its own.
    """
    operation: str
    parameter: int | None = None

    @property
    def known(self) -> bool:
        return is_known(self.operation)

    def to_line(self) -> str:
        if self.parameter is None:
            return self.operation
        return f"{self.operation} {self.parameter}"

    @classmethod
    def from_token(cls, token: str) -> "RecipeStep":
        """Build a step from an operation's emitted token ("-noise 60")."""
        fields = token.split()
        parameter = int(fields[1]) if len(fields) > 1 else None
        return cls(fields[0], parameter)


@dataclass
class Recipe:
    """Ordered sequence of steps. Order matters; steps don't commute."""
    steps: list = field(default_factory=list)

    def __iter__(self):
        return iter(self.steps)

    def __len__(self):
        return len(self.steps)

    def __getitem__(self, idx):
        return self.steps[idx]

    def unknown_steps(self) -> list:
        return [s for s in self.steps if not s.known]

    def to_text(self) -> str:
        return serialize(self)

    @classmethod
    def from_tokens(cls, tokens) -> "Recipe":
        return cls([RecipeStep.from_token(t) for t in tokens])


def _parse_int(field_text: str) -> int | None:
    try:
        return int(field_text)
    except ValueError:
        return None


def parse(text: str) -> Recipe:
    """Parse recipe text. Never raises.

    Blank lines are skipped. The first whitespace-delimited field is the
    token, the second (if any) the integer parameter. A non-integer
    parameter is dropped so the operation falls back to drawing its own.
    Unknown tokens are kept; the executor decides what to do with them.
    """
    if text is None:
        return Recipe()
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")

    steps = []
    for lineno, line in enumerate(str(text).splitlines(), start=1):
        fields = line.split()
        if not fields:
            continue
        parameter = None
        if len(fields) > 1:
            parameter = _parse_int(fields[1])
            if parameter is None:
                logging.debug(
                    "Recipe line %d: parameter %r for %s is not an integer, "
                    "operation will pick its own", lineno, fields[1], fields[0],
                )
        steps.append(RecipeStep(fields[0], parameter))
    return Recipe(steps)


def serialize(recipe: Recipe) -> str:
    """One step per line, newline-terminated. Empty recipe -> ""."""
    return "".join(step.to_line() + "\n" for step in recipe)


def generate_random(count: int, rng=None, strength: float = 1.0) -> Recipe:
    """Draw a random recipe of exactly `count` steps.

    Each step picks an operation uniformly from the catalog and records the
    parameter that operation would draw for itself.
    """
    count = int(count)
    if count < 0:
        raise ValueError(f"Step count must be >= 0, got {count}")
    rng = resolve_rng(rng)
    tokens = list(OPERATIONS.keys())
    steps = []
    for _ in range(count):
        token = tokens[randint(rng, 0, len(tokens) - 1)]
        steps.append(RecipeStep(token, generate_parameter(token, rng, strength)))
    return Recipe(steps)


def generate_light(rng=None, strength: float = 1.0) -> Recipe:
    """Short random recipe for live mode (4-7 steps)."""
    rng = resolve_rng(rng)
    return generate_random(randint(rng, *LIGHT_RECIPE_RANGE), rng, strength)


def load_recipe(path) -> Recipe:
    """Load a recipe from a UTF-8 text file."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Recipe file not found: {path}")
    return parse(path.read_text(encoding="utf-8", errors="replace"))


def save_recipe(recipe: Recipe, path) -> Path:
    """Write a recipe as UTF-8 text. Returns the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize(recipe), encoding="utf-8")
    return path
