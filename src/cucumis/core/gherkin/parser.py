"""Gherkin feature parser.

Only the subset the interpreter runs is understood: ``Feature:``,
``Scenario:``, ``Given/When/Then/And/But`` steps, doc-strings and data
tables. Anything else is ignored rather than rejected.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SCENARIO_RE = re.compile(r"^\s*Scenario:")
DOC_STRING_DELIMITER = '"""'


class StepType(str, Enum):
    """Step type a definition is registered under."""
    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"


STEP_KEYWORDS = ("Given", "When", "Then", "And", "But")
CONJUNCTIONS = ("And", "But")


@dataclass
class Step:
    """Single scenario step."""
    type: StepType
    text: str
    keyword: str
    line: int = 0
    doc_string: Optional[str] = None
    data_table: Optional[list[list[str]]] = None

    @property
    def has_doc_string(self) -> bool:
        return self.doc_string is not None

    @property
    def has_data_table(self) -> bool:
        return self.data_table is not None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "keyword": self.keyword,
            "text": self.text,
            "line": self.line,
            "doc_string": self.doc_string,
            "data_table": self.data_table,
        }


@dataclass
class Scenario:
    """Parsed scenario."""
    name: str
    steps: list[Step] = field(default_factory=list)
    line: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "line": self.line,
            "steps": [s.to_dict() for s in self.steps],
        }


@dataclass
class Feature:
    """Parsed feature file."""
    name: str
    scenarios: list[Scenario] = field(default_factory=list)
    source_path: Optional[Path] = None

    @property
    def total_steps(self) -> int:
        return sum(len(s.steps) for s in self.scenarios)


def split_table_row(line: str) -> list[str]:
    """Split a ``| a | b |`` row into trimmed cells."""
    cells = line.strip().split("|")
    if cells and not cells[0].strip():
        cells = cells[1:]
    if cells and not cells[-1].strip():
        cells = cells[:-1]
    return [cell.strip() for cell in cells]


def _split_keyword(line: str) -> Optional[tuple[str, str]]:
    for keyword in STEP_KEYWORDS:
        if line.startswith(keyword + " "):
            return keyword, line[len(keyword):].strip()
    return None


class FeatureParser:
    """Line-oriented Gherkin parser.

    The parser is a small state machine: outside any literal, inside a
    doc-string, or inside a data table. Literals always attach to the most
    recently parsed step of the current scenario.
    """

    def parse_string(self, content: str) -> Feature:
        """Parse feature text.

        Args:
            content: Feature file content

        Returns:
            Parsed Feature; its name is empty when no ``Feature:`` line exists
        """
        feature_name = ""
        scenarios: list[Scenario] = []
        current: Optional[Scenario] = None

        in_doc_string = False
        doc_lines: list[str] = []
        in_data_table = False

        for number, raw in enumerate(content.split("\n"), start=1):
            raw = raw.rstrip("\r")
            line = raw.strip()
            step = current.steps[-1] if current and current.steps else None

            if in_doc_string:
                if line == DOC_STRING_DELIMITER:
                    step.doc_string = "\n".join(doc_lines)
                    doc_lines = []
                    in_doc_string = False
                else:
                    doc_lines.append(raw)
                continue

            if in_data_table and not line.startswith("|"):
                in_data_table = False

            if SCENARIO_RE.match(raw):
                if current is not None:
                    scenarios.append(current)
                current = Scenario(name=line[len("Scenario:"):].strip(), line=number)
                continue

            if line.startswith("Feature:") and not feature_name:
                feature_name = line[len("Feature:"):].strip()
                continue

            keyword_text = _split_keyword(line)
            if keyword_text is not None:
                if current is None:
                    logger.debug(f"Ignoring step outside a scenario at line {number}")
                    continue
                keyword, text = keyword_text
                if keyword in CONJUNCTIONS:
                    step_type = step.type if step else StepType.GIVEN
                else:
                    step_type = StepType(keyword)
                current.steps.append(
                    Step(type=step_type, text=text, keyword=keyword, line=number)
                )
                continue

            if line == DOC_STRING_DELIMITER:
                if step is None:
                    continue
                step.doc_string = ""
                doc_lines = []
                in_doc_string = True
                continue

            if line.startswith("|"):
                if step is None:
                    continue
                if not in_data_table:
                    step.data_table = []
                    in_data_table = True
                step.data_table.append(split_table_row(line))

        if current is not None:
            scenarios.append(current)

        return Feature(name=feature_name, scenarios=scenarios)

    def parse_file(self, path: Path) -> Feature:
        """Parse a feature file from disk.

        Raises:
            ValueError: If the file does not exist
        """
        if not path.exists():
            raise ValueError(f"Feature file not found: {path}")

        feature = self.parse_string(path.read_text(encoding="utf-8"))
        feature.source_path = path
        return feature


def parse(content: str) -> list[Scenario]:
    """Parse feature text into its ordered scenarios."""
    return FeatureParser().parse_string(content).scenarios
