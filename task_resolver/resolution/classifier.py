"""Deterministic question classification over an ordered rule table."""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from task_resolver.resolution.models import TaskKind

Predicate = Callable[[str], bool]


def contains_all(*needles: str) -> Predicate:
    return lambda text: all(needle in text for needle in needles)


def contains_any(*needles: str) -> Predicate:
    return lambda text: any(needle in text for needle in needles)


def matches(pattern: str) -> Predicate:
    compiled = re.compile(pattern)
    return lambda text: compiled.search(text) is not None


def all_of(*predicates: Predicate) -> Predicate:
    return lambda text: all(predicate(text) for predicate in predicates)


@dataclass(frozen=True)
class ClassificationRule:
    kind: TaskKind
    predicate: Predicate
    description: str = ""


# Order is the precedence contract: the first matching rule wins.
DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        TaskKind.ARCHIVE_CSV_LOOKUP,
        all_of(contains_any("unzip", ".zip"), matches(r"[\w.\-]+\.csv\b")),
        "archive containing a named CSV file",
    ),
    ClassificationRule(
        TaskKind.VERSION_QUERY,
        contains_any("code -s", "code -v", "code --version", "code --status"),
        "editor version/status output",
    ),
    ClassificationRule(
        TaskKind.DEVTOOLS_SIMULATION,
        contains_any("devtools", "dev tools"),
        "browser devtools inspection",
    ),
    ClassificationRule(
        TaskKind.HTTP_HEAD_STATUS,
        contains_any("status code", "head request", "http status"),
        "HTTP status of a URL",
    ),
    ClassificationRule(
        TaskKind.CSS_SELECTOR_COUNT,
        contains_any("css selector", "css-selector"),
        "count elements matching a selector",
    ),
    ClassificationRule(
        TaskKind.WEEKDAY_COUNT,
        contains_any("weekday", "week day", "working day", "business day"),
        "count Monday-Friday dates in a range",
    ),
    ClassificationRule(
        TaskKind.SQL_AGGREGATE,
        matches(r"\b(sql|sqlite)\b"),
        "aggregate over the ticket sales table",
    ),
    ClassificationRule(
        TaskKind.SPREADSHEET_SUM,
        all_of(
            matches(r"\b(spreadsheet|excel|xlsx|sheet|csv)\b"),
            matches(r"\b(sum|total)\b"),
        ),
        "sum a spreadsheet column",
    ),
    ClassificationRule(
        TaskKind.ENCODED_TEXT_DECODE,
        matches(r"\b(encoding|encoded|decode)\b"),
        "decode a file with a named encoding",
    ),
    ClassificationRule(
        TaskKind.JSON_KEY_LOOKUP,
        all_of(contains_any("json"), matches(r"\bkey\b")),
        "value of a key in a JSON file",
    ),
    ClassificationRule(
        TaskKind.JSON_LIST_BUILD,
        all_of(contains_any("json"), matches(r"\b(array|list)\b")),
        "JSON array from a comma separated list",
    ),
    ClassificationRule(
        TaskKind.GITHUB_ACTION,
        contains_any("github"),
        "GitHub repository or action",
    ),
    ClassificationRule(
        TaskKind.REPLACE_ACROSS_FILES,
        matches(r"\breplace\b"),
        "replace text across files",
    ),
    ClassificationRule(
        TaskKind.LIST_FILES,
        contains_any("list all files", "list the files", "ls -l"),
        "list files with attributes",
    ),
    ClassificationRule(
        TaskKind.RENAME_FILES,
        matches(r"\brename\b"),
        "rename files",
    ),
    ClassificationRule(
        TaskKind.COMPARE_FILES,
        matches(r"\b(compare|diff)\b"),
        "compare two files",
    ),
    ClassificationRule(
        TaskKind.RUN_COMMAND,
        all_of(matches(r"\b(run|execute)\b"), contains_any("`")),
        "run a shell command",
    ),
)


class TaskClassifier:
    """Maps question text to exactly one TaskKind; pure and total."""

    def __init__(self, rules: Sequence[ClassificationRule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return self._rules

    def classify(self, question: str) -> TaskKind:
        text = question.lower()
        for rule in self._rules:
            if rule.predicate(text):
                return rule.kind
        return TaskKind.UNSUPPORTED
