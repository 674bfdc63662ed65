"""Heuristic PII detection over column names and sampled values.

A column is flagged when its name fully matches one of the rule patterns
(case-insensitive). Sampled values that also match the rule's value pattern
raise the confidence from COLUMN_NAME_ONLY to VALUE_MATCHED and are kept as
examples. Rules without a value pattern keep every non-empty value as an
example but never escalate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from supascan.core.models import ColumnDescriptor, Confidence, PIIFinding

MAX_EXAMPLES = 5


@dataclass(frozen=True)
class PIIRule:
    pii_type: str
    column_pattern: re.Pattern[str]
    value_pattern: re.Pattern[str] | None = None

    def matches_column(self, name: str) -> bool:
        return self.column_pattern.fullmatch(name) is not None

    def matches_value(self, value: str) -> bool:
        if self.value_pattern is None:
            return False
        return self.value_pattern.search(value) is not None


PII_RULES: tuple[PIIRule, ...] = (
    PIIRule(
        "name",
        re.compile(
            r"name|first_name|last_name|full_name|customer_name|user_name"
            r"|display_name|contact_name|recipient_name|sender_name",
            re.IGNORECASE,
        ),
        re.compile(r"^[a-zA-Z\u00C0-\u024F\s'-]{2,80}\Z"),
    ),
    PIIRule(
        "dob",
        re.compile(
            r"dob|date_of_birth|birth_date|birthdate|birth_day|dateofbirth",
            re.IGNORECASE,
        ),
        re.compile(r"^\d{4}-\d{2}-\d{2}\Z|^\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}\Z"),
    ),
    PIIRule(
        "age",
        re.compile(r"age|user_age|customer_age", re.IGNORECASE),
        re.compile(r"^\s*(?:1[0-1]\d|[1-9]?\d|120)\s*\Z"),
    ),
    PIIRule(
        "address",
        re.compile(
            r"address|street|address_line|city|postcode|zip|zipcode"
            r"|postal_code|country|state|region",
            re.IGNORECASE,
        ),
    ),
    PIIRule(
        "telephone",
        re.compile(
            r"phone|telephone|mobile|tel|cell|contact_number|phone_number"
            r"|mobile_number",
            re.IGNORECASE,
        ),
        re.compile(r"^[\d\s\-+()]{10,20}\Z|^\+?[\d\s\-()]{10,}\Z"),
    ),
)


def _column_name(column: ColumnDescriptor | str) -> str:
    if isinstance(column, ColumnDescriptor):
        return column.name
    return column


def _collect_examples(
    rule: PIIRule, column: str, rows: Sequence[Mapping[str, Any]]
) -> tuple[list[str], Confidence]:
    examples: list[str] = []
    confidence = Confidence.COLUMN_NAME_ONLY
    for row in rows:
        value = row.get(column)
        if value is None or value == "":
            continue
        text = str(value).strip()
        if rule.value_pattern is None:
            keep = True
        elif rule.matches_value(text):
            keep = True
            confidence = Confidence.VALUE_MATCHED
        else:
            keep = False
        if keep and text and text not in examples:
            examples.append(text)
    return examples[:MAX_EXAMPLES], confidence


def detect_pii(
    columns: Iterable[ColumnDescriptor | str] | None,
    sample_rows: Sequence[Mapping[str, Any]] | None = None,
    rules: Sequence[PIIRule] = PII_RULES,
) -> list[PIIFinding]:
    """
    Flag columns whose names (and optionally values) look like personal data.

    Findings are ordered rule by rule, then by column order. No columns means
    no findings.
    """
    names = [_column_name(c) for c in columns or ()]
    rows = list(sample_rows or ())
    findings: list[PIIFinding] = []
    for rule in rules:
        for name in names:
            if not rule.matches_column(name):
                continue
            examples, confidence = _collect_examples(rule, name, rows)
            findings.append(
                PIIFinding(
                    column=name,
                    pii_type=rule.pii_type,
                    confidence=confidence,
                    examples=tuple(examples),
                )
            )
    return findings
