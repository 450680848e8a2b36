"""
Header classification for bank statement CSV files.

Each header cell is normalized and matched against an ordered table of
(role, pattern) pairs. For every role the first matching column wins.
"""
import re
import enum
import logging
import unicodedata
from dataclasses import dataclass
from typing import Dict, List, Pattern, Tuple

logger = logging.getLogger(__name__)

ABSENT = -1


class ColumnRole(str, enum.Enum):
    """Semantic role a CSV column can play"""
    DATE = "date"
    DESCRIPTION = "description"
    DETAILS = "details"
    DOCUMENT_ID = "document_id"
    AMOUNT = "amount"  # signed value, positive = credit
    DEBIT = "debit"
    CREDIT = "credit"
    TYPE_LABEL = "type_label"  # e.g. "Tipo Lançamento": Entrada / Saída


HEADER_ROLE_PATTERNS: List[Tuple[ColumnRole, Pattern[str]]] = [
    (ColumnRole.DATE, re.compile(r'^(data|date|dt)')),
    (ColumnRole.DESCRIPTION, re.compile(r'^(descri|histor|memo|lanc|descr|desc)')),
    (ColumnRole.DETAILS, re.compile(r'^(detalhe|detail|complemento|memo2)')),
    (ColumnRole.DOCUMENT_ID, re.compile(
        r'^(n\W*\s*doc|num\w*\s*(do\s+)?doc|documento|doc\b|referencia|ref\b|fitid)'
    )),
    (ColumnRole.AMOUNT, re.compile(r'^(valor|value|amount|val\b)')),
    (ColumnRole.DEBIT, re.compile(r'^(debito|debit|saida)')),
    (ColumnRole.CREDIT, re.compile(r'^(credito|credit|entrada)')),
    (ColumnRole.TYPE_LABEL, re.compile(r'^tipo')),
]


def normalize_text(text: str) -> str:
    """
    Lowercase and strip diacritics, e.g. "Lançamento" -> "lancamento".
    """
    decomposed = unicodedata.normalize('NFD', text.strip().lower())
    return ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn')


@dataclass(frozen=True)
class ColumnLayout:
    """Column index per role, ABSENT (-1) when the role was not found."""
    date: int = ABSENT
    description: int = ABSENT
    details: int = ABSENT
    document_id: int = ABSENT
    amount: int = ABSENT
    debit: int = ABSENT
    credit: int = ABSENT
    type_label: int = ABSENT

    @property
    def is_statement(self) -> bool:
        """A file needs at least a date and a description column."""
        return self.has(ColumnRole.DATE) and self.has(ColumnRole.DESCRIPTION)

    def has(self, role: ColumnRole) -> bool:
        """True when the header row provided a column for `role`."""
        return getattr(self, role.value) != ABSENT


def classify_headers(headers: List[str]) -> ColumnLayout:
    """Assign a column index to every role the header row provides."""
    found: Dict[str, int] = {}
    for index, header in enumerate(headers):
        normalized = normalize_text(header)
        for role, pattern in HEADER_ROLE_PATTERNS:
            if role.value not in found and pattern.match(normalized):
                found[role.value] = index

    layout = ColumnLayout(**found)
    logger.debug(f"Classified headers {headers} as {layout}")
    return layout
