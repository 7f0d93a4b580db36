"""
Form taxonomy
=============

The closed set of form types a page can be classified as, the record type for
a single page's classification, and the instruction text sent with every
classification call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FormType(str, Enum):
    F1040_MAIN = "1040_main"
    SCHEDULE_1 = "schedule_1"
    SCHEDULE_2 = "schedule_2"
    SCHEDULE_3 = "schedule_3"
    SCHEDULE_A = "schedule_a"
    SCHEDULE_B = "schedule_b"
    SCHEDULE_C = "schedule_c"
    SCHEDULE_D = "schedule_d"
    SCHEDULE_E = "schedule_e"
    K1_SUMMARY = "k1_summary"
    K1_DETAIL = "k1_detail"
    STATE_MAIN = "state_main"
    STATE_SCHEDULE = "state_schedule"
    WORKSHEET = "worksheet"
    SUPPORTING_DOC = "supporting_doc"
    COVER_LETTER = "cover_letter"
    DIRECT_DEPOSIT = "direct_deposit"
    CARRYOVER_SUMMARY = "carryover_summary"
    EFILING_AUTH = "efiling_auth"
    CRYPTO_DETAIL = "crypto_detail"
    OTHER = "other"

    @classmethod
    def lookup(cls, value: str) -> FormType | None:
        """Return the member for a tag, ignoring case and surrounding spaces."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True, order=True)
class PageClassification:
    page_number: int
    form_type: FormType

    def to_dict(self) -> dict:
        return {"page": self.page_number, "type": self.form_type.value}


CLASSIFICATION_PROMPT = """
Classify each page of this tax return PDF. For each page, identify the form type.

Classification categories:
- 1040_main: Form 1040 pages 1-2 (the main federal return with income, deductions, tax)
- schedule_1: Schedule 1 - Additional Income and Adjustments
- schedule_2: Schedule 2 - Additional Taxes
- schedule_3: Schedule 3 - Additional Credits and Payments
- schedule_a: Schedule A - Itemized Deductions
- schedule_b: Schedule B - Interest and Dividends
- schedule_c: Schedule C - Business Income
- schedule_d: Schedule D - Capital Gains and Losses
- schedule_e: Schedule E - Supplemental Income (rentals, royalties, partnerships, S corps)
- k1_summary: Schedule K-1 summary/first page (contains income amounts)
- k1_detail: Schedule K-1 supporting pages, instructions, or continuation pages
- state_main: State tax return main pages (Form 540 for CA, IT-201 for NY, etc.)
- state_schedule: State return supporting schedules
- worksheet: Calculation worksheets (tax computation, AMT, etc.)
- supporting_doc: W-2, 1099, or other source document copies
- cover_letter: Preparer transmittal letters, engagement letters, "Dear Client" letters
- direct_deposit: Direct deposit/debit reports showing bank routing and account numbers
- carryover_summary: Tax return carryovers to next year, loss carryforward summaries
- efiling_auth: E-file authorization forms (Form 8879, TR-579-IT, e-file jurat/disclosure)
- crypto_detail: Cryptocurrency transaction details, lot-by-lot disposal reports
- other: Any other pages not fitting above categories

IMPORTANT: Look for these clues to identify preparer documents vs actual tax forms:
- Cover letters often start with "Dear [Name]" and mention the preparer's firm name
- Direct deposit pages show routing numbers, account numbers in a table format
- Carryover summaries have "Carryovers to [Year]" in the title
- E-file auth pages mention "penalties of perjury", "ERO Declaration", "Taxpayer PIN"
- The actual Form 1040 has "U.S. Individual Income Tax Return" and numbered lines

Respond with a JSON array where each element has:
- "page": page number (1-indexed, relative to the chunk you're seeing)
- "type": one of the classification categories above

Example response format:
[
  {"page": 1, "type": "cover_letter"},
  {"page": 2, "type": "carryover_summary"},
  {"page": 3, "type": "1040_main"}
]

Classify ALL pages in this document chunk.
""".strip()
