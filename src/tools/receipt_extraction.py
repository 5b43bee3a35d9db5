# src/tools/receipt_extraction.py
"""
Receipt OCR + field extraction.

The OCR step (Mistral OCR) turns an image into raw text. `extract` then pulls
a best-effort date / amount / vendor out of that text with a few regex scans.
Every field degrades to "" on its own; the user corrects the draft before it
is saved.
"""

from __future__ import annotations

import base64
import re
from decimal import Decimal
from typing import Optional, Protocol

from mistralai import Mistral

from tools.receipt_schema import DraftExtraction
from utils.errors import OcrError
from utils.logging_setup import get_logger

log = get_logger("receipt_ledger.extraction")

OCR_MODEL = "mistral-ocr-latest"
MIN_VENDOR_LEN = 3

# 1/15/2024, 03-02-24, 1.2.2024 (separators may be mixed)
DATE_RE = re.compile(r"\b\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}\b")
# 12.34, $12.34, $ 12.34 (3.499 reads as 3.49)
AMOUNT_RE = re.compile(r"\$?\s*(\d+\.\d{2})")


def _find_date(text: str) -> str:
    m = DATE_RE.search(text)
    return m.group(0) if m else ""


def _find_amount(text: str) -> str:
    """Largest currency-shaped number; the first one wins a tie."""
    best: Optional[str] = None
    best_value = Decimal(0)
    for m in AMOUNT_RE.finditer(text):
        value = Decimal(m.group(1))
        if best is None or value > best_value:
            best, best_value = m.group(1), value
    return best or ""


def _find_vendor(text: str) -> str:
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return ""
    vendor = lines[0]
    # a 1-2 char first line is usually a logo glyph
    if len(vendor) < MIN_VENDOR_LEN and len(lines) > 1:
        vendor = lines[1]
    return vendor


def extract(raw_text: str) -> DraftExtraction:
    """Parse raw OCR text into a draft receipt. Never raises."""
    text = raw_text or ""
    return DraftExtraction(
        date=_find_date(text),
        amount=_find_amount(text),
        vendor=_find_vendor(text),
        full_text=text,
    )


# Mistral OCR answers in markdown; the regex scans expect plain receipt lines.
_MD_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_MD_TABLE_RULE_RE = re.compile(r"^[\s|:]*-{3,}[\s|:\-]*$")
_MD_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+")
_MD_ESCAPE_RE = re.compile(r"\\([\\`*_{}\[\]()#+\-.!$|])")


def markdown_to_text(markdown: str) -> str:
    """Flatten OCR markdown to one plain line per non-empty row."""
    lines = []
    for line in (markdown or "").splitlines():
        line = _MD_IMAGE_RE.sub("", line)
        if _MD_TABLE_RULE_RE.match(line):
            continue
        line = _MD_HEADING_RE.sub("", line)
        line = line.replace("**", "").replace("__", "")
        line = _MD_ESCAPE_RE.sub(r"\1", line)
        line = " ".join(line.replace("|", " ").split())
        if line:
            lines.append(line)
    return "\n".join(lines)


# ---------- OCR collaborator ----------
def encode_image_to_base64(image_bytes: bytes) -> str:
    """Encodes raw image bytes to a Base64 string."""
    return base64.b64encode(image_bytes).decode("utf-8")


class OcrClient(Protocol):
    def recognize(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> str: ...


class MistralOcrClient:
    """Mistral OCR over a base64 data URL; returns the pages as plain text lines."""

    def __init__(self, api_key: str, model: str = OCR_MODEL, client: Optional[Mistral] = None):
        self.model = model
        self._client = client or Mistral(api_key=api_key)

    def recognize(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
        if not image_bytes:
            raise OcrError("Empty image")
        encoded = encode_image_to_base64(image_bytes)
        try:
            response = self._client.ocr.process(
                model=self.model,
                document={
                    "type": "image_url",
                    "image_url": f"data:{mime_type or 'image/jpeg'};base64,{encoded}",
                },
            )
        except Exception as e:
            raise OcrError(f"OCR request failed: {e}") from e

        pages = getattr(response, "pages", None) or []
        text = markdown_to_text("\n".join((getattr(p, "markdown", "") or "") for p in pages))
        if not text:
            raise OcrError("OCR returned no text")
        return text


def scan_receipt(image_bytes: bytes, mime_type: str, ocr: OcrClient) -> Optional[DraftExtraction]:
    """OCR an image and extract a draft. None means: fall back to manual entry."""
    try:
        text = ocr.recognize(image_bytes, mime_type)
    except OcrError as e:
        log.warning("scan_receipt: %s", e)
        return None
    draft = extract(text)
    log.info(
        "scan_receipt: date=%r amount=%r vendor=%r (%d chars)",
        draft.date, draft.amount, draft.vendor, len(text),
    )
    return draft
