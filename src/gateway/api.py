# gateway/api.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from fastapi import FastAPI
from pydantic import BaseModel, Field

from tools.receipt_extraction import extract
from tools.receipt_schema import AggregateResult, DraftExtraction, ReportFilter
from tools.report_aggregation import aggregate, month_options
from utils.logging_setup import configure_logging, get_logger
from utils.receipts_repo import normalize_rows

log = get_logger("receipt_ledger.gateway")

app = FastAPI(title="Receipt Ledger API")


class ExtractRequest(BaseModel):
    text: str = ""


class RecordsRequest(BaseModel):
    # raw rows as the store returns them; validated by normalize_rows
    records: List[Dict[str, Any]] = Field(default_factory=list)


class AggregateRequest(RecordsRequest):
    filter: ReportFilter = Field(default_factory=ReportFilter)


@app.get("/health")
def health():
    return {"ok": True, "service": "receipt-ledger-api", "time": datetime.utcnow().isoformat() + "Z"}


@app.post("/extract", response_model=DraftExtraction)
def extract_fields(req: ExtractRequest) -> DraftExtraction:
    return extract(req.text)


@app.post("/reports/aggregate", response_model=AggregateResult)
def aggregate_report(req: AggregateRequest) -> AggregateResult:
    records = normalize_rows(req.records)
    log.info("aggregate: %d/%d rows valid, filter=%s", len(records), len(req.records), req.filter.model_dump())
    return aggregate(records, req.filter)


@app.post("/reports/months")
def report_months(req: RecordsRequest):
    return {"months": month_options(normalize_rows(req.records))}


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run(app, host="127.0.0.1", port=7000)
