from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from finn_kvittering.errors import InvalidUrlError, RenderError
from finn_kvittering.models import ParseUrlResponse, VoucherRequest
from finn_kvittering.services.extraction import extract_listing
from finn_kvittering.services.fetcher import validate_url
from finn_kvittering.services.pdf import render_pdf
from finn_kvittering.services.voucher import render_voucher_html, voucher_number
from finn_kvittering.utils.log import setup_logging


logger = logging.getLogger(__name__)

UNSUPPORTED_SITE_WARNING = "Kun Finn.no-URLer støttes for øyeblikket"
PARSE_FAILED_ERROR = "En feil oppstod ved parsing av URL"
MISSING_FIELDS_ERROR = "Påkrevde felter mangler"
PDF_FAILED_ERROR = "En feil oppstod ved generering av PDF"

app = FastAPI(title="Finn Kvittering")


@app.on_event("startup")
def on_startup() -> None:
    setup_logging()


def envelope(status_code: int, **fields: object) -> JSONResponse:
    return JSONResponse(ParseUrlResponse(**fields).body(), status_code=status_code)


@app.post("/api/parse-url")
async def parse_url(request: Request) -> JSONResponse:
    """Extract voucher fields from a Finn.no listing URL.

    Fetch and parse failures still answer 200 with an empty-shaped result
    and a warning; only bad input is a client error.
    """
    try:
        body = await request.json()
        url = body.get("url") if isinstance(body, dict) else None
        try:
            validate_url(url)
        except InvalidUrlError as e:
            warnings = [UNSUPPORTED_SITE_WARNING] if isinstance(url, str) and url else None
            return envelope(400, success=False, error=str(e), warnings=warnings)
        outcome = await run_in_threadpool(extract_listing, url)
        return envelope(200, success=True, data=outcome.result, warnings=outcome.warnings)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while parsing listing URL")
        return envelope(500, success=False, error=PARSE_FAILED_ERROR)


@app.post("/api/generate-pdf")
async def generate_pdf(request: Request) -> Response:
    """Render a completed purchase form as a PDF voucher."""
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Malformed voucher request body")
        return JSONResponse({"error": PDF_FAILED_ERROR}, status_code=500)
    try:
        voucher = VoucherRequest.model_validate(payload)
    except ValidationError as e:
        logger.info("Rejected voucher request: %s", e.errors(include_url=False))
        return JSONResponse({"error": MISSING_FIELDS_ERROR}, status_code=400)

    number = voucher_number(voucher.source_url)
    html = render_voucher_html(voucher, number=number, generated_at=datetime.now())
    try:
        pdf = await run_in_threadpool(render_pdf, html)
    except RenderError as e:
        logger.error("Voucher %s failed to render: %s", number, e)
        return JSONResponse({"error": str(e) or PDF_FAILED_ERROR}, status_code=500)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="kvittering-{number}.pdf"'},
    )
