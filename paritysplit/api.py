"""HTTP endpoints for the upload form and the parity split."""

import asyncio
from pathlib import Path

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

from paritysplit.config import settings
from paritysplit.splitter import splitter
from paritysplit.uploads import ClientInputError, upload_handler

logger = structlog.get_logger()

router = APIRouter(tags=["split"])

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

PROCESSING_ERROR_MESSAGE = "An error occurred while processing the PDF."


@router.get("/", response_class=HTMLResponse)
async def upload_form(request: Request):
    """Render the PDF upload form."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"field_name": settings.upload_field},
    )


@router.post("/split-pdf", response_class=HTMLResponse)
async def split_pdf(request: Request):
    """
    Store the uploaded PDF and split it into odd and even pages.

    Renders a download page linking whichever of the two documents exist.
    Rejected uploads get a 400/413 and processing failures a 500, both as
    plain text.
    """
    structlog.contextvars.clear_contextvars()

    # Read the form directly so a non-file value is rejected as a missing file
    async with request.form() as form:
        try:
            input_path = await upload_handler.save(form.get(settings.upload_field))
        except ClientInputError as e:
            logger.info("Upload rejected", code=e.code, reason=e.message)
            return PlainTextResponse(e.message, status_code=e.status_code)

    structlog.contextvars.bind_contextvars(upload=input_path.name)
    logger.info("Received split request")

    try:
        result = await asyncio.to_thread(splitter.split, input_path)
    except Exception as e:
        logger.error(
            "Split request failed",
            error_code=getattr(e, "code", "UNEXPECTED_ERROR"),
            error=str(e),
        )
        return PlainTextResponse(PROCESSING_ERROR_MESSAGE, status_code=500)

    return templates.TemplateResponse(
        request,
        "download.html",
        {
            "oddFile": result.oddFile,
            "evenFile": result.evenFile,
            "pageCount": result.pageCount,
        },
    )
