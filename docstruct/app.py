from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import SummarizerConfig, load_environment
from .document_processor import DocumentProcessor
from .json_handler import JSONHandler
from .logging_config import DocumentDecodeError, setup_logging
from .summarizer import Summarizer

logger = setup_logging()

load_environment()

app = FastAPI(title="Document Structure Extraction")
FRONTEND_ORIGIN = os.environ.get("FRONTEND_ORIGIN", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_ORIGIN],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

WORKERS = int(os.environ.get("DOCSTRUCT_WORKERS", "1"))

_processor = DocumentProcessor(max_workers=WORKERS)
_handler = JSONHandler()


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/process-pdf")
async def process_pdf(file: Optional[UploadFile] = File(None), apiKey: Optional[str] = Form(None)):
    if file is None:
        return JSONResponse({"error": "No PDF file provided"}, status_code=400)

    data = await file.read()
    if not data:
        return JSONResponse({"error": "No PDF file provided"}, status_code=400)

    try:
        structure = _processor.process_pdf(data)
    except DocumentDecodeError as e:
        logger.warning(f"Rejected upload {file.filename!r}: {e}")
        return JSONResponse({"error": "Error processing PDF", "message": str(e)}, status_code=422)

    summarizer = Summarizer(SummarizerConfig.from_env(api_key=apiKey or None))
    result = summarizer.summarize(structure)

    return {"success": True, "data": _handler.format_output(structure, result)}
