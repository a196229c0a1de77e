import io
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, UploadFile
from fastapi.responses import StreamingResponse

from ..core.config import logger
from ..core.utils import now_local
from ..services import spreadsheet_service

router = APIRouter(tags=["Utilities"])


@router.get("/ping")
async def ping():
    """Health check for monitoring."""
    return {"status": "ok", "timestamp": now_local().isoformat()}


def xlsx_response(output: io.BytesIO, filename: str) -> StreamingResponse:
    file_size = output.getbuffer().nbytes
    # Percent-encode so non-ASCII names survive every browser
    encoded_filename = quote(filename)
    return StreamingResponse(
        output,
        media_type=spreadsheet_service.XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{encoded_filename}",
            "Content-Length": str(file_size),
        },
    )


def read_upload_rows(file: UploadFile):
    """Rows of an uploaded workbook; anything openpyxl cannot read is a 400."""
    if not file.filename or not file.filename.lower().endswith((".xlsx", ".xlsm")):
        raise HTTPException(status_code=400, detail="Please upload an .xlsx file.")
    try:
        return spreadsheet_service.read_rows(io.BytesIO(file.file.read()))
    except Exception as e:
        logger.error(f"[IMPORT] Could not read '{file.filename}': {e}", exc_info=True)
        raise HTTPException(status_code=400, detail=f"Could not read spreadsheet: {e}")
