"""
Cyclone Viewer API
FastAPI backend for loading and serving tropical-cyclone track files

Features:
- ADECK forecast and BDECK best-track parsing
- Track CSV import and export
- Model classification and display filtering
- Per-file track visibility flags
"""

from fastapi import FastAPI, HTTPException, Query, Path
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any, Literal
import os
import logging

from ..processing.csv_tracks import TrackCsvError
from ..processing.intensity import SCALES, scale_to_dict
from ..processing.models import classify_model, get_category, get_model_categories
from .storms import storm_manager

LOG_LEVEL = os.getenv("CYCLONE_VIEWER_LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Cyclone Viewer API",
    description="Tropical cyclone track viewer backend: ADECK/BDECK parsing, track filtering and export",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Get allowed origins from environment, with safe defaults for development
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8080",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Limits
MAX_UPLOAD_MB = float(os.getenv("CYCLONE_VIEWER_MAX_UPLOAD_MB", "20"))
MAX_FILES = int(os.getenv("CYCLONE_VIEWER_MAX_FILES", "50"))
storm_manager.max_files = MAX_FILES


# ============================================================================
# Pydantic Models
# ============================================================================

class TrackFileUpload(BaseModel):
    """Raw file content to parse"""
    filename: Optional[str] = Field(None, description="Original file name")
    content: str = Field(..., description="Full text of the file")
    format: Literal["adeck", "bdeck", "csv", "auto"] = Field("auto", description="File format")

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("File content is empty")
        return value


class FileSummary(BaseModel):
    """Parsed file summary"""
    id: str
    filename: str
    format: str
    uploaded_at: str
    isBdeck: bool
    count: int = Field(..., description="Number of tracks")
    point_count: int
    skipped_count: int = Field(..., description="Lines that produced no point")
    init_times: List[str]
    models: List[str]
    hidden_tracks: List[str]


class VisibilityResponse(BaseModel):
    """Track visibility after a toggle"""
    file_id: str
    track_id: str
    visible: bool


class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    detail: str
    status_code: int


# ============================================================================
# Validation
# ============================================================================

def validate_upload_size(content: str) -> None:
    """Reject uploads over the configured size"""
    if len(content.encode("utf-8")) > MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {MAX_UPLOAD_MB:g} MB."
        )


def validate_category(category: Optional[str]) -> None:
    """Validate model category parameter"""
    if category and get_category(category) is None:
        valid = [c.id for c in get_model_categories()]
        raise HTTPException(
            status_code=400,
            detail=f"Invalid category '{category}'. Valid options: {', '.join(valid)}"
        )


def get_file_or_404(file_id: str):
    stored = storm_manager.get_file(file_id)
    if not stored:
        raise HTTPException(status_code=404, detail=f"File {file_id} not found")
    return stored


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Custom HTTP exception handler with consistent format"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTPException",
            "detail": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(TrackCsvError)
async def track_csv_error_handler(request, exc: TrackCsvError):
    """CSV files that cannot be read as a track"""
    logger.warning(f"CSV import failed: {str(exc)}")
    return JSONResponse(
        status_code=400,
        content={
            "error": "TrackCsvError",
            "detail": str(exc),
            "status_code": 400
        }
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    """Handle value errors"""
    logger.warning(f"Value error: {str(exc)}")
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValueError",
            "detail": "Invalid input provided",
            "status_code": 400
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected errors"""
    logger.error(f"Unhandled error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "detail": "An unexpected error occurred. Please try again later.",
            "status_code": 500
        }
    )


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/", tags=["General"])
async def root():
    """API root endpoint"""
    return {
        "message": "Cyclone Viewer API",
        "version": VERSION,
        "documentation": "/docs",
        "endpoints": {
            "health": "/api/health",
            "files": "/api/files",
            "models": "/api/models",
            "intensity_scales": "/api/intensity/scales",
        }
    }


@app.get("/api/health", tags=["General"])
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": VERSION,
        "files_loaded": len(storm_manager.files),
    }


# ============================================================================
# Track Files
# ============================================================================

@app.post("/api/files", response_model=FileSummary, status_code=201, tags=["Files"])
async def upload_file(upload: TrackFileUpload):
    """
    Parse an ADECK, BDECK or track CSV file and keep it for later queries.

    With `format=auto`, files containing BEST records are read as BDECK.
    """
    validate_upload_size(upload.content)
    stored = storm_manager.load_text(upload.content, filename=upload.filename, fmt=upload.format)
    return storm_manager.get_file_summary(stored.id)


@app.get("/api/files", tags=["Files"])
async def list_files():
    """List loaded files"""
    files = storm_manager.list_files()
    return {"files": files, "count": len(files)}


@app.get("/api/files/{file_id}", response_model=FileSummary, responses={404: {"model": ErrorResponse}}, tags=["Files"])
async def get_file(file_id: str = Path(..., description="File ID returned on upload")):
    """Summary of a loaded file"""
    get_file_or_404(file_id)
    return storm_manager.get_file_summary(file_id)


@app.delete("/api/files/{file_id}", tags=["Files"])
async def delete_file(file_id: str = Path(..., description="File ID returned on upload")):
    """Forget a loaded file"""
    if not storm_manager.delete_file(file_id):
        raise HTTPException(status_code=404, detail=f"File {file_id} not found")
    return {"deleted": file_id}


@app.get("/api/files/{file_id}/tracks", tags=["Tracks"])
async def get_file_tracks(
    file_id: str = Path(..., description="File ID returned on upload"),
    init_time: Optional[str] = Query(None, description="YYYYMMDDHH, 'latest' or 'all'"),
    default_models_only: bool = Query(False, description="Only default models (falls back to known models)"),
    category: Optional[str] = Query(None, description="Model category id"),
    include_hidden: bool = Query(True, description="Include tracks flagged hidden"),
):
    """
    Get the tracks of a file.

    Returns `{storms, count}` for ADECK files and `{storms, isBdeck, count}`
    for BDECK files.
    """
    stored = get_file_or_404(file_id)
    validate_category(category)
    storms = storm_manager.get_tracks(file_id, init_time, default_models_only, category, include_hidden)
    response: Dict[str, Any] = {"storms": storms}
    if stored.result.is_bdeck:
        response["isBdeck"] = True
    response["count"] = len(storms)
    return response


@app.get("/api/files/{file_id}/init-times", tags=["Tracks"])
async def get_file_init_times(file_id: str = Path(..., description="File ID returned on upload")):
    """Initialization times of a file, most recent first, with their models"""
    get_file_or_404(file_id)
    return storm_manager.get_init_times(file_id)


@app.get("/api/files/{file_id}/skipped", tags=["Tracks"])
async def get_skipped_lines(file_id: str = Path(..., description="File ID returned on upload")):
    """Lines that were dropped during parsing and why"""
    get_file_or_404(file_id)
    skipped = storm_manager.get_skipped_lines(file_id)
    return {"skipped": skipped, "count": len(skipped)}


@app.get("/api/files/{file_id}/tracks/{track_id}", responses={404: {"model": ErrorResponse}}, tags=["Tracks"])
async def get_track_details(
    file_id: str = Path(..., description="File ID returned on upload"),
    track_id: str = Path(..., description="Track ID, e.g. 'AL162023_OFCL_2023090100'"),
):
    """
    Get one track with its drawing geometry.

    Geometry includes the track line, the start marker and R34 wedges.
    """
    get_file_or_404(file_id)
    track = storm_manager.get_track(file_id, track_id)
    if not track:
        raise HTTPException(status_code=404, detail=f"Track {track_id} not found")
    return track


@app.post("/api/files/{file_id}/tracks/{track_id}/visibility", response_model=VisibilityResponse, tags=["Tracks"])
async def toggle_track_visibility(
    file_id: str = Path(..., description="File ID returned on upload"),
    track_id: str = Path(..., description="Track ID"),
):
    """Toggle whether a track is hidden"""
    get_file_or_404(file_id)
    visible = storm_manager.toggle_track_visibility(file_id, track_id)
    if visible is None:
        raise HTTPException(status_code=404, detail=f"Track {track_id} not found")
    return {"file_id": file_id, "track_id": track_id, "visible": visible}


@app.get("/api/files/{file_id}/export.csv", tags=["Files"])
async def export_file_csv(file_id: str = Path(..., description="File ID returned on upload")):
    """Export all points of a file as CSV"""
    stored = get_file_or_404(file_id)
    csv_text = storm_manager.export_csv(file_id)
    filename = os.path.splitext(os.path.basename(stored.filename))[0] or "cyclone-track"
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}.csv"'}
    )


# ============================================================================
# Models & Scales
# ============================================================================

@app.get("/api/models", tags=["Models"])
async def list_model_categories():
    """Model categories used to group the model selector"""
    categories = [
        {"id": c.id, "name": c.name, "models": c.models}
        for c in get_model_categories()
    ]
    return {"categories": categories, "ensemble_pattern": "PH followed by two digits"}


@app.get("/api/models/{code}", tags=["Models"])
async def get_model_info(code: str = Path(..., description="Model code, e.g. 'OFCL' or 'PH07'")):
    """Classification, display name and color of a model"""
    return classify_model(code.upper()).to_dict()


@app.get("/api/intensity/scales", tags=["Models"])
async def get_intensity_scales():
    """Intensity category scales (wind speeds in m/s)"""
    return {name: scale_to_dict(name) for name in SCALES}


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
