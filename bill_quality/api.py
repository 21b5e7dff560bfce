"""
Optional FastAPI REST endpoint for bill image quality checks.
Can be run with: uvicorn bill_quality.api:app --reload
"""

from typing import List

from fastapi import FastAPI, UploadFile, File
from fastapi.responses import JSONResponse

from bill_quality.main import QualityAssessor
from bill_quality.config import get_config
from bill_quality.utils.logging import setup_logging

config = get_config()
logger = setup_logging(__name__)

app = FastAPI(
    title="Bill Image Quality API",
    description="Objective quality scoring for captured bill photos",
    version="1.0.0",
    debug=config.API_DEBUG,
)

assessor = QualityAssessor()


@app.post("/assess")
async def assess_endpoint(
    file: UploadFile = File(...),
):
    """
    Assess the quality of one uploaded image.

    Args:
        file: Bill photo (any format Pillow can decode)

    Returns:
        JSON quality result. Undecodable uploads still return 200 with the
        failure result, so clients have a single response shape to handle.
    """
    contents = await file.read()
    logger.info(f"Received {file.filename} ({len(contents)} bytes) for assessment")
    result = await assessor.assess(contents)
    return JSONResponse(content=result.to_payload(), status_code=200)


@app.post("/assess-batch")
async def assess_batch_endpoint(
    files: List[UploadFile] = File(...),
):
    """
    Assess multiple uploaded images.

    Returns:
        JSON list of quality results in upload order
    """
    contents = [await file.read() for file in files]
    logger.info(f"Received batch of {len(contents)} images for assessment")
    results = await assessor.assess_batch(contents)
    return JSONResponse(content=[result.to_payload() for result in results], status_code=200)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/config")
async def get_config_endpoint():
    """Get the active threshold table and analysis settings."""
    return {
        "thresholds": assessor.thresholds.to_payload(),
        "max_analysis_dimension": config.MAX_ANALYSIS_DIMENSION,
        "max_concurrent_assessments": config.MAX_CONCURRENT_ASSESSMENTS,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=config.API_HOST,
        port=config.API_PORT,
        log_level=config.LOG_LEVEL.lower(),
    )
