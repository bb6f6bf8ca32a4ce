"""
Service metadata endpoints.

Health probe and build information for the running service; neither
requires authentication.
"""
import os

from fastapi import APIRouter

SERVICE_NAME = "gravity-service"

router = APIRouter(tags=["support"])


@router.get("/health")
def health_check():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/build-info")
def get_build_info():
    """Return build and deployment information for the running service."""
    return {
        "build_sha": os.getenv("BUILD_SHA") or None,
        "build_timestamp": os.getenv("BUILD_TIMESTAMP") or None,
        "image_tag": os.getenv("IMAGE_TAG") or None,
        "service_name": SERVICE_NAME,
        "version": os.getenv("VERSION", "unknown"),
    }
