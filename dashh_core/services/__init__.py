# =============================================================================
# dashh_core/services/__init__.py
# Service Layer for Dashh
# Separates business logic from UI presentation
# =============================================================================
"""
Service Layer for Dashh

Usage Example:
-------------
    from dashh_core.services import UploadPipeline, compute_stats
    from dashh_core.services.file_catalog import search_files, sort_files

    # Convert and store the files picked in st.file_uploader
    pipeline = UploadPipeline(max_upload_mb=settings.max_upload_mb)
    result = pipeline.run(uploaded_files, facade)
    if result.success:
        print(f"Stored {len(result.data)} file(s)")

    # Derived usage figures
    stats = compute_stats(files)
"""

from .base_service import BaseService, ServiceResult
from .encoding import encode_data_uri, decode_data_uri, parse_data_uri, guess_mime_type
from .stats_service import compute_stats, local_midnight
from .upload_pipeline import UploadPipeline, UploadItem, UploadStatus, SelectedFile

__all__ = [
    # Base
    "BaseService",
    "ServiceResult",
    # Encoding
    "encode_data_uri",
    "decode_data_uri",
    "parse_data_uri",
    "guess_mime_type",
    # Stats
    "compute_stats",
    "local_midnight",
    # Uploads
    "UploadPipeline",
    "UploadItem",
    "UploadStatus",
    "SelectedFile",
]
