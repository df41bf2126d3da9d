"""HTTP API for block frequency detection; the FastAPI app lives in freq_det.web.server."""
