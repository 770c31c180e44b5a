"""HTTP host boundary: FastAPI app, request/response models, and session lock."""
