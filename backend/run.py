#!/usr/bin/env python3
# backend/run.py
"""
Development server for the catalog API.

Runs against the test database URL so local work never touches
production data.
"""
import os
import sys
from pathlib import Path

# Make beautycatalog importable without installing the package
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("IS_TESTING", "true")

import uvicorn

if __name__ == "__main__":
    print("Starting catalog API with the TEST database")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run(
        "beautycatalog.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info"
    )
