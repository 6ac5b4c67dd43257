"""
Main application entry point for Clinic Inbox.
"""

import uvicorn
from .api.app import create_app

# Create the FastAPI application
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "clinic_inbox.main:app",
        host="0.0.0.0",
        port=8001,
    )
