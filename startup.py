#!/usr/bin/env python3
"""Run the ohmage server with uvicorn, bound to HOST and PORT."""
import os
import sys

def main():
    port = int(os.environ.get("PORT", "8000"))
    host = os.environ.get("HOST", "0.0.0.0")
    
    import uvicorn
    
    # Allow running from a checkout without installing the package
    current_dir = os.path.dirname(os.path.abspath(__file__))
    if current_dir not in sys.path:
        sys.path.insert(0, current_dir)
    
    from ohmage.config import settings
    from ohmage.main import app as fastapi_app
    print(f"Starting ohmage server on {host}:{port}")
    uvicorn.run(fastapi_app, host=host, port=port, log_level=settings.LOG_LEVEL.lower())

if __name__ == "__main__":
    main()
