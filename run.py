#!/usr/bin/env python3
"""
Antimatter Simulation Entry Point

Starts the FastAPI server hosting one antimatter simulation.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from antimatter_core.api import run_server
from antimatter_core.config import get_config


if __name__ == "__main__":
    settings = get_config()
    print("Starting Antimatter Simulation...")
    print(f"API available at: http://localhost:{settings.api_port}")
    print(f"Documentation at: http://localhost:{settings.api_port}/docs")
    print()

    try:
        run_server(
            host=settings.api_host,
            port=settings.api_port,
            debug=False  # Set to True for development
        )
    except KeyboardInterrupt:
        print("\nShutting down Antimatter Simulation...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
