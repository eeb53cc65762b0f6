#!/usr/bin/env python
"""
Storefront checkout management entry point.
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

if __name__ == "__main__":
    # ===============================================================================
    # LOAD ENVIRONMENT VARIABLES FROM .env FILE 🔐
    # ===============================================================================
    env_path = Path(__file__).resolve().parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        print(f"✅ [Environment] Loaded {env_path.name} (Midtrans keys, database, redis)")

    # Local development defaults to dev settings; deployments set DJANGO_SETTINGS_MODULE
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Django is not importable. Install the project with `pip install -e .[test]` "
            "inside an activated virtual environment."
        ) from exc

    execute_from_command_line(sys.argv)
