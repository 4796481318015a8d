"""Test configuration: settings are read at import time, so fill them in first."""

import os
import sys
from pathlib import Path


def ensure_root_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    if str(root) not in sys.path:
        sys.path.append(str(root))


ensure_root_on_path()

os.environ.setdefault("SHOPIFY_STORE_URL", "test-store.myshopify.com")
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "shpat_test")
os.environ.setdefault("SHOPIFY_WEBHOOK_SECRET", "test-webhook-secret")
os.environ.setdefault("ENABLE_SCHEDULER", "false")
