#!/usr/bin/env python3
"""
Run a RadAnalytics report over a worklist file.

Usage:
  python scripts/run_report.py --input worklist.csv --export xlsx,pdf --visual

Outputs to outputs/ directory.
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from rad_analytics.report import main

if __name__ == "__main__":
    sys.exit(main())
