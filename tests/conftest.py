"""
Shared fixtures: the three-study worklist used across the suite.
"""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def scenario_rows():
    return [
        {"Date": "01/01/2024", "Time": "09:15 AM", "Mod.": "CT", "Status": "Final", "Report Signed By": "Dr. A"},
        {"Date": "01/01/2024", "Time": "09:45 AM", "Mod.": "MR", "Status": "Prelim", "Report Signed By": "Dr. B"},
        {"Date": "01/02/2024", "Time": "14:00", "Mod.": "CT", "Status": "Final", "Report Signed By": "Dr. A"},
    ]


@pytest.fixture
def mixed_rows(scenario_rows):
    """Scenario rows plus unsigned, unparseable and time-less rows."""
    return scenario_rows + [
        {"Date": "01/03/2024", "Time": "11:30 PM", "Mod.": "XR", "Status": "Final"},
        {"Date": "01/03/2024", "Time": "pending", "Mod.": "US", "Status": "Final", "Report Signed By": "Dr. C"},
        {"Date": "01/03/2024", "Mod.": "US", "Status": "Final", "Report Signed By": "Dr. C"},
        {"Date": "01/04/2024", "Time": "12:05 AM", "Mod.": "CT", "Status": "Prelim", "Report Signed By": "Dr. B"},
    ]
