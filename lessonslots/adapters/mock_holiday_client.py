"""
Offline holiday client backed by a bundled JSON file.
"""

import json
from pathlib import Path
from typing import Dict, Optional, Sequence


class MockHolidayClient:
    """
    Serves holidays from mock_holidays.json instead of the public API.

    Useful for demos and tests without network access. The file uses the
    same record layout as the Nager.Date API.
    """

    def __init__(self, data_file: Optional[Path] = None):
        """
        Initialize the mock client.

        Args:
            data_file: Optional alternative JSON file
        """
        self.data_file = data_file or Path(__file__).parent / "mock_holidays.json"
        self._load_holiday_data()

    def _load_holiday_data(self):
        """Load holiday entries from the JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                self.holiday_entries = json.load(f)
        else:
            self.holiday_entries = []

    def get_holidays(self, years: Sequence[int]) -> Dict[str, str]:
        """
        Return holidays of the requested years.

        Args:
            years: Calendar years to include

        Returns:
            Dictionary mapping ISO date -> holiday name
        """
        wanted = {str(year) for year in years}
        return {
            entry["date"]: entry["name"]
            for entry in self.holiday_entries
            if entry.get("date", "")[:4] in wanted
        }
