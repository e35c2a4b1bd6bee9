"""
Public-holiday client for the Nager.Date API.
"""

import logging
from typing import Any, Dict, List, Sequence

import requests

from ..domain.exceptions import HolidayAPIError

logger = logging.getLogger(__name__)


class NagerHolidayClient:
    """
    Fetches public holidays from https://date.nager.at.

    Uses the /PublicHolidays/{year}/{countryCode} endpoint, once per year.
    """

    DEFAULT_BASE_URL = "https://date.nager.at/api/v3"

    def __init__(
        self,
        country_code: str = "HK",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ):
        """
        Initialize the holiday client.

        Args:
            country_code: ISO 3166-1 alpha-2 country code
            base_url: API root, without trailing slash
            timeout: Request timeout in seconds
        """
        self.country_code = country_code.upper()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def get_holidays(self, years: Sequence[int]) -> Dict[str, str]:
        """
        Get public holidays for several years, merged into one lookup.

        Args:
            years: Calendar years to fetch

        Returns:
            Dictionary mapping ISO date -> holiday name

        Raises:
            HolidayAPIError: If any request fails or returns malformed data
        """
        holidays: Dict[str, str] = {}
        for year in years:
            holidays.update(self._parse_holidays(self._fetch_year(year)))
        logger.debug("Loaded %d holiday(s) for %s %s", len(holidays), self.country_code, list(years))
        return holidays

    def _fetch_year(self, year: int) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/PublicHolidays/{year}/{self.country_code}"

        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise HolidayAPIError(f"Failed to fetch holidays for {year}: {e}") from e
        except ValueError as e:
            raise HolidayAPIError(f"Holiday response for {year} is not JSON: {e}") from e

        if not isinstance(data, list):
            raise HolidayAPIError(f"Unexpected holiday payload for {year}: {type(data).__name__}")
        return data

    @staticmethod
    def _parse_holidays(entries: List[Dict[str, Any]]) -> Dict[str, str]:
        """
        Parse the API response into a date -> name lookup.

        Response format:
        [
            {"date": "2024-12-25", "localName": "聖誕節", "name": "Christmas Day", ...}
        ]
        """
        holidays: Dict[str, str] = {}
        for entry in entries:
            try:
                holidays[entry["date"]] = entry.get("name") or entry["localName"]
            except (KeyError, TypeError) as e:
                logger.warning("Could not parse holiday entry %r: %s", entry, e)
        return holidays
