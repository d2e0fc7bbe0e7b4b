import logging
from typing import Optional, Tuple

import requests

from app.config import settings

logger = logging.getLogger(__name__)


class Geocoder:
    """Best-effort address lookup through OpenStreetMap Nominatim.

    lookup() never raises: any failure is logged and reported as None, so a
    receipt analysis never fails because of geocoding.
    """

    def __init__(self, session: Optional[requests.Session] = None, url: str = None,
                 user_agent: str = None, timeout: float = 5.0):
        self.url = url or settings.geocoding_url
        self.timeout = timeout
        self.s = session or requests.Session()
        self.s.headers.update({
            "User-Agent": user_agent or settings.geocoding_user_agent,
            "Accept": "application/json",
        })

    def lookup(self, address: Optional[str]) -> Optional[Tuple[float, float]]:
        if not address or not address.strip():
            return None
        try:
            r = self.s.get(
                self.url,
                params={"q": address.strip(), "format": "json", "limit": 1},
                timeout=self.timeout,
            )
            r.raise_for_status()
            results = r.json()
            if not results:
                logger.info("No geocoding match for %r", address)
                return None
            return float(results[0]["lat"]), float(results[0]["lon"])
        except Exception as e:
            logger.warning("Geocoding failed for %r: %s", address, e)
            return None
