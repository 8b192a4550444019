import logging
from decimal import Decimal, InvalidOperation

import requests

from apps.exchange.domain.interfaces import BaseRateSource

logger = logging.getLogger(__name__)

# Upper bound on the TCP connect phase; the rest of the budget goes to reading.
CONNECT_TIMEOUT_SECONDS = 3.05


class ExchangeRateApiSource(BaseRateSource):
    """
    ExchangeRate API source.
    Uses the /pair endpoint to fetch the current rate for one currency pair.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    @property
    def request_timeout(self) -> tuple:
        """
        (connect, read) timeouts for requests.
        The read timeout bounds each wait on the socket, not the whole body,
        so a peer trickling bytes can keep the call open longer than this.
        """
        connect = min(CONNECT_TIMEOUT_SECONDS, self.timeout)
        return connect, self.timeout

    def fetch_pair_rate(
        self,
        base_currency: str,
        target_currency: str
    ) -> Decimal | None:
        """
        Fetch the current exchange rate from ExchangeRate API.

        Args:
            base_currency: Base currency code (e.g. USD)
            target_currency: Target currency code (e.g. MXN)

        Returns:
            Exchange rate as Decimal, or None if error occurs
        """
        # Format: https://v6.exchangerate-api.com/v6/YOUR-API-KEY/pair/USD/MXN
        url = f"{self.base_url}/{self.api_key}/pair/{base_currency}/{target_currency}"

        try:
            response = requests.get(url, timeout=self.request_timeout)
            response.raise_for_status()
            data = response.json()

            # Response format: {"result": "success", "conversion_rate": 17.15}
            if not isinstance(data, dict):
                logger.warning(
                    "Unexpected ExchangeRate API payload for %s/%s: %s",
                    base_currency, target_currency, type(data).__name__,
                )
                return None

            if data.get("result") != "success":
                logger.warning(
                    "ExchangeRate API refused %s/%s: %s",
                    base_currency, target_currency, data.get("error-type", "API error"),
                )
                return None

            rate = Decimal(str(data["conversion_rate"]))
            if not rate.is_finite() or rate <= 0:
                logger.warning("ExchangeRate API returned unusable rate %s", rate)
                return None
            return rate

        except requests.exceptions.Timeout:
            logger.warning("Timeout calling ExchangeRate API for %s/%s", base_currency, target_currency)
            return None
        except requests.exceptions.RequestException as e:
            logger.warning("Error calling ExchangeRate API for %s/%s: %s", base_currency, target_currency, e)
            return None
        except (KeyError, ValueError, InvalidOperation) as e:
            logger.warning("Invalid response from ExchangeRate API: %s", e)
            return None
