"""Package registry download client"""

import logging
import time
from typing import Callable, Optional

import requests

from ..api.exceptions import RegistryNotFound, RegistryUnavailable
from ..models.config import RegistryConfig, RetryConfig

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class RegistryClient:
    """Downloads published package archives

    Downloads are retried sequentially with exponential backoff: right
    after an upload the registry may still answer 404 or 5xx while the new
    version propagates.
    """

    def __init__(self,
                 config: Optional[RegistryConfig] = None,
                 retry: Optional[RetryConfig] = None,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config or RegistryConfig()
        self.retry = retry or RetryConfig()
        self.session = session or requests.Session()
        self.sleep = sleep
        self.logger = logging.getLogger(self.__class__.__name__)

    def download(self, name: str, version: str) -> bytes:
        """
        Download the archive of a published version

        Args:
            name: Package name
            version: Package version

        Returns:
            Raw archive bytes

        Raises:
            RegistryUnavailable: If retries are exhausted or the registry
                refuses the request
        """
        url = self.config.download_url(name, version)
        attempts = self.retry.max_attempts
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                return self._fetch(url, name, version)
            except (RegistryNotFound,
                    requests.exceptions.ConnectionError,
                    requests.exceptions.Timeout) as e:
                last_error = e
            except requests.exceptions.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                if status not in RETRYABLE_STATUS:
                    raise RegistryUnavailable(
                        f"Registry refused download of {name} {version}: {e}",
                        attempts=attempt
                    ) from e
                last_error = e
            except requests.exceptions.RequestException as e:
                raise RegistryUnavailable(
                    f"Failed to fetch {name} {version} from {url}: {e}",
                    attempts=attempt
                ) from e

            if attempt < attempts:
                delay = self.retry.get_retry_delay(attempt)
                self.logger.warning(
                    f"Download attempt {attempt}/{attempts} failed ({last_error}), "
                    f"retrying in {delay:.1f}s"
                )
                self.sleep(delay)

        raise RegistryUnavailable(
            f"Failed to fetch {name} {version} after {attempts} attempt(s): {last_error}",
            attempts=attempts
        )

    def _fetch(self, url: str, name: str, version: str) -> bytes:
        self.logger.debug(f"GET {url}")
        response = self.session.get(
            url,
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.timeout
        )
        if response.status_code == 404:
            raise RegistryNotFound(name, version)
        response.raise_for_status()
        return response.content
