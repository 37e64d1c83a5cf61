import logging
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from typing import Any, Optional
import certifi  # Provides Mozilla's CA bundle for SSL certificate verification
import urllib3

from showsnap.settings import get_settings, TMDBSettings

logger = logging.getLogger(__name__)


class TMDBNotConfiguredError(RuntimeError):
    """Raised when neither a TMDB api key nor a read access token is set."""


class TMDB_APIClient:
    def __init__(self,
                tmdb: Optional[TMDBSettings] = None,
                total_retries: Optional[int] = None,
                backoff_factor: Optional[float] = None,
                status_forcelist: tuple = (429, 500, 502, 503, 504)):
        """
        Initializes a requests.Session with:
            - api_key query param or Authorization header
            - JSON accept header
            - HTTPAdapter for retries on connection errors and specified HTTP status codes
        """
        cfg = get_settings()
        self.tmdb: TMDBSettings = tmdb or cfg.tmdb
        if not self.tmdb.is_configured:
            raise TMDBNotConfiguredError("TMDB API key not configured")

        if cfg.verify_ssl:
            self.verify = certifi.where()
        else:
            self.verify = False
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        self.timeout = self.tmdb.timeout
        self.session = requests.Session()

        total = self.tmdb.max_retries if total_retries is None else total_retries
        backoff = self.tmdb.backoff_factor if backoff_factor is None else backoff_factor

        # Configure retries
        retry_strategy = Retry(
            total=total,
            connect=total,
            read=total,
            backoff_factor=backoff,
            status_forcelist=status_forcelist,
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        # Default headers
        self.session.headers.update({"Accept": "application/json"})
        if self.tmdb.read_access_token is not None:
            self.session.headers["Authorization"] = f"Bearer {self.tmdb.read_access_token.get_secret_value()}"
        if self.tmdb.api_key is not None:
            self.session.params = {"api_key": self.tmdb.api_key.get_secret_value()}

    def _handle_response(self, resp: requests.Response) -> Any:
        """
            Handle API response with proper error checking and JSON parsing.

            Args:
                resp: HTTP response object

            Returns:
                Parsed JSON data

            Raises:
                requests.HTTPError: For 4xx/5xx HTTP status codes
                ValueError: If response is not valid JSON
            """
        try:
            resp.raise_for_status()

            if not resp.content:
                logger.warning(f"Empty response received for {resp.url}")
                return {}

            return resp.json()

        except requests.HTTPError:
            # 404s are an expected outcome for unknown ids, callers decide what to do with them
            log = logger.info if resp.status_code == 404 else logger.error
            log(f"HTTP {resp.status_code} error for {resp.url}: {resp.text[:200]}")
            raise

        except ValueError as e:
            logger.error(f"Invalid JSON response from {resp.url}: {resp.text[:200]}...")
            raise ValueError(f"Invalid JSON response: {e}")

    def get(self, path: str, params=None) -> Any:
        """
        Perform a GET request to the TMDb API, returning parsed JSON.

        Connection errors and 429/5xx answers are retried by the mounted adapter
        with exponential backoff before anything is raised.
        """
        api_base_url: str = str(self.tmdb.api_base_url)
        url = f"{api_base_url.rstrip('/')}/{path.lstrip('/')}"
        resp = self.session.get(url, params=params, timeout=self.timeout, verify=self.verify)
        return self._handle_response(resp)

    def image_url(self, size: str, path: Optional[str]) -> str:
        """Build a full image url from a TMDB file path, empty string when there is none."""
        if not path:
            return ""
        return f"{self.tmdb.image_base_url.rstrip('/')}/{size}{path}"

    def close(self) -> None:
        self.session.close()
