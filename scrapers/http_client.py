"""
Client HTTP du scraper
Limitation de débit, rotation des User-Agents, nouvelles tentatives et proxy
"""

import asyncio
import random
import time
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

import httpx
import structlog

from config import ScraperConfig
from .exceptions import FetchError, HTTPStatusError

logger = structlog.get_logger(__name__)

QueryParams = Union[Mapping[str, Any], Sequence[Tuple[str, Any]], None]

class RateLimiter:
    """
    Délai minimal entre deux requêtes, mesuré depuis la fin de la précédente.

    Le verrou est tenu pendant toute la requête: des appels concurrents sont
    sérialisés dans le temps mais chacun reçoit sa propre réponse.
    """

    def __init__(self, min_interval: float):
        self.min_interval = min_interval
        self._lock = asyncio.Lock()
        self._last_request_end: Optional[float] = None

    async def __aenter__(self) -> "RateLimiter":
        await self._lock.acquire()
        try:
            if self._last_request_end is not None:
                elapsed = time.monotonic() - self._last_request_end
                if elapsed < self.min_interval:
                    await asyncio.sleep(self.min_interval - elapsed)
        except BaseException:
            self._lock.release()
            raise
        return self

    async def __aexit__(self, *exc_info) -> None:
        self._last_request_end = time.monotonic()
        self._lock.release()

class HttpClient:
    """Client GET asynchrone sur l'URL de base du site"""

    def __init__(self, config: Optional[ScraperConfig] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or ScraperConfig()
        self.rate_limiter = RateLimiter(self.config.request_delay)
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers=self.config.headers,
            proxy=self.config.proxy.url if self.config.proxy else None,
            transport=transport,
            follow_redirects=True,
            trust_env=False,
        )

    @property
    def user_agents(self) -> List[str]:
        return self.config.user_agents

    def pick_user_agent(self) -> str:
        """User-Agent imposé par la configuration, sinon tiré au hasard dans le pool"""
        if self.config.user_agent:
            return self.config.user_agent
        return random.choice(self.config.user_agents)

    def build_url(self, path: str, params: QueryParams = None) -> str:
        """URL absolue qui sera demandée pour ce chemin"""
        return str(self._client.build_request("GET", path, params=params).url)

    async def fetch(self, path: str, params: QueryParams = None) -> str:
        """
        Récupère le corps d'une page

        Args:
            path: Chemin relatif à l'URL de base
            params: Paramètres de la query string

        Returns:
            Le HTML de la page

        Raises:
            HTTPStatusError: statut 4xx (sans nouvelle tentative) ou 5xx persistant
            FetchError: erreur réseau persistante
        """
        last_error: Optional[Exception] = None

        for attempt in range(self.config.max_retries + 1):
            if attempt:
                delay = self.config.retry_delay * attempt
                logger.warning("request_retry", path=path, attempt=attempt, delay=delay, error=str(last_error))
                await asyncio.sleep(delay)

            try:
                async with self.rate_limiter:
                    started = time.monotonic()
                    response = await self._client.get(
                        path, params=params, headers={"User-Agent": self.pick_user_agent()}
                    )
            except httpx.TransportError as e:
                last_error = FetchError(path, e)
                continue

            if response.status_code >= 500:
                last_error = HTTPStatusError(response.status_code, str(response.url))
                continue
            if response.status_code >= 400:
                raise HTTPStatusError(response.status_code, str(response.url))

            logger.debug(
                "request_done",
                url=str(response.url),
                status=response.status_code,
                elapsed=round(time.monotonic() - started, 3),
            )
            return response.text

        logger.error("request_failed", path=path, attempts=self.config.max_retries + 1, error=str(last_error))
        raise last_error

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
