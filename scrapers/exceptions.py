"""Exceptions du scraper Anichin."""

from typing import Optional


class ScraperError(Exception):
    """Erreur de base du scraper."""
    pass


class FetchError(ScraperError):
    """Echec réseau (DNS, connexion, timeout) après épuisement des tentatives."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        detail = (str(cause) or type(cause).__name__) if cause else "unknown network error"
        super().__init__(detail)


class HTTPStatusError(ScraperError):
    """Réponse HTTP en erreur (4xx immédiatement, 5xx après les tentatives)."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP {status_code} for {url}")


class InvalidInputError(ScraperError):
    """Paramètre fourni par l'appelant invalide (jour inconnu, page < 1...)."""
    pass
