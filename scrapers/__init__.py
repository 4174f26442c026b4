"""
Anichin Scraper Package
Donghua: accueil, planning, listes, fiches séries, épisodes et recherche avancée
"""

from .base_scraper import BaseScraper, ListingItem, RecommendationItem, Pagination, ScheduleEntry, SeriesDetail, EpisodeWatch, SeasonCard
from .anime_scrapers import AnichinScraper, AdvancedSearchFilter
from .exceptions import ScraperError, FetchError, HTTPStatusError, InvalidInputError
from .extractors import MarkupExtractor
from .http_client import HttpClient, RateLimiter
from .markup import NodeSet
from .response import ApiResponse, build_response, error_response, handle_error

__all__ = [
    'BaseScraper',
    'ListingItem',
    'RecommendationItem',
    'Pagination',
    'ScheduleEntry',
    'SeriesDetail',
    'EpisodeWatch',
    'SeasonCard',
    'AnichinScraper',
    'AdvancedSearchFilter',
    'ScraperError',
    'FetchError',
    'HTTPStatusError',
    'InvalidInputError',
    'MarkupExtractor',
    'HttpClient',
    'RateLimiter',
    'NodeSet',
    'ApiResponse',
    'build_response',
    'error_response',
    'handle_error',
]
