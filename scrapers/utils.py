"""
Utilitaires pour le scraping
Slugs, URLs absolues et formatage des nombres / comptes à rebours
"""

import re
import base64
import binascii
from datetime import datetime
from typing import Optional
from urllib.parse import urljoin, urlparse

from config import DEFAULT_BASE_URL, MILLISECONDS_THRESHOLD

# Préfixes de chemin retirés pour obtenir le slug
SLUG_PREFIXES = ("/seri/", "/genres/", "/season/")
EPISODE_SUFFIX = re.compile(r"-episode-\d+-subtitle-indonesia.*$")
# Au-delà, un attribut numérique est considéré comme invalide
MAX_DIGITS = 20

def absolute_url(href: Optional[str], base_url: str = DEFAULT_BASE_URL) -> str:
    """Résout un lien relatif par rapport à l'URL de base ('' si absent)"""
    if not href:
        return ""
    try:
        return urljoin(base_url.rstrip('/') + '/', href.strip())
    except ValueError:
        return ""

def extract_slug(url: Optional[str], base_url: str = DEFAULT_BASE_URL) -> str:
    """
    Extrait l'identifiant canonique d'une URL du site

    /seri/<slug>/, /genres/<slug>/, /season/<slug>/ et
    /<slug>-episode-N-subtitle-indonesia/ donnent <slug>; sinon le dernier
    segment non vide du chemin. Une URL invalide donne ''.
    """
    if not url:
        return ""
    try:
        path = urlparse(urljoin(base_url.rstrip('/') + '/', url.strip())).path
    except ValueError:
        return ""

    for prefix in SLUG_PREFIXES:
        position = path.find(prefix)
        if position != -1:
            rest = [p for p in path[position + len(prefix):].split('/') if p]
            return rest[0] if rest else ""

    segments = [p for p in path.split('/') if p]
    if not segments:
        return ""
    last = segments[-1]
    if "-episode-" in last:
        return EPISODE_SUFFIX.sub("", last)
    return last

def format_episode_number(episode: int) -> str:
    """Complète avec un zéro les numéros inférieurs à 10 (5 -> '05')"""
    episode = int(episode)
    return f"0{episode}" if 0 <= episode < 10 else str(episode)

def extract_episode_number(text: Optional[str]) -> str:
    """Premier nombre trouvé dans un libellé ('Episode 12' -> '12')"""
    if not text:
        return ""
    match = re.search(r'\d+', text)
    return match.group(0) if match else ""

def parse_int(text: Optional[str], default: int = 0) -> int:
    """Entier en tête de chaîne, à la manière de parseInt"""
    match = re.match(r'\s*([+-]?\d+)', text or "")
    if not match or len(match.group(1).lstrip("+-")) > MAX_DIGITS:
        return default
    return int(match.group(1))

def parse_float(text: Optional[str], default: float = 0.0) -> float:
    match = re.match(r'\s*([+-]?\d+(?:\.\d+)?)', text or "")
    return float(match.group(1)) if match else default

def format_countdown(seconds_str: Optional[str]) -> str:
    """
    Convertit un nombre de secondes restantes en libellé lisible

    Returns:
        'Already released' si négatif, sinon '2d 3h 4m', '3h 4m' ou '4m';
        'Unknown' si l'entrée n'est pas numérique
    """
    if not seconds_str or not seconds_str.strip():
        return "Unknown"
    cleaned = re.sub(r'[^\d-]', '', seconds_str)
    match = re.match(r'-?\d+', cleaned)
    if not match or len(match.group(0).lstrip("-")) > MAX_DIGITS:
        return "Unknown"
    seconds = int(match.group(0))
    if seconds < 0:
        return "Already released"

    days, remainder = divmod(seconds, 24 * 3600)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60
    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"

def format_release_time(timestamp_str: Optional[str]) -> str:
    """Timestamp unix (secondes ou millisecondes) -> 'At HH:MM' en heure locale"""
    if not timestamp_str or not timestamp_str.strip():
        return "Unknown"
    cleaned = re.sub(r'[^\d]', '', timestamp_str)
    if not cleaned or len(cleaned) > MAX_DIGITS:
        return "Unknown"
    timestamp = int(cleaned)
    if timestamp > MILLISECONDS_THRESHOLD:
        timestamp //= 1000
    try:
        dt = datetime.fromtimestamp(timestamp)
    except (OverflowError, OSError, ValueError):
        return "Unknown"
    return f"At {dt:%H:%M}"

def decode_base64_url(encoded: str) -> str:
    """Décode une chaîne encodée en base64"""
    try:
        padding = 4 - len(encoded) % 4
        if padding != 4:
            encoded += '=' * padding
        return base64.b64decode(encoded).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return ""

def extract_iframe_src(html: str) -> str:
    """URL du premier attribut src="..." d'un fragment HTML"""
    match = re.search(r'src="([^"]+)"', html or "")
    return match.group(1) if match else ""

def extract_style_url(style: str) -> str:
    """background-image: url('...') -> ..."""
    match = re.search(r"url\(['\"]?(.*?)['\"]?\)", style or "")
    return match.group(1) if match else ""

def extract_width_percentage(style: str) -> int:
    """style="width:72%" -> 72"""
    match = re.search(r'width:\s*(\d{1,4})%', style or "")
    return int(match.group(1)) if match else 0
