import html
import logging
import re

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

IMDB_TITLE_PATTERN = re.compile(r'^https?://(?:www\.|m\.)?imdb\.com/title/(tt\d+)(/.*)?$')
LINK_PATTERN = re.compile(r'^https?://')
TITLE_TAG_PATTERN = re.compile(r'<title>(.*?)</title>')

SESSION_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                  '(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
}

UNKNOWN_TITLE_SUFFIX = ' (Titre IMDb inconnu)'


def is_imdb_title_url(text):
    return bool(IMDB_TITLE_PATTERN.match(text or ''))


def is_link(text):
    return bool(LINK_PATTERN.match(text or ''))


def placeholder_title(url):
    return f"{url}{UNKNOWN_TITLE_SUFFIX}"


def clean_imdb_title(raw_title):
    """Enlève le suffixe « - IMDb » et les espaces autour du titre."""
    return raw_title.replace('- IMDb', '', 1).strip()


def extract_title(page):
    """Extrait le titre d'une page IMDb.

    Regex d'abord (première balise <title> sur une ligne), puis BeautifulSoup
    pour les pages où la balise est coupée sur plusieurs lignes.
    """
    match = TITLE_TAG_PATTERN.search(page)
    if match and match.group(1):
        return clean_imdb_title(match.group(1)) or None

    soup = BeautifulSoup(page, 'html.parser')
    if soup.title and soup.title.string:
        title = clean_imdb_title(soup.title.string)
        return html.escape(title, quote=False) or None
    return None


class ImdbTitleResolver:
    """Récupère le titre d'un film à partir de son lien IMDb (best effort)."""

    def __init__(self, session=None, timeout=10):
        self.session = session or requests.Session()
        self.timeout = timeout

    def resolve(self, url):
        try:
            response = self.session.get(url, headers=SESSION_HEADERS, timeout=self.timeout)
            response.raise_for_status()
            title = extract_title(response.text)
        except requests.RequestException as e:
            logger.warning(f"Erreur IMDb pour {url}: {e}")
            return placeholder_title(url)
        except Exception as e:
            logger.warning(f"Page IMDb illisible pour {url}: {e}")
            return placeholder_title(url)

        if not title:
            logger.warning(f"Titre introuvable dans la page IMDb {url}")
            return placeholder_title(url)
        return title
