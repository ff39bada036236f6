import json
import logging
import os
import threading
import time

from errors import InvalidInput, NotFound, StorageUnavailable, StorageWriteFailed, UnsupportedLink, Unauthorized
from imdb_scraper import is_imdb_title_url, is_link

logger = logging.getLogger(__name__)


def now_ms():
    return int(time.time() * 1000)


def load_document(path):
    """Lit la liste des films. Retourne None si le fichier est illisible."""
    try:
        with open(path, encoding='utf-8') as f:
            movies = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Erreur lors de la lecture des films ({path}): {e}")
        return None
    if not isinstance(movies, list) or not all(isinstance(movie, dict) for movie in movies):
        logger.error(f"Le fichier {path} ne contient pas une liste de films.")
        return None
    logger.info("Les films ont été lus.")
    return movies


def save_document(path, movies):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(movies, f, indent=2, ensure_ascii=False)


def init_store(path):
    if os.path.exists(path):
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    save_document(path, [])
    logger.info(f"Fichier de films créé: {path}")


def parse_movie_id(raw_id):
    """Identifiant de film : entier, ou chaîne de chiffres ASCII uniquement."""
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        return raw_id
    if isinstance(raw_id, str) and raw_id.isascii() and raw_id.isdigit():
        return int(raw_id)
    raise NotFound()


def _is_expired(movie, now, retention_ms):
    """Film vu depuis plus de retention_ms ; sans date de fin valide, il est expiré."""
    if not movie.get('completed'):
        return False
    completed_at = movie.get('completedAt')
    if isinstance(completed_at, bool) or not isinstance(completed_at, (int, float)):
        return True
    return now - completed_at > retention_ms


class SharedSecretAuthorizer:
    """Autorise les modifications protégées par un mot de passe partagé."""

    def __init__(self, secret):
        self.secret = secret

    def is_authorized(self, supplied):
        return isinstance(supplied, str) and supplied == self.secret


class MovieStore:
    """Opérations sur la liste de films stockée dans un fichier JSON.

    Chaque opération relit le document entier, le modifie puis le réécrit.
    Le verrou sérialise ces cycles dans un même processus (requêtes et
    nettoyage planifié) ; plusieurs processus sur le même fichier restent
    exposés aux écritures perdues.
    """

    def __init__(self, path, title_resolver, authorizer, clock=now_ms):
        self.path = path
        self.title_resolver = title_resolver
        self.authorizer = authorizer
        self.clock = clock
        self._lock = threading.Lock()

    def _load(self):
        movies = load_document(self.path)
        if movies is None:
            raise StorageUnavailable()
        return movies

    def _save(self, movies, action):
        try:
            save_document(self.path, movies)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Erreur lors de {action} du film: {e}")
            raise StorageWriteFailed(f"Erreur lors de {action} du film.")

    @staticmethod
    def _index_of(movies, movie_id):
        for index, movie in enumerate(movies):
            if movie.get('id') == movie_id:
                return index
        raise NotFound()

    def list_movies(self):
        return self._load()

    def build_content(self, raw_input):
        if not isinstance(raw_input, str) or not raw_input.strip():
            raise InvalidInput(
                'Le nom ou le lien du film IMDb est requis '
                '(Format IMDb : https://[www.][m.]imdb.com/title/[identifiant]/).'
            )
        text = raw_input.strip()
        if is_imdb_title_url(text):
            title = self.title_resolver.resolve(text)
            return f'<a href="{text}" target="_blank">{title}</a>'
        if is_link(text):
            raise UnsupportedLink()
        return text

    def add_movie(self, raw_input):
        # Le scraping se fait hors verrou
        content = self.build_content(raw_input)
        with self._lock:
            movies = self._load()
            movie = {
                'id': self.clock(),
                'content': content,
                'completed': False,
            }
            movies.append(movie)
            self._save(movies, 'la création')
        logger.info(f"Film ajouté: {movie['id']}")
        return movies

    def toggle_movie(self, movie_id, password):
        if not self.authorizer.is_authorized(password):
            raise Unauthorized()
        with self._lock:
            movies = self._load()
            movie = movies[self._index_of(movies, parse_movie_id(movie_id))]
            movie['completed'] = not movie.get('completed', False)
            movie['inProgress'] = False
            # completedAt n'est pas effacé quand le film repasse à non vu
            if movie['completed']:
                movie['completedAt'] = self.clock()
            self._save(movies, 'la modification')
        return movies

    def delete_movie(self, movie_id):
        with self._lock:
            movies = self._load()
            del movies[self._index_of(movies, parse_movie_id(movie_id))]
            self._save(movies, 'la suppression')
        logger.info(f"Film supprimé: {movie_id}")
        return movies

    def sweep_completed(self, retention_ms, now=None):
        """Supprime les films vus depuis plus de retention_ms.

        Retourne le nombre de films supprimés, ou None si le fichier est illisible.
        """
        with self._lock:
            movies = load_document(self.path)
            if movies is None:
                logger.warning("Nettoyage des films ignoré: fichier illisible.")
                return None
            now = self.clock() if now is None else now
            kept = [movie for movie in movies if not _is_expired(movie, now, retention_ms)]
            save_document(self.path, kept)
        removed = len(movies) - len(kept)
        logger.info(f"Les films ont été nettoyés ({removed} supprimé(s)).")
        return removed
