"""Erreurs métier renvoyées au client avec un code HTTP et un message lisible."""


class WatchlistError(Exception):
    status_code = 500
    message = 'Erreur interne.'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidInput(WatchlistError):
    status_code = 400
    message = 'Requête invalide.'


class UnsupportedLink(WatchlistError):
    status_code = 400
    message = 'IMDb est le seul service supporté actuellement.'


class Unauthorized(WatchlistError):
    status_code = 401
    message = 'Erreur lors de la modification du film.'


class NotFound(WatchlistError):
    status_code = 404
    message = 'Film introuvable.'


class StorageUnavailable(WatchlistError):
    status_code = 500
    message = 'Erreur lors de la lecture des films.'


class StorageWriteFailed(WatchlistError):
    status_code = 500
    message = "Erreur lors de l'enregistrement des films."


class QuotaExceeded(WatchlistError):
    status_code = 429

    def __init__(self, count, limit):
        self.count = count
        self.limit = limit
        super().__init__(
            f"Liste2FilmsAI n'est plus disponible aujourd'hui ({count}/{limit} requêtes), "
            "veuillez réessayer demain."
        )


class AssistantUnavailable(WatchlistError):
    status_code = 500
    message = "Liste2FilmsAI n'est pas disponible pour le moment."
