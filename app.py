import logging
import os

from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS

from ai_gateway import AIGateway, AssistantClient, DailyQuota
from config import Settings
from errors import WatchlistError
from imdb_scraper import ImdbTitleResolver
from movies_store import MovieStore, SharedSecretAuthorizer, init_store
from scheduler import build_scheduler

logger = logging.getLogger(__name__)

PUBLIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'public')


def _json_body():
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def create_app(settings=None, store=None, gateway=None):
    settings = settings or Settings.from_env()

    if store is None:
        init_store(settings.movies_file)
        store = MovieStore(
            settings.movies_file,
            title_resolver=ImdbTitleResolver(timeout=settings.imdb_timeout_seconds),
            authorizer=SharedSecretAuthorizer(settings.edit_password),
        )
    if gateway is None:
        gateway = AIGateway(
            AssistantClient(settings.openai_api_key, settings.openai_assistant_id),
            DailyQuota(settings.ai_daily_limit),
            max_prompt_length=settings.ai_max_prompt_length,
        )

    app = Flask(__name__, static_folder=None)
    CORS(app)
    app.config['SETTINGS'] = settings
    app.extensions['movie_store'] = store
    app.extensions['ai_gateway'] = gateway

    @app.errorhandler(WatchlistError)
    def handle_watchlist_error(error):
        return jsonify({'error': error.message}), error.status_code

    @app.route('/movies', methods=['GET'])
    def get_movies():
        return jsonify(store.list_movies())

    @app.route('/movies', methods=['POST'])
    def create_movie():
        movies = store.add_movie(_json_body().get('movie'))
        return jsonify(movies)

    @app.route('/movies/edit/toggle/<movie_id>', methods=['PATCH'])
    def toggle_movie(movie_id):
        password = _json_body().get('password')
        movies = store.toggle_movie(movie_id, password)
        return jsonify(movies)

    @app.route('/movies/<movie_id>', methods=['DELETE'])
    def delete_movie(movie_id):
        movies = store.delete_movie(movie_id)
        return jsonify(movies)

    @app.route('/ai', methods=['POST'])
    def ask_ai():
        reply = gateway.ask(_json_body().get('prompt'))
        return jsonify({'reply': reply})

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def home(path):
        """Fichiers de public/, sinon la page d'accueil."""
        if path and os.path.isfile(os.path.join(PUBLIC_DIR, path)):
            return send_from_directory(PUBLIC_DIR, path)
        return send_from_directory(PUBLIC_DIR, 'index.html')

    return app


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    app = create_app(settings)
    scheduler = build_scheduler(
        app.extensions['movie_store'],
        app.extensions['ai_gateway'].quota,
        settings,
    )
    scheduler.start()

    logger.info(f"Le serveur est démarré sur le port {settings.port}.")
    app.run(host=settings.host, port=settings.port)


if __name__ == '__main__':
    main()
