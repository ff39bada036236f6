import json

import pytest

from ai_gateway import AIGateway, DailyQuota
from app import create_app
from config import Settings
from errors import AssistantUnavailable
from movies_store import MovieStore, SharedSecretAuthorizer, init_store

PASSWORD = 'secret-test'


class FakeResolver:
    def __init__(self, title='Dune: Part Two'):
        self.title = title
        self.calls = []

    def resolve(self, url):
        self.calls.append(url)
        return self.title


class FakeClock:
    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        self.now += 1
        return self.now


class FakeAssistant:
    def __init__(self, reply='Essayez Arrival.'):
        self.reply = reply
        self.fail = False
        self.prompts = []

    def ask(self, prompt):
        self.prompts.append(prompt)
        if self.fail:
            raise AssistantUnavailable()
        return self.reply


@pytest.fixture
def movies_file(tmp_path):
    path = tmp_path / 'movies.json'
    init_store(str(path))
    return path


@pytest.fixture
def read_movies(movies_file):
    def _read():
        return json.loads(movies_file.read_text(encoding='utf-8'))
    return _read


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(movies_file, resolver, clock):
    return MovieStore(
        str(movies_file),
        title_resolver=resolver,
        authorizer=SharedSecretAuthorizer(PASSWORD),
        clock=clock,
    )


@pytest.fixture
def assistant():
    return FakeAssistant()


@pytest.fixture
def gateway(assistant):
    return AIGateway(assistant, DailyQuota(3), max_prompt_length=128)


@pytest.fixture
def client(movies_file, store, gateway):
    settings = Settings(movies_file=str(movies_file), edit_password=PASSWORD, ai_daily_limit=3)
    app = create_app(settings, store=store, gateway=gateway)
    app.config['TESTING'] = True
    return app.test_client()
