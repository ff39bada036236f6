import logging
import threading

from openai import OpenAI, OpenAIError

from errors import AssistantUnavailable, InvalidInput, QuotaExceeded

logger = logging.getLogger(__name__)


def prompt_length(prompt):
    """Longueur en unités UTF-16, comme la limite côté navigateur (maxlength)."""
    return len(prompt.encode('utf-16-le', 'surrogatepass')) // 2


class DailyQuota:
    """Compteur de requêtes AI, remis à zéro chaque nuit par le planificateur."""

    def __init__(self, limit):
        self.limit = limit
        self.count = 0
        self._lock = threading.Lock()

    @property
    def exhausted(self):
        return self.count >= self.limit

    def consume(self):
        with self._lock:
            self.count += 1
            return self.count

    def reset(self):
        with self._lock:
            self.count = 0
        logger.info("Le compteur de requêtes AI a été réinitialisé.")


class AssistantClient:
    """Client minimal pour l'assistant OpenAI (threads + runs)."""

    def __init__(self, api_key, assistant_id, client=None):
        self.api_key = api_key
        self.assistant_id = assistant_id
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                logger.error("OPENAI_APIKEY manquante, assistant désactivé.")
                raise AssistantUnavailable()
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def ask(self, prompt):
        client = self.client
        try:
            thread = client.beta.threads.create()
            client.beta.threads.messages.create(thread.id, role='user', content=prompt)
            run = client.beta.threads.runs.create_and_poll(
                thread_id=thread.id,
                assistant_id=self.assistant_id,
            )
            if run.status != 'completed':
                logger.error(f"Run de l'assistant terminé avec le statut {run.status}: {run.last_error}")
                raise AssistantUnavailable()
            messages = client.beta.threads.messages.list(thread_id=run.thread_id)
            return messages.data[0].content[0].text.value
        except OpenAIError as e:
            logger.error(f"Erreur lors de la demande à l'AI: {e}")
            raise AssistantUnavailable()
        except (IndexError, AttributeError) as e:
            logger.error(f"Réponse de l'assistant inexploitable: {e}")
            raise AssistantUnavailable()


class AIGateway:
    def __init__(self, assistant, quota, max_prompt_length=128):
        self.assistant = assistant
        self.quota = quota
        self.max_prompt_length = max_prompt_length

    def ask(self, prompt):
        if not isinstance(prompt, str) or not prompt:
            raise InvalidInput('Le message est requis.')
        if prompt_length(prompt) > self.max_prompt_length:
            raise InvalidInput('Le message est trop long.')
        if self.quota.exhausted:
            raise QuotaExceeded(self.quota.count, self.quota.limit)

        reply = self.assistant.ask(prompt)
        count = self.quota.consume()
        logger.info(f"Requête AI acceptée ({count}/{self.quota.limit}).")
        return reply
