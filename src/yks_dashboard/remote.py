"""Cached access to the dashboard API.

Reads are cached per resource key ("tasks", "moods/latest",
"calendar/2024-05-01") and concurrent reads of one key share a single
request. Writes go through a static mutation table; each successful write
invalidates the keys the table declares for it, so the next read of any of
those keys goes back to the server.
"""
import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass

import requests

from yks_dashboard.errors import ServerError, TransportError
from yks_dashboard.models import parse_records
from yks_dashboard.schema import validate_insert

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

TASK_KEYS = ("tasks", "calendar", "summary/daily")
QUESTION_LOG_KEYS = ("question-logs", "topics", "subjects/stats")
EXAM_KEYS = ("exam-results", "exam-subject-nets", "topics")


@dataclass(frozen=True)
class Mutation:
    method: str
    path: str
    invalidates: tuple
    entity: str | None = None  # insert schema checked before sending


MUTATIONS = {
    "create_task": Mutation("POST", "tasks", TASK_KEYS, entity="task"),
    "update_task": Mutation("PUT", "tasks/{id}", TASK_KEYS),
    "toggle_task": Mutation("PATCH", "tasks/{id}/toggle", TASK_KEYS),
    "delete_task": Mutation("DELETE", "tasks/{id}", TASK_KEYS),
    "create_mood": Mutation("POST", "moods", ("moods", "moods/latest", "summary/daily"), entity="mood"),
    "create_goal": Mutation("POST", "goals", ("goals",), entity="goal"),
    "update_goal": Mutation("PUT", "goals/{id}", ("goals",)),
    "delete_goal": Mutation("DELETE", "goals/{id}", ("goals",)),
    "create_question_log": Mutation("POST", "question-logs", QUESTION_LOG_KEYS, entity="question_log"),
    "update_question_log": Mutation("PUT", "question-logs/{id}", QUESTION_LOG_KEYS),
    "delete_question_log": Mutation("DELETE", "question-logs/{id}", QUESTION_LOG_KEYS),
    "clear_question_logs": Mutation("DELETE", "question-logs/all", QUESTION_LOG_KEYS),
    "create_exam_result": Mutation("POST", "exam-results", EXAM_KEYS, entity="exam_result"),
    "delete_exam_result": Mutation("DELETE", "exam-results/{id}", EXAM_KEYS),
    "clear_exam_results": Mutation("DELETE", "exam-results/all", EXAM_KEYS),
    "create_exam_subject_net": Mutation("POST", "exam-subject-nets", ("exam-subject-nets",), entity="exam_subject_net"),
    "update_exam_subject_net": Mutation("PUT", "exam-subject-nets/{id}", ("exam-subject-nets",)),
    "delete_exam_subject_net": Mutation("DELETE", "exam-subject-nets/{id}", ("exam-subject-nets",)),
    "create_flashcard": Mutation("POST", "flashcards", ("flashcards",), entity="flashcard"),
    "update_flashcard": Mutation("PUT", "flashcards/{id}", ("flashcards",)),
    "delete_flashcard": Mutation("DELETE", "flashcards/{id}", ("flashcards",)),
    "review_flashcard": Mutation("POST", "flashcards/{id}/review", ("flashcards",)),
}


def normalize_key(key: str) -> str:
    return key.strip("/")


def covers(parent: str, key: str) -> bool:
    """True when invalidating parent also invalidates key."""
    return key == parent or key.startswith(parent + "/") or key.startswith(parent + "?")


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text


class RemoteStore:
    """Thread-safe read cache and write channel for the dashboard API."""

    def __init__(self, base_url: str, session=None, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self._lock = threading.Lock()
        self._cache: dict[str, object] = {}
        self._inflight: dict[str, tuple[int, Future]] = {}
        self._generations: dict[str, int] = {}
        self._mutating: dict[str, int] = {}

    def _request(self, method: str, path: str, payload=None):
        url = f"{self.base_url}/api/{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url}: {e}") from e
        if not response.ok:
            message = _error_message(response)
            logger.warning("%s %s returned %s: %s", method, url, response.status_code, message)
            raise ServerError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning("%s %s returned a body that is not JSON", method, url)
            raise ServerError(response.status_code, "invalid JSON body") from e

    def fetch(self, key: str):
        """Return the record set for key, reading from the server only when not cached."""
        key = normalize_key(key)
        with self._lock:
            if key in self._cache:
                logger.debug("Cache hit %s", key)
                return self._cache[key]
            generation = self._generations.get(key, 0)
            pending = self._inflight.get(key)
            if pending is not None and pending[0] == generation:
                future, owner = pending[1], False
            else:
                future, owner = Future(), True
                self._inflight[key] = (generation, future)
        if not owner:
            logger.debug("Joining in-flight read of %s", key)
            return future.result()

        logger.debug("Cache miss %s", key)
        try:
            data = self._request("GET", key)
        except Exception as e:
            self._finish(key, future)
            future.set_exception(e)
            raise
        except BaseException:
            # joiners get a transport error, the interrupt stays with this thread
            self._finish(key, future)
            future.set_exception(TransportError(f"read of {key} interrupted"))
            raise
        with self._lock:
            # an invalidation while the read was in flight makes the result stale
            if self._generations.get(key, 0) == generation:
                self._cache[key] = data
        self._finish(key, future)
        future.set_result(data)
        return data

    def _finish(self, key: str, future: Future) -> None:
        with self._lock:
            pending = self._inflight.get(key)
            if pending is not None and pending[1] is future:
                del self._inflight[key]

    def fetch_records(self, key: str, cls) -> list:
        return parse_records(cls, self.fetch(key))

    def invalidate(self, *keys: str) -> None:
        """Mark keys, and every key below them, stale."""
        parents = [normalize_key(k) for k in keys]
        with self._lock:
            known = set(self._cache) | set(self._inflight) | set(self._generations) | set(parents)
            for key in known:
                if any(covers(parent, key) for parent in parents):
                    self._cache.pop(key, None)
                    self._generations[key] = self._generations.get(key, 0) + 1
        logger.debug("Invalidated %s", ", ".join(parents))

    def is_mutating(self, kind: str) -> bool:
        with self._lock:
            return self._mutating.get(kind, 0) > 0

    def mutate(self, kind: str, payload=None, invalidate=(), **path_params):
        """Send a write and invalidate its declared keys once it succeeds.

        On failure the cache is left as it was and the error propagates.
        """
        mutation = MUTATIONS.get(kind)
        if mutation is None:
            raise ValueError(f"Unknown mutation: {kind}")
        if mutation.entity is not None:
            payload = validate_insert(mutation.entity, payload if payload is not None else {})
        try:
            path = mutation.path.format(**path_params)
        except KeyError as e:
            raise ValueError(f"{kind} needs path parameter {e}") from e

        with self._lock:
            self._mutating[kind] = self._mutating.get(kind, 0) + 1
        try:
            result = self._request(mutation.method, path, payload)
        finally:
            with self._lock:
                self._mutating[kind] -= 1
        self.invalidate(*mutation.invalidates, *invalidate)
        return result
