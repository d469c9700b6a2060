"""
Dictionary Client - Word definition lookup
==========================================

This module looks words up in a free dictionary web API
(https://dictionaryapi.dev) and flattens the returned entries into
display text. Lookups run on a dedicated I/O thread pool and never fail:
any transport or format problem yields the no-definition reply.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from core.exceptions import DefinitionLookupError
from core.logging import get_logger

logger = get_logger("services.dictionary")


MEANINGS_KEY = "meanings"
DEFINITIONS_KEY = "definitions"
DEFINITION_KEY = "definition"


class DictionaryClient:
    """
    Client for the dictionary API.

    Example:
        client = DictionaryClient()

        future = client.lookup("cake")
        print(future.result())
        # "\\nDefinition: A sweet dessert food..."

        client.close()
    """

    DEFAULT_API_BASE = "https://api.dictionaryapi.dev/api/v2/entries/en/"

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 10.0,
        definition_label: str = "Definition: ",
        no_definition_response: str = "Sorry, I could not find the definition for: ",
        max_workers: int = 4,
        http_client: Optional[httpx.Client] = None,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        """
        Initialize the dictionary client.

        Args:
            api_base: Base URL; the url-encoded word is appended to it
            timeout: Request timeout in seconds
            definition_label: Prefix of each definition line
            no_definition_response: Reply prefix when no definition is found
            max_workers: Size of the I/O thread pool
            http_client: HTTP client to use instead of a new one
            executor: Executor to run lookups on instead of a new pool
        """
        self.api_base = api_base
        self.definition_label = definition_label
        self.no_definition_response = no_definition_response

        self._client = http_client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._owns_client = http_client is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="dictionary-io"
        )

        logger.info("Initialized dictionary client", extra={"api_base": api_base})

    def lookup(self, word: str) -> Future:
        """
        Look a word up in the background.

        Args:
            word: Word to define

        Returns:
            Future completed with the definition text
        """
        return self._executor.submit(self.get_definition, word)

    def get_definition(self, word: str) -> str:
        """
        Look a word up, blocking the calling thread.

        Args:
            word: Word to define

        Returns:
            Definition text, or the no-definition reply
        """
        url = self.api_base + quote(word, safe="")

        try:
            response = self._client.get(url)
            return self.parse_definitions(response.json(), word)

        except httpx.HTTPError as e:
            logger.error(f"Error fetching definition for word {word!r}: {e}")
        except (ValueError, KeyError, TypeError, DefinitionLookupError) as e:
            logger.warning(f"Unusable definition response for word {word!r}: {e}")

        return self.no_definition_reply(word)

    def parse_definitions(self, payload: Any, word: str = "") -> str:
        """
        Flatten a dictionary API payload into definition text.

        Every ``definition`` of every meaning of every entry is emitted in
        document order, each on its own line behind the definition label.

        Args:
            payload: Decoded JSON response
            word: Word that was looked up

        Returns:
            Definition text

        Raises:
            DefinitionLookupError: If the payload is not a list of entries
                or holds no definition
            KeyError: If an entry or meaning lacks its nested list
        """
        if not isinstance(payload, list):
            raise DefinitionLookupError("Response is not a list of entries", word=word)

        lines: List[str] = []
        for entry in payload:
            for meaning in entry[MEANINGS_KEY]:
                for definition in meaning[DEFINITIONS_KEY]:
                    if DEFINITION_KEY in definition:
                        lines.append("\n" + self.definition_label + str(definition[DEFINITION_KEY]))

        if not lines:
            raise DefinitionLookupError("Response holds no definitions", word=word)

        return "".join(lines)

    def no_definition_reply(self, word: str) -> str:
        return self.no_definition_response + word

    def close(self) -> None:
        """
        Stop the I/O pool and close the HTTP client.

        Queued lookups are cancelled; running ones are abandoned.
        """
        self._executor.shutdown(wait=False, cancel_futures=True)
        if self._owns_client:
            self._client.close()
