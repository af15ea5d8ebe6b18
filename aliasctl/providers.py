"""AI providers used for alias conversion and generation"""

from typing import Any, Dict, List, Optional

import requests

from aliasctl.errors import ConfigurationError, TranslationError

DEFAULT_TIMEOUT = 30

CONFIGURE_HINTS = [
    "aliasctl configure-ai ollama http://localhost:11434 llama3",
    "aliasctl configure-ai openai https://api.openai.com gpt-4o-mini --api-key YOUR_KEY",
    "aliasctl configure-ai anthropic https://api.anthropic.com claude-3-5-haiku-latest --api-key YOUR_KEY",
]

PROVIDER_HINTS = {
    "ollama": [
        "Make sure Ollama is running with 'ollama serve'",
        "Check that the model is downloaded with 'ollama list'",
        "Verify the endpoint URL (usually http://localhost:11434)",
    ],
    "openai": [
        "Verify your API key is correct and not expired",
        "Check your OpenAI account for quota issues",
        "Verify the endpoint URL (usually https://api.openai.com)",
    ],
    "anthropic": [
        "Verify your API key is correct and not expired",
        "Check your Anthropic account for quota issues",
        "Verify the endpoint URL (usually https://api.anthropic.com)",
    ],
}


def validate_endpoint(endpoint: str) -> None:
    if not endpoint.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"invalid endpoint URL '{endpoint}'",
            hints=["The endpoint must start with http:// or https://"],
        )


def _limit(text: str, size: int = 200) -> str:
    return text if len(text) <= size else text[:size] + "..."


class Provider:
    """Base class for HTTP chat/completion backends"""

    name = "provider"
    path = ""

    def __init__(self, endpoint: str, model: str, api_key: Optional[str] = None,
                 timeout: int = DEFAULT_TIMEOUT):
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.endpoint}{self.path}"

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def payload(self, prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        raise NotImplementedError

    def _error(self, message: str, cause: Optional[BaseException] = None) -> TranslationError:
        return TranslationError(message, cause=cause, hints=PROVIDER_HINTS.get(self.name, []),
                                provider=self.name)

    def check(self) -> None:
        validate_endpoint(self.endpoint)

    def complete(self, prompt: str) -> str:
        """Send prompt and return the provider's text answer"""
        self.check()
        try:
            response = requests.post(self.url, json=self.payload(prompt),
                                     headers=self.headers(), timeout=self.timeout)
        except requests.Timeout as e:
            raise self._error(f"{self.name} request to {self.endpoint} timed out", e)
        except requests.ConnectionError as e:
            raise self._error(f"failed to connect to {self.name} at {self.endpoint}", e)
        except requests.RequestException as e:
            raise self._error(f"{self.name} request failed", e)

        if response.status_code in (401, 403):
            raise self._error(f"{self.name} API authentication error: invalid API key")
        if response.status_code == 404 and "model" in response.text.lower():
            raise self._error(f"{self.name} model '{self.model}' not found")
        if response.status_code != 200:
            raise self._error(
                f"{self.name} API error (status {response.status_code}): {_limit(response.text)}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise self._error(f"invalid response from {self.name} API: {_limit(response.text)}", e)

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise self._error(f"{self.name} API error: {message}")

        text = self.extract_text(data) if isinstance(data, dict) else None
        if text is None:
            raise self._error(
                f"unexpected response format from {self.name}: {_limit(response.text)}"
            )
        return text

    def to_config(self) -> Dict[str, Any]:
        config = {"endpoint": self.endpoint, "model": self.model}
        if self.api_key:
            config["api_key"] = self.api_key
        return config


class OllamaProvider(Provider):
    name = "ollama"
    path = "/api/generate"

    def payload(self, prompt: str) -> Dict[str, Any]:
        return {"model": self.model, "prompt": prompt, "stream": False}

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        text = data.get("response")
        return text if isinstance(text, str) else None


class OpenAIProvider(Provider):
    name = "openai"
    path = "/v1/chat/completions"

    def check(self) -> None:
        super().check()
        if not self.api_key:
            raise ConfigurationError(
                "OpenAI API key is empty",
                hints=["Configure a key with 'aliasctl configure-ai openai ENDPOINT MODEL --api-key KEY'"],
            )

    def headers(self) -> Dict[str, str]:
        return {**super().headers(), "Authorization": f"Bearer {self.api_key}"}

    def payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": "You are a utility that converts and creates command line aliases "
                                              "for different shells. Respond only with the result, no explanation."},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.2,
        }

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) else None


class AnthropicProvider(Provider):
    name = "anthropic"
    path = "/v1/messages"
    api_version = "2023-06-01"

    def check(self) -> None:
        super().check()
        if not self.api_key:
            raise ConfigurationError(
                "Anthropic API key is empty",
                hints=["Configure a key with 'aliasctl configure-ai anthropic ENDPOINT MODEL --api-key KEY'"],
            )

    def headers(self) -> Dict[str, str]:
        return {**super().headers(), "x-api-key": self.api_key, "anthropic-version": self.api_version}

    def payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": 300,
            "temperature": 0.1,
        }

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        for block in data.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "text":
                return block.get("text")
        return None


PROVIDER_TYPES = {
    OllamaProvider.name: OllamaProvider,
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider,
}


def create_provider(kind: str, endpoint: str, model: str, api_key: Optional[str] = None) -> Provider:
    if kind not in PROVIDER_TYPES:
        raise ConfigurationError(
            f"unsupported AI provider '{kind}'",
            hints=[f"Supported providers: {', '.join(sorted(PROVIDER_TYPES))}"],
        )
    validate_endpoint(endpoint)
    return PROVIDER_TYPES[kind](endpoint, model, api_key=api_key)


class ProviderManager:
    """Registry of configured providers with a default"""

    def __init__(self):
        self.providers: Dict[str, Provider] = {}
        self.default: Optional[str] = None

    def add(self, provider: Provider, make_default: bool = False) -> None:
        self.providers[provider.name] = provider
        if make_default or self.default is None:
            self.set_default(provider.name)

    def set_default(self, name: str) -> None:
        if name not in self.providers:
            raise ConfigurationError(
                f"provider '{name}' not configured",
                hints=[f"Available providers: {', '.join(self.names()) or 'none'}"],
            )
        self.default = name

    def names(self) -> List[str]:
        return sorted(self.providers)

    def get(self, name: Optional[str] = None) -> Provider:
        """Named provider, or the default one when name is empty"""
        if not name:
            if self.default is None:
                raise ConfigurationError(
                    "no AI provider configured",
                    hints=["Configure one with:"] + CONFIGURE_HINTS,
                )
            return self.providers[self.default]
        if name in self.providers:
            return self.providers[name]
        if not self.providers:
            raise ConfigurationError(
                f"AI provider '{name}' not configured and no providers are available",
                hints=["Configure one with:"] + CONFIGURE_HINTS,
            )
        raise ConfigurationError(
            f"AI provider '{name}' not configured",
            hints=[f"Available providers: {', '.join(self.names())}",
                   "Choose one with the --provider option"],
        )

    @classmethod
    def from_config(cls, settings: Dict[str, Any], default: Optional[str] = None) -> "ProviderManager":
        manager = cls()
        for kind, values in (settings or {}).items():
            if kind not in PROVIDER_TYPES or not isinstance(values, dict):
                continue
            manager.add(PROVIDER_TYPES[kind](values.get("endpoint", ""), values.get("model", ""),
                                             api_key=values.get("api_key")))
        if default in manager.providers:
            manager.set_default(default)
        return manager

    def to_config(self) -> Dict[str, Any]:
        return {name: provider.to_config() for name, provider in self.providers.items()}
