from unittest.mock import Mock, patch

import pytest
import requests

from aliasctl.errors import ConfigurationError, TranslationError
from aliasctl.providers import (
    AnthropicProvider,
    OllamaProvider,
    OpenAIProvider,
    ProviderManager,
    create_provider,
)


def make_response(status_code=200, data=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(data, Exception):
        response.json.side_effect = data
    else:
        response.json.return_value = data
    return response


@patch("aliasctl.providers.requests.post")
def test_ollama_complete(mock_post):
    mock_post.return_value = make_response(data={"response": "alias ll 'ls'", "done": True})
    provider = OllamaProvider("http://localhost:11434/", "llama3")

    assert provider.complete("convert ls") == "alias ll 'ls'"

    mock_post.assert_called_once_with(
        "http://localhost:11434/api/generate",
        json={"model": "llama3", "prompt": "convert ls", "stream": False},
        headers={"Content-Type": "application/json"},
        timeout=30,
    )


@patch("aliasctl.providers.requests.post")
def test_openai_complete(mock_post):
    mock_post.return_value = make_response(
        data={"choices": [{"message": {"role": "assistant", "content": "doskey ll=dir"}}]}
    )
    provider = OpenAIProvider("https://api.openai.com", "gpt-4o-mini", api_key="sk-test")

    assert provider.complete("convert ls") == "doskey ll=dir"

    args, kwargs = mock_post.call_args
    assert args == ("https://api.openai.com/v1/chat/completions",)
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"]["messages"][-1] == {"role": "user", "content": "convert ls"}


@patch("aliasctl.providers.requests.post")
def test_anthropic_complete(mock_post):
    mock_post.return_value = make_response(
        data={"content": [{"type": "text", "text": "Set-Alias ll Get-ChildItem"}]}
    )
    provider = AnthropicProvider("https://api.anthropic.com", "claude-3-5-haiku-latest", api_key="key")

    assert provider.complete("convert ls") == "Set-Alias ll Get-ChildItem"

    args, kwargs = mock_post.call_args
    assert args == ("https://api.anthropic.com/v1/messages",)
    assert kwargs["headers"]["x-api-key"] == "key"
    assert kwargs["headers"]["anthropic-version"] == "2023-06-01"


@pytest.mark.parametrize("provider_class", [OpenAIProvider, AnthropicProvider])
@patch("aliasctl.providers.requests.post")
def test_missing_api_key(mock_post, provider_class):
    provider = provider_class("https://example.com", "model")

    with pytest.raises(ConfigurationError):
        provider.complete("prompt")

    mock_post.assert_not_called()


@patch("aliasctl.providers.requests.post")
def test_connection_error(mock_post):
    mock_post.side_effect = requests.ConnectionError("refused")
    provider = OllamaProvider("http://localhost:11434", "llama3")

    with pytest.raises(TranslationError) as exc_info:
        provider.complete("prompt")

    error = exc_info.value
    assert error.message == "failed to connect to ollama at http://localhost:11434"
    assert error.provider == "ollama"
    assert "Make sure Ollama is running with 'ollama serve'" in error.hints


@patch("aliasctl.providers.requests.post")
def test_timeout(mock_post):
    mock_post.side_effect = requests.Timeout("slow")
    provider = OllamaProvider("http://localhost:11434", "llama3")

    with pytest.raises(TranslationError, match="timed out"):
        provider.complete("prompt")


@pytest.mark.parametrize("status_code", [401, 403])
@patch("aliasctl.providers.requests.post")
def test_auth_error(mock_post, status_code):
    mock_post.return_value = make_response(status_code=status_code, text="unauthorized")
    provider = OpenAIProvider("https://api.openai.com", "gpt-4o-mini", api_key="bad")

    with pytest.raises(TranslationError, match="authentication error"):
        provider.complete("prompt")


@patch("aliasctl.providers.requests.post")
def test_model_not_found(mock_post):
    mock_post.return_value = make_response(status_code=404, text='{"error":"model \'nope\' not found"}')
    provider = OllamaProvider("http://localhost:11434", "nope")

    with pytest.raises(TranslationError) as exc_info:
        provider.complete("prompt")

    assert exc_info.value.message == "ollama model 'nope' not found"


@patch("aliasctl.providers.requests.post")
def test_http_error(mock_post):
    mock_post.return_value = make_response(status_code=500, text="internal error")
    provider = OllamaProvider("http://localhost:11434", "llama3")

    with pytest.raises(TranslationError) as exc_info:
        provider.complete("prompt")

    assert exc_info.value.message == "ollama API error (status 500): internal error"


@patch("aliasctl.providers.requests.post")
def test_invalid_json(mock_post):
    mock_post.return_value = make_response(data=ValueError("no json"), text="<html>")
    provider = OllamaProvider("http://localhost:11434", "llama3")

    with pytest.raises(TranslationError, match="invalid response from ollama API"):
        provider.complete("prompt")


@patch("aliasctl.providers.requests.post")
def test_error_in_body(mock_post):
    mock_post.return_value = make_response(data={"error": {"message": "quota exceeded"}})
    provider = OpenAIProvider("https://api.openai.com", "gpt-4o-mini", api_key="sk")

    with pytest.raises(TranslationError) as exc_info:
        provider.complete("prompt")

    assert exc_info.value.message == "openai API error: quota exceeded"


@patch("aliasctl.providers.requests.post")
def test_missing_content(mock_post):
    mock_post.return_value = make_response(data={"choices": []}, text='{"choices": []}')
    provider = OpenAIProvider("https://api.openai.com", "gpt-4o-mini", api_key="sk")

    with pytest.raises(TranslationError, match="unexpected response format"):
        provider.complete("prompt")


def test_create_provider():
    provider = create_provider("ollama", "http://localhost:11434", "llama3")

    assert isinstance(provider, OllamaProvider)
    assert provider.to_config() == {"endpoint": "http://localhost:11434", "model": "llama3"}


def test_create_provider__invalid_endpoint():
    with pytest.raises(ConfigurationError, match="invalid endpoint URL"):
        create_provider("ollama", "localhost:11434", "llama3")


def test_create_provider__unknown_kind():
    with pytest.raises(ConfigurationError) as exc_info:
        create_provider("gemini", "https://example.com", "m")

    assert "Supported providers: anthropic, ollama, openai" in exc_info.value.hints


def test_manager__default_is_first_added():
    manager = ProviderManager()
    manager.add(OllamaProvider("http://localhost:11434", "llama3"))
    manager.add(OpenAIProvider("https://api.openai.com", "gpt", api_key="sk"))

    assert manager.get().name == "ollama"
    assert manager.get("openai").name == "openai"
    assert manager.names() == ["ollama", "openai"]


def test_manager__make_default_and_set_default():
    manager = ProviderManager()
    manager.add(OllamaProvider("http://localhost:11434", "llama3"))
    manager.add(OpenAIProvider("https://api.openai.com", "gpt", api_key="sk"), make_default=True)
    assert manager.default == "openai"

    manager.set_default("ollama")
    assert manager.default == "ollama"

    with pytest.raises(ConfigurationError):
        manager.set_default("anthropic")


def test_manager__nothing_configured():
    with pytest.raises(ConfigurationError) as exc_info:
        ProviderManager().get()

    assert exc_info.value.message == "no AI provider configured"
    assert any("configure-ai" in hint for hint in exc_info.value.hints)


def test_manager__unknown_name():
    manager = ProviderManager()
    manager.add(OllamaProvider("http://localhost:11434", "llama3"))

    with pytest.raises(ConfigurationError) as exc_info:
        manager.get("anthropic")

    assert "Available providers: ollama" in exc_info.value.hints


def test_manager__config_round_trip():
    settings = {
        "ollama": {"endpoint": "http://localhost:11434", "model": "llama3"},
        "anthropic": {"endpoint": "https://api.anthropic.com", "model": "claude", "api_key": "key"},
        "unknown": {"endpoint": "https://example.com", "model": "m"},
    }

    manager = ProviderManager.from_config(settings, default="anthropic")

    assert manager.names() == ["anthropic", "ollama"]
    assert manager.default == "anthropic"
    assert manager.get().api_key == "key"
    assert manager.to_config() == {
        "ollama": {"endpoint": "http://localhost:11434", "model": "llama3"},
        "anthropic": {"endpoint": "https://api.anthropic.com", "model": "claude", "api_key": "key"},
    }
