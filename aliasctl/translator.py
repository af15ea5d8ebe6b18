"""Ask an AI provider to convert or suggest aliases"""

from dataclasses import dataclass
from typing import Optional, Protocol

from aliasctl.codec import parse
from aliasctl.dialects import DEFINITION_KEYWORDS, Dialect
from aliasctl.errors import AliasCtlError, TranslationError


class Capability(Protocol):
    """Anything that turns a prompt into a free-text answer"""

    def complete(self, prompt: str) -> str:
        ...


def conversion_prompt(command: str, source: Dialect, target: Dialect) -> str:
    return (
        f"Convert the following command from {source} shell to {target} shell. "
        f"Provide only the final command without explanation: {command}"
    )


def generation_prompt(command: str, dialect: Dialect) -> str:
    return f"""You are a shell alias creation expert for {dialect} shell.

Task: Create a concise, memorable alias for the following command:
{command}

Requirements:
- The alias name should be short but descriptive
- Follow standard naming conventions for {dialect} aliases
- The alias should be intuitive and easy to remember
- Don't abbreviate too aggressively, though initials like kgp for kubectl get pods are acceptable.
- Avoid using special characters or spaces in the alias
- Ensure the alias is unique and doesn't conflict with existing commands in the shell
- Consider common aliases in the {dialect} ecosystem

Response format:
Provide ONLY the complete alias definition in the correct syntax for {dialect} shell.
- For bash/zsh/ksh: alias name='command'
- For PowerShell: Set-Alias name command or function name {{ command }}
- For CMD: doskey name=command
- For fish: alias name 'command'

Do not include any explanations, preambles, or additional text."""


def extract_alias_definition(response: str) -> str:
    """First line that starts like a definition, else the whole trimmed text"""
    content = response.strip()
    for line in content.splitlines():
        line = line.strip()
        if line.startswith(DEFINITION_KEYWORDS):
            return line
    return content


def _ask(capability: Capability, prompt: str, context: str) -> str:
    try:
        response = capability.complete(prompt)
    except TranslationError as e:
        raise TranslationError(context, cause=e, hints=e.hints, provider=e.provider) from e
    except AliasCtlError:
        raise
    except Exception as e:
        raise TranslationError(context, cause=e) from e
    if not response or not response.strip():
        raise TranslationError(context, hints=["The AI provider returned an empty answer"])
    return extract_alias_definition(response)


def translate(command: str, source: Dialect, target: Dialect, capability: Capability) -> str:
    """Rewrite command from source syntax to target syntax"""
    if source == target:
        return command
    return _ask(
        capability,
        conversion_prompt(command, source, target),
        f"failed to convert alias from {source} to {target}",
    )


def generate(command: str, dialect: Dialect, capability: Capability) -> str:
    """Suggest an alias definition for command"""
    return _ask(
        capability,
        generation_prompt(command, dialect),
        f"failed to generate alias suggestion for {dialect} shell",
    )


@dataclass
class TranslationResult:
    command: Optional[str] = None
    error: Optional[TranslationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class TranslationRequest:
    """One alias command to rewrite from source to target syntax"""

    command: str
    source: Dialect
    target: Dialect

    def execute(self, capability: Capability) -> TranslationResult:
        try:
            return TranslationResult(command=translate(self.command, self.source, self.target, capability))
        except TranslationError as e:
            return TranslationResult(error=e)


def definition_command(text: str, dialect: Dialect) -> str:
    """Command part of an AI answer: parsed from a definition when possible"""
    definition = parse(text, dialect)
    if definition is not None:
        return definition[1]
    return text.strip()
