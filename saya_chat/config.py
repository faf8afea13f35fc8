"""
Configuration for the chat application.

Values come from defaults, then environment variables, then explicit
overrides (typically command line arguments).
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Template
from pydantic import BaseModel, Field, ValidationError, field_validator

from .core.errors import ConfigError
from .core.passcode_gate import DIGITS

TEMPLATE_DIR = Path(__file__).parent / "templates"

ENV_VARS = {
    "passcode": "SAYA_PASSCODE",
    "model": "LITELLM_MODEL",
    "temperature": "SAYA_TEMPERATURE",
    "error_delay": "SAYA_ERROR_DELAY",
    "web_search": "SAYA_WEB_SEARCH",
}


class ChatConfig(BaseModel):
    """Validated settings for one chat application instance."""

    passcode: str = "0001"
    model: str = "gemini/gemini-2.5-flash"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    assistant_name: str = "Saya"
    creator: str = "David sun"
    welcome_message: Optional[str] = None
    failure_message: str = "Sorry, I encountered an error. Please try again."
    error_delay: float = Field(default=0.8, ge=0.0)
    web_search: bool = True

    @field_validator("passcode")
    @classmethod
    def _passcode_digits(cls, value: str) -> str:
        if not value or not all(c in DIGITS for c in value):
            raise ValueError("passcode must be a non-empty string of digits")
        return value

    @property
    def welcome(self) -> str:
        if self.welcome_message:
            return self.welcome_message
        return f"Hello, I am {self.assistant_name}. How can I assist you with your studies today?"

    def render_system_instruction(self) -> str:
        """Render the persona instruction from its Jinja template."""
        return load_template("system_instruction.jinja").render(
            assistant_name=self.assistant_name,
            creator=self.creator
        ).strip()


def load_template(name: str) -> Template:
    """Load a Jinja template from the package templates directory."""
    template_path = TEMPLATE_DIR / name
    with open(template_path, 'r') as f:
        template_content = f.read()
    return Template(template_content)


def load_config(environ: Dict[str, str] = None, **overrides: Any) -> ChatConfig:
    """
    Build a ChatConfig from the environment and explicit overrides.

    Args:
        environ: Mapping to read variables from (defaults to os.environ)
        **overrides: Field values that take precedence; None values are ignored

    Returns:
        Validated configuration

    Raises:
        ConfigError: If any value fails validation
    """
    environ = os.environ if environ is None else environ

    values: Dict[str, Any] = {}
    for field, var in ENV_VARS.items():
        if environ.get(var):
            values[field] = environ[var]
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ChatConfig(**values)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
