"""Prompt template loader.

Loads oracle prompt templates from prompts/templates/ and renders them
with string.Template ($var syntax).

JSON braces in templates are preserved as-is; only $variable
placeholders are substituted.
"""

from functools import lru_cache
from pathlib import Path
from string import Template

_TEMPLATES_DIR = Path(__file__).parent / "templates"


@lru_cache(maxsize=32)
def _load_raw(name: str) -> str:
    """Load raw template text from file. Cached for performance."""
    path = _TEMPLATES_DIR / f"{name}.txt"
    if not path.exists():
        raise FileNotFoundError(f"Prompt template not found: {path}")
    return path.read_text(encoding="utf-8")


def render(name: str, **kwargs: str) -> str:
    """Load a prompt template and render it with the given variables.

    Auto-injects $analyst_role from analyst.txt if the template uses it
    and the caller didn't provide an explicit value.

    Args:
        name: Template filename without extension (e.g. "relevance")
        **kwargs: Template variables to substitute

    Returns:
        Rendered prompt string

    Raises:
        FileNotFoundError: If template file doesn't exist
        KeyError: If a required placeholder has no value provided
    """
    template_text = _load_raw(name)

    if "$analyst_role" in template_text and "analyst_role" not in kwargs:
        kwargs["analyst_role"] = _load_raw("analyst").strip()

    return Template(template_text).substitute(**kwargs)
