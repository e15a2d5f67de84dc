"""Jinja2 rendering of the fixed XHTML/XML assets."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

ASSETS_DIR = Path(__file__).resolve().parent / "assets"


@lru_cache(maxsize=1)
def _template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(ASSETS_DIR)),
        autoescape=select_autoescape(
            enabled_extensions=("xml", "xhtml", "html"),
            default_for_string=False,
        ),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_template(template_name: str, **context: object) -> str:
    return _template_env().get_template(template_name).render(**context)
