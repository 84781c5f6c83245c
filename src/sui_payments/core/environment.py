"""
Where the ``SUI_PAYMENT_*`` settings come from.

Three layers are merged, lowest precedence first:

1. the process environment (or an explicit ``base`` mapping),
2. a dotenv file, which only fills keys the first layer lacks,
3. overrides given on the command line or in code.

A missing dotenv file is not an error; a node operator usually exports the
variables directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Mapping, MutableMapping, Optional, Tuple

__all__ = [
    "PaymentEnvironment",
    "build_environment",
    "load_env_file",
]

_QUOTES = ("'", '"')


def _dotenv_value(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    # Unquoted values may carry a trailing " # comment".
    if " #" in text:
        text = text.split(" #", 1)[0].rstrip()
    return text


def _dotenv_pairs(path: Path) -> Iterator[Tuple[str, str]]:
    if not path.is_file():
        return
    with path.open(encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if line.startswith("export "):
                line = line[7:].lstrip()
            key, sep, value = line.partition("=")
            key = key.strip()
            if not sep or not key or key.startswith("#"):
                continue
            yield key, _dotenv_value(value)


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """Copy dotenv entries into ``environ`` (default ``os.environ``) without clobbering."""
    target = os.environ if environ is None else environ
    for key, value in _dotenv_pairs(Path(path)):
        if key not in target:
            target[key] = value
    return dict(target)


@dataclass(frozen=True)
class PaymentEnvironment:
    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> PaymentEnvironment:
    """
    Resolve the layered settings. ``env_file=None`` skips the dotenv layer;
    an empty ``base`` is honoured and does not fall back to ``os.environ``.
    """
    variables = dict(os.environ) if base is None else dict(base)
    if env_file is not None:
        load_env_file(env_file, environ=variables)
    variables.update(overrides or {})
    return PaymentEnvironment(variables=variables)
