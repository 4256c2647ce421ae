"""Backup configuration parser.

The configuration language has exactly three directives, each followed
by a brace-delimited, whitespace-separated list of words::

    # comment
    include { /home/alice /etc/fstab }
    exclude { /home/alice/.cache }
    exclude-match { *.tar.gz "*/Trash bin/*" }

The text is parsed by a restricted grammar, never executed, so a
configuration file cannot run commands or touch anything beyond the
three directives. The whole file is parsed before any directive takes
effect: a syntax error anywhere leaves the resolver untouched.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from fossback.backupset.resolver import SetResolver
from fossback.errors import ConfigError

logger = logging.getLogger(__name__)

INCLUDE = "include"
EXCLUDE = "exclude"
EXCLUDE_MATCH = "exclude-match"

DIRECTIVES: tuple[str, ...] = (INCLUDE, EXCLUDE, EXCLUDE_MATCH)

_OPEN = "{"
_CLOSE = "}"


@dataclass(frozen=True, slots=True)
class Directive:
    """One parsed directive.

    Attributes:
        keyword: Directive name (include, exclude, exclude-match).
        arguments: Words listed inside the braces.
        line: Line number of the keyword (1-based).
    """

    keyword: str
    arguments: tuple[str, ...]
    line: int


@dataclass(frozen=True, slots=True)
class _Token:
    text: str
    line: int
    quoted: bool = False

    @property
    def is_open(self) -> bool:
        return not self.quoted and self.text == _OPEN

    @property
    def is_close(self) -> bool:
        return not self.quoted and self.text == _CLOSE


def _tokenize(text: str, origin: str) -> Iterator[_Token]:
    """Split configuration text into words, braces, and quoted strings."""
    i = 0
    line = 1
    length = len(text)

    while i < length:
        ch = text[i]

        if ch == "\n":
            line += 1
            i += 1
            continue

        if ch.isspace():
            i += 1
            continue

        if ch == "#":
            while i < length and text[i] != "\n":
                i += 1
            continue

        if ch in (_OPEN, _CLOSE):
            yield _Token(ch, line)
            i += 1
            continue

        if ch == '"':
            start_line = line
            i += 1
            chars: list[str] = []
            while True:
                if i >= length:
                    msg = f"{origin}:{start_line}: unterminated quoted string"
                    raise ConfigError(msg)
                ch = text[i]
                if ch == "\\" and i + 1 < length and text[i + 1] in ('"', "\\"):
                    chars.append(text[i + 1])
                    i += 2
                    continue
                if ch == '"':
                    i += 1
                    break
                if ch == "\n":
                    line += 1
                chars.append(ch)
                i += 1
            yield _Token("".join(chars), start_line, quoted=True)
            continue

        start = i
        while i < length and not text[i].isspace() and text[i] not in (_OPEN, _CLOSE, '"'):
            i += 1
        yield _Token(text[start:i], line)


def parse_config(text: str, origin: str = "<config>") -> list[Directive]:
    """Parse configuration text into directives.

    Args:
        text: Configuration source.
        origin: Name used in error messages (usually the file path).

    Returns:
        Directives in source order.

    Raises:
        ConfigError: If the text does not follow the three-directive grammar.
    """
    directives: list[Directive] = []
    tokens = _tokenize(text, origin)

    for token in tokens:
        if token.is_close:
            raise ConfigError(f"{origin}:{token.line}: unexpected '}}'")
        if token.quoted or token.text not in DIRECTIVES:
            raise ConfigError(f"{origin}:{token.line}: unknown directive '{token.text}'")

        keyword = token
        opener = next(tokens, None)
        if opener is None or not opener.is_open:
            raise ConfigError(f"{origin}:{keyword.line}: expected '{{' after '{keyword.text}'")

        arguments: list[str] = []
        for word in tokens:
            if word.is_close:
                break
            if word.is_open:
                raise ConfigError(f"{origin}:{word.line}: nested '{{' is not allowed")
            arguments.append(word.text)
        else:
            msg = f"{origin}:{keyword.line}: unterminated '{keyword.text}' block"
            raise ConfigError(msg)

        directives.append(Directive(keyword.text, tuple(arguments), keyword.line))

    return directives


class ConfigEvaluator:
    """Feeds parsed configuration directives into a SetResolver.

    Args:
        resolver: Resolver receiving include, exclude, and exclude-match
            directives.
    """

    def __init__(self, resolver: SetResolver) -> None:
        self._resolver = resolver

    def evaluate(self, source: Path | str) -> None:
        """Read, parse, and apply a configuration file.

        Args:
            source: Path to the configuration file.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        path = Path(source).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigError(f"Configuration file not found: {path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

        logger.debug("Evaluating configuration %s", path)
        self.evaluate_text(text, origin=str(path))

    def evaluate_text(self, text: str, origin: str = "<config>") -> None:
        """Parse and apply configuration text.

        Raises:
            ConfigError: If the text cannot be parsed.
        """
        for directive in parse_config(text, origin):
            if directive.keyword == INCLUDE:
                self._resolver.add_include(directive.arguments)
            elif directive.keyword == EXCLUDE:
                self._resolver.add_exclude(directive.arguments)
            else:
                self._resolver.set_exclude_globs(directive.arguments)
