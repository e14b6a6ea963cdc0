import re
from typing import List, NamedTuple, Optional

from ccpm.errors import TransformError
from ccpm.models.transform import BaseTransform

NO_MINIFY = re.compile(r"^\s*--!\s*no-minify", re.MULTILINE)
PRESERVE_LINES = re.compile(r"^\s*--!\s*preserve-lines", re.MULTILINE)
PRESERVE_LINES_STRICT = re.compile(r"^\s*--!\s*preserve-lines-strict", re.MULTILINE)

_SPACE = re.compile(r"[ \t\r\f\v]+")
_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER = re.compile(
    r"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?"
    r"|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_LONG_BRACKET = re.compile(r"\[(=*)\[")
_OPERATORS = (
    "...", "..", "==", "~=", "<=", ">=", "<<", ">>", "//", "::",
    "+", "-", "*", "/", "%", "^", "#", "&", "~", "|", "<", ">", "=",
    "(", ")", "{", "}", "[", "]", ";", ":", ",", ".",
)


class Token(NamedTuple):
    kind: str
    text: str
    line: int


def _is_digit(char: str) -> bool:
    # str.isdigit() also accepts non-ASCII digits, which Lua does not
    return len(char) == 1 and "0" <= char <= "9"


def _is_word(char: str) -> bool:
    return char.isalnum() or char == "_"


def _long_bracket_end(source: str, start: int, level: str, line: int, what: str) -> int:
    close = f"]{level}]"
    end = source.find(close, start)
    if end == -1:
        raise TransformError(f"unfinished long {what} starting at line {line}")
    return end + len(close)


def _string_end(source: str, start: int, line: int) -> int:
    quote = source[start]
    pos = start + 1
    while pos < len(source):
        char = source[pos]
        if char == "\\":
            pos += 2
            continue
        if char == quote:
            return pos + 1
        if char == "\n":
            break
        pos += 1
    raise TransformError(f"unfinished string at line {line}")


def tokenize(source: str) -> List[Token]:
    """
    Splits Lua source into tokens, comments included, each tagged with the line it starts on.

    :raises TransformError: On unfinished strings, comments or malformed numbers, or unexpected symbols.
    """
    tokens: List[Token] = []
    pos = 0
    line = 1
    length = len(source)

    # Shebang line
    if source.startswith("#"):
        end = source.find("\n")
        pos = length if end == -1 else end
        tokens.append(Token("comment", source[:pos], line))

    while pos < length:
        char = source[pos]

        if char == "\n":
            line += 1
            pos += 1
            continue

        space = _SPACE.match(source, pos)
        if space:
            pos = space.end()
            continue

        if source.startswith("--", pos):
            long = _LONG_BRACKET.match(source, pos + 2)
            if long:
                end = _long_bracket_end(source, long.end(), long.group(1), line, "comment")
            else:
                end = source.find("\n", pos)
                end = length if end == -1 else end
            kind, text = "comment", source[pos:end]
        elif char == "[" and _LONG_BRACKET.match(source, pos):
            long = _LONG_BRACKET.match(source, pos)
            if long is None:
                raise TransformError(f"unexpected symbol {char!r} at line {line}")
            end = _long_bracket_end(source, long.end(), long.group(1), line, "string")
            kind, text = "string", source[pos:end]
        elif char in "'\"":
            end = _string_end(source, pos, line)
            kind, text = "string", source[pos:end]
        elif _is_digit(char) or (char == "." and _is_digit(source[pos + 1 : pos + 2])):
            number = _NUMBER.match(source, pos)
            if number is None:
                raise TransformError(f"malformed number near {source[pos:pos + 2]!r} at line {line}")
            end = number.end()
            if end < length and _is_word(source[end]):
                raise TransformError(f"malformed number near {source[pos:end + 1]!r} at line {line}")
            kind, text = "number", source[pos:end]
        elif _is_word(char):
            name = _NAME.match(source, pos)
            if not name:
                raise TransformError(f"unexpected symbol {char!r} at line {line}")
            end = name.end()
            kind, text = "name", source[pos:end]
        else:
            operator = next((op for op in _OPERATORS if source.startswith(op, pos)), None)
            if operator is None:
                raise TransformError(f"unexpected symbol {char!r} at line {line}")
            end = pos + len(operator)
            kind, text = "operator", operator

        tokens.append(Token(kind, text, line))
        line += text.count("\n")
        pos = end

    return tokens


def _needs_space(prev: Token, token: Token) -> bool:
    """Whether writing the two tokens next to each other would make them tokenize differently."""
    last, first = prev.text[-1], token.text[0]
    if _is_word(last) and _is_word(first):
        return True
    if prev.kind == "number" and first == ".":
        return True
    if last == "-" and first == "-":
        return True
    if last == "." and (first == "." or _is_digit(first)):
        return True
    if last == "[" and first in "[=":
        return True
    return False


def minify(source: str) -> str:
    """
    Removes comments and insignificant whitespace from Lua source.

    A file containing a `--! no-minify` line is returned untouched. `--! preserve-lines` keeps every token on its
    original line group while dropping blank lines and indentation, and `--! preserve-lines-strict` keeps every
    token on its exact original line number.
    """
    if NO_MINIFY.search(source):
        return source

    strict = PRESERVE_LINES_STRICT.search(source) is not None
    preserve = strict or PRESERVE_LINES.search(source) is not None

    parts: List[str] = []
    prev: Optional[Token] = None
    current_line = 1
    for token in tokenize(source):
        if token.kind == "comment":
            continue
        if preserve and token.line > current_line and (strict or parts):
            parts.append("\n" * (token.line - current_line) if strict else "\n")
            prev = None
        elif prev is not None and _needs_space(prev, token):
            parts.append(" ")
        parts.append(token.text)
        current_line = token.line + token.text.count("\n")
        prev = token

    return "".join(parts)


class LuaMinifyTransform(BaseTransform):
    """
    Minifies Lua source files, honouring `--!` directives.
    """

    name = "minify"

    def transform(self, source: str) -> str:
        return minify(source)
