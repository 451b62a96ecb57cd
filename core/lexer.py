"""
G-code lexer for splitting raw G-code lines into instruction, words and comment.
"""
import re
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional
from utils.errors import ErrorCollector, ErrorType


COMMENT_MARKER = ';'


class TokenType(Enum):
    # Instruction (G, M or T code)
    INSTRUCTION = "INSTRUCTION"

    # Axis words
    X_WORD = "X"
    Y_WORD = "Y"
    Z_WORD = "Z"

    # Parameter words
    F_WORD = "F"
    E_WORD = "E"
    S_WORD = "S"
    T_WORD = "T"


@dataclass
class Token:
    """Represents a single token in a G-code line."""
    type: TokenType
    value: str
    line_number: int
    char_start: int
    char_end: int


@dataclass
class LexedLine:
    """The pieces of one non-blank source line."""
    line_number: int
    text: str                      # trimmed line
    code: str                      # code part, without the comment
    comment: Optional[str] = None
    instruction: Optional[Token] = None
    words: List[Token] = field(default_factory=list)

    @property
    def is_comment_only(self) -> bool:
        return self.text.startswith(COMMENT_MARKER)


class GCodeLexer:
    """Tokenizes G-code text line by line."""

    # Leading instruction token: G, M or T followed by digits
    INSTRUCTION_PATTERN = re.compile(r'^([GMT]\d+)', re.IGNORECASE)

    # Parameter word: a standalone letter optionally followed by a signed decimal
    # number. Letters inside free text ("M117 Setting up") are not words. A
    # letter with no number is reported as malformed and skipped.
    WORD_PATTERN = re.compile(r'(?<![A-Z])([XYZFEST])(?![A-Z])([+-]?(?:\d+\.?\d*|\.\d+))?',
                              re.IGNORECASE)

    def __init__(self, error_collector: Optional[ErrorCollector] = None):
        self.error_collector = error_collector if error_collector is not None else ErrorCollector()

    def tokenize(self, gcode_text: str) -> List[LexedLine]:
        """Tokenize the whole text; blank lines produce nothing."""
        lines = []
        for line_num, line in enumerate(gcode_text.split('\n'), 1):
            lexed = self.tokenize_line(line, line_num)
            if lexed is not None:
                lines.append(lexed)
        return lines

    def tokenize_line(self, line: str, line_number: int) -> Optional[LexedLine]:
        """Tokenize a single line of G-code. Returns None for blank lines."""
        original_line = line
        line = line.strip()
        if not line:
            return None

        offset = len(original_line) - len(original_line.lstrip())

        if line.startswith(COMMENT_MARKER):
            return LexedLine(line_number, line, code='', comment=line[1:].strip())

        code = line
        comment = None
        comment_index = line.find(COMMENT_MARKER)
        if comment_index != -1:
            code = line[:comment_index].strip()
            comment = line[comment_index + 1:].strip()

        lexed = LexedLine(line_number, line, code=code, comment=comment)
        if not code:
            return lexed

        match = self.INSTRUCTION_PATTERN.match(code)
        if match:
            lexed.instruction = Token(TokenType.INSTRUCTION, match.group(1).upper(),
                                      line_number, offset, offset + match.end())
        else:
            self.error_collector.add_error(
                line_number, offset, offset + len(code),
                f"Unrecognized instruction: '{code.split()[0]}'",
                ErrorType.UNRECOGNIZED_LINE
            )
            return lexed

        for word in self.WORD_PATTERN.finditer(code, match.end()):
            letter = word.group(1).upper()
            start = offset + word.start()
            end = offset + word.end()
            if word.group(2) is None:
                self.error_collector.add_error(
                    line_number, start, end,
                    f"Missing or malformed value for {letter} word",
                    ErrorType.MALFORMED_WORD
                )
                continue
            lexed.words.append(Token(TokenType(letter), word.group(2), line_number, start, end))

        return lexed
