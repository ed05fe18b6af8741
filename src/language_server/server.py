"""gopp Language Server

Implements the Language Server Protocol for editors working on Go files
that carry gopp directives: malformed directives show up as warnings, and
directive names are completed and documented on hover.
"""

import logging
import sys
import os
from typing import Dict, List, Optional

from pygls.server import LanguageServer
from lsprotocol.types import (
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_HOVER,
    TEXT_DOCUMENT_DIAGNOSTIC,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    Diagnostic,
    DiagnosticOptions,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentDiagnosticParams,
    FullDocumentDiagnosticReport,
    Hover,
    HoverParams,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
    TextDocumentSyncKind,
)

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

try:
    from src.gopp.directives import DEFAULT_PREFIX, DIRECTIVES
    from src.gopp.engine import VERSION, Gopp
    from src.gopp.lexer import LexerError, tokenize
except ImportError:
    from gopp.directives import DEFAULT_PREFIX, DIRECTIVES
    from gopp.engine import VERSION, Gopp
    from gopp.lexer import LexerError, tokenize


logger = logging.getLogger(__name__)

DIRECTIVE_HELP = {
    name: f"**{signature}**\n\n{description}"
    for name, signature, description in DIRECTIVES
}


def collect_diagnostics(text: str, prefix: str = DEFAULT_PREFIX) -> List[Diagnostic]:
    """Lex and preprocess *text*, returning LSP diagnostics (0-based ranges)."""
    try:
        tokens = tokenize(text)
    except LexerError as e:
        line = max(e.line - 1, 0)
        col = max(e.column - 1, 0)
        return [Diagnostic(
            range=Range(
                start=Position(line=line, character=col),
                end=Position(line=line, character=col + 1)
            ),
            message=str(e),
            severity=DiagnosticSeverity.Error,
            source="gopp"
        )]

    gopp = Gopp(prefix=prefix)
    gopp.process(tokens)

    items = []
    for found in gopp.sink:
        line = found.line - 1
        col = found.column - 1
        items.append(Diagnostic(
            range=Range(
                start=Position(line=line, character=col),
                end=Position(line=line, character=col + len(found.raw))
            ),
            message=f"invalid gopp comment: {found.reason}",
            severity=DiagnosticSeverity.Warning,
            source="gopp"
        ))
    return items


def directive_completions(line_prefix: str, prefix: str = DEFAULT_PREFIX) -> List[CompletionItem]:
    """Completion items for the text before the cursor, if it opens a directive."""
    stripped = line_prefix.lstrip()
    if not stripped.startswith(prefix):
        return []
    # Only the directive name itself is completed.
    if ' ' in stripped[len(prefix):]:
        return []

    return [
        CompletionItem(
            label=name,
            kind=CompletionItemKind.Keyword,
            detail=signature,
            documentation=description,
            insert_text=name,
        )
        for name, signature, description in DIRECTIVES
    ]


def directive_hover(line: str, line_number: int, character: int,
                    prefix: str = DEFAULT_PREFIX) -> Optional[Hover]:
    """Hover text for the directive name under *character*, if any."""
    start = line.find(prefix)
    if start < 0:
        return None

    word_start = start + len(prefix)
    word_end = word_start
    while word_end < len(line) and line[word_end].isalpha():
        word_end += 1

    if not word_start <= character <= word_end:
        return None

    name = line[word_start:word_end].lower()
    if name not in DIRECTIVE_HELP:
        return None

    return Hover(
        contents=MarkupContent(kind=MarkupKind.Markdown, value=DIRECTIVE_HELP[name]),
        range=Range(
            start=Position(line=line_number, character=word_start),
            end=Position(line=line_number, character=word_end)
        )
    )


class GoppLanguageServer(LanguageServer):
    """Language Server for gopp directives."""

    def __init__(self):
        super().__init__("gopp-language-server", VERSION,
                         text_document_sync_kind=TextDocumentSyncKind.Full)

        # Document cache
        self.documents: Dict[str, str] = {}
        self.prefix = DEFAULT_PREFIX


gopp_server = GoppLanguageServer()


@gopp_server.feature(TEXT_DOCUMENT_COMPLETION, CompletionOptions(trigger_characters=[":"]))
async def completion(params: CompletionParams) -> CompletionList:
    """Provide completion items."""
    text = gopp_server.documents.get(params.text_document.uri)
    if text is None:
        return CompletionList(is_incomplete=False, items=[])

    lines = text.split('\n')
    position = params.position
    if position.line >= len(lines):
        return CompletionList(is_incomplete=False, items=[])

    current_line = lines[position.line][:position.character]
    items = directive_completions(current_line, gopp_server.prefix)
    return CompletionList(is_incomplete=False, items=items)


@gopp_server.feature(TEXT_DOCUMENT_HOVER)
async def hover(params: HoverParams) -> Optional[Hover]:
    """Provide hover information."""
    text = gopp_server.documents.get(params.text_document.uri)
    if text is None:
        return None

    lines = text.split('\n')
    position = params.position
    if position.line >= len(lines):
        return None

    return directive_hover(lines[position.line], position.line,
                           position.character, gopp_server.prefix)


@gopp_server.feature(
    TEXT_DOCUMENT_DIAGNOSTIC,
    DiagnosticOptions(inter_file_dependencies=False, workspace_diagnostics=False)
)
async def diagnostics(params: DocumentDiagnosticParams) -> FullDocumentDiagnosticReport:
    """Provide diagnostics (malformed directives, lexer errors)."""
    text = gopp_server.documents.get(params.text_document.uri)
    if text is None:
        return FullDocumentDiagnosticReport(kind="full", items=[])

    items = collect_diagnostics(text, gopp_server.prefix)
    logger.debug("%s: %d diagnostic(s)", params.text_document.uri, len(items))
    return FullDocumentDiagnosticReport(kind="full", items=items)


# Document synchronization
@gopp_server.feature(TEXT_DOCUMENT_DID_OPEN)
async def did_open(params: DidOpenTextDocumentParams):
    """Handle document open event."""
    gopp_server.documents[params.text_document.uri] = params.text_document.text


@gopp_server.feature(TEXT_DOCUMENT_DID_CHANGE)
async def did_change(params: DidChangeTextDocumentParams):
    """Handle document change event."""
    document_uri = params.text_document.uri

    for change in params.content_changes:
        # Full sync: every change carries the whole document.
        gopp_server.documents[document_uri] = change.text


@gopp_server.feature(TEXT_DOCUMENT_DID_CLOSE)
async def did_close(params: DidCloseTextDocumentParams):
    """Handle document close event."""
    gopp_server.documents.pop(params.text_document.uri, None)
