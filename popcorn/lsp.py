"""
Popcorn Language Server (stub)
==============================
A minimal pygls language server on stdin/stdout for editor integration.

pygls owns the JSON-RPC transport and the initialize / shutdown / exit
lifecycle. Popcorn contributes full-document sync and lexer / parser errors
published as diagnostics when a document is opened or changed.

stdout carries the protocol, so all logging goes to stderr.
"""
from __future__ import annotations

import logging

from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    InitializeParams,
    Position,
    Range,
    TextDocumentSyncKind,
)
from pygls.server import LanguageServer

from . import __version__
from .errors import LexerError, ParserError
from .lexer import tokenize
from .parser import produce_ast

logger = logging.getLogger(__name__)

SERVER_NAME = "popcorn-lsp"


def diagnose(source: str) -> list[Diagnostic]:
    """Return diagnostics for the first lexer/parser error in `source`."""
    try:
        produce_ast(tokenize(source))
    except (LexerError, ParserError) as e:
        line = max(e.line - 1, 0)
        col = max(e.col - 1, 0)
        return [Diagnostic(
            range=Range(
                start=Position(line=line, character=col),
                end=Position(line=line, character=col + 1),
            ),
            message=e.message,
            severity=DiagnosticSeverity.Error,
            source="popcorn",
        )]
    return []


# ─────────────────────────────────────────────────────────────
#  Features
# ─────────────────────────────────────────────────────────────

def on_initialize(ls: LanguageServer, params: InitializeParams):
    client = params.client_info.name if params.client_info else "unknown client"
    logger.info("initialized by %s", client)


def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams):
    doc = params.text_document
    ls.publish_diagnostics(doc.uri, diagnose(doc.text))


def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams):
    uri = params.text_document.uri
    document = ls.workspace.get_text_document(uri)
    ls.publish_diagnostics(uri, diagnose(document.source))


def create_server() -> LanguageServer:
    """Build a language server with the Popcorn features registered."""
    server = LanguageServer(
        SERVER_NAME, __version__,
        text_document_sync_kind=TextDocumentSyncKind.Full,
    )
    server.feature(INITIALIZE)(on_initialize)
    server.feature(TEXT_DOCUMENT_DID_OPEN)(did_open)
    server.feature(TEXT_DOCUMENT_DID_CHANGE)(did_change)
    return server


def run_lsp() -> int:
    create_server().start_io()
    logger.info("Popcorn LSP server exited")
    return 0
