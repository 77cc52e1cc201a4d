"""
Popcorn Playground Server
=========================
FastAPI application exposing the lexer, parser and evaluator over HTTP.

Launch:
    popcorn serve                   # Via CLI
    python -m popcorn.server        # Direct

Endpoints:
    GET    /api/health              → Status and version
    POST   /api/tokenize            → Token list for a source string
    POST   /api/ast                 → Tagged JSON AST
    POST   /api/evaluate            → Evaluate, optionally in a named session
    DELETE /api/sessions/{id}       → Drop a session's environment
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__
from .environment import Environment
from .errors import PopcornError
from .interpreter import Interpreter
from .lexer import tokenize
from .nodes import dump_ast
from .parser import produce_ast
from .values import format_value, to_python

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
#  App Setup
# ─────────────────────────────────────────────────────────────

app = FastAPI(title="Popcorn Playground", version=__version__)


@dataclass
class Session:
    """One retained environment plus the output captured by its `print`."""
    output: list[str] = field(default_factory=list)
    env: Environment = field(init=False)
    interp: Interpreter = field(init=False)

    def __post_init__(self):
        self.interp = Interpreter(output_fn=self.output.append)
        self.env = self.interp.make_environment()


_sessions: dict[str, Session] = {}


# ─────────────────────────────────────────────────────────────
#  Request Models
# ─────────────────────────────────────────────────────────────

class SourceRequest(BaseModel):
    source: str


class EvaluateRequest(BaseModel):
    source: str
    session: Optional[str] = None


def _bad_request(e: PopcornError) -> HTTPException:
    logger.info("request failed: %s: %s", type(e).__name__, e)
    return HTTPException(status_code=400, detail={"error": str(e), "kind": e.kind})


# ─────────────────────────────────────────────────────────────
#  Endpoints
# ─────────────────────────────────────────────────────────────

@app.get("/api/health")
async def api_health():
    return {"status": "ok", "version": __version__}


@app.post("/api/tokenize")
async def api_tokenize(req: SourceRequest):
    """Return the token stream, EOF included."""
    try:
        tokens = tokenize(req.source)
    except PopcornError as e:
        raise _bad_request(e)
    return [
        {"type": t.type.name, "value": t.value, "line": t.line, "col": t.col}
        for t in tokens
    ]


@app.post("/api/ast")
async def api_ast(req: SourceRequest):
    try:
        program = produce_ast(tokenize(req.source))
    except PopcornError as e:
        raise _bad_request(e)
    return dump_ast(program)


@app.post("/api/evaluate")
async def api_evaluate(req: EvaluateRequest):
    """
    Evaluate `source`. Without a session id every request starts from a
    fresh root environment; with one, bindings persist across requests.
    """
    if req.session is None:
        session = Session()
    elif req.session in _sessions:
        session = _sessions[req.session]
    else:
        session = _sessions[req.session] = Session()
        logger.info("created session %s", req.session)
    session.output.clear()

    try:
        result = session.interp.run(req.source, session.env)
    except PopcornError as e:
        raise _bad_request(e)

    return {
        "result": to_python(result),
        "display": format_value(result, nested=True),
        "kind": result.type_name,
        "output": list(session.output),
    }


@app.delete("/api/sessions/{session_id}")
async def api_drop_session(session_id: str):
    if _sessions.pop(session_id, None) is None:
        raise HTTPException(status_code=404, detail=f"Unknown session '{session_id}'")
    return {"dropped": session_id}


def run_server(host: str = "127.0.0.1", port: int = 3000, log_level: str = "warning"):
    """Launch the playground server."""
    import uvicorn

    print(f"\n🍿 ─── Popcorn Playground ───")
    print(f"  http://{host}:{port}/docs")
    print(f"  Press Ctrl+C to stop\n")

    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    run_server()
