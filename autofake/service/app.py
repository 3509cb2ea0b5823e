"""FastAPI application entrypoint for autofake service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..expander import Expander, ExpansionError, ExpansionResult


class ExpandRequest(BaseModel):
    source: str
    filename: Optional[str] = None


class DeclarationSummary(BaseModel):
    name: str
    strategy: str
    parameters: List[str]


class ExpandResponse(BaseModel):
    source: str
    declarations: List[DeclarationSummary]


class HealthResponse(BaseModel):
    status: str


def _default_expander() -> Expander:
    return Expander()


def create_app(
    expander_factory: Callable[[], Expander] = _default_expander,
) -> FastAPI:
    """Create the FastAPI application exposing source expansion."""

    app = FastAPI(title="AutoFake Service", version="0.1.0")

    async def get_expander() -> Expander:
        return expander_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/expand", response_model=ExpandResponse)
    async def expand(
        payload: ExpandRequest,
        expander: Expander = Depends(get_expander),
    ) -> ExpandResponse:
        def _run_expand() -> ExpansionResult:
            return expander.expand_source(payload.source, filename=payload.filename or "<request>")

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_expand)
        return ExpandResponse(
            source=result.source,
            declarations=[
                DeclarationSummary(
                    name=declaration.name,
                    strategy=declaration.strategy,
                    parameters=list(declaration.parameters),
                )
                for declaration in result.declarations
            ],
        )

    @app.exception_handler(ExpansionError)
    async def expansion_error_handler(_: Any, exc: ExpansionError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
