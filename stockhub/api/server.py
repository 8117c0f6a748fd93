# stockhub/api/server.py

"""Thin read-only HTTP layer over the aggregated stock lookup."""

import logging
from collections.abc import Callable

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from stockhub.api.schemas import EanBatchIn, ProductOut, ProductsOut
from stockhub.services.lookup import StockLookup

logger = logging.getLogger("stockhub.api")

_NO_DATA = "Failed to load stock data or no stock data available."


def create_app(
    lookup_loader: Callable[[], StockLookup] = StockLookup.from_file,
) -> FastAPI:
    """Build the API app.

    *lookup_loader* is called per request so that a pipeline run's
    freshly written aggregate is served without a restart.
    """
    app = FastAPI(
        title="Stock Lookup API",
        version="1.0.0",
        description="Where is an EAN available, and at what price.",
    )

    @app.exception_handler(RequestValidationError)
    async def _bad_request(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=400,
            content={
                "error": (
                    "Invalid request. Please provide an array of EAN "
                    "numbers in the request body."
                )
            },
        )

    def _load() -> StockLookup | None:
        lookup = lookup_loader()
        if not len(lookup):
            logger.error(_NO_DATA)
            return None
        return lookup

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Stock lookup server", "docs": "/docs"}

    @app.get("/productByEan", response_model=ProductOut)
    def product_by_ean(
        ean: str | None = Query(default=None),
    ) -> object:
        if not ean:
            return JSONResponse(
                status_code=400,
                content={
                    "error": (
                        "Invalid request. Please provide an EAN number "
                        "as a query parameter."
                    )
                },
            )
        lookup = _load()
        if lookup is None:
            return JSONResponse(status_code=500, content={"error": _NO_DATA})
        return lookup.find_by_identifier(ean).to_dict()

    @app.post("/productsByEan", response_model=ProductsOut)
    def products_by_ean(body: EanBatchIn) -> object:
        lookup = _load()
        if lookup is None:
            return JSONResponse(status_code=500, content={"error": _NO_DATA})
        return lookup.find_many(body.eans).to_dict()

    return app
