from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from relay.core.errors import ConfirmationTimeout, InsufficientFunds, RelayError


def ok(data: Any) -> JSONResponse:
    return JSONResponse(content=jsonable_encoder(data), status_code=200)


def err(message: str, http_status: int = 400, **extra: Any) -> JSONResponse:
    body = {"error": message}
    body.update(extra)
    return JSONResponse(content=jsonable_encoder(body), status_code=http_status)


def relay_error_response(exc: RelayError) -> JSONResponse:
    if isinstance(exc, InsufficientFunds):
        return err(exc.message, 400, code=exc.code, balance=float(exc.balance))
    if isinstance(exc, ConfirmationTimeout):
        return err(exc.message, 504, code=exc.code, txHash=exc.tx_hash)
    return err(exc.message, 500, code=exc.code)
