import logging

from fastapi import APIRouter, Depends, Request

from relay.core.errors import RelayError
from relay.core.responses import err, relay_error_response
from relay.core.units import format_ether, format_fixed
from relay.schemas.transfer import BalanceOut, HealthOut, StatusOut, TransferIn, TransferOut
from relay.services.context import RelayContext
from relay.services.transfer import TransferFailed

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Transfers"])

TRANSFER_PATHS = ("/convert", "/send-eth", "/withdraw", "/transfer", "/eip1559-transfer")


def get_context(request: Request) -> RelayContext:
    return request.app.state.context


async def convert(payload: TransferIn, ctx: RelayContext = Depends(get_context)):
    """Send native currency from the relay account, clamped to leave the fee reserve."""
    settings = ctx.settings
    try:
        transfer = payload.to_request(settings.DEFAULT_AMOUNT, settings.DEFAULT_DESTINATION)
    except ValueError as exc:
        return err(str(exc), 400, code="bad_request")

    try:
        result = await ctx.transfers.execute_transfer(transfer)
    except TransferFailed as exc:
        return relay_error_response(exc.cause)
    except Exception as exc:
        logger.exception("Unexpected transfer error")
        return err(str(exc), 500)
    return TransferOut.from_result(result)


for _path in TRANSFER_PATHS:
    router.add_api_route(
        _path,
        convert,
        methods=["POST"],
        response_model=TransferOut,
        name=f"transfer:{_path.strip('/')}",
    )


@router.get("/balance", response_model=BalanceOut)
async def balance(ctx: RelayContext = Depends(get_context)):
    try:
        wei = await ctx.account.balance()
    except RelayError as exc:
        return err(exc.message, 500, code=exc.code)
    return BalanceOut(wallet=ctx.account.address, balance=format_ether(wei))


@router.get("/status", response_model=StatusOut)
async def status(ctx: RelayContext = Depends(get_context)):
    """Always answers; a failed balance read is reported as degraded, not zero."""
    out = StatusOut(method=ctx.settings.METHOD, wallet=ctx.account.address)
    if ctx.account.configured and ctx.pool.is_bound:
        try:
            out.balance = format_fixed(await ctx.account.balance())
        except Exception as exc:
            logger.warning("Status balance read failed: %s", exc)
    out.degraded = out.balance is None
    out.endpoint = ctx.pool.active_url
    return out


@router.get("/health", response_model=HealthOut)
async def health():
    return HealthOut()
