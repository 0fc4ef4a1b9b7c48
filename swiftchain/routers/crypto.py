from fastapi import APIRouter, Depends

from swiftchain.core.config import Settings, get_settings
from swiftchain.models.transfer import TransactionOut
from swiftchain.models.withdrawal import WithdrawalAck, WithdrawalIn
from swiftchain.services.chain_status import ChainStatusSource, make_chain_status_source
from swiftchain.services.withdrawal import simulate_withdrawal

router = APIRouter(prefix="/api/crypto", tags=["crypto"])


def get_chain_status_source(settings: Settings = Depends(get_settings)) -> ChainStatusSource:
    return make_chain_status_source(settings)


@router.get(
    "/transaction/{tx_hash}",
    response_model=TransactionOut,
    summary="Look up the on-chain status of a transaction",
)
def get_transaction(tx_hash: str, source: ChainStatusSource = Depends(get_chain_status_source)):
    return TransactionOut(transaction=source.lookup(tx_hash))


@router.post(
    "/withdraw",
    response_model=WithdrawalAck,
    summary="Simulate an INR withdrawal to a bank account",
)
async def withdraw(payload: WithdrawalIn):
    return simulate_withdrawal(payload)
