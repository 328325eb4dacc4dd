"""Executor Info — identity and digest domain of this relay deployment.

Invariants:
    - Read-only, no DB access

Design Decisions:
    - Signers need both values: the address to approve as spender, the domain
      to rebuild digests offline
"""

from fastapi import APIRouter, Depends

from metarelay.api.dependencies import get_executor
from metarelay.core.compute_digest import digest_hex
from metarelay.services.relay_executor import MetaTransferExecutor

router = APIRouter(prefix="/api/v1/executor", tags=["executor"])


@router.get("")
async def get_executor_info(
    executor: MetaTransferExecutor = Depends(get_executor),
):
    return {
        "address": executor.address,
        "domain_name": executor.domain_name,
        "domain_separator": digest_hex(executor.domain),
    }
