"""Health Probe — liveness endpoint reporting the configured cluster and program.

Invariants:
    - GET /health returns 200 with static config values
    - Never performs an RPC call (cluster info comes from config)
"""

from fastapi import APIRouter, Depends, status

from counter_gateway.api.dependencies import get_gateway
from counter_gateway.schemas.counter import HealthCheckResponse
from counter_gateway.services.counter_gateway import CounterGateway

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "", response_model=HealthCheckResponse, status_code=status.HTTP_200_OK,
)
async def health_check(gateway: CounterGateway = Depends(get_gateway)):
    """Liveness probe with cluster URL and program id."""
    info = gateway.get_cluster_info()
    return HealthCheckResponse(
        solana_cluster=info.cluster, program_id=info.program_id,
    )
