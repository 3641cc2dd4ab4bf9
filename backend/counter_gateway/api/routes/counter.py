"""Counter Routes — initialize, increment and read on-chain counters.

Invariants:
    - Input validated by validate_body/validate_params dependencies before the handler runs
    - Handlers delegate to CounterGateway and only shape the response
    - Errors are raised, never formatted here (error_handlers owns the envelope)
"""

from fastapi import APIRouter, Depends, status

from counter_gateway.api.dependencies import get_gateway
from counter_gateway.api.validation import validate_body, validate_params
from counter_gateway.schemas.counter import (
    CounterAddressParams,
    GetCounterResponse,
    IncrementCounterRequest,
    IncrementCounterResponse,
    InitializeCounterRequest,
    InitializeCounterResponse,
)
from counter_gateway.services.counter_gateway import CounterGateway

router = APIRouter(prefix="/api/counter", tags=["counter"])


@router.post(
    "/initialize",
    response_model=InitializeCounterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def initialize_counter(
    body: InitializeCounterRequest = Depends(validate_body(InitializeCounterRequest)),
    gateway: CounterGateway = Depends(get_gateway),
):
    result = await gateway.initialize_counter(body.seed)
    return InitializeCounterResponse(
        counter_address=result.counter_address,
        seed=result.seed,
        signature=result.signature,
    )


@router.post(
    "/increment",
    response_model=IncrementCounterResponse,
    status_code=status.HTTP_200_OK,
)
async def increment_counter(
    body: IncrementCounterRequest = Depends(validate_body(IncrementCounterRequest)),
    gateway: CounterGateway = Depends(get_gateway),
):
    result = await gateway.increment_counter(body.counter_address)
    return IncrementCounterResponse(
        counter_address=body.counter_address,
        new_count=result.new_count,
        signature=result.signature,
    )


@router.get("/{counterAddress}", response_model=GetCounterResponse)
async def get_counter(
    params: CounterAddressParams = Depends(validate_params(CounterAddressParams)),
    gateway: CounterGateway = Depends(get_gateway),
):
    view = await gateway.get_counter_data(params.counter_address)
    return GetCounterResponse(
        counter_address=params.counter_address,
        authority=view.authority,
        count=view.count,
    )
