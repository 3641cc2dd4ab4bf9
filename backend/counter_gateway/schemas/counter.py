"""Counter Schemas — Pydantic models for the counter and health endpoints.

Invariants:
    - JSON field names are camelCase (alias_generator), Python attributes snake_case
    - InitializeCounterRequest.seed defaults to "counter" when omitted
    - count/newCount are decimal strings so u64 values survive JSON number precision

Design Decisions:
    - populate_by_name: handlers build responses with snake_case kwargs
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests -----------------------------------------------------------------

class InitializeCounterRequest(CamelModel):
    seed: str = "counter"


class IncrementCounterRequest(CamelModel):
    counter_address: str


class CounterAddressParams(CamelModel):
    counter_address: str


# --- Responses ----------------------------------------------------------------

class InitializeCounterResponse(CamelModel):
    success: bool = True
    counter_address: str
    seed: str
    signature: str


class IncrementCounterResponse(CamelModel):
    success: bool = True
    counter_address: str
    new_count: str
    signature: str


class GetCounterResponse(CamelModel):
    success: bool = True
    counter_address: str
    authority: str
    count: str


class HealthCheckResponse(CamelModel):
    status: Literal["ok"] = "ok"
    solana_cluster: str
    program_id: str
