"""Route Dependencies — resolve shared services from application state.

Invariants:
    - One CounterGateway per app, stored on app.state by the app factory/lifespan
"""

from fastapi import Request

from counter_gateway.services.counter_gateway import CounterGateway


def get_gateway(request: Request) -> CounterGateway:
    return request.app.state.gateway
