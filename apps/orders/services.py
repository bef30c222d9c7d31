"""
Order Management Services for the Orchid Portal
Wires the composer, gateway, merge view and lifecycle controller for one
request: API client bound to the session token, fallback store shared by
every session.
"""

from dataclasses import dataclass

from django.http import HttpRequest

from apps.api_client.services import OrchidAPIClient

from .composer import OrderComposer
from .fallback import CacheFallbackOrderStore, FallbackOrderStore
from .gateway import ResilientOrderGateway
from .lifecycle import OrderLifecycleController
from .merge import OrderMergeView


@dataclass
class OrderServices:
    api: OrchidAPIClient
    store: FallbackOrderStore
    composer: type[OrderComposer]
    gateway: ResilientOrderGateway
    merge_view: OrderMergeView
    lifecycle: OrderLifecycleController

    @classmethod
    def build(cls, api: OrchidAPIClient, store: FallbackOrderStore) -> 'OrderServices':
        gateway = ResilientOrderGateway(api, store)
        merge_view = OrderMergeView(api, store)
        return cls(
            api=api,
            store=store,
            composer=OrderComposer,
            gateway=gateway,
            merge_view=merge_view,
            lifecycle=OrderLifecycleController(gateway, merge_view),
        )

    @classmethod
    def for_request(cls, request: HttpRequest) -> 'OrderServices':
        return cls.build(OrchidAPIClient.for_request(request), CacheFallbackOrderStore())
