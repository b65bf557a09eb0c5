# Overview: Builds the service objects around an explicit DataStore.

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import current_app, g

from .extensions import db
from .services.event_recorder import EventRecorder
from .services.fulfillment_service import FulfillmentEngine
from .services.request_ledger import RequestLedger
from .services.token_service import TokenService
from .store import DataStore


@dataclass
class Services:
    store: DataStore
    tokens: TokenService
    requests: RequestLedger
    fulfillment: FulfillmentEngine
    recorder: EventRecorder


def build_services(session, *, token_ttl: timedelta) -> Services:
    """Wire every service around one store; the only place that does so."""
    store = DataStore(session)
    recorder = EventRecorder(store)
    return Services(
        store=store,
        tokens=TokenService(store, ttl=token_ttl),
        requests=RequestLedger(store, recorder=recorder),
        fulfillment=FulfillmentEngine(store, recorder=recorder),
        recorder=recorder,
    )


def current_services() -> Services:
    """Services bound to the request-scoped session, built once per request."""
    if "services" not in g:
        g.services = build_services(
            db.session,
            token_ttl=timedelta(minutes=current_app.config["QR_TOKEN_TTL_MINUTES"]),
        )
    return g.services
