"""
frameattest.context - Explicitly constructed process dependencies.

One ``FrameContext`` per process holds the HTTP client, chain client,
signer and counter store. Handlers receive it through ``app.state`` so
tests can swap any piece for a fake.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx
from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3

from frameattest.attestation import AttestationSubmitter
from frameattest.config import Settings
from frameattest.counter import CounterStore, MemoryCounterStore, PostgresCounterStore, VisitCounter
from frameattest.hub import HubClient, MessageValidator
from frameattest.identity import IdentityResolver
from frameattest.pipeline import ActionStrategy, AttestationStrategy, FramePipeline, MintStrategy
from frameattest.relay import SyndicateMinter

logger = logging.getLogger("frameattest.context")


@dataclass
class FrameContext:
    pipeline: FramePipeline
    counter: VisitCounter
    public_url: str = ""
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("frameattest"))
    http: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        await self.counter.store.connect()

    async def aclose(self) -> None:
        await self.counter.store.close()
        if self.http is not None:
            await self.http.aclose()


def build_counter_store(settings: Settings) -> CounterStore:
    if settings.database_url:
        return PostgresCounterStore(settings.database_url)
    logger.warning("DATABASE_URL not set, visit counter is in-memory only")
    return MemoryCounterStore()


def build_action(settings: Settings, http: httpx.AsyncClient) -> ActionStrategy:
    if settings.action == "mint":
        return MintStrategy(SyndicateMinter(
            settings.syndicate_api_key,
            settings.syndicate_project_id,
            settings.mint_contract_address,
            http,
            base_url=settings.syndicate_api_url,
        ))
    w3 = AsyncWeb3(AsyncHTTPProvider(
        settings.chain_rpc_url, request_kwargs={"timeout": settings.http_timeout},
    ))
    return AttestationStrategy(AttestationSubmitter(
        w3,
        Account.from_key(settings.private_key),
        confirmation_timeout=settings.confirmation_timeout,
    ))


def build_context(settings: Settings, *, log: Optional[logging.Logger] = None) -> FrameContext:
    log = log or logging.getLogger("frameattest")
    http = httpx.AsyncClient(timeout=settings.http_timeout)
    pipeline = FramePipeline(
        MessageValidator(HubClient(settings.hub_url, http)),
        IdentityResolver(settings.neynar_api_key, http, base_url=settings.neynar_api_url),
        build_action(settings, http),
        logger=log.getChild("pipeline"),
    )
    return FrameContext(
        pipeline=pipeline,
        counter=VisitCounter(build_counter_store(settings)),
        public_url=settings.public_url,
        logger=log,
        http=http,
    )
