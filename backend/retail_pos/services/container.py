# Overview: Builds the service objects once per app and exposes them to routes.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..settings import AppSettings
from .access_service import AccessGate
from .auth_service import CredentialStore
from .products_service import CatalogManager
from .sales_service import TransactionLedger
from .session_service import TokenSigner
from .storage_service import StorageBackend, build_storage_backend

EXTENSION_KEY = "retail_pos"


@dataclass
class Services:
    settings: AppSettings
    storage: StorageBackend
    credentials: CredentialStore
    catalog: CatalogManager
    ledger: TransactionLedger
    gate: AccessGate


def build_services(settings: AppSettings, storage: StorageBackend | None = None) -> Services:
    """Wire every component from one settings object. storage may be injected (tests)."""
    if storage is None:
        storage = build_storage_backend(settings)

    signer = TokenSigner(secret_key=settings.secret_key, max_age=settings.token_max_age_seconds)

    return Services(
        settings=settings,
        storage=storage,
        credentials=CredentialStore(
            signer=signer,
            bcrypt_rounds=settings.bcrypt_rounds,
            password_min_length=settings.password_min_length,
        ),
        catalog=CatalogManager(storage),
        ledger=TransactionLedger(),
        gate=AccessGate(signer),
    )


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
