"""
Policy inspection API.

This module provides a read-only REST API that reports how registered
models are classified: which attributes are encrypted, which are only
signed, and how attributes unknown to a model are treated when loaded.
"""

import logging

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
import uvicorn

from ..config import FieldSealConfig
from ..encryption.classifier import ClassificationCache, default_cache
from ..encryption.record_encryptor import Encryptor
from ..registry.mappings import MappingsRegistry


logger = logging.getLogger(__name__)


# API models for requests and responses
class PolicyResponse(BaseModel):
    """Classification of a model type."""

    model: str
    table_name: str
    context_table_name: str
    do_not_touch: bool
    fields: dict[str, list[str]]
    unknown_attributes: list[str]


class ResolvePayload(BaseModel):
    """Attribute names found in a stored record."""

    attributes: list[str]


class ResolveResponse(BaseModel):
    """Effective flags per attribute when loading such a record."""

    model: str
    policies: dict[str, list[str]]


# Initialize the FastAPI app
app = FastAPI(
    title="fieldseal policy service",
    description="Reports the encryption and signing policy of sealed models",
    version="0.1.0",
)


def _registry() -> MappingsRegistry:
    return MappingsRegistry.instance()


def _cache() -> ClassificationCache:
    return default_cache()


def use_encryptor(encryptor: Encryptor | None) -> None:
    """
    Take the reserved attribute names from the encryptor the application uses.

    Without one, the configured signature and material description names
    apply.

    Args:
        encryptor: The record encryptor, or None to go back to configuration
    """
    app.state.reserved_fields = (
        None
        if encryptor is None
        else (encryptor.signature_field_name, encryptor.material_description_field_name)
    )


def _reserved_fields() -> tuple[str, str]:
    reserved = getattr(app.state, "reserved_fields", None)
    if reserved is not None:
        return reserved
    return (
        FieldSealConfig.get("encryption.signature_field"),
        FieldSealConfig.get("encryption.material_description_field"),
    )


def _model_type(model_name: str) -> type:
    try:
        return _registry().model_type(model_name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown model: {model_name}")


@app.get("/health")
def health_check() -> dict[str, str]:
    """
    Check the health of the service.

    Returns:
        Health status
    """
    return {"status": "ok", "mode": FieldSealConfig.get("mode")}


@app.get("/policies", response_model=list[str])
def list_policies() -> list[str]:
    """List the names of registered models."""
    return sorted(_registry().model_types())


@app.get("/policies/{model_name}", response_model=PolicyResponse)
def get_policy(model_name: str) -> PolicyResponse:
    """
    Get the classification of a registered model.

    Args:
        model_name: Class name of the model

    Returns:
        The model's policy
    """
    model_type = _model_type(model_name)
    policy = _cache().get_policy(model_type).to_dict()

    table_name = _registry().table_name(model_type)
    override = _registry().table_aad_override(model_type)

    return PolicyResponse(
        model=model_name,
        table_name=table_name,
        context_table_name=override or table_name,
        do_not_touch=policy["do_not_touch"],
        fields=policy["fields"],
        unknown_attributes=policy["unknown_attributes"],
    )


@app.post("/policies/{model_name}/resolve", response_model=ResolveResponse)
def resolve_policy(model_name: str, payload: ResolvePayload) -> ResolveResponse:
    """
    Resolve the effective load policy for a stored record's attributes.

    Args:
        model_name: Class name of the model
        payload: Attribute names present in the stored record

    Returns:
        Flags per attribute, as the attribute encryptor would apply them
    """
    model_type = _model_type(model_name)
    policies = _cache().get_policy(model_type).reconcile(
        payload.attributes, reserved=_reserved_fields()
    )

    return ResolveResponse(
        model=model_name,
        policies={name: sorted(f.value for f in flags) for name, flags in policies.items()},
    )


def start_api(host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """
    Start the API server.

    Args:
        host: Host to bind to
        port: Port to bind to
        reload: Whether to enable auto-reload
    """
    logger.info("Starting policy service on %s:%d", host, port)
    uvicorn.run(
        "fieldseal.service.api:app",
        host=host,
        port=port,
        reload=reload,
    )
