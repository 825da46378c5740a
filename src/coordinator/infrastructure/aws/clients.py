"""boto3 client factories."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from coordinator.config import AwsSettings


def _client_config(settings: AwsSettings) -> Config:
    return Config(
        region_name=settings.region,
        retries={"max_attempts": settings.max_attempts, "mode": "standard"},
        connect_timeout=5,
        read_timeout=10,
    )


def create_client(service_name: str, settings: AwsSettings) -> Any:
    """Low-level client for ``service_name`` (``ssm``, ``ecs``)."""
    return boto3.client(
        service_name,
        config=_client_config(settings),
        endpoint_url=settings.endpoint_url,
    )


def create_table(table_name: str, settings: AwsSettings) -> Any:
    """DynamoDB ``Table`` resource."""
    resource = boto3.resource(
        "dynamodb",
        config=_client_config(settings),
        endpoint_url=settings.endpoint_url,
    )
    return resource.Table(table_name)
