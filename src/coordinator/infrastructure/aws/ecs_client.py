"""ECS implementation of the orchestration client."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from coordinator.domain.errors import OrchestrationError
from coordinator.domain.models.task_definition import (
    DeploymentConfiguration,
    TaskDefinition,
    TaskDefinitionRegistration,
)
from coordinator.domain.ports.services import OrchestrationClient


logger = structlog.get_logger(__name__)

# Registration keys carried over from the described revision, by domain field.
REGISTRATION_FIELDS: dict[str, str] = {
    "family": "family",
    "container_definitions": "containerDefinitions",
    "task_role_arn": "taskRoleArn",
    "execution_role_arn": "executionRoleArn",
    "network_mode": "networkMode",
    "volumes": "volumes",
    "placement_constraints": "placementConstraints",
    "requires_compatibilities": "requiresCompatibilities",
    "cpu": "cpu",
    "memory": "memory",
}


class EcsOrchestrationClient(OrchestrationClient):
    """Drives a single ECS service through the ECS API."""

    def __init__(self, client: Any, cluster: str, service: str) -> None:
        self._client = client
        self._cluster = cluster
        self._service = service

    async def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        method = getattr(self._client, operation)
        try:
            return await asyncio.to_thread(method, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "ecs_call_failed",
                operation=operation,
                cluster=self._cluster,
                service=self._service,
                error=str(e),
            )
            raise OrchestrationError(f"ECS {operation} failed: {e}") from e

    async def current_task_definition_arn(self) -> str:
        response = await self._call(
            "describe_services", cluster=self._cluster, services=[self._service],
        )
        services = response.get("services", [])
        if not services:
            failures = response.get("failures", [])
            raise OrchestrationError(
                f"Service {self._service} not found in {self._cluster}: {failures}"
            )
        return str(services[0]["taskDefinition"])

    async def describe_task_definition(self, arn: str) -> TaskDefinition:
        response = await self._call("describe_task_definition", taskDefinition=arn)
        raw = response["taskDefinition"]
        fields = {
            field: raw[key] for field, key in REGISTRATION_FIELDS.items() if key in raw
        }
        return TaskDefinition(arn=raw.get("taskDefinitionArn", arn), **fields)

    async def register_task_definition(self, registration: TaskDefinitionRegistration) -> str:
        data = registration.model_dump()
        params = {
            key: data[field]
            for field, key in REGISTRATION_FIELDS.items()
            if data.get(field) not in (None, [])
        }
        params["containerDefinitions"] = data["container_definitions"]
        response = await self._call("register_task_definition", **params)
        return str(response["taskDefinition"]["taskDefinitionArn"])

    async def update_service(
        self,
        task_definition_arn: str,
        configuration: DeploymentConfiguration | None = None,
        force_new_deployment: bool = False,
    ) -> str:
        params: dict[str, Any] = {
            "cluster": self._cluster,
            "service": self._service,
            "taskDefinition": task_definition_arn,
        }
        if configuration is not None:
            params["deploymentConfiguration"] = _deployment_configuration(configuration)
        if force_new_deployment:
            params["forceNewDeployment"] = True

        response = await self._call("update_service", **params)
        return _primary_deployment_id(response)


def _deployment_configuration(configuration: DeploymentConfiguration) -> dict[str, Any]:
    params: dict[str, Any] = {
        "maximumPercent": configuration.maximum_percent,
        "minimumHealthyPercent": configuration.minimum_healthy_percent,
    }
    if configuration.circuit_breaker_enabled:
        params["deploymentCircuitBreaker"] = {
            "enable": True,
            "rollback": configuration.circuit_breaker_rollback,
        }
    return params


def _primary_deployment_id(response: dict[str, Any]) -> str:
    deployments = response.get("service", {}).get("deployments", [])
    if not deployments:
        raise OrchestrationError("update_service returned no deployments")
    for deployment in deployments:
        if deployment.get("status") == "PRIMARY":
            return str(deployment["id"])
    return str(deployments[0]["id"])
