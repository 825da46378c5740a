"""Unit tests for the ECS orchestration client, against a stubbed client."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import boto3
import pytest
from botocore.stub import Stubber

from coordinator.domain.errors import OrchestrationError
from coordinator.domain.models.task_definition import DeploymentConfiguration
from coordinator.infrastructure.aws.ecs_client import EcsOrchestrationClient


CLUSTER = "bellyfed-testing"
SERVICE = "web"
TD_ARN = "arn:aws:ecs:us-east-1:123456789012:task-definition/web:4"
IMAGE = "123456789012.dkr.ecr.us-east-1.amazonaws.com/web:v4"


@pytest.fixture
def ecs_client() -> Any:
    return boto3.client(
        "ecs",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(ecs_client: Any) -> Iterator[Stubber]:
    with Stubber(ecs_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def client(ecs_client: Any) -> EcsOrchestrationClient:
    return EcsOrchestrationClient(ecs_client, CLUSTER, SERVICE)


def _task_definition_response() -> dict[str, Any]:
    return {
        "taskDefinition": {
            "taskDefinitionArn": TD_ARN,
            "family": "web",
            "revision": 4,
            "status": "ACTIVE",
            "containerDefinitions": [
                {"name": "web", "image": IMAGE, "essential": True,
                 "portMappings": [{"containerPort": 8080}]},
                {"name": "otel", "image": "otel/collector:0.90", "essential": False},
            ],
            "taskRoleArn": "arn:aws:iam::123456789012:role/task",
            "executionRoleArn": "arn:aws:iam::123456789012:role/exec",
            "networkMode": "awsvpc",
            "volumes": [],
            "placementConstraints": [],
            "requiresCompatibilities": ["FARGATE"],
            "cpu": "256",
            "memory": "512",
        },
    }


class TestEcsOrchestrationClient:
    @pytest.mark.asyncio
    async def test_current_task_definition(
        self, client: EcsOrchestrationClient, stubber: Stubber,
    ) -> None:
        stubber.add_response(
            "describe_services",
            {"services": [{"serviceName": SERVICE, "taskDefinition": TD_ARN}], "failures": []},
            {"cluster": CLUSTER, "services": [SERVICE]},
        )
        assert await client.current_task_definition_arn() == TD_ARN

    @pytest.mark.asyncio
    async def test_missing_service(self, client: EcsOrchestrationClient, stubber: Stubber) -> None:
        stubber.add_response(
            "describe_services",
            {"services": [], "failures": [{"arn": SERVICE, "reason": "MISSING"}]},
            {"cluster": CLUSTER, "services": [SERVICE]},
        )
        with pytest.raises(OrchestrationError):
            await client.current_task_definition_arn()

    @pytest.mark.asyncio
    async def test_describe_and_register_new_revision(
        self, client: EcsOrchestrationClient, stubber: Stubber,
    ) -> None:
        response = _task_definition_response()
        stubber.add_response("describe_task_definition", response, {"taskDefinition": TD_ARN})
        raw = response["taskDefinition"]
        stubber.add_response(
            "register_task_definition",
            {"taskDefinition": {"taskDefinitionArn": TD_ARN.replace(":4", ":5")}},
            {
                "family": "web",
                "containerDefinitions": [
                    {**raw["containerDefinitions"][0], "image": IMAGE.replace(":v4", ":v5")},
                    raw["containerDefinitions"][1],
                ],
                "taskRoleArn": raw["taskRoleArn"],
                "executionRoleArn": raw["executionRoleArn"],
                "networkMode": "awsvpc",
                "requiresCompatibilities": ["FARGATE"],
                "cpu": "256",
                "memory": "512",
            },
        )

        current = await client.describe_task_definition(TD_ARN)
        new_arn = await client.register_task_definition(current.with_image_tag("v5"))

        assert current.family == "web"
        assert new_arn.endswith("web:5")

    @pytest.mark.asyncio
    async def test_update_service_with_configuration(
        self, client: EcsOrchestrationClient, stubber: Stubber,
    ) -> None:
        stubber.add_response(
            "update_service",
            {"service": {"deployments": [
                {"id": "ecs-svc/2", "status": "ACTIVE"},
                {"id": "ecs-svc/3", "status": "PRIMARY"},
            ]}},
            {
                "cluster": CLUSTER,
                "service": SERVICE,
                "taskDefinition": TD_ARN,
                "deploymentConfiguration": {
                    "maximumPercent": 200,
                    "minimumHealthyPercent": 50,
                    "deploymentCircuitBreaker": {"enable": True, "rollback": False},
                },
            },
        )

        deployment_id = await client.update_service(
            TD_ARN, DeploymentConfiguration(circuit_breaker_enabled=True),
        )

        assert deployment_id == "ecs-svc/3"

    @pytest.mark.asyncio
    async def test_forced_update_for_rollback(
        self, client: EcsOrchestrationClient, stubber: Stubber,
    ) -> None:
        stubber.add_response(
            "update_service",
            {"service": {"deployments": [{"id": "ecs-svc/9", "status": "ACTIVE"}]}},
            {
                "cluster": CLUSTER,
                "service": SERVICE,
                "taskDefinition": TD_ARN,
                "forceNewDeployment": True,
            },
        )

        assert await client.update_service(TD_ARN, force_new_deployment=True) == "ecs-svc/9"

    @pytest.mark.asyncio
    async def test_api_errors_become_orchestration_errors(
        self, client: EcsOrchestrationClient, stubber: Stubber,
    ) -> None:
        stubber.add_client_error(
            "update_service", service_error_code="ServiceNotActiveException", http_status_code=400,
        )
        with pytest.raises(OrchestrationError):
            await client.update_service(TD_ARN)
