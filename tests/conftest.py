"""Shared pytest fixtures for ecs-inventory tests."""

import os
from typing import Any

import pytest

from ecs_inventory.config import AnchoreInfo, AppConfig

CLUSTER_ARN = "arn:aws:ecs:us-east-1:123456789012:cluster/web"


@pytest.fixture
def cluster_arn() -> str:
    """ARN of the cluster most tests inventory."""
    return CLUSTER_ARN


@pytest.fixture
def anchore_info() -> AnchoreInfo:
    """A complete, valid Anchore target."""
    return AnchoreInfo(
        url="https://ancho.re",
        user="admin",
        password="foobar",
        account="engineering",
    )


@pytest.fixture
def app_config(monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    """Configuration with defaults only, isolated from the environment."""
    for key in list(os.environ):
        if key.upper().startswith("ECS_INVENTORY_"):
            monkeypatch.delenv(key)
    return AppConfig(region="us-east-1", polling_interval_seconds=0)


@pytest.fixture
def described_tasks() -> list[dict[str, Any]]:
    """DescribeTasks entries for two tasks with three containers in total."""
    return [
        {
            "taskArn": "arn:aws:ecs:us-east-1:123456789012:task/web/aaa",
            "clusterArn": CLUSTER_ARN,
            "taskDefinitionArn": "arn:aws:ecs:us-east-1:123456789012:task-definition/web:3",
            "group": "service:web",
            "launchType": "FARGATE",
            "tags": [{"key": "team", "value": "payments"}],
            "containers": [
                {
                    "name": "app",
                    "image": "123456789012.dkr.ecr.us-east-1.amazonaws.com/web:1.2.0",
                    "imageDigest": "sha256:1111",
                    "taskArn": "arn:aws:ecs:us-east-1:123456789012:task/web/aaa",
                },
                {
                    "name": "sidecar",
                    "image": "envoyproxy/envoy:v1.29",
                    "taskArn": "arn:aws:ecs:us-east-1:123456789012:task/web/aaa",
                },
            ],
        },
        {
            "taskArn": "arn:aws:ecs:us-east-1:123456789012:task/web/bbb",
            "clusterArn": CLUSTER_ARN,
            "taskDefinitionArn": "arn:aws:ecs:us-east-1:123456789012:task-definition/worker:7",
            "launchType": "EC2",
            "containers": [
                {
                    "name": "worker",
                    "image": "123456789012.dkr.ecr.us-east-1.amazonaws.com/web:1.2.0",
                    "imageDigest": "sha256:1111",
                    "taskArn": "arn:aws:ecs:us-east-1:123456789012:task/web/bbb",
                },
            ],
        },
    ]


@pytest.fixture
def described_services() -> list[dict[str, Any]]:
    """DescribeServices entries for one service."""
    return [
        {
            "serviceArn": "arn:aws:ecs:us-east-1:123456789012:service/web/web",
            "serviceName": "web",
            "desiredCount": 2,
            "runningCount": 1,
            "taskDefinition": "arn:aws:ecs:us-east-1:123456789012:task-definition/web:3",
            "tags": [{"key": "env", "value": "prod"}],
        },
    ]
